# app/routers/lookup.py
"""Installation lookup + the caller's recent searches."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from app.database import RemoteStore, get_store
from app.dependencies import (get_current_session, get_lookup_cache, get_recent_searches,
                              require_lookup_access)
from app.schemas.customer import CustomerView, RecentSearches as RecentSearchesOut
from app.services.lookup_cache import LookupCache, RecentSearches
from app.services.lookup_service import find_customer, log_search_query
from app.services.session_service import Session
from app.utils.customer_view import build_customer_view

router = APIRouter()


@router.get("/lookup/recent", response_model=RecentSearchesOut, summary="Last 5 searched installation numbers")
def list_recent(session: Session = Depends(get_current_session),
                recents: RecentSearches = Depends(get_recent_searches)):
    return RecentSearchesOut(items=recents.items(session.username))


@router.delete("/lookup/recent", summary="Clear recent searches")
def clear_recent(session: Session = Depends(get_current_session),
                 recents: RecentSearches = Depends(get_recent_searches)):
    recents.clear(session.username)
    return {"status": "cleared"}


@router.get("/lookup/{installation_number}", response_model=CustomerView, summary="Look up an installation")
async def lookup_installation(
    installation_number: str,
    background_tasks: BackgroundTasks,
    session: Session = Depends(require_lookup_access),
    store: RemoteStore = Depends(get_store),
    cache: LookupCache = Depends(get_lookup_cache),
    recents: RecentSearches = Depends(get_recent_searches),
):
    term = installation_number.strip()
    if not term:
        raise HTTPException(status_code=400, detail="Installation number is required")

    customer, cached = await find_customer(store, cache, term)
    recents.add(session.username, term)
    background_tasks.add_task(log_search_query, store, session.username, term)
    return build_customer_view(customer, session.unrestricted, cached=cached)
