# app/dependencies.py
"""FastAPI dependencies: session resolution, admin / terms / service window guards."""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.errors import ServiceClosed
from app.services.access_gate import service_window
from app.services.lookup_cache import LookupCache, RecentSearches, lookup_cache, recent_searches
from app.services.session_service import Session, SessionStore, sessions


def get_sessions() -> SessionStore:
    return sessions


def get_lookup_cache() -> LookupCache:
    return lookup_cache


def get_recent_searches() -> RecentSearches:
    return recent_searches


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: SessionStore = Depends(get_sessions),
) -> Session:
    session = store.get(credentials.credentials) if credentials else None
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not logged in",
                            headers={"WWW-Authenticate": "Bearer"})
    return session


def require_admin(session: Session = Depends(get_current_session)) -> Session:
    if not session.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return session


def require_lookup_access(session: Session = Depends(get_current_session)) -> Session:
    """Staff must have accepted the terms, and the service window must be open right now."""
    if not session.terms_accepted:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Usage terms not accepted")
    if not service_window.refresh():
        raise ServiceClosed()
    return session
