# app/routers/admin.py
"""
Admin console: staff accounts, usage statistics, customer CSV import/export.
Every endpoint requires an admin session.
"""

from datetime import date, datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from app.config import settings
from app.database import RemoteStore, get_store
from app.dependencies import get_sessions, require_admin
from app.schemas.credential import AdminUserOut, CredentialIn
from app.schemas.customer import ImportReport
from app.schemas.stats import NEVER_LOGGED_IN, AdminOverview
from app.services import credential_service
from app.services.import_service import bulk_upsert_customers
from app.services.session_service import SessionStore
from app.services.stats_service import DISPLAY_FORMAT, get_user_activity_stats
from app.utils.csv_codec import BOM, export_customers_csv, parse_customer_csv
from app.utils.logger import get_logger

router = APIRouter(dependencies=[Depends(require_admin)])
logger = get_logger(__name__)

SortKey = Literal["username", "query_count", "last_login"]


def _last_login_sort_key(value: str) -> float:
    if not value or value == NEVER_LOGGED_IN:
        return 0
    try:
        return datetime.strptime(value, DISPLAY_FORMAT).timestamp()
    except ValueError:
        return 0


async def _admin_users(store: RemoteStore) -> list[AdminUserOut]:
    credentials = await credential_service.list_credentials(store)
    stats = await get_user_activity_stats(store)
    return credential_service.merge_users_with_stats(credentials, stats)


@router.get("/admin/users", response_model=list[AdminUserOut], summary="Staff accounts with usage stats")
async def list_users(sort: SortKey = "last_login", descending: bool = True, search: Optional[str] = None,
                     store: RemoteStore = Depends(get_store)):
    users = await _admin_users(store)
    if sort == "last_login":
        users.sort(key=lambda u: _last_login_sort_key(u.last_login), reverse=descending)
    else:
        users.sort(key=lambda u: getattr(u, sort), reverse=descending)
    if search:
        users = [u for u in users if search.lower() in u.username.lower()]
    return users


@router.get("/admin/overview", response_model=AdminOverview, summary="Dashboard totals")
async def overview(store: RemoteStore = Depends(get_store)):
    users = await _admin_users(store)
    total_customers = await credential_service.get_customer_count(store)
    return credential_service.build_overview(users, total_customers)


@router.post("/admin/users", summary="Add a staff account")
async def add_user(body: CredentialIn, store: RemoteStore = Depends(get_store)):
    await credential_service.add_credential(store, body.to_credential())
    return {"status": "added", "username": body.username}


@router.put("/admin/users/{username}", summary="Edit a staff account")
async def update_user(username: str, body: CredentialIn, store: RemoteStore = Depends(get_store),
                      sessions: SessionStore = Depends(get_sessions)):
    await credential_service.update_credential(store, username, body.to_credential())
    # device binding or the unrestricted flag may have changed: force a fresh login
    sessions.drop_user(username)
    return {"status": "updated", "username": body.username}


@router.delete("/admin/users/{username}", summary="Delete a staff account")
async def delete_user(username: str, store: RemoteStore = Depends(get_store),
                      sessions: SessionStore = Depends(get_sessions)):
    await credential_service.delete_credential(store, username)
    sessions.drop_user(username)
    return {"status": "deleted", "username": username}


@router.delete("/admin/users/{username}/stats", summary="Reset a user's search history")
async def reset_stats(username: str, store: RemoteStore = Depends(get_store)):
    await credential_service.reset_user_stats(store, username)
    return {"status": "reset", "username": username}


@router.get("/admin/customers/count", summary="Total customer records")
async def customer_count(store: RemoteStore = Depends(get_store)):
    return {"count": await credential_service.get_customer_count(store)}


@router.post("/admin/customers/import", response_model=ImportReport, summary="Bulk import customers from CSV")
async def import_customers(request: Request, store: RemoteStore = Depends(get_store)):
    """
    Body is the raw CSV text (text/csv). Rows are upserted in chunks of
    IMPORT_CHUNK_SIZE; the response carries the counts and the progress log.
    """
    raw_body = await request.body()
    text = raw_body.decode("utf-8", errors="replace")
    log: list[str] = ["Reading file..."]

    customers = parse_customer_csv(text)
    if not customers:
        raise HTTPException(status_code=400, detail="No rows to import. Check the CSV format.")
    log.append(f"{len(customers)} customer records prepared. Sending to the database in chunks...")

    def on_progress(processed: int, total: int, errors: int):
        log.append(f"Processed {processed}/{total} (errors: {errors})")

    result = await bulk_upsert_customers(store, customers, on_progress=on_progress)

    if result.error and result.success == 0:
        log.append(f"CRITICAL ERROR: {result.error}")
    else:
        log.append("IMPORT COMPLETE.")
        log.append(f"Succeeded: {result.success}")
        log.append(f"Failed: {result.error_count}")
        if result.error_count > 0:
            log.append(f"Last error: {result.error}")
    logger.info(f"CSV import: {result.success} ok / {result.error_count} failed")

    return ImportReport(total=len(customers), log=log, **result.model_dump())


@router.get("/admin/customers/export", summary="Download all customers as CSV")
async def export_customers(store: RemoteStore = Depends(get_store)):
    rows = await store.select("customers", limit=settings.EXPORT_ROW_LIMIT)
    if not rows:
        raise HTTPException(status_code=404, detail="No data to export")
    content = BOM + export_customers_csv(rows)
    filename = f"customers_backup_{date.today().isoformat()}.csv"
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
