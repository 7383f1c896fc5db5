# app/services/credential_service.py
"""Admin console operations on staff accounts, search logs and customer totals."""

from app.database import RemoteStore, eq
from app.errors import DuplicateUsername, RemoteStoreError
from app.schemas.credential import AdminUserOut, Credential
from app.schemas.stats import NEVER_LOGGED_IN, AdminOverview, UserActivityStat
from app.utils.logger import get_logger

logger = get_logger(__name__)

USERS_TABLE = "users"
CUSTOMERS_TABLE = "customers"
SEARCH_LOGS_TABLE = "search_logs"


async def list_credentials(store: RemoteStore) -> list[Credential]:
    rows = await store.select(USERS_TABLE, "username, password, allowed_device_id")
    return [Credential.from_row(r) for r in rows]


async def add_credential(store: RemoteStore, credential: Credential) -> list[Credential]:
    existing = await store.select_one(USERS_TABLE, "username", filters={"username": eq(credential.username)})
    if existing:
        raise DuplicateUsername()
    await store.insert(USERS_TABLE, {
        "username": credential.username,
        "password": credential.password,
        "allowed_device_id": credential.allowed_device_id or None,
    })
    logger.info(f"User '{credential.username}' added")
    return await list_credentials(store)


async def update_credential(store: RemoteStore, original_username: str, credential: Credential) -> list[Credential]:
    await store.update(USERS_TABLE, {
        "username": credential.username,
        "password": credential.password,
        "allowed_device_id": credential.allowed_device_id or None,
    }, filters={"username": eq(original_username)})
    logger.info(f"User '{original_username}' updated")
    return await list_credentials(store)


async def delete_credential(store: RemoteStore, username: str) -> list[Credential]:
    await store.delete(USERS_TABLE, filters={"username": eq(username)})
    logger.info(f"User '{username}' deleted")
    return await list_credentials(store)


async def reset_user_stats(store: RemoteStore, username: str):
    await store.delete(SEARCH_LOGS_TABLE, filters={"username": eq(username)})
    logger.info(f"Search history of '{username}' cleared")


async def get_customer_count(store: RemoteStore) -> int:
    try:
        return await store.count(CUSTOMERS_TABLE)
    except RemoteStoreError as e:
        logger.warning(f"Customer count unavailable: {e}")
        return 0


async def check_server_connection(store: RemoteStore) -> bool:
    try:
        await store.count(CUSTOMERS_TABLE)
    except RemoteStoreError as e:
        logger.warning(f"Connection check failed: {e}")
        return False
    return True


def merge_users_with_stats(credentials: list[Credential], stats: list[UserActivityStat]) -> list[AdminUserOut]:
    by_user = {s.username: s for s in stats}
    merged = []
    for cred in credentials:
        stat = by_user.get(cred.username)
        merged.append(AdminUserOut(
            username=cred.username,
            password=cred.password,
            allowed_device_id=None if cred.is_unrestricted else cred.allowed_device_id,
            unrestricted=cred.is_unrestricted,
            query_count=stat.query_count if stat else 0,
            last_login=stat.last_login if stat else NEVER_LOGGED_IN,
        ))
    return merged


def build_overview(users: list[AdminUserOut], total_customers: int) -> AdminOverview:
    most_active = max(users, key=lambda u: u.query_count, default=None)
    return AdminOverview(
        total_users=len(users),
        total_queries=sum(u.query_count for u in users),
        most_active_user=most_active.username if most_active else None,
        total_customers=total_customers,
    )
