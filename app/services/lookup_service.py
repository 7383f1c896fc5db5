# app/services/lookup_service.py
"""
Customer lookup by installation number.
Cache first (24h TTL), then an exact-match query on the customers table.
"""

from typing import Tuple

from app.database import RemoteStore, eq
from app.errors import NotFound, RemoteStoreError
from app.schemas.customer import Customer
from app.services.lookup_cache import LookupCache
from app.utils.logger import get_logger, get_audit_logger

logger = get_logger(__name__)
audit = get_audit_logger()

CUSTOMERS_TABLE = "customers"
SEARCH_LOGS_TABLE = "search_logs"


async def find_customer(store: RemoteStore, cache: LookupCache, installation_number: str) -> Tuple[Customer, bool]:
    """Returns (customer, served_from_cache). Raises NotFound."""
    cached = cache.get(installation_number)
    if cached is not None:
        logger.debug(f"Cache hit for {installation_number}")
        return cached, True

    row = await store.select_one(CUSTOMERS_TABLE, filters={"installation_number": eq(installation_number)})
    if not row:
        raise NotFound()

    customer = Customer.from_row(row)
    cache.put(installation_number, customer)
    return customer, False


async def log_search_query(store: RemoteStore, username: str, installation_number: str):
    """Append to search_logs. Runs after the response; never raises."""
    audit.info(f"SEARCH user={username} installation={installation_number}")
    try:
        await store.insert(SEARCH_LOGS_TABLE, {"username": username, "installation_number": installation_number})
    except RemoteStoreError as e:
        logger.warning(f"Search log write failed for {username}/{installation_number}: {e}")
