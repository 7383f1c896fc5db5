# app/services/import_service.py
"""
Chunked bulk upsert of customers, keyed on installation_number.

Chunks go out one at a time, in order, with a short pause in between so the
remote store is not flooded. A failed chunk is counted and skipped; a
permission error stops the whole import and every record not yet written is
reported as failed. Partial failure is returned, never raised.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from app.config import settings
from app.database import RemoteStore
from app.errors import PermissionDenied, RemoteStoreError
from app.schemas.customer import Customer, ImportResult
from app.utils.customer_view import parse_coordinate
from app.utils.logger import get_logger

logger = get_logger(__name__)

CUSTOMERS_TABLE = "customers"
CONFLICT_KEY = "installation_number"
PERMISSION_ABORT_MESSAGE = "PERMISSION ERROR: the database does not allow writes. Grant access in the SQL editor."

ProgressCallback = Callable[[int, int, int], None]


def to_store_row(customer: Customer) -> dict:
    return {
        "installation_number": customer.installation_number,
        "name": customer.name,
        "phone": customer.phone,
        "address": customer.address,
        "latitude": parse_coordinate(customer.latitude) if customer.latitude else None,
        "longitude": parse_coordinate(customer.longitude) if customer.longitude else None,
    }


async def bulk_upsert_customers(
    store: RemoteStore,
    customers: list[Customer],
    on_progress: Optional[ProgressCallback] = None,
    chunk_size: Optional[int] = None,
    throttle_seconds: Optional[float] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ImportResult:
    if not customers:
        return ImportResult(success=0, error_count=0, error=None)

    chunk_size = chunk_size or settings.IMPORT_CHUNK_SIZE
    throttle_seconds = settings.IMPORT_THROTTLE_SECONDS if throttle_seconds is None else throttle_seconds

    rows = [to_store_row(c) for c in customers]
    total = len(rows)
    success = 0
    errors = 0
    last_error: Optional[str] = None

    for start in range(0, total, chunk_size):
        chunk = rows[start:start + chunk_size]
        try:
            await store.upsert(CUSTOMERS_TABLE, chunk, on_conflict=CONFLICT_KEY)
            success += len(chunk)
        except PermissionDenied:
            logger.error(f"Import aborted at record {start}: write permission denied")
            return ImportResult(success=success, error_count=total - success, error=PERMISSION_ABORT_MESSAGE)
        except RemoteStoreError as e:
            logger.error(f"Chunk error at index {start}: {e}")
            errors += len(chunk)
            last_error = e.message

        if on_progress:
            on_progress(min(start + len(chunk), total), total, errors)

        await sleep(throttle_seconds)

    logger.info(f"Import finished: {success} ok, {errors} failed of {total}")
    return ImportResult(success=success, error_count=errors, error=last_error)
