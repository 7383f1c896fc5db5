# app/errors.py
"""
Error taxonomy shared by services and routers.

Every error carries a human-readable message and the HTTP status the API
answers with. Raw transport / PostgREST error structures never leave
normalize_remote_error(): callers only ever see these classes.
"""

from typing import Optional

import httpx

from app.utils.logger import get_logger

logger = get_logger(__name__)

# PostgreSQL / PostgREST error codes we care about
PG_INSUFFICIENT_PRIVILEGE = "42501"
PG_UNDEFINED_TABLE = "42P01"
PGRST_TABLE_NOT_IN_SCHEMA = "PGRST205"


class AppError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Username or password is incorrect."


class DeviceNotAuthorized(AppError):
    status_code = 403
    default_message = "This device is not authorized for this account. Please contact your administrator."


class NotFound(AppError):
    status_code = 404
    default_message = "No record was found for this installation number."


class ServiceClosed(AppError):
    status_code = 403
    default_message = "The service is closed. It is available on weekdays 08:00-18:00, from the 1st to the 20th of each month."


class DuplicateUsername(AppError):
    status_code = 409
    default_message = "This username is already registered."


class RemoteStoreError(AppError):
    """Anything that went wrong talking to the remote datastore."""
    status_code = 502


class PermissionDenied(RemoteStoreError):
    status_code = 403
    default_message = (
        "Database permission error: row level security policies are missing. "
        "Grant table access in the SQL editor."
    )


class TableMissing(RemoteStoreError):
    status_code = 503
    default_message = (
        "Database table not found: the 'users' or 'customers' table may have been dropped. "
        "Recreate the tables in the SQL editor."
    )


class ConnectivityError(RemoteStoreError):
    status_code = 503
    default_message = "Could not reach the server. Check your internet connection."


class UnknownDatabaseError(RemoteStoreError):
    status_code = 502
    default_message = "An unknown database error occurred."


def _describe(payload) -> str:
    """Best-effort human-readable message out of a PostgREST error payload."""
    if not payload:
        return UnknownDatabaseError.default_message
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        if payload.get("message"):
            message = str(payload["message"])
            if payload.get("details"):
                message += f" ({payload['details']})"
            if payload.get("hint"):
                message += f"\nHint: {payload['hint']}"
            return message
        if payload.get("error_description"):
            return str(payload["error_description"])
    return str(payload)


def normalize_remote_error(payload, status_code: Optional[int] = None, context: str = "") -> RemoteStoreError:
    """
    Map a PostgREST error body (dict, str or None) plus HTTP status to one of
    the RemoteStoreError subclasses. Returns the error; the caller raises it.
    """
    logger.error(f"Remote store error ({context}): status={status_code} payload={payload!r}")

    message = _describe(payload)
    code = payload.get("code") if isinstance(payload, dict) else None

    if code == PG_INSUFFICIENT_PRIVILEGE or "row-level security" in message or status_code in (401, 403):
        return PermissionDenied()
    if code in (PG_UNDEFINED_TABLE, PGRST_TABLE_NOT_IN_SCHEMA):
        return TableMissing()

    lowered = message.lower()
    if "failed to fetch" in lowered or "network" in lowered:
        return ConnectivityError()

    return UnknownDatabaseError(message)


def normalize_transport_error(exc: httpx.HTTPError, context: str = "") -> ConnectivityError:
    logger.error(f"Remote store unreachable ({context}): {exc}")
    return ConnectivityError()
