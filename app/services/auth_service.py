# app/services/auth_service.py
"""
Device-bound staff authentication.

  authenticate()          — fetch the credential and check it. No writes.
  bind_device_if_unset()  — lock an unbound account to a device. Idempotent.
  login()                 — superuser shortcut, then authenticate + bind.

Credential rules:
  - unknown username or wrong password      → InvalidCredentials
  - allowed_device_id == ANY_DEVICE         → unrestricted, no device check
  - allowed_device_id set to another device → DeviceNotAuthorized
  - allowed_device_id empty                 → bind to the calling device
"""

from dataclasses import dataclass

from app.config import settings
from app.database import RemoteStore, eq
from app.errors import DeviceNotAuthorized, InvalidCredentials, RemoteStoreError
from app.schemas.credential import Credential
from app.utils.logger import get_logger, get_audit_logger

logger = get_logger(__name__)
audit = get_audit_logger()

USERS_TABLE = "users"
UNBOUND_FILTER = "(allowed_device_id.is.null,allowed_device_id.eq.)"


@dataclass(frozen=True)
class AuthDecision:
    unrestricted: bool
    needs_binding: bool = False


@dataclass(frozen=True)
class LoginResult:
    username: str
    is_admin: bool
    unrestricted: bool


def check_credential(credential: Credential, password: str, device_id: str) -> AuthDecision:
    """Pure credential check. Raises InvalidCredentials / DeviceNotAuthorized."""
    if credential.password != password:
        raise InvalidCredentials()

    if credential.is_unrestricted:
        return AuthDecision(unrestricted=True)

    if credential.allowed_device_id and credential.allowed_device_id != device_id:
        raise DeviceNotAuthorized()

    return AuthDecision(unrestricted=False, needs_binding=not credential.allowed_device_id and bool(device_id))


async def fetch_credential(store: RemoteStore, username: str):
    row = await store.select_one(USERS_TABLE, "username, password, allowed_device_id",
                                 filters={"username": eq(username)})
    return Credential.from_row(row) if row else None


async def authenticate(store: RemoteStore, username: str, password: str, device_id: str) -> AuthDecision:
    credential = await fetch_credential(store, username)
    if credential is None:
        raise InvalidCredentials()
    return check_credential(credential, password, device_id)


async def bind_device_if_unset(store: RemoteStore, username: str, device_id: str) -> bool:
    """
    Write device_id into an account that has no device yet.
    The update only matches unbound rows, so a concurrent first login from
    another device cannot overwrite a binding that already happened.
    Returns True if this call performed the binding.
    Raises DeviceNotAuthorized if someone else bound the account first.
    """
    if not device_id:
        return False

    updated = await store.update(USERS_TABLE, {"allowed_device_id": device_id},
                                 filters={"username": eq(username), "or": UNBOUND_FILTER})
    if updated:
        logger.info(f"Account '{username}' bound to device {device_id}")
        return True

    current = await fetch_credential(store, username)
    if current is not None and current.allowed_device_id not in (None, device_id) and not current.is_unrestricted:
        logger.warning(f"Account '{username}' was bound to another device during login")
        raise DeviceNotAuthorized()
    return False


def is_superuser(username: str, password: str) -> bool:
    return bool(settings.ADMIN_PASSWORD) and username == settings.ADMIN_USERNAME and password == settings.ADMIN_PASSWORD


async def login(store: RemoteStore, username: str, password: str, device_id: str) -> LoginResult:
    if is_superuser(username, password):
        audit.info(f"LOGIN admin={username}")
        return LoginResult(username=username, is_admin=True, unrestricted=True)

    try:
        decision = await authenticate(store, username, password, device_id)
    except (InvalidCredentials, DeviceNotAuthorized) as e:
        audit.warning(f"LOGIN REJECTED user={username} device={device_id} reason={type(e).__name__}")
        raise

    if decision.needs_binding:
        try:
            await bind_device_if_unset(store, username, device_id)
        except DeviceNotAuthorized:
            audit.warning(f"LOGIN REJECTED user={username} device={device_id} reason=DeviceNotAuthorized")
            raise
        except RemoteStoreError as e:
            logger.warning(f"Could not bind device for '{username}': {e}")

    audit.info(f"LOGIN user={username} device={device_id} unrestricted={decision.unrestricted}")
    return LoginResult(username=username, is_admin=False, unrestricted=decision.unrestricted)
