# app/services/device_identity.py
"""
Device identity and remembered username for the calling device.
Read once at session start and passed explicitly into login.
"""

import uuid
from typing import Optional

from app.services.local_state import JsonStateStore

DEVICE_ID_KEY = "device_uuid_v2"
REMEMBERED_USERNAME_KEY = "remembered_username"


def load_or_create_device_id(state: JsonStateStore) -> str:
    device_id = state.get(DEVICE_ID_KEY)
    if not device_id:
        device_id = str(uuid.uuid4())
        state.set(DEVICE_ID_KEY, device_id)
    return device_id


def set_device_id(state: JsonStateStore, device_id: str) -> str:
    """User-edited identity. Blank input keeps the current one."""
    device_id = device_id.strip()
    if not device_id:
        return load_or_create_device_id(state)
    state.set(DEVICE_ID_KEY, device_id)
    return device_id


def remembered_username(state: JsonStateStore) -> Optional[str]:
    return state.get(REMEMBERED_USERNAME_KEY)


def remember_username(state: JsonStateStore, username: str, remember: bool):
    if remember:
        state.set(REMEMBERED_USERNAME_KEY, username)
    else:
        state.remove(REMEMBERED_USERNAME_KEY)
