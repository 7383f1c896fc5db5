"""Unit tests for the locally persisted device identity and remembered username."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from app.services.device_identity import (load_or_create_device_id, remember_username,
                                          remembered_username, set_device_id)
from app.services.local_state import JsonStateStore


class TestDeviceIdentity:
    def test_created_once_and_persisted(self, tmp_path):
        path = str(tmp_path / "client.json")
        first = load_or_create_device_id(JsonStateStore(path))
        assert first
        assert load_or_create_device_id(JsonStateStore(path)) == first

    def test_user_override(self, tmp_path):
        state = JsonStateStore(str(tmp_path / "client.json"))
        load_or_create_device_id(state)
        assert set_device_id(state, "  MY-PHONE ") == "MY-PHONE"
        assert load_or_create_device_id(state) == "MY-PHONE"

    def test_blank_override_keeps_current(self, tmp_path):
        state = JsonStateStore(str(tmp_path / "client.json"))
        current = load_or_create_device_id(state)
        assert set_device_id(state, "   ") == current

    def test_corrupt_state_file_starts_fresh(self, tmp_path):
        path = tmp_path / "client.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_or_create_device_id(JsonStateStore(str(path)))


class TestRememberedUsername:
    def test_remember_and_forget(self, tmp_path):
        state = JsonStateStore(str(tmp_path / "client.json"))
        remember_username(state, "1001", remember=True)
        assert remembered_username(state) == "1001"
        remember_username(state, "1001", remember=False)
        assert remembered_username(state) is None
