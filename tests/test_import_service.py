"""Unit tests for the chunked customer bulk upsert."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import json
import httpx
import pytest
from unittest.mock import AsyncMock
from app.database import RemoteStore
from app.errors import PermissionDenied, UnknownDatabaseError
from app.schemas.customer import Customer
from app.services.import_service import PERMISSION_ABORT_MESSAGE, bulk_upsert_customers, to_store_row


def make_customers(n):
    return [Customer(installation_number=str(1000 + i), name=f"Customer {i}") for i in range(n)]


async def run(store, customers, progress=None):
    sleep = AsyncMock()
    result = await bulk_upsert_customers(store, customers, on_progress=progress,
                                         chunk_size=200, throttle_seconds=0.1, sleep=sleep)
    return result, sleep


class TestBulkUpsert:
    @pytest.mark.asyncio
    async def test_all_chunks_succeed_in_order(self):
        store = AsyncMock()
        progress = []
        result, sleep = await run(store, make_customers(450), lambda *a: progress.append(a))

        assert (result.success, result.error_count, result.error) == (450, 0, None)
        assert store.upsert.await_count == 3
        first_ids = [call.args[1][0]["installation_number"] for call in store.upsert.await_args_list]
        assert first_ids == ["1000", "1200", "1400"]
        for call in store.upsert.await_args_list:
            assert call.args[0] == "customers"
            assert call.kwargs["on_conflict"] == "installation_number"
        assert progress == [(200, 450, 0), (400, 450, 0), (450, 450, 0)]
        assert sleep.await_count == 3
        sleep.assert_awaited_with(0.1)

    @pytest.mark.asyncio
    async def test_failed_chunk_counted_and_skipped(self):
        store = AsyncMock()
        store.upsert.side_effect = [None, UnknownDatabaseError("statement timeout"), None]
        progress = []
        result, _ = await run(store, make_customers(450), lambda *a: progress.append(a))

        assert result.success == 250
        assert result.error_count == 200
        assert result.success + result.error_count == 450
        assert result.error == "statement timeout"
        assert store.upsert.await_count == 3
        assert progress[-1] == (450, 450, 200)

    @pytest.mark.asyncio
    async def test_permission_error_aborts_remaining(self):
        store = AsyncMock()
        store.upsert.side_effect = [None, PermissionDenied(), None, None]
        progress = []
        result, _ = await run(store, make_customers(700), lambda *a: progress.append(a))

        assert result.success == 200
        assert result.error_count == 500
        assert result.error == PERMISSION_ABORT_MESSAGE
        assert store.upsert.await_count == 2
        assert progress == [(200, 700, 0)]

    @pytest.mark.asyncio
    async def test_permission_error_after_earlier_failure(self):
        store = AsyncMock()
        store.upsert.side_effect = [UnknownDatabaseError("bad row"), None, PermissionDenied()]
        result, _ = await run(store, make_customers(600))

        assert result.success == 200
        assert result.error_count == 400

    @pytest.mark.asyncio
    async def test_empty_input(self):
        store = AsyncMock()
        result, sleep = await run(store, [])
        assert (result.success, result.error_count, result.error) == (0, 0, None)
        store.upsert.assert_not_called()
        sleep.assert_not_called()


class TestToStoreRow:
    def test_coordinates_accept_comma_decimal(self):
        row = to_store_row(Customer(installation_number="1", latitude="41,0082", longitude="28.97"))
        assert row["latitude"] == 41.0082
        assert row["longitude"] == 28.97

    def test_blank_or_garbage_coordinates_become_null(self):
        row = to_store_row(Customer(installation_number="1", latitude="", longitude="n/a"))
        assert row["latitude"] is None
        assert row["longitude"] is None

    def test_non_finite_coordinates_become_null(self):
        row = to_store_row(Customer(installation_number="1", latitude="nan", longitude="-inf"))
        assert row["latitude"] is None
        assert row["longitude"] is None


class TestUpsertOverHttp:
    @pytest.mark.asyncio
    async def test_non_finite_coordinates_sent_as_null(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201)

        store = RemoteStore("https://example.supabase.co", "anon-key", transport=httpx.MockTransport(handler))
        customers = [
            Customer(installation_number="1", latitude="nan", longitude="inf"),
            Customer(installation_number="2", latitude="41,0", longitude="29.0"),
        ]

        result, _ = await run(store, customers)

        assert (result.success, result.error_count) == (2, 0)
        assert bodies[0][0]["latitude"] is None
        assert bodies[0][0]["longitude"] is None
        assert bodies[0][1]["latitude"] == 41.0
