"""
Supabase adapter tests

Checks the PostgREST query chains issued through supabase-py.
"""

from unittest.mock import MagicMock

import pytest

from app import db as db_module
from app.db import THREAD_LIMIT, SupabaseDB, get_db


def _client_returning(data):
    client = MagicMock()
    table = client.table.return_value
    for name in ("upsert", "insert", "select", "eq", "order", "limit"):
        getattr(table, name).return_value = table
    table.execute.return_value = MagicMock(data=data)
    return client, table


class TestSupabaseDB:
    def test_upsert_customer_on_phone(self):
        client, table = _client_returning([{"id": "c-1", "phone": "880"}])

        row = SupabaseDB(client).upsert_customer("880", "Rahim")

        assert row["id"] == "c-1"
        client.table.assert_called_with("customers")
        args, kwargs = table.upsert.call_args
        assert args[0]["phone"] == "880" and args[0]["name"] == "Rahim"
        assert "last_seen_at" in args[0]
        assert kwargs == {"on_conflict": "phone"}

    def test_upsert_customer_without_row_raises(self):
        client, _ = _client_returning([])
        with pytest.raises(RuntimeError):
            SupabaseDB(client).upsert_customer("880", None)

    def test_insert_inbound_keeps_raw(self):
        client, table = _client_returning([])

        SupabaseDB(client).insert_message("c-1", direction="inbound", message_text="hi", raw={"entry": []})

        table.insert.assert_called_once_with(
            {"customer_id": "c-1", "direction": "inbound", "message_text": "hi", "raw": {"entry": []}}
        )

    def test_insert_outbound_has_no_raw(self):
        client, table = _client_returning([])

        SupabaseDB(client).insert_message("c-1", direction="outbound", message_text="hello")

        assert "raw" not in table.insert.call_args[0][0]

    def test_thread_orders_ascending_then_limits(self):
        rows = [{"direction": "inbound", "message_text": "hi", "created_at": "t0"}]
        client, table = _client_returning(rows)

        assert SupabaseDB(client).list_thread("c-1") == rows

        client.table.assert_called_with("messages")
        table.select.assert_called_once_with("direction,message_text,created_at")
        table.eq.assert_called_once_with("customer_id", "c-1")
        table.order.assert_called_once_with("created_at", desc=False)
        table.limit.assert_called_once_with(THREAD_LIMIT)

    def test_upsert_summary_on_customer(self):
        client, table = _client_returning(None)

        row = SupabaseDB(client).upsert_summary("c-1", summary="s", insights={"topic": "t"})

        client.table.assert_called_with("conversation_summaries")
        args, kwargs = table.upsert.call_args
        assert kwargs == {"on_conflict": "customer_id"}
        assert row["last_summary"] == "s" and row["last_insights"] == {"topic": "t"}

    def test_get_summary_absent(self):
        client, _ = _client_returning([])
        assert SupabaseDB(client).get_summary("c-1") is None


class TestInMemoryDB:
    def test_message_requires_customer(self, memory_db):
        with pytest.raises(KeyError):
            memory_db.insert_message("missing", direction="inbound", message_text="hi")

    def test_summary_is_overwritten(self, memory_db):
        customer = memory_db.upsert_customer("880", None)
        memory_db.upsert_summary(customer["id"], "first", {})
        memory_db.upsert_summary(customer["id"], "second", {"topic": "x"})

        assert memory_db.get_summary(customer["id"])["last_summary"] == "second"
        assert len(memory_db.summaries) == 1


class TestGetDb:
    @pytest.fixture(autouse=True)
    def fresh_cache(self, monkeypatch):
        monkeypatch.setattr(db_module, "_db_instance", None)
        monkeypatch.setattr(db_module, "_db_credentials", None)
        self.created = []

        def fake_create_client(url, key):
            self.created.append((url, key))
            return MagicMock(name=f"client-{len(self.created)}")

        monkeypatch.setattr(db_module, "create_client", fake_create_client)

    def test_same_credentials_reuse_adapter(self, settings):
        assert get_db(settings) is get_db(settings.model_copy())
        assert self.created == [("https://example.supabase.co", "service-role")]

    def test_changed_credentials_rebuild_adapter(self, settings):
        first = get_db(settings)
        other = get_db(settings.model_copy(update={"supabase_url": "https://other.supabase.co"}))

        assert other is not first
        assert self.created[-1] == ("https://other.supabase.co", "service-role")
