# =============================================================================
# tests/unit/test_supabase_client.py
# Unit Tests for the Supabase table wrapper and credentials
# =============================================================================

from unittest.mock import MagicMock

import pytest
from postgrest.exceptions import APIError

from classpoll_core.config import load_supabase_credentials
from classpoll_core.data.supabase_client import RemoteStore, StoreResult, TableClient
from classpoll_core.errors import ConfigurationError, RemoteStoreError


def _api_error(code, message):
    return APIError({"code": code, "message": message, "hint": None, "details": None})


class TestTableClient:

    def test_select_single_page(self, mock_supabase):
        query = mock_supabase.table.return_value.select.return_value
        query.range.return_value.execute.return_value.data = [{"id": "1"}, {"id": "2"}]

        rows, error = TableClient(mock_supabase, "exams").select()

        assert error is None
        assert rows == [{"id": "1"}, {"id": "2"}]
        query.range.assert_called_once_with(0, TableClient.BATCH_SIZE - 1)

    def test_select_paginates(self, mock_supabase):
        query = mock_supabase.table.return_value.select.return_value
        full = [{"id": str(i)} for i in range(TableClient.BATCH_SIZE)]
        query.range.return_value.execute.side_effect = [
            MagicMock(data=full), MagicMock(data=[{"id": "last"}]),
        ]

        rows, error = TableClient(mock_supabase, "users").select()

        assert error is None
        assert len(rows) == TableClient.BATCH_SIZE + 1
        assert query.range.call_count == 2

    def test_select_ordered(self, mock_supabase):
        query = mock_supabase.table.return_value.select.return_value
        query.order.return_value.range.return_value.execute.return_value.data = []

        TableClient(mock_supabase, "class_groups").select(order_by="name")

        query.order.assert_called_once_with("name", desc=False)

    def test_api_error_mapped(self, mock_supabase):
        query = mock_supabase.table.return_value.select.return_value
        query.range.return_value.execute.side_effect = _api_error(
            "42P01", 'relation "resources" does not exist')

        result = TableClient(mock_supabase, "resources").select()

        assert not result.ok
        assert result.data is None
        assert isinstance(result.error, RemoteStoreError)
        assert result.error.db_code == "42P01"
        assert result.error.details["table"] == "resources"
        assert result.error.details["operation"] == "select"

    def test_update_applies_filters(self, mock_supabase):
        builder = mock_supabase.table.return_value.update.return_value
        builder.eq.return_value.execute.return_value.data = [{"id": "p-1"}]

        result = TableClient(mock_supabase, "polls").update({"id": "p-1"}, {"title": "x"})

        assert result.ok
        mock_supabase.table.return_value.update.assert_called_once_with({"title": "x"})
        builder.eq.assert_called_once_with("id", "p-1")

    def test_delete_foreign_key_error(self, mock_supabase):
        builder = mock_supabase.table.return_value.delete.return_value
        builder.eq.return_value.execute.side_effect = _api_error(
            "23503", "update or delete on table \"users\" violates foreign key constraint")

        result = TableClient(mock_supabase, "users").delete({"id": "u-1"})

        assert result.error.db_code == "23503"
        assert result.error.code == "STORE_001"

    def test_non_api_exception_mapped(self, mock_supabase):
        mock_supabase.table.return_value.insert.return_value.execute.side_effect = ConnectionError("down")

        result = TableClient(mock_supabase, "exams").insert({"id": "e"})

        assert result.error.message == "down"
        assert result.error.db_code is None

    def test_select_one(self, mock_supabase):
        limited = mock_supabase.table.return_value.select.return_value.limit.return_value
        limited.execute.return_value.data = []

        row, error = TableClient(mock_supabase, "school_settings").select_one()

        assert row is None and error is None

    def test_remote_store_scopes_tables(self, mock_supabase):
        table = RemoteStore(mock_supabase).table("polls")
        assert table.table_name == "polls"
        assert table.client is mock_supabase

    def test_store_result_unpacks(self):
        data, error = StoreResult(data=[1])
        assert data == [1] and error is None


class TestCredentials:

    def test_secrets_first(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "env-key")

        creds = load_supabase_credentials({"supabase": {"url": "https://s.supabase.co", "key": "k"}})

        assert creds.url == "https://s.supabase.co"
        assert creds.key == "k"

    def test_environment_fallback(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "env-key")

        creds = load_supabase_credentials(None)

        assert creds.url == "https://env.supabase.co"

    def test_missing_raises(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_KEY", raising=False)

        with pytest.raises(ConfigurationError) as exc_info:
            load_supabase_credentials({})

        assert not exc_info.value.recoverable
