# =============================================================================
# classpoll_core/data/supabase_client.py
# Supabase Client Configuration for ClassPoll+
# Table-scoped select / insert / update / delete / upsert returning (data, error)
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import streamlit as st
from postgrest.exceptions import APIError
from supabase import Client, create_client

from classpoll_core.config import load_supabase_credentials
from classpoll_core.errors import RemoteStoreError
from classpoll_core.logging import get_logger

logger = get_logger(__name__)


def _read_streamlit_secrets() -> Optional[dict]:
    try:
        return st.secrets.to_dict()
    except Exception as e:
        # No secrets.toml; credentials may still come from the environment
        logger.debug(f"Streamlit secrets unavailable: {e}")
        return None


def get_supabase_client() -> Client:
    """
    Initialize and return a Supabase client.

    Expects secrets in .streamlit/secrets.toml:
        [supabase]
        url = "https://your-project.supabase.co"
        key = "your-anon-key"

    Raises:
        ConfigurationError: when no credentials are configured
    """
    credentials = load_supabase_credentials(_read_streamlit_secrets())
    return create_client(credentials.url, credentials.key)


@st.cache_resource(ttl=3600)  # Cache for 1 hour, then refresh
def get_cached_supabase_client() -> Client:
    """Supabase client shared across sessions of this server process."""
    return get_supabase_client()


@dataclass
class StoreResult:
    """
    Outcome of one remote call: ``data`` on success, ``error`` on failure.
    Exactly one of the two is meaningful.
    """
    data: Any = None
    error: Optional[RemoteStoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self):
        # Allows ``data, error = table.select()``
        yield self.data
        yield self.error


def _to_store_error(exc: Exception, table: str, operation: str) -> RemoteStoreError:
    if isinstance(exc, APIError):
        return RemoteStoreError(
            exc.message or str(exc),
            table=table,
            operation=operation,
            db_code=exc.code,
            details={"hint": exc.hint} if exc.hint else None,
        )
    return RemoteStoreError(str(exc), table=table, operation=operation)


class TableClient:
    """
    Generic CRUD operations for one Supabase table.

    No method raises: every failure comes back as ``StoreResult.error``.
    """

    BATCH_SIZE = 1000  # PostgREST default max rows per request

    def __init__(self, client: Client, table_name: str):
        self.client = client
        self.table_name = table_name

    def _fail(self, exc: Exception, operation: str) -> StoreResult:
        error = _to_store_error(exc, self.table_name, operation)
        logger.warning(f"{operation} on {self.table_name} failed: {error}")
        return StoreResult(error=error)

    def select(self, order_by: Optional[str] = None, ascending: bool = True) -> StoreResult:
        """
        Fetch ALL records from the table (handles the 1000 row limit).

        Returns:
            StoreResult whose data is a list of row dicts
        """
        try:
            all_data: List[Dict[str, Any]] = []
            offset = 0

            while True:
                query = self.client.table(self.table_name).select("*")
                if order_by:
                    query = query.order(order_by, desc=not ascending)
                response = query.range(offset, offset + self.BATCH_SIZE - 1).execute()

                rows = response.data or []
                all_data.extend(rows)
                if len(rows) < self.BATCH_SIZE:
                    break
                offset += self.BATCH_SIZE

            return StoreResult(data=all_data)
        except Exception as e:
            return self._fail(e, "select")

    def select_one(self) -> StoreResult:
        """Fetch the first row, or None when the table is empty."""
        try:
            response = self.client.table(self.table_name).select("*").limit(1).execute()
            rows = response.data or []
            return StoreResult(data=rows[0] if rows else None)
        except Exception as e:
            return self._fail(e, "select")

    def insert(self, data: Dict[str, Any]) -> StoreResult:
        try:
            response = self.client.table(self.table_name).insert(data).execute()
            return StoreResult(data=response.data)
        except Exception as e:
            return self._fail(e, "insert")

    def update(self, filters: Dict[str, Any], data: Dict[str, Any]) -> StoreResult:
        """Update records matching every ``column == value`` in filters."""
        try:
            query = self.client.table(self.table_name).update(data)
            for col, val in filters.items():
                query = query.eq(col, val)
            response = query.execute()
            return StoreResult(data=response.data)
        except Exception as e:
            return self._fail(e, "update")

    def delete(self, filters: Dict[str, Any]) -> StoreResult:
        try:
            query = self.client.table(self.table_name).delete()
            for col, val in filters.items():
                query = query.eq(col, val)
            response = query.execute()
            return StoreResult(data=response.data)
        except Exception as e:
            return self._fail(e, "delete")

    def upsert(self, data: Dict[str, Any]) -> StoreResult:
        """Insert or update a record (must include the primary key)."""
        try:
            response = self.client.table(self.table_name).upsert(data).execute()
            return StoreResult(data=response.data)
        except Exception as e:
            return self._fail(e, "upsert")


class RemoteStore:
    """
    Entry point to the remote tables.

    Usage:
        store = RemoteStore(get_cached_supabase_client())
        rows, error = store.table("polls").select()
    """

    def __init__(self, client: Client):
        self.client = client

    def table(self, table_name: str) -> TableClient:
        return TableClient(self.client, table_name)


def get_remote_store() -> RemoteStore:
    return RemoteStore(get_cached_supabase_client())
