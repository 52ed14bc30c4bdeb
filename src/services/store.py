"""
Primary store backed by a Supabase (PostgREST) table.
"""

import threading
from typing import Any, Dict, List

from supabase import Client, ClientOptions, create_client

from src.utils.config import get_settings
from src.utils.logger import logger


class StoreError(Exception):
    """The store rejected or failed an insert."""


class SupabaseStore:
    def __init__(self, url: str, key: str, timeout: float = 30.0):
        self.url = url
        self.key = key
        self.timeout = timeout
        self._client: Client | None = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "SupabaseStore":
        settings = get_settings()
        return cls(settings.supabase_url, settings.supabase_key, settings.sink_timeout_seconds)

    @property
    def client(self) -> Client:
        """Supabase client, created on first use."""
        with self._lock:
            if self._client is None:
                if not self.url or not self.key:
                    raise StoreError("Supabase is not configured")
                self._client = create_client(
                    self.url,
                    self.key,
                    options=ClientOptions(postgrest_client_timeout=self.timeout),
                )
                logger.info("connected_to_supabase")
        return self._client

    def insert(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Insert rows into a table.

        Returns:
            Inserted rows as returned by the store, including assigned ids
        """
        try:
            response = self.client.table(table).insert(rows).execute()
        except StoreError:
            raise
        except Exception as e:
            logger.error("store_insert_failed", table=table, rows=len(rows), error=str(e))
            raise StoreError(str(e)) from e

        data = response.data or []
        logger.info("rows_inserted", table=table, rows=len(data))
        return data
