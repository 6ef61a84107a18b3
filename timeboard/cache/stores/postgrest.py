"""PostgREST (Supabase) implementation of SnapshotStore.

Expects a table shaped like::

    cache_snapshots(cache_key text primary key, payload jsonb,
                    expires_at timestamptz, updated_at timestamptz)
"""

from datetime import datetime
from typing import Any

import httpx

from timeboard.cache.models import Snapshot
from timeboard.cache.store import SnapshotStore
from timeboard.config.models.storage import SnapshotStoreConfig
from timeboard.utils.clock import Clock, utc_now


class PostgrestSnapshotStore(SnapshotStore):
    """Snapshot rows read and upserted through the PostgREST HTTP API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        table: str = "cache_snapshots",
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the store.

        Args:
            client: HTTP client whose base_url is the PostgREST root and which
                already carries the ``apikey``/``Authorization`` headers
            table: Snapshot table name
            clock: Source of the ``updated_at`` column value
        """
        self._client = client
        self._table = table
        self._clock = clock

    @classmethod
    def from_config(cls, config: SnapshotStoreConfig) -> "PostgrestSnapshotStore":
        """Build a store with its own HTTP client from settings."""
        if not config.connection_url or not config.service_key:
            raise ValueError("PostgREST snapshot store needs connection_url and service_key")

        client = httpx.AsyncClient(
            base_url=config.connection_url.rstrip("/") + "/rest/v1",
            headers={
                "apikey": config.service_key,
                "Authorization": f"Bearer {config.service_key}",
                "Content-Type": "application/json",
            },
            timeout=config.timeout_seconds,
        )
        return cls(client, table=config.table)

    async def get_latest(self, key: str) -> Snapshot | None:
        response = await self._client.get(
            f"/{self._table}",
            params={
                "select": "payload,expires_at,updated_at",
                "cache_key": f"eq.{key}",
                "order": "updated_at.desc",
                "limit": "1",
            },
        )
        response.raise_for_status()

        rows: Any = response.json()
        if not isinstance(rows, list) or not rows:
            return None

        row = rows[0]
        expires_at = datetime.fromisoformat(row["expires_at"])
        created_raw = row.get("updated_at")
        created_at = datetime.fromisoformat(created_raw) if created_raw else expires_at
        return Snapshot(
            key=key,
            payload=row["payload"],
            created_at=created_at,
            expires_at=expires_at,
        )

    async def upsert(self, snapshot: Snapshot) -> None:
        response = await self._client.post(
            f"/{self._table}",
            json=[
                {
                    "cache_key": snapshot.key,
                    "payload": snapshot.payload,
                    "expires_at": snapshot.expires_at.isoformat(),
                    "updated_at": self._clock().isoformat(),
                }
            ],
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )
        response.raise_for_status()

    async def close(self) -> None:
        await self._client.aclose()
