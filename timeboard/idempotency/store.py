"""IdempotencyStore abstract interface."""

from abc import ABC, abstractmethod

from timeboard.idempotency.models import IdempotencyRecord


class IdempotencyStore(ABC):
    """Storage for idempotency records.

    Implementations raise on backend failure; the guard absorbs it.
    """

    @abstractmethod
    async def get(self, scope: str, subject_id: str, token: str) -> IdempotencyRecord | None:
        """Return the live record for a key, if any."""
        pass

    @abstractmethod
    async def insert_if_absent(self, record: IdempotencyRecord, ttl_seconds: int) -> bool:
        """Store the record unless a live one already exists for its key.

        Returns:
            True if the record was stored, False if an earlier one was kept
        """
        pass

    async def close(self) -> None:
        """Release backend connections."""
        return None
