"""Per-key single-flight registry for upstream refreshes."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from timeboard.observability.logging import get_logger
from timeboard.observability.metrics import COALESCED_REFRESHES

logger = get_logger(__name__)

T = TypeVar("T")


class SingleFlight:
    """At most one in-flight call per key.

    The first caller for a key runs the call; callers arriving while it is
    in flight await the same result instead of starting their own. The key
    is released as soon as the call settles, so the next caller starts a
    new call. If the leading caller is cancelled, waiters are cancelled too.
    """

    def __init__(self) -> None:
        self._calls: dict[str, asyncio.Future[Any]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._calls

    async def run(self, key: str, func: Callable[[], Awaitable[T]]) -> T:
        existing = self._calls.get(key)
        if existing is not None:
            COALESCED_REFRESHES.inc()
            logger.debug("refresh_coalesced", key=key)
            return await asyncio.shield(existing)

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._calls[key] = future
        try:
            result = await func()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved so an unobserved failure is not reported twice
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            self._calls.pop(key, None)
