"""Envelope for the cached read views."""

from typing import Any

from timeboard.snapshots.orchestrator import ServedSnapshot
from timeboard.utils.dates import to_rfc3339


def render_envelope(served: ServedSnapshot) -> dict[str, Any]:
    """Merge a served payload with its freshness fields.

    The payload is already camelCase JSON; envelope fields use the same case.
    """
    content: dict[str, Any] = dict(served.payload) if isinstance(served.payload, dict) else {"data": served.payload}
    content.update(
        {
            "cachedAt": to_rfc3339(served.cached_at),
            "stale": served.stale,
            "warning": served.warning,
            "quotaRemaining": served.quota_remaining,
            "quotaResetsIn": served.quota_resets_in,
        }
    )
    if served.retry_after is not None:
        content["retryAfter"] = served.retry_after
    return content
