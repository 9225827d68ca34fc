"""Group a flat message list into per-counterpart conversations."""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


def _timestamp(value: datetime | str) -> datetime:
    """Normalize a created_at value (ISO string or datetime) to an aware datetime."""
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _recency(message: Mapping[str, Any]) -> tuple[datetime, int]:
    # Equal timestamps fall back to the higher id.
    return _timestamp(message["created_at"]), int(message["id"])


def counterpart_of(message: Mapping[str, Any], user_id: int) -> int:
    """Return the other participant of a message relative to ``user_id``."""
    return message["receiver_id"] if message["sender_id"] == user_id else message["sender_id"]


def aggregate_conversations(
    messages: Iterable[Mapping[str, Any]],
    user_id: int,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Build one conversation entry per counterpart.

    Each entry holds the most recent message exchanged with that counterpart
    and the number of unread messages the user received from them. Entries
    are ordered newest first. Self-addressed messages group under the user's
    own id.

    Args:
        messages: Messages involving ``user_id``, in any order.
        user_id: The user whose inbox is being built.
        limit: Optional cap on the number of conversations returned.

    Returns:
        list: Dicts with ``counterpart_id``, ``latest_message`` and
        ``unread_count``.
    """
    latest: dict[int, Mapping[str, Any]] = {}
    unread: dict[int, int] = {}

    for message in messages:
        counterpart = counterpart_of(message, user_id)
        if counterpart == user_id:
            logger.debug("Self-addressed message %s grouped under user %s", message["id"], user_id)

        current = latest.get(counterpart)
        if current is None or _recency(message) > _recency(current):
            latest[counterpart] = message

        if not message.get("read", False) and message["receiver_id"] == user_id:
            unread[counterpart] = unread.get(counterpart, 0) + 1
        else:
            unread.setdefault(counterpart, 0)

    ordered = sorted(latest.items(), key=lambda item: _recency(item[1]), reverse=True)
    if limit is not None:
        ordered = ordered[:limit]

    return [
        {
            "counterpart_id": counterpart,
            "latest_message": dict(message),
            "unread_count": unread[counterpart],
        }
        for counterpart, message in ordered
    ]
