"""Bridge from message-insert notifications to query cache invalidation.

The bridge subscribes to inserts on the messages table addressed to the
signed-in user. Each insert marks the message list and the conversation
summary stale, and the open thread too when the new message belongs to it.
When the subscription cannot be established, or the channel later reports
an error, timeout or close, the bridge polls the message list and the open
thread on the chat poll interval instead.
"""

import asyncio
import contextlib
import logging
from typing import Any

from realtime import RealtimeSubscribeStates
from supabase import AsyncClient, acreate_client

from src.client.api_client import CONVERSATIONS_PATH, MESSAGES_PATH, UNREAD_COUNT_PATH, thread_path
from src.client.query_cache import QueryCache
from src.core.config import ClientSettings, get_client_settings

logger = logging.getLogger(__name__)

FAILED_STATES = frozenset(
    {
        RealtimeSubscribeStates.CHANNEL_ERROR,
        RealtimeSubscribeStates.TIMED_OUT,
        RealtimeSubscribeStates.CLOSED,
    }
)


async def create_realtime_client(
    access_token: str | None = None,
    settings: ClientSettings | None = None,
) -> AsyncClient | None:
    """Create an async Supabase client for realtime subscriptions.

    Returns:
        AsyncClient | None: None when no identity provider is configured.
    """
    settings = settings or get_client_settings()
    if not settings.supabase_url or not settings.supabase_publishable_key:
        return None
    client = await acreate_client(settings.supabase_url, settings.supabase_publishable_key)
    if access_token:
        await client.realtime.set_auth(access_token)
    return client


def extract_record(payload: dict[str, Any]) -> dict[str, Any] | None:
    """Pull the inserted row out of a change notification."""
    data = payload.get("data")
    if isinstance(data, dict) and isinstance(data.get("record"), dict):
        return data["record"]
    for name in ("record", "new"):
        if isinstance(payload.get(name), dict):
            return payload[name]
    return None


class MessageRealtimeBridge:
    """Invalidates cached message reads when new messages arrive.

    Usage:
        async with MessageRealtimeBridge(realtime, cache, user_id) as bridge:
            bridge.open_conversation(counterpart_id)
    """

    def __init__(
        self,
        realtime: Any,
        cache: QueryCache,
        user_id: int,
        poll_interval: float | None = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            realtime: Async Supabase client (or anything with the same
                ``channel``/``remove_channel`` surface). None forces polling.
            cache: Query cache holding the message reads.
            user_id: The signed-in user's id.
            poll_interval: Fallback poll interval; defaults to the cache config.
        """
        self._realtime = realtime
        self.cache = cache
        self.user_id = user_id
        self.poll_interval = poll_interval or cache.config.poll_interval_seconds
        self.counterpart_id: int | None = None
        self._channel: Any = None
        self._poll_task: asyncio.Task | None = None
        self._removal_task: asyncio.Task | None = None
        self._running = False

    @property
    def subscribed(self) -> bool:
        return self._channel is not None

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def start(self) -> bool:
        """Subscribe to message inserts, falling back to polling.

        Join failures reported later through the subscription state callback
        also switch the bridge to polling.

        Returns:
            bool: True if the live subscription is active.
        """
        self._running = True
        if self._realtime is None:
            logger.info("Realtime not configured for user %s, polling every %ss", self.user_id, self.poll_interval)
            self._start_polling()
            return False

        try:
            channel = self._realtime.channel(f"messages:{self.user_id}")
            channel.on_postgres_changes(
                "INSERT",
                schema="public",
                table="messages",
                filter=f"receiver_id=eq.{self.user_id}",
                callback=self._on_insert,
            )
            self._channel = channel
            await channel.subscribe(self._on_subscribe_state)
        except Exception as e:
            self._channel = None
            logger.warning("Realtime subscription failed for user %s, falling back to polling: %s", self.user_id, e)
            self._start_polling()
            return False

        if self.subscribed:
            logger.info("Subscribing to message inserts for user %s", self.user_id)
        return self.subscribed

    def _on_subscribe_state(self, state: RealtimeSubscribeStates, error: Exception | None = None) -> None:
        if state == RealtimeSubscribeStates.SUBSCRIBED:
            logger.info("Subscribed to message inserts for user %s", self.user_id)
            return
        if not self._running or state not in FAILED_STATES:
            return

        logger.warning(
            "Realtime channel for user %s reported %s, falling back to polling: %s",
            self.user_id,
            state.value,
            error,
        )
        channel, self._channel = self._channel, None
        self._start_polling()
        if channel is not None:
            self._removal_task = asyncio.create_task(self._remove_channel(channel))

    def open_conversation(self, counterpart_id: int) -> None:
        """Mark the thread with ``counterpart_id`` as the one on screen."""
        self.counterpart_id = counterpart_id

    def close_conversation(self) -> None:
        self.counterpart_id = None

    def _on_insert(self, payload: dict[str, Any]) -> None:
        record = extract_record(payload)
        if record is None:
            logger.debug("Ignoring notification without a record: %s", payload)
            return
        self.handle_insert(record)

    def handle_insert(self, record: dict[str, Any]) -> None:
        """Invalidate the reads affected by one inserted message."""
        self.cache.invalidate_path(MESSAGES_PATH)
        self.cache.invalidate_path(CONVERSATIONS_PATH)
        self.cache.invalidate_path(UNREAD_COUNT_PATH)

        counterpart = self.counterpart_id
        if counterpart is not None and counterpart in (record.get("sender_id"), record.get("receiver_id")):
            self.cache.invalidate_path(thread_path(counterpart))

    def _start_polling(self) -> None:
        if self.polling:
            return
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def _poll_loop(self) -> None:
        """Invalidate the message list and the open thread on every poll tick."""
        while self._running:
            try:
                await asyncio.sleep(self.poll_interval)
                if self.counterpart_id is not None:
                    self.cache.invalidate_path(thread_path(self.counterpart_id))
                self.cache.invalidate_path(MESSAGES_PATH)
                self.cache.invalidate_path(CONVERSATIONS_PATH)
            except asyncio.CancelledError:
                break

    async def _remove_channel(self, channel: Any) -> bool:
        try:
            await self._realtime.remove_channel(channel)
        except Exception as e:
            logger.warning("Failed to remove realtime channel for user %s: %s", self.user_id, e)
            return False
        return True

    async def close(self) -> None:
        """Stop polling and drop the subscription."""
        self._running = False
        self.counterpart_id = None

        if self._poll_task is not None:
            self._poll_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._poll_task
            self._poll_task = None

        if self._removal_task is not None:
            await self._removal_task
            self._removal_task = None

        if self._channel is not None:
            channel, self._channel = self._channel, None
            if await self._remove_channel(channel):
                logger.info("Unsubscribed from message inserts for user %s", self.user_id)

    async def __aenter__(self) -> "MessageRealtimeBridge":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
