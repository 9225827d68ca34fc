"""Messaging view: conversation list, open thread and live updates."""

import logging
from typing import Any

from src.client.api_client import CONVERSATIONS_PATH, MESSAGES_PATH, thread_path
from src.client.query_cache import QueryResult
from src.client.realtime import MessageRealtimeBridge
from src.client.session import AuthSession
from src.services.conversation_aggregator import aggregate_conversations

logger = logging.getLogger(__name__)


class ConversationView:
    """State behind a messaging screen for the signed-in user.

    The view owns its realtime bridge. Closing it drops the subscription and
    stops background refetches nobody is waiting on. Reads other consumers of
    the shared cache are still awaiting run to completion.
    """

    def __init__(self, session: AuthSession, realtime: Any = None) -> None:
        if session.user_id is None:
            raise ValueError("ConversationView requires a signed-in session")
        self.session = session
        self.client = session.client
        self.bridge = MessageRealtimeBridge(realtime, self.client.cache, session.user_id)
        self.counterpart_id: int | None = None

    async def open(self) -> "ConversationView":
        await self.bridge.start()
        return self

    async def conversations(self, limit: int | None = None) -> list[dict]:
        """Conversation summaries built from the caller's message list.

        Falls back to whatever the cache still holds when the refetch fails.
        """
        result = await self.client.list_messages()
        if result.error is not None:
            logger.warning("Showing cached conversations: %s", result.error)
        return aggregate_conversations(result.data or [], self.session.user_id, limit=limit)

    async def select(self, counterpart_id: int) -> QueryResult:
        """Open the thread with ``counterpart_id`` and load it."""
        if self.counterpart_id is not None and self.counterpart_id != counterpart_id:
            self.client.cache.cancel([thread_path(self.counterpart_id)])
        self.counterpart_id = counterpart_id
        self.bridge.open_conversation(counterpart_id)
        return await self.client.get_thread(counterpart_id)

    async def thread(self) -> QueryResult | None:
        """Reload the open thread (served from cache while fresh)."""
        if self.counterpart_id is None:
            return None
        return await self.client.get_thread(self.counterpart_id)

    async def send(self, content: str, job_id: int | None = None) -> dict:
        """Send a message to the open counterpart."""
        if self.counterpart_id is None:
            raise ValueError("No conversation is open")
        return await self.client.send_message(self.counterpart_id, content, job_id=job_id)

    async def mark_thread_read(self) -> int:
        """Mark every unread message from the open counterpart read.

        Returns:
            int: Number of messages marked.
        """
        result = await self.thread()
        if result is None or not result.data:
            return 0
        unread = [
            m for m in result.data
            if not m.get("read") and m.get("receiver_id") == self.session.user_id
        ]
        for message in unread:
            await self.client.mark_read(message["id"])
        return len(unread)

    async def close(self) -> None:
        keys = [MESSAGES_PATH, CONVERSATIONS_PATH]
        if self.counterpart_id is not None:
            keys.append(thread_path(self.counterpart_id))
        self.client.cache.release(keys)
        self.counterpart_id = None
        await self.bridge.close()

    async def __aenter__(self) -> "ConversationView":
        return await self.open()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
