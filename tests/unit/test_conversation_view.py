"""Unit tests for the client conversation view."""

import asyncio

import httpx
import pytest

from src.client.api_client import MESSAGES_PATH, MarketplaceClient, thread_path
from src.client.session import AuthSession, MemoryTokenStore
from src.client.conversations import ConversationView
from src.core.config import ClientSettings
from tests.fakes import FakeApi

USER_ID = 1


def message(message_id: int, sender_id: int, receiver_id: int, second: int, read: bool = False) -> dict:
    return {
        "id": message_id,
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "job_id": None,
        "content": f"message {message_id}",
        "read": read,
        "created_at": f"2024-01-01T00:00:{second:02d}+00:00",
    }


INBOX = [
    message(4, 3, USER_ID, 4),
    message(3, USER_ID, 2, 3),
    message(2, 2, USER_ID, 2),
    message(1, 2, USER_ID, 1, read=True),
]


@pytest.fixture
def api() -> FakeApi:
    api = FakeApi()
    api.on("GET", MESSAGES_PATH, json=INBOX)
    return api


@pytest.fixture
def session(api: FakeApi) -> AuthSession:
    client = MarketplaceClient(
        "http://testserver",
        token="local-token",
        settings=ClientSettings(_env_file=None, chat_poll_seconds=60),
        transport=httpx.MockTransport(api),
    )
    session = AuthSession(client, MemoryTokenStore("local-token"))
    session.user = {"id": USER_ID, "role": "client"}
    return session


class TestConversationView:
    """Tests for ConversationView."""

    def test_requires_signed_in_session(self, session: AuthSession) -> None:
        session.user = None

        with pytest.raises(ValueError):
            ConversationView(session)

    @pytest.mark.asyncio
    async def test_conversations_aggregated_from_messages(self, session: AuthSession) -> None:
        async with ConversationView(session) as view:
            conversations = await view.conversations()

        assert [c["counterpart_id"] for c in conversations] == [3, 2]
        assert conversations[1]["latest_message"]["id"] == 3
        assert conversations[1]["unread_count"] == 1

    @pytest.mark.asyncio
    async def test_select_loads_thread_and_tracks_counterpart(self, session: AuthSession, api: FakeApi) -> None:
        api.on("GET", thread_path(2), json=[message(2, 2, USER_ID, 2)])

        async with ConversationView(session) as view:
            result = await view.select(2)

            assert result.data[0]["id"] == 2
            assert view.bridge.counterpart_id == 2

    @pytest.mark.asyncio
    async def test_send_targets_open_counterpart(self, session: AuthSession, api: FakeApi) -> None:
        api.on("GET", thread_path(2), json=[])
        api.on("POST", MESSAGES_PATH, 201, message(5, USER_ID, 2, 5))

        async with ConversationView(session) as view:
            await view.select(2)
            sent = await view.send("hello again")

        assert sent["receiver_id"] == 2
        assert session.client.cache.peek(thread_path(2)).is_stale

    @pytest.mark.asyncio
    async def test_send_without_open_conversation(self, session: AuthSession) -> None:
        async with ConversationView(session) as view:
            with pytest.raises(ValueError):
                await view.send("hello")

    @pytest.mark.asyncio
    async def test_mark_thread_read_marks_only_received_unread(self, session: AuthSession, api: FakeApi) -> None:
        api.on(
            "GET",
            thread_path(2),
            json=[message(2, 2, USER_ID, 2), message(3, USER_ID, 2, 3), message(1, 2, USER_ID, 1, read=True)],
        )
        api.on("PATCH", "/api/messages/2/read", json={**message(2, 2, USER_ID, 2), "read": True})

        async with ConversationView(session) as view:
            await view.select(2)
            marked = await view.mark_thread_read()

        assert marked == 1
        assert len(api.calls("PATCH", "/api/messages/2/read")) == 1

    @pytest.mark.asyncio
    async def test_close_stops_polling(self, session: AuthSession) -> None:
        view = await ConversationView(session).open()
        assert view.bridge.polling

        await view.close()

        assert not view.bridge.polling
        assert view.counterpart_id is None

    @pytest.mark.asyncio
    async def test_close_leaves_shared_reads_running(self, session: AuthSession) -> None:
        gate = asyncio.Event()

        async def slow_inbox() -> list[dict]:
            await gate.wait()
            return INBOX

        view = await ConversationView(session).open()
        other_reader = asyncio.create_task(session.client.cache.read(MESSAGES_PATH, slow_inbox))
        await asyncio.sleep(0)

        await view.close()
        gate.set()
        result = await other_reader

        assert result.error is None
        assert result.data == INBOX
