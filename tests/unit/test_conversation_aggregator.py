"""Unit tests for grouping messages into conversations."""

from datetime import datetime, timezone

from src.services.conversation_aggregator import aggregate_conversations, counterpart_of

USER_ID = 1


def make_message(
    message_id: int,
    sender_id: int,
    receiver_id: int,
    created_at: str,
    read: bool = False,
) -> dict:
    return {
        "id": message_id,
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "content": f"message {message_id}",
        "job_id": None,
        "read": read,
        "created_at": created_at,
    }


class TestCounterpartOf:
    """Tests for counterpart_of."""

    def test_sender_sees_receiver(self) -> None:
        assert counterpart_of(make_message(1, USER_ID, 2, "2024-01-01T00:00:00+00:00"), USER_ID) == 2

    def test_receiver_sees_sender(self) -> None:
        assert counterpart_of(make_message(1, 3, USER_ID, "2024-01-01T00:00:00+00:00"), USER_ID) == 3


class TestAggregateConversations:
    """Tests for aggregate_conversations."""

    def test_empty_input_gives_no_conversations(self) -> None:
        assert aggregate_conversations([], USER_ID) == []

    def test_one_entry_per_counterpart_with_latest_message(self) -> None:
        """The newest message per counterpart wins regardless of input order."""
        messages = [
            make_message(3, 2, USER_ID, "2024-01-01T10:00:00+00:00"),
            make_message(1, USER_ID, 2, "2024-01-01T08:00:00+00:00"),
            make_message(2, 3, USER_ID, "2024-01-01T09:00:00+00:00"),
            make_message(4, USER_ID, 3, "2024-01-01T07:00:00+00:00"),
        ]

        conversations = aggregate_conversations(messages, USER_ID)

        assert [c["counterpart_id"] for c in conversations] == [2, 3]
        assert conversations[0]["latest_message"]["id"] == 3
        assert conversations[1]["latest_message"]["id"] == 2

    def test_sorted_newest_first(self) -> None:
        messages = [
            make_message(1, 4, USER_ID, "2024-01-03T00:00:00+00:00"),
            make_message(2, 2, USER_ID, "2024-01-01T00:00:00+00:00"),
            make_message(3, USER_ID, 3, "2024-01-02T00:00:00+00:00"),
        ]

        conversations = aggregate_conversations(messages, USER_ID)

        assert [c["counterpart_id"] for c in conversations] == [4, 3, 2]

    def test_unread_counts_only_received_unread(self) -> None:
        """Sent messages and read messages never count as unread."""
        messages = [
            make_message(1, 2, USER_ID, "2024-01-01T00:00:01+00:00", read=False),
            make_message(2, 2, USER_ID, "2024-01-01T00:00:02+00:00", read=False),
            make_message(3, 2, USER_ID, "2024-01-01T00:00:03+00:00", read=True),
            make_message(4, USER_ID, 2, "2024-01-01T00:00:04+00:00", read=False),
            make_message(5, USER_ID, 3, "2024-01-01T00:00:05+00:00", read=False),
        ]

        conversations = {c["counterpart_id"]: c for c in aggregate_conversations(messages, USER_ID)}

        assert conversations[2]["unread_count"] == 2
        assert conversations[3]["unread_count"] == 0

    def test_equal_timestamps_prefer_higher_id(self) -> None:
        same_time = "2024-01-01T12:00:00+00:00"
        messages = [
            make_message(8, 2, USER_ID, same_time),
            make_message(9, USER_ID, 2, same_time),
            make_message(7, 2, USER_ID, same_time),
        ]

        conversations = aggregate_conversations(messages, USER_ID)

        assert conversations[0]["latest_message"]["id"] == 9

    def test_limit_keeps_most_recent(self) -> None:
        messages = [
            make_message(i, i + 1, USER_ID, f"2024-01-0{i}T00:00:00+00:00")
            for i in range(1, 6)
        ]

        conversations = aggregate_conversations(messages, USER_ID, limit=2)

        assert [c["counterpart_id"] for c in conversations] == [6, 5]

    def test_mixed_timestamp_types(self) -> None:
        """ISO strings (with Z suffix), naive and aware datetimes compare together."""
        messages = [
            make_message(1, 2, USER_ID, "2024-01-01T10:00:00Z"),
            {**make_message(2, 3, USER_ID, ""), "created_at": datetime(2024, 1, 1, 11, 0)},
            {**make_message(3, 4, USER_ID, ""), "created_at": datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)},
        ]

        conversations = aggregate_conversations(messages, USER_ID)

        assert [c["counterpart_id"] for c in conversations] == [3, 2, 4]

    def test_self_messages_group_under_own_id(self) -> None:
        messages = [
            make_message(1, USER_ID, USER_ID, "2024-01-01T00:00:00+00:00"),
            make_message(2, 2, USER_ID, "2024-01-01T00:00:01+00:00"),
        ]

        conversations = aggregate_conversations(messages, USER_ID)

        assert {c["counterpart_id"] for c in conversations} == {USER_ID, 2}

    def test_every_counterpart_appears_once(self) -> None:
        """The set of counterparts equals the distinct other participants."""
        messages = [
            make_message(i, sender, receiver, f"2024-01-01T00:00:{i:02d}+00:00")
            for i, (sender, receiver) in enumerate(
                [(USER_ID, 2), (2, USER_ID), (USER_ID, 3), (4, USER_ID), (3, USER_ID), (USER_ID, 4)],
                start=1,
            )
        ]

        conversations = aggregate_conversations(messages, USER_ID)
        counterparts = [c["counterpart_id"] for c in conversations]

        assert sorted(counterparts) == [2, 3, 4]
        assert len(counterparts) == len(set(counterparts))

    def test_same_input_gives_same_result(self) -> None:
        """Aggregating a shuffled inbox with timestamp ties twice yields identical output."""
        messages = [
            make_message(1, 2, USER_ID, "2024-01-01T09:00:00+00:00"),
            make_message(2, USER_ID, 2, "2024-01-01T09:00:00+00:00"),
            make_message(3, 3, USER_ID, "2024-01-01T09:00:00+00:00"),
            make_message(4, USER_ID, 4, "2024-01-01T08:00:00+00:00"),
            make_message(5, 4, USER_ID, "2024-01-01T08:00:00+00:00", read=True),
            make_message(6, 3, USER_ID, "2024-01-01T07:00:00+00:00"),
        ]
        shuffled = [messages[i] for i in (4, 0, 5, 2, 1, 3)]

        first = aggregate_conversations(shuffled, USER_ID)
        second = aggregate_conversations(shuffled, USER_ID)

        assert first == second
        assert first == aggregate_conversations(messages, USER_ID)
        assert [c["counterpart_id"] for c in first] == [3, 2, 4]
