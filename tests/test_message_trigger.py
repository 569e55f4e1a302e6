"""Tests for the chat message trigger."""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timedelta, timezone

import pytest

from notifier.triggers import on_message_created


def _future():
    return (datetime.now(timezone.utc) + timedelta(hours=1)).isoformat()


def _past():
    return (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()


@pytest.fixture
def direct_message():
    return {"senderId": "A", "receiverId": "B", "conversationId": "conv1", "content": "Xin chào"}


def test_direct_message_pushes_to_receiver(store, fcm, direct_message):
    store.users["A"] = {"fullName": "An"}
    store.users["B"] = {"fcmToken": "tok-b"}

    result = asyncio.run(on_message_created("m1", direct_message))

    assert result.success
    assert len(fcm.sent) == 1
    push = fcm.sent[0]
    assert push["token"] == "tok-b"
    assert push["title"] == "An"
    assert push["body"] == "Xin chào"
    assert push["data"] == {
        "type": "chat_message",
        "senderId": "A",
        "receiverId": "B",
        "conversationId": "conv1",
        "messageId": "m1",
    }
    assert fcm.multicasts == []


def test_direct_message_muted_receiver_gets_nothing(store, fcm, direct_message):
    store.users["B"] = {"fcmToken": "tok-b"}
    store.mutes[("conv1", "B")] = {"mutedUntil": _future()}

    assert asyncio.run(on_message_created("m1", direct_message)) is None
    assert fcm.sent == []


def test_direct_message_expired_mute_still_delivers(store, fcm, direct_message):
    store.users["B"] = {"fcmToken": "tok-b"}
    store.mutes[("conv1", "B")] = {"mutedUntil": _past()}

    asyncio.run(on_message_created("m1", direct_message))
    assert len(fcm.sent) == 1


def test_direct_message_mute_error_fails_open(store, fcm, direct_message):
    store.users["B"] = {"fcmToken": "tok-b"}
    store.fail_mutes = True

    asyncio.run(on_message_created("m1", direct_message))
    assert len(fcm.sent) == 1


def test_direct_message_without_token_is_dropped(store, fcm, direct_message):
    store.users["B"] = {"fullName": "Bình"}

    assert asyncio.run(on_message_created("m1", direct_message)) is None
    assert fcm.sent == []


@pytest.mark.parametrize("receiver_id", ["", None, "A"])
def test_direct_message_without_distinct_receiver_is_dropped(store, fcm, direct_message, receiver_id):
    direct_message["receiverId"] = receiver_id
    store.users["A"] = {"fcmToken": "tok-a"}

    asyncio.run(on_message_created("m1", direct_message))
    assert fcm.sent == []


def test_message_without_sender_is_dropped(store, fcm, direct_message):
    direct_message.pop("senderId")
    store.users["B"] = {"fcmToken": "tok-b"}

    assert asyncio.run(on_message_created("m1", direct_message)) is None
    assert fcm.sent == []
    assert store.user_reads == []


def test_sender_name_falls_back_when_profile_lookup_fails(store, fcm, direct_message):
    store.failing_users.add("A")
    store.users["B"] = {"fcmToken": "tok-b"}

    asyncio.run(on_message_created("m1", direct_message))
    assert fcm.sent[0]["title"] == "Synap"


def test_media_message_uses_placeholder(store, fcm, direct_message):
    direct_message.update(content="", imageUrl="https://cdn/p.jpg")
    store.users["A"] = {"username": "an"}
    store.users["B"] = {"fcmToken": "tok-b"}

    asyncio.run(on_message_created("m1", direct_message))
    assert fcm.sent[0]["title"] == "an"
    assert fcm.sent[0]["body"] == "[Ảnh]"


def test_receiver_token_lookup_error_propagates(store, fcm, direct_message):
    store.failing_users.add("B")

    with pytest.raises(RuntimeError):
        asyncio.run(on_message_created("m1", direct_message))


def test_send_error_propagates(store, fcm, direct_message):
    store.users["B"] = {"fcmToken": "tok-b"}
    fcm.error = RuntimeError("fcm down")

    with pytest.raises(RuntimeError, match="fcm down"):
        asyncio.run(on_message_created("m1", direct_message))


@pytest.fixture
def group_message():
    return {"senderId": "A", "groupId": "g1", "conversationId": "conv-g1", "content": "chào cả nhà"}


def test_group_message_multicasts_to_other_members(store, fcm, group_message):
    store.groups["g1"] = {"memberIds": ["A", "B", "C"]}
    store.users["A"] = {"fullName": "An", "fcmToken": "tok-a"}
    store.users["B"] = {"fcmToken": "tok-b"}
    store.users["C"] = {"fcmToken": "tok-c"}

    result = asyncio.run(on_message_created("m9", group_message))

    assert result.success_count == 2
    assert fcm.sent == []
    assert len(fcm.multicasts) == 1
    push = fcm.multicasts[0]
    assert sorted(push["tokens"]) == ["tok-b", "tok-c"]
    assert push["title"] == "An"
    assert push["body"] == "chào cả nhà"
    assert push["data"] == {
        "type": "group_chat_message",
        "senderId": "A",
        "groupId": "g1",
        "conversationId": "conv-g1",
        "messageId": "m9",
    }


def test_group_message_all_filtered_sends_nothing(store, fcm, group_message):
    store.groups["g1"] = {"memberIds": ["A", "B", "C"]}
    store.users["B"] = {"fcmToken": "tok-b"}
    store.users["C"] = {"fullName": "no token"}
    store.mutes[("conv-g1", "B")] = {"mutedUntil": _future()}

    assert asyncio.run(on_message_created("m9", group_message)) is None
    assert fcm.multicasts == []


def test_group_message_skips_muted_and_tokenless_members(store, fcm, group_message):
    store.groups["g1"] = {"memberIds": ["A", "B", "C", "D"]}
    store.users["B"] = {"fcmToken": "tok-b"}
    store.users["C"] = {}
    store.users["D"] = {"fcmToken": "tok-d"}
    store.mutes[("conv-g1", "B")] = {"mutedUntil": _future()}

    asyncio.run(on_message_created("m9", group_message))
    assert fcm.multicasts[0]["tokens"] == ["tok-d"]


def test_group_message_member_lookup_failure_only_skips_that_member(store, fcm, group_message):
    store.groups["g1"] = {"memberIds": ["A", "B", "C"]}
    store.failing_users.add("B")
    store.users["C"] = {"fcmToken": "tok-c"}

    asyncio.run(on_message_created("m9", group_message))
    assert fcm.multicasts[0]["tokens"] == ["tok-c"]


def test_group_message_deduplicates_members_and_tokens(store, fcm, group_message):
    store.groups["g1"] = {"memberIds": ["B", "B", "C", "", None]}
    store.users["B"] = {"fcmToken": "shared"}
    store.users["C"] = {"fcmToken": "shared"}

    asyncio.run(on_message_created("m9", group_message))
    assert fcm.multicasts[0]["tokens"] == ["shared"]
    assert store.user_reads.count("B") == 1


def test_group_with_only_sender_sends_nothing(store, fcm, group_message):
    store.groups["g1"] = {"memberIds": ["A"]}
    store.users["A"] = {"fcmToken": "tok-a"}

    assert asyncio.run(on_message_created("m9", group_message)) is None
    assert fcm.multicasts == []


def test_missing_group_sends_nothing(store, fcm, group_message):
    assert asyncio.run(on_message_created("m9", group_message)) is None
    assert fcm.multicasts == []
    assert fcm.sent == []


def test_group_id_takes_precedence_over_receiver(store, fcm, group_message):
    group_message["receiverId"] = "B"
    store.groups["g1"] = {"memberIds": ["A", "C"]}
    store.users["B"] = {"fcmToken": "tok-b"}
    store.users["C"] = {"fcmToken": "tok-c"}

    asyncio.run(on_message_created("m9", group_message))
    assert fcm.sent == []
    assert fcm.multicasts[0]["tokens"] == ["tok-c"]


def test_group_member_lookups_run_concurrently(store, fcm, group_message):
    members = ["B", "C", "D"]
    store.groups["g1"] = {"memberIds": ["A"] + members}
    for uid in members:
        store.users[uid] = {"fcmToken": f"tok-{uid.lower()}"}

    # Every member's token read blocks until all of them are in flight
    barrier = threading.Barrier(len(members), timeout=2)
    plain_get_user = store.get_user

    def get_user(user_id):
        if user_id in members:
            barrier.wait()
        return plain_get_user(user_id)

    store.get_user = get_user

    asyncio.run(on_message_created("m9", group_message))

    assert sorted(fcm.multicasts[0]["tokens"]) == ["tok-b", "tok-c", "tok-d"]
