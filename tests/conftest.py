"""Shared fakes for Firestore reads and FCM sends."""

from __future__ import annotations

import pytest

from notifier import lookups
from notifier.push_service import MulticastResult, PushResult, push_service


class FakeFirestoreService:
    """In-memory stand-in for FirestoreService."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.groups: dict[str, dict] = {}
        self.mutes: dict[tuple[str, str], dict] = {}
        self.failing_users: set[str] = set()
        self.fail_mutes = False
        self.user_reads: list[str] = []

    def get_user(self, user_id):
        self.user_reads.append(user_id)
        if user_id in self.failing_users:
            raise RuntimeError(f"firestore unavailable for {user_id}")
        return self.users.get(user_id)

    def get_group(self, group_id):
        return self.groups.get(group_id)

    def get_mute(self, conversation_id, user_id):
        if self.fail_mutes:
            raise RuntimeError("mute lookup failed")
        return self.mutes.get((conversation_id, user_id))


class FakeFCM:
    """Records every push instead of talking to FCM."""

    def __init__(self):
        self.sent: list[dict] = []
        self.multicasts: list[dict] = []
        self.error: Exception | None = None

    async def send(self, token, title, body, data, channel_id="synap_general"):
        if self.error is not None:
            raise self.error
        self.sent.append({"token": token, "title": title, "body": body, "data": data, "channel_id": channel_id})
        return PushResult(success=True, message_id=f"projects/test/messages/{len(self.sent)}")

    async def send_multicast(self, tokens, title, body, data, channel_id="synap_general"):
        if self.error is not None:
            raise self.error
        self.multicasts.append({"tokens": list(tokens), "title": title, "body": body, "data": data, "channel_id": channel_id})
        return MulticastResult(success_count=len(tokens))


@pytest.fixture
def store(monkeypatch):
    fake = FakeFirestoreService()
    monkeypatch.setattr(lookups, "firestore_service", fake)
    return fake


@pytest.fixture
def fcm(monkeypatch):
    fake = FakeFCM()
    monkeypatch.setattr(push_service, "fcm", fake)
    return fake
