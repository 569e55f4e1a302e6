"""
Async lookups used by the triggers.

Firestore Admin reads are blocking, so each one runs in a worker thread;
that lets the group fan-out check many members concurrently.
"""
import asyncio
import logging
from typing import List

from django.utils import timezone

from .firebase_service import firestore_service
from .utils import as_str, parse_timestamp

logger = logging.getLogger("notifier")


async def get_user_token(user_id: str) -> str:
    """FCM token of a user, or "" when the user or token is missing. Errors propagate."""
    profile = await asyncio.to_thread(firestore_service.get_user, user_id)
    if not profile:
        return ""
    return as_str(profile.get("fcmToken"))


async def resolve_display_name(user_id: str, default: str) -> str:
    """
    Display name for a user: fullName, then username, then ``default``.

    Never raises; a failed profile lookup yields ``default``.
    """
    if not user_id:
        return default
    try:
        profile = await asyncio.to_thread(firestore_service.get_user, user_id)
    except Exception as e:
        logger.warning(f"[PROFILE] Lookup failed for {user_id}: {e}")
        return default
    profile = profile or {}
    return as_str(profile.get("fullName")) or as_str(profile.get("username")) or default


async def get_group_member_ids(group_id: str) -> List[str]:
    """Member ids of a group ([] when the group is missing). Errors propagate."""
    group = await asyncio.to_thread(firestore_service.get_group, group_id)
    if not group:
        return []
    return [as_str(member_id) for member_id in group.get("memberIds") or []]


async def is_conversation_muted(conversation_id: str, user_id: str, now=None) -> bool:
    """
    Whether ``user_id`` has muted ``conversation_id`` right now.

    A mute is active while its ``mutedUntil`` lies strictly in the future.
    Lookup or parse failures count as not muted.
    """
    if not conversation_id or not user_id:
        return False
    try:
        mute = await asyncio.to_thread(firestore_service.get_mute, conversation_id, user_id)
        if not mute:
            return False

        muted_until = mute.get("mutedUntil")
        if not muted_until:
            return False

        now = now or timezone.now()
        return parse_timestamp(muted_until) > now
    except Exception as e:
        logger.error(f"[MUTE] Error checking mute status for {conversation_id}/{user_id}: {e}")
        return False
