import asyncio
import logging

from ..constants import DEFAULT_SENDER_NAME
from ..formatters import preview_body
from ..lookups import get_group_member_ids, get_user_token, is_conversation_muted, resolve_display_name
from ..push_service import push_service
from ..utils import as_str

logger = logging.getLogger("notifier")


async def _group_target_token(conversation_id: str, user_id: str) -> str:
    if await is_conversation_muted(conversation_id, user_id):
        logger.info(f"[MESSAGE] Conversation {conversation_id} is muted for user {user_id}, skipping")
        return ""
    try:
        return await get_user_token(user_id)
    except Exception as e:
        logger.error(f"[MESSAGE] Token lookup failed for {user_id}: {e}")
        return ""


async def _send_group(message_id, sender_id, sender_name, body, conversation_id, group_id):
    member_ids = await get_group_member_ids(group_id)
    targets = list(dict.fromkeys(uid for uid in member_ids if uid and uid != sender_id))
    if not targets:
        return None

    tokens = await asyncio.gather(*(_group_target_token(conversation_id, uid) for uid in targets))
    tokens = list(dict.fromkeys(token for token in tokens if token))
    if not tokens:
        return None

    logger.info(f"[MESSAGE] Group {group_id}: sending {message_id} to {len(tokens)}/{len(targets)} members")
    return await push_service.send_group_chat_message(
        tokens=tokens,
        sender_name=sender_name,
        body=body,
        sender_id=sender_id,
        group_id=group_id,
        conversation_id=conversation_id,
        message_id=message_id,
    )


async def _send_direct(message_id, sender_id, receiver_id, sender_name, body, conversation_id):
    if not receiver_id or receiver_id == sender_id:
        return None

    if await is_conversation_muted(conversation_id, receiver_id):
        logger.info(f"[MESSAGE] Conversation {conversation_id} is muted for user {receiver_id}, skipping notification")
        return None

    token = await get_user_token(receiver_id)
    if not token:
        return None

    return await push_service.send_chat_message(
        token=token,
        sender_name=sender_name,
        body=body,
        sender_id=sender_id,
        receiver_id=receiver_id,
        conversation_id=conversation_id,
        message_id=message_id,
    )


async def on_message_created(message_id: str, data: dict):
    """
    Notify the recipients of a new chat message.

    Group messages fan out to every member except the sender; direct messages
    go to the receiver. Members who muted the conversation or have no token
    are skipped.
    """
    sender_id = as_str(data.get("senderId"))
    receiver_id = as_str(data.get("receiverId"))
    conversation_id = as_str(data.get("conversationId"))
    group_id = as_str(data.get("groupId"))

    if not sender_id:
        return None

    sender_name = await resolve_display_name(sender_id, DEFAULT_SENDER_NAME)
    body = preview_body(data)

    if group_id:
        return await _send_group(message_id, sender_id, sender_name, body, conversation_id, group_id)

    return await _send_direct(message_id, sender_id, receiver_id, sender_name, body, conversation_id)
