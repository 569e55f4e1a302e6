import logging

from ..constants import CALL_BODY_VIDEO, CALL_BODY_VOICE, CALL_STATUS_RINGING, CALL_TITLE_FALLBACK
from ..lookups import get_user_token
from ..push_service import push_service
from ..utils import as_str

logger = logging.getLogger("notifier")


async def on_call_invitation_created(call_id: str, data: dict):
    """
    Ring the recipient of a new call invitation.

    Only invitations that are still ringing (or carry no status yet) are
    delivered. The caller's client usually copies the recipient token into the
    invitation; the profile is only read when it did not.
    """
    recipient_user_id = as_str(data.get("recipientUserId"))
    caller_id = as_str(data.get("callerId"))
    caller_name = as_str(data.get("callerName"))
    channel_name = as_str(data.get("channelName"))
    status = as_str(data.get("status"))
    is_video = bool(data.get("isVideo"))

    if not recipient_user_id or not caller_id or not channel_name:
        return None
    if status and status != CALL_STATUS_RINGING:
        logger.info(f"[CALL] Invitation {call_id} has status={status}, skipping")
        return None

    token = as_str(data.get("fcmToken"))
    if not token:
        try:
            token = await get_user_token(recipient_user_id)
        except Exception as e:
            logger.warning(f"[CALL] Token lookup failed for {recipient_user_id}: {e}")
            token = ""
    if not token:
        logger.info(f"[CALL] No token for recipient {recipient_user_id}, skipping {call_id}")
        return None

    return await push_service.send_incoming_call(
        token=token,
        title=caller_name or CALL_TITLE_FALLBACK,
        body=CALL_BODY_VIDEO if is_video else CALL_BODY_VOICE,
        caller_id=caller_id,
        is_video=is_video,
        call_id=call_id,
        channel_name=channel_name,
    )
