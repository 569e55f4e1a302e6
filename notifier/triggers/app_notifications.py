import logging

from ..constants import APP_NAME, DEFAULT_ACTOR_NAME
from ..formatters import notification_body
from ..lookups import get_user_token, resolve_display_name
from ..push_service import push_service
from ..utils import as_str

logger = logging.getLogger("notifier")


async def on_app_notification_created(notification_id: str, data: dict):
    """Push a new in-app notification (like, comment, follow ...) to its owner."""
    user_id = as_str(data.get("userId"))
    actor_id = as_str(data.get("actorId"))
    notification_type = as_str(data.get("type"))
    post_id = as_str(data.get("postId"))
    comment_id = as_str(data.get("commentId"))

    if not user_id:
        return None

    token = await get_user_token(user_id)
    if not token:
        logger.info(f"[NOTIFICATION] No token for user {user_id}, skipping {notification_id}")
        return None

    actor_name = await resolve_display_name(actor_id, DEFAULT_ACTOR_NAME)

    return await push_service.send_app_notification(
        token=token,
        title=APP_NAME,
        body=notification_body(notification_type, actor_name),
        notification_id=notification_id,
        notification_type=notification_type,
        user_id=user_id,
        actor_id=actor_id,
        post_id=post_id,
        comment_id=comment_id,
    )
