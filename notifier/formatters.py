"""Text shown in push notifications."""
from .constants import (
    NOTIFICATION_FALLBACK,
    PREVIEW_AUDIO,
    PREVIEW_FALLBACK,
    PREVIEW_GIF,
    PREVIEW_IMAGE,
    PREVIEW_VIDEO,
)
from .utils import as_str

# Checked in order when a message has no text
MEDIA_PLACEHOLDERS = [
    ("imageUrl", PREVIEW_IMAGE),
    ("videoUrl", PREVIEW_VIDEO),
    ("audioUrl", PREVIEW_AUDIO),
    ("gifUrl", PREVIEW_GIF),
]

NOTIFICATION_TEMPLATES = {
    "like": "{actor} đã thích bài viết của bạn",
    "comment": "{actor} đã bình luận bài viết của bạn",
    "reply": "{actor} đã phản hồi bình luận của bạn",
    "follow": "{actor} đã theo dõi bạn",
    "share": "{actor} đã chia sẻ bài viết của bạn",
    "mention": "{actor} đã gắn thẻ bạn trong bài viết",
    "friendRequest": "{actor} đã gửi lời mời kết bạn",
}


def preview_body(message: dict) -> str:
    """Short preview of a chat message: its text, a media placeholder, or a generic line."""
    text = as_str(message.get("content")).strip()
    if text:
        return text
    for field, placeholder in MEDIA_PLACEHOLDERS:
        if message.get(field):
            return placeholder
    return PREVIEW_FALLBACK


def notification_body(notification_type, actor_name: str) -> str:
    template = NOTIFICATION_TEMPLATES.get(as_str(notification_type))
    if template is None:
        return NOTIFICATION_FALLBACK
    return template.format(actor=actor_name)
