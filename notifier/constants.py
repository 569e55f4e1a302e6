import os

APP_NAME = os.environ.get("NOTIFIER_APP_NAME", "Synap")
ANDROID_CHANNEL_ID = os.environ.get("NOTIFIER_ANDROID_CHANNEL_ID", "synap_general")

# Display-name fallbacks
DEFAULT_SENDER_NAME = APP_NAME
DEFAULT_ACTOR_NAME = "Ai đó"

# Message preview placeholders
PREVIEW_IMAGE = "[Ảnh]"
PREVIEW_VIDEO = "[Video]"
PREVIEW_AUDIO = "[Voice]"
PREVIEW_GIF = "[GIF]"
PREVIEW_FALLBACK = "Bạn có tin nhắn mới"

NOTIFICATION_FALLBACK = "Bạn có thông báo mới"

CALL_TITLE_FALLBACK = "Cuộc gọi đến"
CALL_BODY_VIDEO = "Cuộc gọi video đến"
CALL_BODY_VOICE = "Cuộc gọi thoại đến"
CALL_STATUS_RINGING = "ringing"

# data["type"] values understood by the mobile client
TYPE_CHAT_MESSAGE = "chat_message"
TYPE_GROUP_CHAT_MESSAGE = "group_chat_message"
TYPE_APP_NOTIFICATION = "app_notification"
TYPE_INCOMING_CALL = "incoming_call"

# FCM rejects multicast messages with more tokens than this
MULTICAST_MAX_TOKENS = 500

LISTENER_WORKERS = int(os.environ.get("NOTIFIER_LISTENER_WORKERS", "4"))
