"""
Trigger handlers, keyed by the Firestore collection whose creations fire them.
"""
from .app_notifications import on_app_notification_created
from .calls import on_call_invitation_created
from .messages import on_message_created

MESSAGES_COLLECTION = "messages"
NOTIFICATIONS_COLLECTION = "notifications"
CALL_NOTIFICATIONS_COLLECTION = "callNotifications"

TRIGGERS = {
    MESSAGES_COLLECTION: on_message_created,
    NOTIFICATIONS_COLLECTION: on_app_notification_created,
    CALL_NOTIFICATIONS_COLLECTION: on_call_invitation_created,
}


class UnknownCollectionError(LookupError):
    """Raised when no trigger is registered for a collection."""


async def dispatch(collection: str, document_id: str, data=None):
    """Run the trigger for a newly created document and return its delivery result."""
    handler = TRIGGERS.get(collection)
    if handler is None:
        raise UnknownCollectionError(collection)
    return await handler(document_id, data or {})


__all__ = [
    "TRIGGERS",
    "MESSAGES_COLLECTION",
    "NOTIFICATIONS_COLLECTION",
    "CALL_NOTIFICATIONS_COLLECTION",
    "UnknownCollectionError",
    "dispatch",
    "on_message_created",
    "on_app_notification_created",
    "on_call_invitation_created",
]
