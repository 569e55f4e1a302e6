"""
Push notification service - FCM delivery via the Firebase Admin SDK.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, List

from firebase_admin import messaging

from .constants import (
    ANDROID_CHANNEL_ID,
    MULTICAST_MAX_TOKENS,
    TYPE_APP_NOTIFICATION,
    TYPE_CHAT_MESSAGE,
    TYPE_GROUP_CHAT_MESSAGE,
    TYPE_INCOMING_CALL,
)
from .firebase_service import get_firebase_app

logger = logging.getLogger("notifier")


class PushNotConfiguredError(RuntimeError):
    """Raised when a push is attempted without a Firebase app."""


@dataclass
class PushResult:
    """Result of a single-target push attempt"""
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class MulticastResult:
    """Aggregated result of a multicast push"""
    success_count: int = 0
    failure_count: int = 0
    failed_tokens: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.success_count > 0


class FCMService:
    """
    Firebase Cloud Messaging sender.

    Provider errors from a single-target send propagate to the caller, as does
    a missing Firebase app. For multicast, per-token failures are reported in
    the result and logged.
    """

    def __init__(self):
        self._ready = False

    def is_configured(self) -> bool:
        """Check if FCM is properly configured"""
        if not self._ready:
            self._ready = get_firebase_app() is not None
            if self._ready:
                logger.info("[FCM] Firebase messaging initialized")
        return self._ready

    @staticmethod
    def _android_config(channel_id: str) -> messaging.AndroidConfig:
        return messaging.AndroidConfig(
            notification=messaging.AndroidNotification(channel_id=channel_id),
        )

    async def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Dict[str, str],
        channel_id: str = ANDROID_CHANNEL_ID,
    ) -> PushResult:
        """
        Send a notification message to one device.

        Args:
            token: FCM registration token
            title: Notification title
            body: Notification body
            data: Data payload (values are coerced to strings)
            channel_id: Android notification channel

        Returns:
            PushResult with the provider message id
        """
        if not self.is_configured():
            logger.error("[FCM] Not configured, cannot send push")
            raise PushNotConfiguredError("FCM not configured")

        message = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data={k: str(v) for k, v in data.items()},
            android=self._android_config(channel_id),
        )

        # Blocking SDK call, keep it off the event loop
        response = await asyncio.to_thread(messaging.send, message)

        logger.info(f"[FCM] Message sent successfully: {response}")
        return PushResult(success=True, message_id=response)

    async def send_multicast(
        self,
        tokens: List[str],
        title: str,
        body: str,
        data: Dict[str, str],
        channel_id: str = ANDROID_CHANNEL_ID,
    ) -> MulticastResult:
        """
        Send the same notification to many devices.

        Tokens beyond the FCM multicast limit go out in further batches, so
        every token is attempted exactly once. An error in the first batch
        propagates; a failing later batch is logged and its tokens are
        reported as failed.
        """
        result = MulticastResult()
        if not self.is_configured():
            logger.error("[FCM] Not configured, cannot send multicast")
            raise PushNotConfiguredError("FCM not configured")

        string_data = {k: str(v) for k, v in data.items()}

        for start in range(0, len(tokens), MULTICAST_MAX_TOKENS):
            batch = tokens[start:start + MULTICAST_MAX_TOKENS]
            message = messaging.MulticastMessage(
                tokens=batch,
                notification=messaging.Notification(title=title, body=body),
                data=string_data,
                android=self._android_config(channel_id),
            )
            try:
                response = await asyncio.to_thread(messaging.send_each_for_multicast, message)
            except Exception as e:
                if start == 0:
                    raise
                logger.error(f"[FCM] Multicast batch at {start} failed, {len(batch)} tokens not delivered: {e}")
                result.failure_count += len(batch)
                result.failed_tokens.extend(batch)
                continue

            result.success_count += response.success_count
            result.failure_count += response.failure_count
            for token, send_response in zip(batch, response.responses):
                if not send_response.success:
                    result.failed_tokens.append(token)
                    logger.warning(f"[FCM] Multicast delivery failed for {token[:20]}...: {send_response.exception}")

        logger.info(f"[FCM] Multicast sent: success={result.success_count}, failure={result.failure_count}")
        return result


class PushNotificationService:
    """
    Builds the payloads the mobile client understands and hands them to FCM.
    """

    def __init__(self):
        self.fcm = FCMService()

    async def send_chat_message(
        self,
        token: str,
        sender_name: str,
        body: str,
        sender_id: str,
        receiver_id: str,
        conversation_id: str,
        message_id: str,
    ) -> PushResult:
        data = {
            "type": TYPE_CHAT_MESSAGE,
            "senderId": sender_id,
            "receiverId": receiver_id,
            "conversationId": conversation_id,
            "messageId": message_id,
        }
        return await self.fcm.send(token, sender_name, body, data)

    async def send_group_chat_message(
        self,
        tokens: List[str],
        sender_name: str,
        body: str,
        sender_id: str,
        group_id: str,
        conversation_id: str,
        message_id: str,
    ) -> MulticastResult:
        data = {
            "type": TYPE_GROUP_CHAT_MESSAGE,
            "senderId": sender_id,
            "groupId": group_id,
            "conversationId": conversation_id,
            "messageId": message_id,
        }
        return await self.fcm.send_multicast(tokens, sender_name, body, data)

    async def send_app_notification(
        self,
        token: str,
        title: str,
        body: str,
        notification_id: str,
        notification_type: str,
        user_id: str,
        actor_id: str,
        post_id: str,
        comment_id: str,
    ) -> PushResult:
        data = {
            "type": TYPE_APP_NOTIFICATION,
            "notificationId": notification_id,
            "notificationType": notification_type,
            "userId": user_id,
            "actorId": actor_id,
            "postId": post_id,
            "commentId": comment_id,
        }
        return await self.fcm.send(token, title, body, data)

    async def send_incoming_call(
        self,
        token: str,
        title: str,
        body: str,
        caller_id: str,
        is_video: bool,
        call_id: str,
        channel_name: str,
    ) -> PushResult:
        data = {
            "type": TYPE_INCOMING_CALL,
            "callerId": caller_id,
            "isVideo": "true" if is_video else "false",
            "callId": call_id,
            "channelName": channel_name,
        }
        return await self.fcm.send(token, title, body, data)


# Singleton instance
push_service = PushNotificationService()
