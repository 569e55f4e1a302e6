"""
Firebase service - Firestore reads for the notification triggers.

Firestore Collections:
- messages/{messageId}: chat messages (trigger source)
- notifications/{notificationId}: in-app notifications (trigger source)
- callNotifications/{callId}: call invitations (trigger source)
- users/{uid}: fullName, username, fcmToken
- groups/{groupId}: memberIds
- conversations/{conversationId}/mutes/{uid}: mutedUntil
"""
import json
import logging
import os
from typing import Optional, Dict, Any

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger("notifier")

# Firebase Admin initialization
_firebase_app = None
_firestore_client = None
_firebase_init_attempted = False


def get_firebase_app():
    """Get or initialize Firebase Admin app"""
    global _firebase_app, _firebase_init_attempted

    if _firebase_app is not None:
        return _firebase_app

    if _firebase_init_attempted:
        # Already tried and failed
        return None

    _firebase_init_attempted = True

    use_emulator = os.environ.get("FIREBASE_USE_EMULATOR", "false").lower() == "true"
    project_id = os.environ.get("FIREBASE_PROJECT_ID")

    logger.info(f"Firebase init: use_emulator={use_emulator}, project_id={project_id}")

    options = {"projectId": project_id} if project_id else None

    if use_emulator:
        # Must be set before the Firestore client is created
        firestore_host = os.environ.get("FIRESTORE_EMULATOR_HOST", "localhost:8080")
        os.environ["FIRESTORE_EMULATOR_HOST"] = firestore_host
        options = {"projectId": project_id or "demo-project"}
        cred = None
    else:
        service_account_json = os.environ.get("FIREBASE_SERVICE_ACCOUNT")
        service_account_path = os.environ.get("FIREBASE_SERVICE_ACCOUNT_PATH")

        cred = None
        if service_account_json:
            try:
                cred = credentials.Certificate(json.loads(service_account_json))
                logger.info("Using FIREBASE_SERVICE_ACCOUNT env var")
            except (json.JSONDecodeError, ValueError) as e:
                logger.error(f"Invalid FIREBASE_SERVICE_ACCOUNT JSON: {e}")
                return None
        elif service_account_path and os.path.exists(service_account_path):
            cred = credentials.Certificate(service_account_path)
            logger.info(f"Using service account from {service_account_path}")
        else:
            # Cloud Run / Functions: application default credentials
            logger.info("Using application default credentials")

    try:
        _firebase_app = firebase_admin.initialize_app(cred, options=options)
        logger.info(f"Firebase Admin initialized (emulator={use_emulator})")
    except ValueError:
        # Already initialized elsewhere in the process
        _firebase_app = firebase_admin.get_app()
    except Exception as e:
        logger.error(f"Firebase init failed: {e}")
        return None

    return _firebase_app


def get_firestore():
    """Get Firestore client"""
    global _firestore_client

    if _firestore_client is not None:
        return _firestore_client

    app = get_firebase_app()
    if app is None:
        return None

    try:
        _firestore_client = firestore.client(app)
        return _firestore_client
    except Exception as e:
        logger.error(f"Failed to get Firestore client: {e}")
        return None


class FirestoreService:
    """
    Read-only access to the documents the triggers consult.

    Lookups return None for missing documents. Errors raised by Firestore
    itself are not caught here; callers decide whether to fall back or abort.
    """

    # Collection names
    USERS_COLLECTION = "users"
    GROUPS_COLLECTION = "groups"
    CONVERSATIONS_COLLECTION = "conversations"
    MUTES_SUBCOLLECTION = "mutes"

    def __init__(self):
        self._db = None

    @property
    def db(self):
        """Lazy initialization of Firestore client"""
        if self._db is None:
            self._db = get_firestore()
        return self._db

    def is_available(self) -> bool:
        """Check if Firestore is available"""
        return self.db is not None

    def _get(self, doc_ref) -> Optional[Dict[str, Any]]:
        doc = doc_ref.get()
        if not doc.exists:
            return None
        return doc.to_dict() or {}

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a user profile.

        Expected document structure at users/{uid}:
        {
            "fullName": "Nguyễn Văn An",
            "username": "an.nguyen",
            "fcmToken": "fcm_registration_token",
            ...
        }
        """
        if not self.db:
            logger.warning("Firestore not available")
            return None

        return self._get(self.db.collection(self.USERS_COLLECTION).document(user_id))

    def get_group(self, group_id: str) -> Optional[Dict[str, Any]]:
        """Get a group document ({"memberIds": [...]})."""
        if not self.db:
            logger.warning("Firestore not available")
            return None

        return self._get(self.db.collection(self.GROUPS_COLLECTION).document(group_id))

    def get_mute(self, conversation_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """Get the mute record at conversations/{conversationId}/mutes/{uid}."""
        if not self.db:
            logger.warning("Firestore not available")
            return None

        doc_ref = (
            self.db.collection(self.CONVERSATIONS_COLLECTION)
            .document(conversation_id)
            .collection(self.MUTES_SUBCOLLECTION)
            .document(user_id)
        )
        return self._get(doc_ref)


# Singleton instance
firestore_service = FirestoreService()
