"""
Firestore watch that fires the triggers for newly created documents.

Each collection gets its own ``on_snapshot`` listener. The first snapshot
lists documents that already existed and is skipped; after that every ADDED
change is dispatched once on a worker pool.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from .constants import LISTENER_WORKERS
from .firebase_service import get_firestore
from .triggers import TRIGGERS, dispatch
from .utils import run_async

logger = logging.getLogger("notifier")


class TriggerListener:
    """Attach Firestore listeners for the trigger collections."""

    def __init__(self, collections=None, db=None, max_workers: int = LISTENER_WORKERS):
        self.collections = list(collections or TRIGGERS.keys())
        unknown = [name for name in self.collections if name not in TRIGGERS]
        if unknown:
            raise ValueError(f"No trigger registered for: {', '.join(unknown)}")

        self._db = db
        self._max_workers = max_workers
        self._executor = None
        self._watches = []
        self._primed = set()
        self._lock = threading.Lock()

    def start(self):
        if self._executor is not None:
            raise RuntimeError("Listener is already running")

        db = self._db or get_firestore()
        if db is None:
            raise RuntimeError("Firestore is not configured")

        with self._lock:
            self._primed = set()
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="trigger")
        for collection in self.collections:
            watch = db.collection(collection).on_snapshot(self._make_callback(collection))
            self._watches.append(watch)
            logger.info(f"[LISTENER] Watching {collection}")

    def stop(self):
        for watch in self._watches:
            watch.unsubscribe()
        self._watches = []
        # Detach first so late snapshot callbacks stop submitting work
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        logger.info("[LISTENER] Stopped")

    def _make_callback(self, collection: str):
        def on_snapshot(col_snapshot, changes, read_time):
            with self._lock:
                if collection not in self._primed:
                    self._primed.add(collection)
                    logger.info(f"[LISTENER] {collection}: skipped initial snapshot of {len(col_snapshot)} documents")
                    return

            for change in changes:
                if change.type.name != "ADDED":
                    continue
                doc = change.document
                with self._lock:
                    if self._executor is None:
                        logger.info(f"[LISTENER] Stopped, dropping {collection}/{doc.id}")
                        return
                    self._executor.submit(self.handle, collection, doc.id, doc.to_dict() or {})

        return on_snapshot

    def handle(self, collection: str, document_id: str, data: dict):
        """Run one trigger invocation; failures are logged and never stop the watch."""
        try:
            result = run_async(dispatch(collection, document_id, data))
            logger.debug(f"[LISTENER] {collection}/{document_id} done: {result}")
            return result
        except Exception:
            logger.exception(f"[LISTENER] Trigger failed for {collection}/{document_id}")
            return None
