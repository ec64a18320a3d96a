# docintel/state/registry.py
import logging
from collections import OrderedDict
from threading import Lock
from typing import List, Optional

from docintel.core.config import settings
from docintel.state.storage import KeyValueStorage, ScopedStorage, create_storage
from docintel.state.store import DataStore

logger = logging.getLogger(__name__)


class StateRegistry:
    """
    One DataStore per session, all sharing a single storage backend.

    At most ``max_sessions`` stores stay loaded; the least recently used one
    is dropped and reloaded from the backend on its next request.
    """

    def __init__(self, backend: Optional[KeyValueStorage] = None, max_sessions: Optional[int] = None):
        self._backend = backend
        self.max_sessions = max_sessions or settings.STATE_MAX_SESSIONS
        self._stores: "OrderedDict[str, DataStore]" = OrderedDict()
        self._lock = Lock()

    @property
    def backend(self) -> KeyValueStorage:
        if self._backend is None:
            self._backend = create_storage()
        return self._backend

    def get(self, session_id: Optional[str] = None) -> DataStore:
        session_id = session_id or settings.DEFAULT_SESSION_ID
        with self._lock:
            store = self._stores.get(session_id)
            if store is not None:
                self._stores.move_to_end(session_id)
                return store

            logger.info(f"🆕 Opening session state: {session_id}")
            store = DataStore(ScopedStorage(self.backend, session_id))
            self._stores[session_id] = store
            while len(self._stores) > self.max_sessions:
                evicted, _ = self._stores.popitem(last=False)
                logger.info(f"♻️ Unloading idle session state: {evicted}")
            return store

    def loaded_sessions(self) -> List[str]:
        with self._lock:
            return list(self._stores)

    def reset(self, backend: Optional[KeyValueStorage] = None) -> None:
        with self._lock:
            self._stores.clear()
            self._backend = backend


state_registry = StateRegistry()
