# docintel/state/store.py
"""
Local State Aggregator
Holds files, folders, usage, organization, analytics and chat history for one
session and keeps the derived counters in step on every mutation.
"""
import logging
import time
from threading import RLock
from typing import Any, Dict, List, Optional, TypeVar

from pydantic import BaseModel

from docintel.core.config import settings
from docintel.core.exceptions import DuplicateFileError, FolderNotFoundError
from docintel.schemas.state import (
    Analytics, ApiKeys, ChatMessage, DocumentFile, Folder, Organization, Usage
)
from docintel.state import persistence
from docintel.state.persistence import StorageKeys
from docintel.state.processing import FALLBACK_ENGINE, chat_tokens, simulate_ai_processing
from docintel.state.storage import KeyValueStorage

logger = logging.getLogger(__name__)

ROOT_FOLDER_ID = "root"
USAGE_KINDS = ("uploads", "chats", "storage")
DEFAULT_PERMISSIONS = {"admin": ["read", "write", "delete"]}

M = TypeVar("M", bound=BaseModel)


def root_folder() -> Folder:
    return Folder(
        id=ROOT_FOLDER_ID,
        name="Root",
        path="/",
        permissions={k: list(v) for k, v in DEFAULT_PERMISSIONS.items()},
        created_by="1",
    )


def default_folders() -> List[Folder]:
    return [root_folder()]


def bump(model: M, **deltas: int) -> M:
    """Copy of ``model`` with counters shifted by ``deltas``, clamped at zero."""
    return model.model_copy(update={
        name: max(0, getattr(model, name) + delta) for name, delta in deltas.items()
    })


class DataStore:
    """
    Session state plus the operations that mutate it.

    All mutations run under one lock, so Usage, Analytics and
    Organization.usage are never observed out of step with each other.
    Each mutation writes the slots it touched straight away.
    """

    def __init__(self, storage: KeyValueStorage, simulate_ai_processing: Optional[bool] = None):
        self.storage = storage
        self.simulate_ai_processing = (
            settings.SIMULATE_AI_PROCESSING if simulate_ai_processing is None else simulate_ai_processing
        )
        self._lock = RLock()
        self._last_id = 0
        self._current_folder: Optional[Folder] = None
        self.load()

    # ---------------------------------------------------------------- loading

    def load(self) -> None:
        with self._lock:
            self._files = persistence.load_list(self.storage, StorageKeys.files, DocumentFile, list)
            self._folders = persistence.load_list(self.storage, StorageKeys.folders, Folder, default_folders)
            self._usage = persistence.load_object(self.storage, StorageKeys.usage, Usage, Usage)
            self._organization = persistence.load_object(
                self.storage, StorageKeys.organization, Organization, Organization
            )
            self._analytics = persistence.load_object(self.storage, StorageKeys.analytics, Analytics, Analytics)
            self._chat_messages = persistence.load_list(
                self.storage, StorageKeys.chat_messages, ChatMessage, list
            )
            if self._find_folder(ROOT_FOLDER_ID) is None:
                self._folders.insert(0, root_folder())

        logger.info(
            f"📂 State loaded: {len(self._files)} files, {len(self._folders)} folders, "
            f"{len(self._chat_messages)} chat messages"
        )

    def _persist(self, *slots: str) -> None:
        values = {
            StorageKeys.files: self._files,
            StorageKeys.folders: self._folders,
            StorageKeys.usage: self._usage,
            StorageKeys.organization: self._organization,
            StorageKeys.analytics: self._analytics,
            StorageKeys.chat_messages: self._chat_messages,
        }
        for slot in slots:
            persistence.save(self.storage, slot, values[slot])

    def new_id(self) -> str:
        """Millisecond timestamp id, bumped when two ids land in the same millisecond."""
        with self._lock:
            candidate = int(time.time() * 1000)
            self._last_id = max(candidate, self._last_id + 1)
            return str(self._last_id)

    # ---------------------------------------------------------------- reads

    @property
    def files(self) -> List[DocumentFile]:
        with self._lock:
            return list(self._files)

    @property
    def folders(self) -> List[Folder]:
        with self._lock:
            return list(self._folders)

    @property
    def usage(self) -> Usage:
        with self._lock:
            return self._usage.model_copy(deep=True)

    @property
    def organization(self) -> Organization:
        with self._lock:
            return self._organization.model_copy(deep=True)

    @property
    def analytics(self) -> Analytics:
        with self._lock:
            return self._analytics.model_copy(deep=True)

    @property
    def chat_messages(self) -> List[ChatMessage]:
        with self._lock:
            return list(self._chat_messages)

    @property
    def current_folder(self) -> Optional[Folder]:
        return self._current_folder

    def get_file(self, file_id: str) -> Optional[DocumentFile]:
        with self._lock:
            return next((f for f in self._files if f.id == file_id), None)

    def _find_folder(self, folder_id: str) -> Optional[Folder]:
        return next((f for f in self._folders if f.id == folder_id), None)

    def get_folder(self, folder_id: str) -> Optional[Folder]:
        with self._lock:
            return self._find_folder(folder_id)

    def list_folders(self, include_root: bool = False) -> List[Folder]:
        with self._lock:
            return [f for f in self._folders if include_root or f.id != ROOT_FOLDER_ID]

    def get_files_by_folder(self, folder_id: str) -> List[DocumentFile]:
        with self._lock:
            return [f for f in self._files if f.folder_id == folder_id]

    def engine_usage_shares(self) -> Dict[str, float]:
        """Per-engine share of all counted AI operations, in percent."""
        with self._lock:
            counts = self._analytics.ai_engine_usage.model_dump()
        total = sum(counts.values())
        if not total:
            return {engine: 0.0 for engine in counts}
        return {engine: round(count * 100 / total, 1) for engine, count in counts.items()}

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "files": list(self._files),
                "folders": list(self._folders),
                "current_folder": self._current_folder,
                "usage": self._usage.model_copy(deep=True),
                "organization": self._organization.model_copy(deep=True),
                "analytics": self._analytics.model_copy(deep=True),
                "chat_messages": list(self._chat_messages),
            }

    # ---------------------------------------------------------------- mutations

    def upload_file(self, file: DocumentFile) -> DocumentFile:
        """
        Store a file and account for it in Usage, Analytics and Organization.usage.

        Ids are unique: a second file with a stored id raises DuplicateFileError.
        """
        engine = file.ai_engine or FALLBACK_ENGINE
        processing = simulate_ai_processing(file)
        stored = processing.apply(file) if self.simulate_ai_processing else file
        tokens = processing.tokens

        with self._lock:
            if self.get_file(file.id) is not None:
                raise DuplicateFileError(file.id)
            self._files.append(stored)
            self._usage = bump(
                self._usage,
                uploads_used=1, storage_used=file.size, tokens_used=tokens, requests_made=1,
            )
            analytics = bump(
                self._analytics,
                total_files=1, total_uploads=1, total_storage=file.size,
                tokens_used=tokens, requests_made=1,
            )
            self._analytics = analytics.model_copy(update={
                "ai_engine_usage": bump(analytics.ai_engine_usage, **{engine: 1})
            })
            self._organization = self._organization.model_copy(update={
                "usage": bump(
                    self._organization.usage,
                    uploads_used=1, storage_used=file.size, tokens_used=tokens, requests_made=1,
                )
            })
            self._persist(StorageKeys.files, StorageKeys.usage, StorageKeys.analytics, StorageKeys.organization)

        logger.info(f"📤 File uploaded: {file.name} ({file.size} bytes, engine={engine}, tokens={tokens})")
        return stored

    def delete_file(self, file_id: str) -> Optional[DocumentFile]:
        """Remove a file and release its storage. Unknown ids change nothing."""
        with self._lock:
            file = self.get_file(file_id)
            if file is None:
                return None

            index = self._files.index(file)
            self._files = self._files[:index] + self._files[index + 1:]
            self._usage = bump(self._usage, storage_used=-file.size)
            self._analytics = bump(self._analytics, total_files=-1, total_storage=-file.size)
            self._organization = self._organization.model_copy(update={
                "usage": bump(self._organization.usage, storage_used=-file.size)
            })
            self._persist(StorageKeys.files, StorageKeys.usage, StorageKeys.analytics, StorageKeys.organization)

        logger.info(f"🗑️ File deleted: {file.name} ({file.size} bytes)")
        return file

    def create_folder(self, name: str, parent_id: Optional[str] = None, created_by: str = "1") -> Folder:
        parent_id = parent_id or ROOT_FOLDER_ID
        with self._lock:
            parent = self._find_folder(parent_id)
            if parent is None:
                raise FolderNotFoundError(parent_id)

            folder = Folder(
                id=self.new_id(),
                name=name,
                parent_id=parent_id,
                path=f"{parent.path.rstrip('/')}/{name}",
                permissions={k: list(v) for k, v in DEFAULT_PERMISSIONS.items()},
                created_by=created_by,
            )
            self._folders.append(folder)
            self._persist(StorageKeys.folders)

        logger.info(f"📁 Folder created: {folder.path}")
        return folder

    def update_usage(self, kind: str, amount: int) -> Usage:
        """Shift ``{kind}_used`` on Usage only."""
        if kind not in USAGE_KINDS:
            raise ValueError(f"Unknown usage kind: {kind}. Expected one of {', '.join(USAGE_KINDS)}")

        with self._lock:
            self._usage = bump(self._usage, **{f"{kind}_used": amount})
            self._persist(StorageKeys.usage)
            return self._usage.model_copy()

    def add_chat_message(self, message: ChatMessage) -> ChatMessage:
        """Append to chat history; user turns are counted as chats."""
        with self._lock:
            self._chat_messages.append(message)
            slots = [StorageKeys.chat_messages]

            if message.role == "user":
                tokens = chat_tokens(message.ai_engine)
                self._usage = bump(self._usage, chats_used=1, tokens_used=tokens, requests_made=1)
                analytics = bump(self._analytics, total_chats=1, tokens_used=tokens, requests_made=1)
                self._analytics = analytics.model_copy(update={
                    "ai_engine_usage": bump(analytics.ai_engine_usage, **{message.ai_engine: 1})
                })
                self._organization = self._organization.model_copy(update={
                    "usage": bump(self._organization.usage, chats_used=1, tokens_used=tokens, requests_made=1)
                })
                slots += [StorageKeys.usage, StorageKeys.analytics, StorageKeys.organization]

            self._persist(*slots)

        return message

    def set_organization(self, organization: Organization) -> Organization:
        with self._lock:
            self._organization = organization
            self._persist(StorageKeys.organization)
        return organization

    def set_current_folder(self, folder: Optional[Folder]) -> None:
        self._current_folder = folder

    # ---------------------------------------------------------------- api keys

    def get_api_keys(self) -> ApiKeys:
        """Keys saved from Settings, else the ones on the organization."""
        raw = persistence.load_raw(self.storage, StorageKeys.api_keys)
        if isinstance(raw, dict):
            try:
                return ApiKeys.model_validate(raw)
            except ValueError as e:
                logger.warning(f"⚠️ Ignoring malformed API keys: {e}")
        with self._lock:
            return self._organization.settings.api_keys.model_copy()

    def save_api_keys(self, keys: ApiKeys) -> Organization:
        with self._lock:
            persistence.save(self.storage, StorageKeys.api_keys, keys)
            org_settings = self._organization.settings.model_copy(update={"api_keys": keys})
            self._organization = self._organization.model_copy(update={"settings": org_settings})
            self._persist(StorageKeys.organization)
            return self._organization.model_copy(deep=True)
