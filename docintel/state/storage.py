# docintel/state/storage.py
"""
Key-value storage backends for persisted session state.

Every backend exposes the same string-in/string-out contract as a browser's
``localStorage``: the aggregator serializes each slot to JSON itself.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from sqlalchemy import Column, DateTime, String, Text, create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

from docintel.core.config import settings

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """Базовый интерфейс хранилища"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        pass


class MemoryStorage(KeyValueStorage):
    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = Lock()

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)


class JsonFileStorage(KeyValueStorage):
    """One ``<key>.json`` file per slot inside a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        with self._lock:
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._path(key).unlink(missing_ok=True)

    def keys(self) -> List[str]:
        return [unquote(p.stem) for p in self.directory.glob("*.json")]


Base = declarative_base()


class StorageSlot(Base):
    __tablename__ = "storage_slots"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SqlStorage(KeyValueStorage):
    """Slots stored as rows of the ``storage_slots`` table."""

    def __init__(self, database_url: str):
        connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
        self.engine = create_engine(
            database_url,
            echo=settings.LOG_LEVEL == "DEBUG",
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

    def get_item(self, key: str) -> Optional[str]:
        with self.SessionLocal() as db:
            slot = db.get(StorageSlot, key)
            return slot.value if slot else None

    def set_item(self, key: str, value: str) -> None:
        with self.SessionLocal() as db:
            slot = db.get(StorageSlot, key)
            if slot is None:
                db.add(StorageSlot(key=key, value=value))
            else:
                slot.value = value
            db.commit()

    def remove_item(self, key: str) -> None:
        with self.SessionLocal() as db:
            slot = db.get(StorageSlot, key)
            if slot is not None:
                db.delete(slot)
                db.commit()

    def keys(self) -> List[str]:
        with self.SessionLocal() as db:
            return list(db.scalars(select(StorageSlot.key)))


class ScopedStorage(KeyValueStorage):
    """Prefixes keys with a session id so sessions can share one backend."""

    def __init__(self, backend: KeyValueStorage, scope: str):
        self.backend = backend
        self.prefix = f"{scope}:"

    def get_item(self, key: str) -> Optional[str]:
        return self.backend.get_item(self.prefix + key)

    def set_item(self, key: str, value: str) -> None:
        self.backend.set_item(self.prefix + key, value)

    def remove_item(self, key: str) -> None:
        self.backend.remove_item(self.prefix + key)

    def keys(self) -> List[str]:
        return [k[len(self.prefix):] for k in self.backend.keys() if k.startswith(self.prefix)]


def create_storage(backend: Optional[str] = None) -> KeyValueStorage:
    """Build the backend named by ``STORAGE_BACKEND``."""
    backend = (backend or settings.STORAGE_BACKEND).lower()
    logger.info(f"🗄️ Using storage backend: {backend}")
    if backend == "memory":
        return MemoryStorage()
    if backend == "file":
        return JsonFileStorage(settings.get_storage_dir())
    if backend == "sql":
        return SqlStorage(settings.DATABASE_URL)
    raise ValueError(f"Unknown storage backend: {backend}")
