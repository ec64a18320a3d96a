# docintel/state/persistence.py
"""
Reading and writing state slots.

Loading never fails: absent, unreadable or wrongly shaped slots fall back
to the supplied default. Writing never fails either: errors are logged and
the in-memory state stays authoritative.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from docintel.state.storage import KeyValueStorage

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class StorageKeys:
    files = "docintel_files"
    folders = "docintel_folders"
    usage = "docintel_usage"
    organization = "docintel_organization"
    analytics = "docintel_analytics"
    chat_messages = "docintel_chat_messages"
    api_keys = "docIntelApiKeys"


def deep_merge(defaults: Mapping[str, Any], stored: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``stored`` onto ``defaults``; nested mappings are merged, everything else is replaced."""
    merged = dict(defaults)
    for key, value in stored.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _read(storage: KeyValueStorage, key: str) -> Optional[Any]:
    raw = storage.get_item(key)
    if not raw:
        return None
    return json.loads(raw)


def load_object(storage: KeyValueStorage, key: str, model: Type[M], default: Callable[[], M]) -> M:
    """Load an object slot, deep-merged onto the default."""
    try:
        parsed = _read(storage, key)
        if parsed is not None:
            if not isinstance(parsed, dict):
                raise ValueError(f"expected an object, got {type(parsed).__name__}")
            base = default().model_dump(by_alias=True)
            return model.model_validate(deep_merge(base, parsed))
    except Exception as e:
        logger.warning(f"⚠️ Failed to load {key} from storage: {e}")
    return default()


def load_list(storage: KeyValueStorage, key: str, model: Type[M], default: Callable[[], List[M]]) -> List[M]:
    """
    Load a list slot. A slot that is not a list yields the default;
    invalid items are dropped one by one so the rest survive.
    """
    try:
        parsed = _read(storage, key)
        if parsed is not None:
            if not isinstance(parsed, list):
                logger.warning(f"⚠️ Stored {key} is not a list, using defaults")
                return default()
            items = []
            for index, item in enumerate(parsed):
                try:
                    items.append(model.model_validate(item))
                except ValidationError as e:
                    logger.warning(f"⚠️ Dropping invalid item {index} of {key}: {e.error_count()} error(s)")
            return items
    except Exception as e:
        logger.warning(f"⚠️ Failed to load {key} from storage: {e}")
    return default()


def load_raw(storage: KeyValueStorage, key: str) -> Optional[Any]:
    try:
        return _read(storage, key)
    except Exception as e:
        logger.warning(f"⚠️ Failed to load {key} from storage: {e}")
        return None


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    return value


def save(storage: KeyValueStorage, key: str, value: Any) -> bool:
    """Serialize and write one slot. Returns False when the write failed."""
    try:
        storage.set_item(key, json.dumps(to_jsonable(value)))
        return True
    except Exception as e:
        logger.warning(f"⚠️ Failed to save {key} to storage: {e}")
        return False
