"""
Settings endpoints
API-ключи, сохранённые пользователем для своей сессии
"""
import logging

from fastapi import APIRouter, Depends

from docintel.api.dependencies import get_store
from docintel.schemas import ApiKeys, Organization
from docintel.state.store import DataStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api-keys", response_model=ApiKeys)
def get_api_keys(store: DataStore = Depends(get_store)):
    return store.get_api_keys()


@router.put("/api-keys", response_model=Organization)
def save_api_keys(keys: ApiKeys, store: DataStore = Depends(get_store)):
    """Save keys and copy them onto the organization settings"""
    logger.info(f"🔑 Saving API keys for engines: {[k for k, v in keys.model_dump().items() if v]}")
    return store.save_api_keys(keys)
