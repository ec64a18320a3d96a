"""
Usage endpoints
"""
from fastapi import APIRouter, Depends

from docintel.api.dependencies import get_store
from docintel.core.exceptions import BadRequestException
from docintel.schemas import Usage, UsageUpdate
from docintel.state.store import DataStore

router = APIRouter()


@router.get("", response_model=Usage)
def get_usage(store: DataStore = Depends(get_store)):
    return store.usage


@router.post("", response_model=Usage)
def update_usage(update: UsageUpdate, store: DataStore = Depends(get_store)):
    try:
        return store.update_usage(update.kind, update.amount)
    except ValueError as e:
        raise BadRequestException(str(e))
