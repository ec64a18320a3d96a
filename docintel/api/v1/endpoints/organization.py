"""
Organization endpoints
"""
from fastapi import APIRouter, Depends

from docintel.api.dependencies import get_store
from docintel.schemas import Organization
from docintel.state.store import DataStore

router = APIRouter()


@router.get("", response_model=Organization)
def get_organization(store: DataStore = Depends(get_store)):
    return store.organization


@router.put("", response_model=Organization)
def set_organization(organization: Organization, store: DataStore = Depends(get_store)):
    return store.set_organization(organization)
