"""
Folder endpoints
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docintel.api.dependencies import get_store
from docintel.core.exceptions import NotFoundException
from docintel.schemas import CurrentFolderUpdate, DocumentFile, Folder, FolderCreate
from docintel.state.store import DataStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[Folder])
def list_folders(
        include_root: bool = Query(False, alias="includeRoot"),
        store: DataStore = Depends(get_store)
):
    return store.list_folders(include_root=include_root)


@router.post("", response_model=Folder, status_code=status.HTTP_201_CREATED)
def create_folder(folder_in: FolderCreate, store: DataStore = Depends(get_store)):
    """Create a folder under parentId (root when omitted)"""
    return store.create_folder(folder_in.name, folder_in.parent_id)


@router.get("/current", response_model=Optional[Folder])
def get_current_folder(store: DataStore = Depends(get_store)):
    return store.current_folder


@router.put("/current", response_model=Optional[Folder])
def set_current_folder(update: CurrentFolderUpdate, store: DataStore = Depends(get_store)):
    folder = None
    if update.folder_id is not None:
        folder = store.get_folder(update.folder_id)
        if folder is None:
            raise NotFoundException("Folder not found")
    store.set_current_folder(folder)
    return folder


@router.get("/{folder_id}/files", response_model=List[DocumentFile])
def get_folder_files(folder_id: str, store: DataStore = Depends(get_store)):
    if store.get_folder(folder_id) is None:
        raise NotFoundException("Folder not found")
    return store.get_files_by_folder(folder_id)
