"""
File management endpoints
Загрузка, просмотр и удаление файлов сессии
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docintel.api.dependencies import get_store
from docintel.core.exceptions import NotFoundException
from docintel.schemas import DocumentFile, FileCreate
from docintel.state.store import DataStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=List[DocumentFile])
def list_files(
        folder_id: Optional[str] = Query(None, alias="folderId"),
        store: DataStore = Depends(get_store)
):
    """List files, optionally only those in one folder"""
    if folder_id is not None:
        return store.get_files_by_folder(folder_id)
    return store.files


@router.post("", response_model=DocumentFile, status_code=status.HTTP_201_CREATED)
def upload_file(
        file_in: FileCreate,
        store: DataStore = Depends(get_store)
):
    """
    Register an uploaded file and account for it in usage and analytics
    """
    data = file_in.model_dump(exclude={"id"})
    file = DocumentFile(id=file_in.id or store.new_id(), **data)
    return store.upload_file(file)


@router.get("/{file_id}", response_model=DocumentFile)
def get_file(file_id: str, store: DataStore = Depends(get_store)):
    file = store.get_file(file_id)
    if file is None:
        raise NotFoundException("File not found")
    return file


@router.delete("/{file_id}", response_model=DocumentFile)
def delete_file(file_id: str, store: DataStore = Depends(get_store)):
    """Delete a file and release its storage"""
    file = store.delete_file(file_id)
    if file is None:
        raise NotFoundException("File not found")
    return file
