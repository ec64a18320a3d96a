# docintel/core/exceptions.py
from typing import Any, Optional, Dict
from fastapi import HTTPException, status


class BaseAPIException(HTTPException):
    """Base exception for API"""
    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class NotFoundException(BaseAPIException):
    """Resource not found exception"""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail
        )


class BadRequestException(BaseAPIException):
    """Bad request exception"""
    def __init__(self, detail: str = "Bad request"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class GatewayError(Exception):
    """
    Failure of the AI proxy gateway.

    Carries the HTTP status to answer with and the flat error body
    ``{error, details?, type?}`` returned to the caller.
    """
    def __init__(
        self,
        status_code: int,
        error: str,
        details: Any = None,
        error_type: Optional[str] = None
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details
        self.error_type = error_type

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        if self.error_type is not None:
            payload["type"] = self.error_type
        return payload


class StateException(Exception):
    """Local state aggregator exception"""
    pass


class FolderNotFoundError(StateException):
    """Parent folder does not exist"""
    def __init__(self, folder_id: str):
        super().__init__(f"Folder not found: {folder_id}")
        self.folder_id = folder_id


class DuplicateFileError(StateException):
    """A file with this id is already stored"""
    def __init__(self, file_id: str):
        super().__init__(f"File already exists: {file_id}")
        self.file_id = file_id
