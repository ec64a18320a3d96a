# docintel/api/v1/router.py
from fastapi import APIRouter

from docintel.api.v1.endpoints import (
    analytics,
    chat,
    files,
    folders,
    organization,
    settings,
    usage
)

api_router = APIRouter()

# Include all routers
api_router.include_router(files.router, prefix="/files", tags=["Files"])
api_router.include_router(folders.router, prefix="/folders", tags=["Folders"])
api_router.include_router(usage.router, prefix="/usage", tags=["Usage"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
api_router.include_router(organization.router, prefix="/organization", tags=["Organization"])
api_router.include_router(chat.router, prefix="/chat", tags=["Chat"])
api_router.include_router(settings.router, prefix="/settings", tags=["Settings"])
