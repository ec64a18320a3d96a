"""
Analytics endpoints
"""
from fastapi import APIRouter, Depends

from docintel.api.dependencies import get_store
from docintel.schemas import AnalyticsResponse
from docintel.state.store import DataStore

router = APIRouter()


@router.get("", response_model=AnalyticsResponse)
def get_analytics(store: DataStore = Depends(get_store)):
    """
    Aggregate counters. aiEngineUsage holds raw counts;
    aiEngineUsagePercent is the same tally as shares of the total.
    """
    analytics = store.analytics
    return AnalyticsResponse(
        **analytics.model_dump(),
        ai_engine_usage_percent=store.engine_usage_shares(),
    )
