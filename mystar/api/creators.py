import logging

from fastapi import APIRouter, Depends
from postgrest.exceptions import APIError
from supabase import Client

from ..errors import MyStarError
from ..models import EarningsSummary
from ..stores import EarningsRegistry
from ..supabase_client import fetch_rows, get_supabase
from .dependencies import get_earnings_registry, realtime_active, require_creator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/creators/me", tags=["creators"])


@router.get("/earnings", response_model=EarningsSummary)
def read_earnings(
    current_user=Depends(require_creator),
    client: Client = Depends(get_supabase),
    registry: EarningsRegistry = Depends(get_earnings_registry),
    live: bool = Depends(realtime_active),
):
    """Earnings summary

    With a live realtime subscription the rows are loaded once and kept
    current by change events; otherwise they are reloaded on every call.
    """
    earnings = registry.get(current_user.id) if live else None
    if earnings is None:
        try:
            rows = fetch_rows(client, "earnings", {"creator_id": current_user.id})
        except APIError as e:
            logger.error(f"Error loading earnings for {current_user.id}: {e.message}")
            raise MyStarError("Failed to load earnings", details=e.message)
        earnings = registry.track(current_user.id, rows)
    return earnings.summary()
