from fastapi import APIRouter, Depends
from supabase import Client

from ..config import Settings, get_settings
from ..mailer import ResendMailer, get_mailer
from ..models import BookingRequest
from ..orders import book_video_ad, get_video_ad
from ..supabase_client import get_current_user, get_supabase

router = APIRouter(prefix="/video-ads", tags=["bookings"])


@router.get("/{video_ad_id}")
def read_video_ad(video_ad_id: str, client: Client = Depends(get_supabase)):
    return get_video_ad(client, video_ad_id)


@router.post("/{video_ad_id}/book")
def book(
    video_ad_id: str,
    booking: BookingRequest,
    current_user=Depends(get_current_user),
    client: Client = Depends(get_supabase),
    mailer: ResendMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    """Create a paid request for a creator's video ad"""
    return book_video_ad(client, mailer, settings, current_user, video_ad_id, booking)
