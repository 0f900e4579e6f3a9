"""
Video greeting bookings.

Booking is a straight sequence: create the request row, let the
`process_request_payment` stored procedure move the price from the fan's
wallet, then notify the fan and the creator. Notifications are best-effort
and never undo a paid booking.
"""

import logging
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client

from .config import Settings
from .email_templates import translate_request_type
from .errors import MyStarError, NotFound
from .mailer import ResendMailer
from .models import BookingRequest, CreatorNotificationRequest, OrderEmailRequest
from .notifications import send_creator_notification, send_order_confirmation
from .supabase_client import call_rpc, fetch_one, insert_row, user_display_name

logger = logging.getLogger(__name__)

VIDEO_AD_COLUMNS = "id, price, duration, creator:creator_id (id, name)"


def get_video_ad(client: Client, video_ad_id: str) -> Dict[str, Any]:
    try:
        ad = fetch_one(client, "video_ads", {"id": video_ad_id}, columns=VIDEO_AD_COLUMNS)
    except APIError as e:
        logger.error(f"Error loading video ad {video_ad_id}: {e.message}")
        ad = None
    if not ad or not ad.get("creator"):
        raise NotFound("Video ad not found")
    return ad


def book_video_ad(
    client: Client,
    mailer: ResendMailer,
    settings: Settings,
    user,
    video_ad_id: str,
    booking: BookingRequest,
) -> Dict[str, Any]:
    """Create and pay for a video request, then notify both sides"""
    ad = get_video_ad(client, video_ad_id)
    creator = ad["creator"]

    try:
        request_row = insert_row(client, "requests", {
            "creator_id": creator["id"],
            "fan_id": user.id,
            "video_ad_id": ad["id"],
            "message": booking.message,
            "request_type": booking.request_type,
            "status": "pending",
            "price": ad["price"],
            "deadline": booking.deadline.isoformat(),
            "recipient": booking.recipient,
        })
    except APIError as e:
        raise MyStarError("Failed to create request", details=e.message)

    try:
        payment = call_rpc(client, "process_request_payment", {
            "p_request_id": request_row["id"],
            "p_fan_id": user.id,
            "p_creator_id": creator["id"],
            "p_amount": ad["price"],
        })
    except MyStarError as e:
        raise MyStarError("Failed to process payment", details=e.details, status_code=402)

    # A set-returning procedure answers with a list of rows
    if isinstance(payment, list):
        payment = payment[0] if payment else None
    if not isinstance(payment, dict) or not payment.get("success"):
        error = payment.get("error") if isinstance(payment, dict) else None
        raise MyStarError("Failed to process payment", details=error, status_code=402)

    logger.info(f"Request {request_row['id']} paid: fan={user.id} creator={creator['id']} price={ad['price']}")

    notify_fan(client, mailer, settings, user, request_row["id"], creator, booking)
    notify_creator(client, mailer, settings, user, request_row["id"], creator, booking, ad["price"])

    return {"success": True, "request_id": request_row["id"]}


def notify_fan(client, mailer, settings, user, request_id, creator, booking: BookingRequest) -> Optional[Dict]:
    if not getattr(user, "email", None):
        return None
    try:
        return send_order_confirmation(client, mailer, settings, user, OrderEmailRequest(
            orderId=request_id,
            fanEmail=user.email,
            fanName=user_display_name(user, "משתמש יקר"),
            creatorName=creator.get("name"),
            orderType=translate_request_type(booking.request_type),
        ))
    except MyStarError as e:
        logger.error(f"Error sending order confirmation for {request_id}: {e.error} ({e.details})")
        return None


def notify_creator(client, mailer, settings, user, request_id, creator, booking: BookingRequest, price) -> Optional[Dict]:
    try:
        creator_user = fetch_one(client, "users", {"id": creator["id"]}, columns="email")
    except APIError as e:
        logger.error(f"Error loading creator {creator['id']}: {e.message}")
        return None
    if not creator_user or not creator_user.get("email"):
        return None

    try:
        return send_creator_notification(client, mailer, settings, user, CreatorNotificationRequest(
            orderId=request_id,
            creatorEmail=creator_user["email"],
            creatorName=creator.get("name"),
            fanName=user_display_name(user, "מעריץ"),
            orderType=booking.request_type,
            orderMessage=booking.message,
            orderPrice=price,
        ))
    except MyStarError as e:
        logger.error(f"Error sending creator notification for {request_id}: {e.error} ({e.details})")
        return None
