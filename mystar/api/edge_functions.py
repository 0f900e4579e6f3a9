"""
Edge functions exposed as HTTP routes under /functions/v1.

Configuration is checked before the caller is authenticated, so a
misconfigured deployment answers the same way for every caller.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from supabase import Client

from ..config import Settings, get_settings
from ..errors import ValidationFailed
from ..mailer import ResendMailer, get_mailer
from ..models import (
    CapturePayPalPaymentRequest,
    ContactFormRequest,
    CreatePayPalOrderRequest,
    CreatorNotificationRequest,
    OrderEmailRequest,
    SendEmailRequest,
)
from ..notifications import (
    check_order_email_service,
    require_mailer,
    send_creator_notification,
    send_order_confirmation,
    send_templated_email,
    submit_contact_form,
)
from ..payments import capture_paypal_payment, check_paypal_connection, create_paypal_order, require_paypal
from ..paypal import PayPalClient, get_paypal
from ..supabase_client import get_supabase, resolve_user

router = APIRouter(prefix="/functions/v1", tags=["edge-functions"])


@router.post("/create-paypal-order")
def create_paypal_order_endpoint(
    body: CreatePayPalOrderRequest,
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(get_supabase),
    paypal: PayPalClient = Depends(get_paypal),
):
    require_paypal(paypal)
    user = resolve_user(client, authorization)
    return create_paypal_order(client, paypal, user, body)


@router.post("/capture-paypal-payment")
def capture_paypal_payment_endpoint(
    body: CapturePayPalPaymentRequest,
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(get_supabase),
    paypal: PayPalClient = Depends(get_paypal),
):
    require_paypal(paypal, ValidationFailed)
    user = resolve_user(client, authorization)
    return capture_paypal_payment(client, paypal, user, body)


@router.api_route("/test-paypal-connection", methods=["GET", "POST"])
def paypal_connection_endpoint(paypal: PayPalClient = Depends(get_paypal)):
    return check_paypal_connection(paypal)


@router.post("/send-email")
def send_email_endpoint(
    body: SendEmailRequest,
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(get_supabase),
    mailer: ResendMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    require_mailer(mailer)
    user = resolve_user(client, authorization)
    return send_templated_email(client, mailer, settings, user, body)


@router.post("/send-order-email")
def send_order_email_endpoint(
    body: OrderEmailRequest,
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(get_supabase),
    mailer: ResendMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    simulated = check_order_email_service(mailer, settings)
    if simulated:
        return simulated
    user = resolve_user(client, authorization)
    return send_order_confirmation(client, mailer, settings, user, body)


@router.post("/send-creator-notification")
def send_creator_notification_endpoint(
    body: CreatorNotificationRequest,
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(get_supabase),
    mailer: ResendMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    require_mailer(mailer)
    user = resolve_user(client, authorization)
    return send_creator_notification(client, mailer, settings, user, body)


@router.post("/send-contact-form")
def send_contact_form_endpoint(
    body: ContactFormRequest,
    client: Client = Depends(get_supabase),
    mailer: ResendMailer = Depends(get_mailer),
):
    result = submit_contact_form(client, mailer, body)
    if not result["emailSent"]:
        return JSONResponse(status_code=207, content=result)
    return result
