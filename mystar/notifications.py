"""
Email edge functions: templated email, fan order confirmation, creator order
notification and the public contact form.

Each function validates its input, sends through Resend and leaves an audit
or ticket row in Supabase. Failures are raised as MyStarError; the caller
renders them.
"""

import logging
import time
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client

from . import email_templates
from .config import Settings
from .errors import ConfigurationError, MyStarError, NotFound, ValidationFailed
from .mailer import EmailDeliveryError, ResendMailer
from .models import ContactFormRequest, CreatorNotificationRequest, OrderEmailRequest, SendEmailRequest
from .supabase_client import fetch_one, insert_row, write_audit_log

logger = logging.getLogger(__name__)

NOREPLY_ADDRESS = "noreply@mystar.co.il"
ORDERS_ADDRESS = "orders@mystar.co.il"
CONTACT_ADDRESS = "contact@mystar.co.il"
SUPPORT_ADDRESS = "support@mystar.co.il"

# Resend test inbox and sender used outside production
DEV_RECIPIENT = "delivered@resend.dev"
DEV_SENDER = "onboarding@resend.dev"


def require_mailer(mailer: ResendMailer) -> None:
    if not mailer.is_configured:
        logger.error("Resend API key not configured")
        raise ConfigurationError("Email service not properly configured")


def simulated_send(reason: str) -> Dict[str, Any]:
    return {
        "success": True,
        "message": f"Development mode: {reason}",
        "emailId": f"dev-{int(time.time() * 1000)}",
    }


# ============================================================================
# SEND-EMAIL (stored templates)
# ============================================================================

def send_templated_email(
    client: Client,
    mailer: ResendMailer,
    settings: Settings,
    user,
    request: SendEmailRequest,
) -> Dict[str, Any]:
    """Render an `email_templates` row and send it"""
    require_mailer(mailer)

    if not request.to or not request.subject or not request.template:
        raise ValidationFailed("Missing required parameters")

    email_data = {**request.data, "siteUrl": settings.SITE_URL}

    try:
        template = fetch_one(client, "email_templates", {"name": request.template})
    except APIError as e:
        logger.error(f"Error fetching email template {request.template}: {e.message}")
        template = None
    if not template:
        raise NotFound("Template not found")

    try:
        content = email_templates.render_stored_template(template.get("content") or "", email_data, settings.SITE_URL)
    except email_templates.TemplateError as e:
        logger.error(f"Email template {request.template} is invalid: {e}")
        raise MyStarError("Invalid email template", details=str(e))

    try:
        email_id = mailer.send(NOREPLY_ADDRESS, request.to, request.subject, content)
    except EmailDeliveryError as e:
        raise MyStarError("Failed to send email", details=e.message or "Unknown error")

    write_audit_log(
        client,
        action="send_email",
        entity="email",
        user_id=user.id,
        details={"to": request.to, "subject": request.subject, "template": request.template},
    )

    return {"success": True, "message": "Email sent successfully", "id": email_id}


# ============================================================================
# SEND-ORDER-EMAIL (fan confirmation)
# ============================================================================

def check_order_email_service(mailer: ResendMailer, settings: Settings) -> Optional[Dict[str, Any]]:
    """Simulated result when mail is not configured in development

    In production a missing key is a configuration error (503).
    """
    if mailer.is_configured:
        return None
    if not settings.is_production:
        logger.info("Development mode: simulating order email send")
        return simulated_send("Email simulation successful")
    logger.error("Resend API key not configured in production environment")
    raise MyStarError(
        "Email service configuration error",
        details="Please contact support for assistance",
        status_code=503,
    )


def send_order_confirmation(
    client: Client,
    mailer: ResendMailer,
    settings: Settings,
    user,
    request: OrderEmailRequest,
) -> Dict[str, Any]:
    """Confirm a new order to the fan who placed it"""
    simulated = check_order_email_service(mailer, settings)
    if simulated:
        return simulated

    if not request.orderId or not request.fanEmail:
        raise ValidationFailed("Missing required fields")

    site_url = request.siteUrl or settings.SITE_URL
    to_email = request.fanEmail if settings.is_production else DEV_RECIPIENT
    from_email = ORDERS_ADDRESS if settings.is_production else DEV_SENDER

    html = email_templates.render_order_confirmation(
        order_id=request.orderId,
        fan_name=request.fanName,
        creator_name=request.creatorName,
        order_type=request.orderType,
        estimated_delivery=request.estimatedDelivery,
        site_url=site_url,
    )
    subject = f"הבקשה שלך התקבלה! - סרטון ברכה מ{request.creatorName or ''}"
    audit = {"fanEmail": to_email, "creatorName": request.creatorName}

    try:
        email_id = mailer.send(from_email, to_email, subject, html, reply_to=SUPPORT_ADDRESS)
    except EmailDeliveryError as e:
        write_audit_log(client, "send_order_email_failed", "requests", user.id,
                        {**audit, "error": e.message or "Failed to send email"}, entity_id=request.orderId)
        if not settings.is_production:
            return simulated_send("Email simulation successful (API error ignored)")
        raise MyStarError("Failed to send email", details=e.message or "Unknown error")
    except Exception as e:
        logger.exception("Error sending order email")
        write_audit_log(client, "send_order_email_exception", "requests", user.id,
                        {**audit, "error": str(e) or "Unknown error"}, entity_id=request.orderId)
        if not settings.is_production:
            return simulated_send("Email simulation successful (error ignored)")
        raise MyStarError("An error occurred while sending the email", details=str(e) or "Unknown error")

    write_audit_log(client, "send_order_email_success", "requests", user.id,
                    {**audit, "emailId": email_id}, entity_id=request.orderId)

    return {
        "success": True,
        "message": "Order confirmation email sent successfully",
        "emailId": email_id,
    }


# ============================================================================
# SEND-CREATOR-NOTIFICATION
# ============================================================================

def send_creator_notification(
    client: Client,
    mailer: ResendMailer,
    settings: Settings,
    user,
    request: CreatorNotificationRequest,
) -> Dict[str, Any]:
    """Tell a creator a new paid request is waiting for them"""
    require_mailer(mailer)

    if not request.orderId or not request.creatorEmail or not request.creatorName:
        raise ValidationFailed("Missing required fields for creator notification")

    html = email_templates.render_creator_notification(
        order_id=request.orderId,
        creator_name=request.creatorName,
        fan_name=request.fanName,
        order_type=request.orderType,
        order_message=request.orderMessage,
        order_price=request.orderPrice,
        site_url=request.siteUrl or settings.SITE_URL,
    )
    subject = f"הזמנה חדשה מ{request.fanName or 'מעריץ'} - MyStar"
    audit = {"creatorEmail": request.creatorEmail, "creatorName": request.creatorName}

    try:
        email_id = mailer.send(ORDERS_ADDRESS, request.creatorEmail, subject, html)
    except EmailDeliveryError as e:
        write_audit_log(client, "send_creator_notification_failed", "requests", user.id,
                        {**audit, "error": e.message or "Failed to send email"}, entity_id=request.orderId)
        raise MyStarError("Failed to send email", details=e.message or "Unknown error")
    except Exception as e:
        logger.exception("Error sending creator notification")
        write_audit_log(client, "send_creator_notification_exception", "requests", user.id,
                        {**audit, "error": str(e) or "Unknown error"}, entity_id=request.orderId)
        raise MyStarError("An error occurred while sending the email", details=str(e) or "Unknown error")

    write_audit_log(client, "send_creator_notification_success", "requests", user.id,
                    {**audit, "emailId": email_id}, entity_id=request.orderId)

    return {
        "success": True,
        "message": "Creator notification email sent successfully",
        "emailId": email_id,
    }


# ============================================================================
# SEND-CONTACT-FORM
# ============================================================================

def submit_contact_form(
    client: Client,
    mailer: ResendMailer,
    request: ContactFormRequest,
) -> Dict[str, Any]:
    """File a support ticket and forward the message to support

    The ticket is the system of record: a stored ticket with a failed email is
    a partial success (`emailSent` false), no ticket is a failure.
    """
    require_mailer(mailer)

    if not request.name or not request.email or not request.message:
        raise ValidationFailed("Missing required fields")

    subject = request.subject or email_templates.DEFAULT_CONTACT_SUBJECT

    ticket_id = None
    try:
        ticket = insert_row(client, "support_tickets", {
            "subject": subject,
            "description": request.message,
            "email": request.email,
            "status": "open",
            "priority": "medium",
        })
        ticket_id = ticket.get("id")
        logger.info(f"Support ticket created with ID: {ticket_id}")
    except Exception as e:
        logger.error(f"Error storing support ticket: {e}")

    email_sent = False
    email_error = None
    try:
        mailer.send(
            CONTACT_ADDRESS,
            SUPPORT_ADDRESS,
            f"פנייה חדשה: {subject}",
            email_templates.render_contact_form(request.name, request.email, subject, request.message, ticket_id),
            reply_to=request.email,
        )
        email_sent = True
    except EmailDeliveryError as e:
        email_error = e.message or "Failed to send email"
    except Exception as e:
        logger.exception("Exception sending contact form email")
        email_error = str(e) or "Exception while sending email"

    if ticket_id and email_sent:
        return {
            "success": True,
            "message": "הפנייה נשלחה בהצלחה",
            "ticketId": ticket_id,
            "emailSent": True,
        }

    if ticket_id:
        return {
            "success": True,
            "message": "הפנייה נשמרה במערכת, אך שליחת האימייל נכשלה",
            "ticketId": ticket_id,
            "emailSent": False,
            "emailError": email_error,
        }

    raise MyStarError("Failed to process your request", details=email_error)
