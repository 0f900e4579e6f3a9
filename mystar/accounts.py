"""
Fan and creator accounts: signup, verification e-mails and password reset.
"""

import logging
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client

from .config import Settings
from .errors import MyStarError
from .mailer import ResendMailer
from .models import CreatorSignup, FanSignup, SendEmailRequest
from .notifications import send_templated_email
from .site_config import map_category
from .supabase_client import insert_row

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "נא להמתין 30 שניות לפני נסיון נוסף"
DUPLICATE_EMAIL_MESSAGE = "כתובת האימייל כבר קיימת במערכת"
SIGNUP_FAILED_MESSAGE = "אירעה שגיאה בתהליך ההרשמה. אנא נסה שוב."
WELCOME_SUBJECT = "ברוך הבא ל-MyStar!"


def signup_error(message: str) -> MyStarError:
    """Map an auth/database error message to the error shown to the user"""
    lowered = message.lower()
    if "rate limit" in lowered or "security purposes" in lowered:
        return MyStarError(RATE_LIMIT_MESSAGE, status_code=429)
    if "duplicate key" in lowered or "already registered" in lowered:
        return MyStarError(DUPLICATE_EMAIL_MESSAGE, status_code=409)
    return MyStarError(message or SIGNUP_FAILED_MESSAGE, status_code=400)


def _register(client: Client, settings: Settings, signup: FanSignup, role: str):
    try:
        response = client.auth.sign_up({
            "email": signup.email,
            "password": signup.password,
            "options": {
                "data": {"name": signup.name, "role": role},
                "email_redirect_to": f"{settings.SITE_URL}/auth/callback",
            },
        })
    except Exception as e:
        logger.error(f"Error during {role} signup: {e}")
        raise signup_error(str(e))

    user = getattr(response, "user", None)
    if not user:
        raise MyStarError("No user returned after signup")

    try:
        insert_row(client, "users", {
            "id": user.id,
            "email": user.email,
            "name": signup.name,
            "birth_date": signup.birthDate or None,
            "bio": signup.bio or None,
            "role": role,
            "wallet_balance": 0,
            "status": "active",
        })
    except APIError as e:
        logger.error(f"Error creating users row for {user.id}: {e.message}")
        raise signup_error(e.message or "")

    return user


def signup_fan(client: Client, mailer: ResendMailer, settings: Settings, signup: FanSignup) -> Dict[str, Any]:
    user = _register(client, settings, signup, "fan")
    send_welcome_email(client, mailer, settings, user, signup.email, signup.name)
    return {"success": True, "user_id": user.id, "role": "fan"}


def signup_creator(client: Client, mailer: ResendMailer, settings: Settings, signup: CreatorSignup) -> Dict[str, Any]:
    """Register a creator together with an empty creator profile"""
    user = _register(client, settings, signup, "creator")

    try:
        insert_row(client, "creator_profiles", {
            "id": user.id,
            "name": signup.name,
            "category": map_category(signup.category),
            "bio": signup.bio or None,
            "price": 0,
            "delivery_time": "24 hours",
        })
    except APIError as e:
        logger.error(f"Error creating creator profile for {user.id}: {e.message}")
        raise signup_error(e.message or "")

    send_welcome_email(client, mailer, settings, user, signup.email, signup.name)
    return {"success": True, "user_id": user.id, "role": "creator"}


def send_welcome_email(
    client: Client,
    mailer: ResendMailer,
    settings: Settings,
    user,
    email: str,
    name: Optional[str],
) -> bool:
    """Best-effort welcome e-mail from the `welcome` template"""
    try:
        send_templated_email(client, mailer, settings, user, SendEmailRequest(
            to=email,
            subject=WELCOME_SUBJECT,
            template="welcome",
            data={"name": name or "משתמש יקר", "loginUrl": f"{settings.SITE_URL}/login"},
        ))
        return True
    except MyStarError as e:
        logger.warning(f"Welcome email to {email} not sent: {e.error}")
        return False
    except Exception as e:
        logger.exception(f"Welcome email to {email} failed: {e}")
        return False


def resend_verification_email(client: Client, settings: Settings, email: str) -> Dict[str, Any]:
    try:
        client.auth.resend({
            "type": "signup",
            "email": email,
            "options": {"email_redirect_to": f"{settings.SITE_URL}/auth/callback"},
        })
    except Exception as e:
        logger.error(f"Error resending verification email: {e}")
        raise MyStarError("Failed to resend verification email", details=str(e), status_code=400)
    return {"success": True}


def send_password_reset_email(client: Client, settings: Settings, email: str) -> Dict[str, Any]:
    try:
        client.auth.reset_password_for_email(email, {"redirect_to": f"{settings.SITE_URL}/reset-password"})
    except Exception as e:
        logger.error(f"Error sending password reset email: {e}")
        raise MyStarError("Failed to send password reset email", details=str(e), status_code=400)
    return {"success": True}
