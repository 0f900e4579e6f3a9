"""
Transactional email through Resend
"""

import logging
from typing import Any, Dict, List, Optional, Union

import requests
import resend
from resend.exceptions import ResendError
from fastapi import Depends

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Resend refused or failed to send a message"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ResendMailer:
    def __init__(self, api_key: Optional[str]):
        self.api_key = (api_key or "").strip()

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def send(
        self,
        sender: str,
        to: Union[str, List[str]],
        subject: str,
        html: str,
        reply_to: Optional[str] = None,
    ) -> str:
        """Send one HTML message and return the Resend email id"""
        if not self.is_configured:
            raise EmailDeliveryError("Resend API key is not configured")

        params: Dict[str, Any] = {
            "from": sender,
            "to": to if isinstance(to, list) else [to],
            "subject": subject,
            "html": html,
        }
        if reply_to:
            params["reply_to"] = reply_to

        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(params)
        except ResendError as e:
            message = getattr(e, "message", None) or str(e)
            status_code = getattr(e, "code", None)
            logger.error(f"Resend API error: to={to} subject={subject!r} error={message}")
            raise EmailDeliveryError(message, status_code if isinstance(status_code, int) else None)
        except (requests.RequestException, ConnectionError) as e:
            logger.error(f"Resend unreachable: to={to} subject={subject!r} error={e}")
            raise EmailDeliveryError(str(e) or "Email service unreachable")

        email_id = response.get("id") if isinstance(response, dict) else getattr(response, "id", None)
        logger.info(f"Email {email_id} sent to {to}")
        return email_id


def get_mailer(settings: Settings = Depends(get_settings)) -> ResendMailer:
    """FastAPI dependency"""
    return ResendMailer(settings.RESEND_API_KEY)
