"""
PayPal REST client (OAuth2 client credentials + Orders v2)
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import requests
from fastapi import Depends

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class PayPalError(Exception):
    """Non-2xx answer from PayPal"""

    def __init__(self, status_code: int, payload: Optional[Dict[str, Any]], fallback: str):
        self.status_code = status_code
        self.payload = payload or {}
        self.description = describe_error(self.payload) or fallback
        super().__init__(self.description)


def describe_error(payload: Dict[str, Any]) -> Optional[str]:
    """Best human-readable description PayPal put in an error body"""
    if payload.get("error_description"):
        return payload["error_description"]
    if payload.get("message"):
        return payload["message"]
    details = payload.get("details") or []
    if details and isinstance(details[0], dict):
        return details[0].get("description")
    return None


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


class PayPalClient:
    def __init__(
        self,
        client_id: Optional[str],
        client_secret: Optional[str],
        api_url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _json(self, response: requests.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError:
            return {"message": response.text or response.reason}

    def get_access_token(self) -> str:
        """Exchange client credentials for a bearer token"""
        response = self.session.post(
            f"{self.api_url}/v1/oauth2/token",
            auth=(self.client_id or "", self.client_secret or ""),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data={"grant_type": "client_credentials"},
            timeout=self.timeout,
        )
        payload = self._json(response)
        if not response.ok:
            logger.error(f"PayPal authentication failed: status={response.status_code} error={payload}")
            raise PayPalError(response.status_code, payload, "Failed to authenticate with PayPal")
        return payload["access_token"]

    def create_order(self, amount: Decimal, currency: str, description: str, custom_id: str) -> Dict[str, Any]:
        """Create a CAPTURE-intent order for a single purchase unit"""
        access_token = self.get_access_token()
        response = self.session.post(
            f"{self.api_url}/v2/checkout/orders",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {access_token}",
                "Prefer": "return=representation",
            },
            json={
                "intent": "CAPTURE",
                "purchase_units": [{
                    "amount": {
                        "currency_code": currency,
                        "value": format_amount(amount),
                    },
                    "description": description,
                    "custom_id": custom_id,
                }],
            },
            timeout=self.timeout,
        )
        payload = self._json(response)
        if not response.ok:
            logger.error(f"PayPal order creation failed: status={response.status_code} error={payload}")
            raise PayPalError(response.status_code, payload, "Failed to create PayPal order")
        logger.info(f"PayPal order {payload.get('id')} created for transaction {custom_id}")
        return payload

    def capture_order(self, order_id: str, access_token: Optional[str] = None) -> Dict[str, Any]:
        """Capture an approved order"""
        access_token = access_token or self.get_access_token()
        response = self.session.post(
            f"{self.api_url}/v2/checkout/orders/{order_id}/capture",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {access_token}",
            },
            timeout=self.timeout,
        )
        payload = self._json(response)
        if not response.ok:
            logger.error(f"PayPal capture failed: status={response.status_code} error={payload}")
            raise PayPalError(response.status_code, payload, "Failed to capture PayPal payment")
        return payload


def capture_id(capture_payload: Dict[str, Any]) -> Optional[str]:
    """purchase_units[0].payments.captures[0].id of a capture response"""
    try:
        return capture_payload["purchase_units"][0]["payments"]["captures"][0]["id"]
    except (KeyError, IndexError, TypeError):
        return None


def get_paypal(settings: Settings = Depends(get_settings)) -> PayPalClient:
    """FastAPI dependency"""
    return PayPalClient(
        settings.PAYPAL_CLIENT_ID,
        settings.PAYPAL_CLIENT_SECRET,
        settings.paypal_api_url,
        timeout=settings.HTTP_TIMEOUT,
    )
