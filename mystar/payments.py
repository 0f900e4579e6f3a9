"""
Wallet top-ups through PayPal.

A top-up is a pending `wallet_transactions` row, a PayPal order carrying the
transaction id as `custom_id`, and, once the fan approves, a capture followed
by the `process_paypal_transaction` stored procedure, which completes the
transaction and credits the wallet in one database transaction.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, Optional

from postgrest.exceptions import APIError
from supabase import Client

from .errors import ConfigurationError, MyStarError, NotFound, UpstreamError, ValidationFailed
from .models import CapturePayPalPaymentRequest, CreatePayPalOrderRequest
from .paypal import PayPalClient, PayPalError, capture_id
from .supabase_client import call_rpc, fetch_one, insert_row, update_rows, utc_now_iso

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def parse_amount(raw: Any) -> Optional[Decimal]:
    """Positive amount rounded half-up to two decimals, or None"""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    try:
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def require_paypal(paypal: PayPalClient, error_cls=ConfigurationError) -> None:
    if not paypal.is_configured:
        logger.error("PayPal credentials missing: client_id=%s client_secret=%s",
                     bool(paypal.client_id), bool(paypal.client_secret))
        raise error_cls("PayPal credentials are not configured")


def mark_transaction_failed(client: Client, transaction_id: str) -> None:
    try:
        update_rows(
            client,
            "wallet_transactions",
            {"payment_status": "failed", "updated_at": utc_now_iso()},
            {"id": transaction_id},
        )
    except APIError as e:
        logger.error(f"Could not mark transaction {transaction_id} as failed: {e.message}")


# ============================================================================
# CREATE-PAYPAL-ORDER
# ============================================================================

def create_paypal_order(
    client: Client,
    paypal: PayPalClient,
    user,
    request: CreatePayPalOrderRequest,
) -> Dict[str, Any]:
    """Record a pending top-up and open the matching PayPal order"""
    amount = parse_amount(request.amount)
    if amount is None:
        raise MyStarError("Invalid amount")

    try:
        transaction = insert_row(client, "wallet_transactions", {
            "user_id": user.id,
            "type": "top_up",
            "amount": float(amount),
            "payment_method": "paypal",
            "payment_status": "pending",
            "description": request.description,
        })
    except APIError as e:
        raise MyStarError(f"Failed to create transaction record: {e.message}")

    try:
        order = paypal.create_order(amount, request.currency, request.description, transaction["id"])
    except PayPalError as e:
        mark_transaction_failed(client, transaction["id"])
        raise MyStarError(e.description)

    logger.info(f"Top-up {transaction['id']} of {amount} {request.currency} opened as PayPal order {order['id']}")
    return {
        "success": True,
        "order_id": order["id"],
        "transaction_id": transaction["id"],
    }


# ============================================================================
# CAPTURE-PAYPAL-PAYMENT
# ============================================================================

def capture_paypal_payment(
    client: Client,
    paypal: PayPalClient,
    user,
    request: CapturePayPalPaymentRequest,
) -> Dict[str, Any]:
    """Capture an approved order and settle its wallet transaction"""
    if not request.order_id or not request.transaction_id:
        raise ValidationFailed("Missing required parameters")

    try:
        transaction = fetch_one(client, "wallet_transactions", {
            "id": request.transaction_id,
            "user_id": user.id,
        })
    except APIError as e:
        logger.error(f"Transaction verification error: {e.message}")
        transaction = None
    if not transaction:
        raise NotFound("Transaction not found or unauthorized")

    try:
        access_token = paypal.get_access_token()
    except PayPalError as e:
        raise UpstreamError("Failed to authenticate with PayPal", details=e.description, status_code=e.status_code)

    try:
        capture = paypal.capture_order(request.order_id, access_token)
    except PayPalError as e:
        mark_transaction_failed(client, request.transaction_id)
        raise UpstreamError("Failed to capture PayPal payment", details=e.description, status_code=e.status_code)

    try:
        call_rpc(client, "process_paypal_transaction", {
            "p_transaction_id": request.transaction_id,
            "p_status": "completed",
        })
    except MyStarError as e:
        logger.error(f"Error updating transaction {request.transaction_id}: {e.details}")
        raise MyStarError("Failed to update transaction status", details=e.details)

    logger.info(f"Transaction {request.transaction_id} captured (order {request.order_id})")
    return {
        "success": True,
        "message": "Payment captured successfully",
        "capture_id": capture_id(capture),
    }


# ============================================================================
# TEST-PAYPAL-CONNECTION
# ============================================================================

def check_paypal_connection(paypal: PayPalClient) -> Dict[str, Any]:
    """Check the configured credentials by requesting an access token"""
    require_paypal(paypal, ValidationFailed)

    try:
        paypal.get_access_token()
    except PayPalError as e:
        raise UpstreamError("Failed to authenticate with PayPal", details=e.description, status_code=e.status_code)

    return {"success": True, "message": "Successfully connected to PayPal"}
