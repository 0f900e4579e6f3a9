"""
Pydantic models for request bodies and responses.

Edge-function bodies keep the field names the web client sends; required
fields are Optional here and checked by the handlers so that every function
answers with its own error message.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ============================================================================
# PAYMENTS
# ============================================================================

class CreatePayPalOrderRequest(BaseModel):
    amount: Optional[Union[float, str]] = None
    currency: str = "ILS"
    description: str = "Wallet top-up"


class CapturePayPalPaymentRequest(BaseModel):
    order_id: Optional[str] = None
    transaction_id: Optional[str] = None


# ============================================================================
# EMAIL
# ============================================================================

class SendEmailRequest(BaseModel):
    to: Optional[Union[str, List[str]]] = None
    subject: Optional[str] = None
    template: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


class OrderEmailRequest(BaseModel):
    orderId: Optional[str] = None
    fanEmail: Optional[str] = None
    fanName: Optional[str] = None
    creatorName: Optional[str] = None
    orderType: Optional[str] = None
    estimatedDelivery: Optional[str] = None
    siteUrl: Optional[str] = None


class CreatorNotificationRequest(BaseModel):
    orderId: Optional[str] = None
    creatorEmail: Optional[str] = None
    creatorName: Optional[str] = None
    fanName: Optional[str] = None
    orderType: Optional[str] = None
    orderMessage: Optional[str] = None
    orderPrice: Optional[Union[float, str]] = None
    siteUrl: Optional[str] = None


class ContactFormRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None


# ============================================================================
# BOOKINGS
# ============================================================================

class BookingRequest(BaseModel):
    message: str
    request_type: str = Field(..., pattern="^(birthday|anniversary|congratulations|motivation|other)$")
    deadline: datetime
    recipient: Optional[str] = None


# ============================================================================
# ACCOUNTS
# ============================================================================

class FanSignup(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str
    birthDate: Optional[str] = None
    bio: Optional[str] = None


class CreatorSignup(FanSignup):
    category: str


class EmailAddress(BaseModel):
    email: EmailStr


# ============================================================================
# STORES
# ============================================================================

class AdminSettingsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    platformFee: Optional[float] = None
    minRequestPrice: Optional[float] = None
    maxRequestPrice: Optional[float] = None
    defaultDeliveryTime: Optional[int] = None
    maxDeliveryTime: Optional[int] = None
    allowedFileTypes: Optional[List[str]] = None
    maxFileSize: Optional[int] = None
    autoApproveCreators: Optional[bool] = None
    requireEmailVerification: Optional[bool] = None
    enableDisputes: Optional[bool] = None
    disputeWindow: Optional[int] = None
    payoutThreshold: Optional[float] = None
    payoutSchedule: Optional[str] = None

    @field_validator("*")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("setting cannot be null")
        return value


class FanSettingsUpdate(BaseModel):
    notifications: Optional[Dict[str, bool]] = None
    privacy: Optional[Dict[str, bool]] = None


class EarningsSummary(BaseModel):
    total: float
    pending: float
    this_month: float
    count: int
