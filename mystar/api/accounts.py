from fastapi import APIRouter, Depends
from supabase import Client

from ..accounts import resend_verification_email, send_password_reset_email, signup_creator, signup_fan
from ..config import Settings, get_settings
from ..mailer import ResendMailer, get_mailer
from ..models import CreatorSignup, EmailAddress, FanSignup
from ..supabase_client import get_supabase

router = APIRouter(prefix="/auth", tags=["accounts"])


@router.post("/signup/fan", status_code=201)
def signup_fan_endpoint(
    signup: FanSignup,
    client: Client = Depends(get_supabase),
    mailer: ResendMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    return signup_fan(client, mailer, settings, signup)


@router.post("/signup/creator", status_code=201)
def signup_creator_endpoint(
    signup: CreatorSignup,
    client: Client = Depends(get_supabase),
    mailer: ResendMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    return signup_creator(client, mailer, settings, signup)


@router.post("/resend-verification")
def resend_verification_endpoint(
    body: EmailAddress,
    client: Client = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    return resend_verification_email(client, settings, body.email)


@router.post("/password-reset")
def password_reset_endpoint(
    body: EmailAddress,
    client: Client = Depends(get_supabase),
    settings: Settings = Depends(get_settings),
):
    return send_password_reset_email(client, settings, body.email)
