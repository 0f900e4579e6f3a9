from functools import lru_cache

from fastapi import Depends, Request
from supabase import Client

from ..config import Settings, get_settings
from ..errors import Forbidden
from ..site_config import SiteConfigCache
from ..stores import AdminStore, EarningsRegistry, FanStore
from ..supabase_client import fetch_one, get_current_user, get_supabase


@lru_cache()
def _admin_store(data_dir: str) -> AdminStore:
    return AdminStore(data_dir)


@lru_cache()
def _fan_store(data_dir: str) -> FanStore:
    return FanStore(data_dir)


def get_admin_store(settings: Settings = Depends(get_settings)) -> AdminStore:
    return _admin_store(settings.DATA_DIR)


def get_fan_store(settings: Settings = Depends(get_settings)) -> FanStore:
    return _fan_store(settings.DATA_DIR)


def get_earnings_registry(request: Request) -> EarningsRegistry:
    return request.app.state.earnings


def get_site_config_cache(request: Request) -> SiteConfigCache:
    return request.app.state.site_config


def realtime_active(request: Request) -> bool:
    return getattr(request.app.state, "realtime", None) is not None


def get_user_role(client: Client, user) -> str:
    row = fetch_one(client, "users", {"id": user.id}, columns="role")
    return (row or {}).get("role", "")


async def require_admin(current_user=Depends(get_current_user), client: Client = Depends(get_supabase)):
    """Authenticated user whose `users.role` is admin"""
    if get_user_role(client, current_user) != "admin":
        raise Forbidden("Admin access required")
    return current_user


async def require_creator(current_user=Depends(get_current_user), client: Client = Depends(get_supabase)):
    if get_user_role(client, current_user) != "creator":
        raise Forbidden("Creator access required")
    return current_user
