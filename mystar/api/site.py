from fastapi import APIRouter, Depends
from supabase import Client

from ..site_config import SiteConfig, SiteConfigCache, active_categories, load_site_config
from ..supabase_client import get_supabase
from .dependencies import get_site_config_cache, realtime_active

router = APIRouter(tags=["site"])


@router.get("/site-config", response_model=SiteConfig)
def read_site_config(
    client: Client = Depends(get_supabase),
    cache: SiteConfigCache = Depends(get_site_config_cache),
    live: bool = Depends(realtime_active),
):
    # The cache only stays current while realtime updates are flowing
    if not live:
        return load_site_config(client)
    return cache.get(client)


@router.get("/categories")
def list_categories(client: Client = Depends(get_supabase)):
    return {"categories": active_categories(client)}
