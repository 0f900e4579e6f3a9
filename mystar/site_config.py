"""
Site configuration and creator categories, both stored in `platform_config`.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from pydantic import BaseModel, Field, ValidationError
from supabase import Client

from .supabase_client import change_record, fetch_one

logger = logging.getLogger(__name__)

# Hebrew category names shown at signup -> values stored in creator_profiles
CATEGORY_MAPPING = {
    "מוזיקאי": "musician",
    "שחקן": "actor",
    "קומיקאי": "comedian",
    "ספורטאי": "athlete",
    "משפיען": "influencer",
    "אמן": "artist",
}


class SiteConfig(BaseModel):
    site_name: str = "MyStar"
    site_name_hebrew: str = "מיי סטאר"
    logo_url: str = ""
    favicon_url: str = ""
    meta_description: str = "קבל ברכה מותאמת אישית לכל אירוע מאמנים יוצרים וסלבריטאים"
    meta_keywords: List[str] = Field(default_factory=lambda: [
        "מיי סטאר", "ברכות מאמנים", "ברכות לכל אירוע", "ברכות מיוצרים", "ברכות מסלב", "mystar",
    ])
    og_image: str = ""
    og_title: str = "מיי סטאר- רכישת ברכות מותאמות אישית מיוצרים אמנים וסלבריטאים לכל אירוע"
    og_description: str = "קבל ברכה מותאמת אישית לכל אירוע מאמנים יוצרים וסלבריטאים"
    google_analytics_id: str = ""


def map_category(category: str) -> str:
    return CATEGORY_MAPPING.get(category, category)


def parse_site_config(value: Any) -> SiteConfig:
    """Stored values over the defaults; null fields keep their default

    Raises pydantic.ValidationError for values of the wrong type.
    """
    if isinstance(value, dict):
        value = {key: item for key, item in value.items() if item is not None}
    return SiteConfig.model_validate(value)


def load_site_config(client: Client) -> SiteConfig:
    """Stored site configuration, or the defaults when none is stored or it cannot be read"""
    try:
        row = fetch_one(client, "platform_config", {"key": "site_config"}, columns="value")
    except APIError as e:
        logger.error(f"Error fetching site configuration: {e.message}")
        return SiteConfig()

    value = (row or {}).get("value")
    if not value:
        logger.warning("No site configuration found, using defaults")
        return SiteConfig()
    try:
        return parse_site_config(value)
    except ValidationError as e:
        logger.error(f"Invalid site configuration, using defaults: {e}")
        return SiteConfig()


def active_categories(client: Client) -> List[Dict[str, Any]]:
    """Active admin-defined categories ordered by their `order` field"""
    try:
        row = fetch_one(client, "platform_config", {"key": "categories"}, columns="value")
    except Exception as e:
        logger.error(f"Error fetching categories: {e}")
        return []

    categories = ((row or {}).get("value") or {}).get("categories") or []
    active = [category for category in categories if category.get("active")]
    return sorted(active, key=lambda category: category.get("order", 0))


class SiteConfigCache:
    """Site configuration held in memory and refreshed by realtime updates"""

    def __init__(self):
        self._config: Optional[SiteConfig] = None
        self._lock = threading.Lock()

    def get(self, client: Client) -> SiteConfig:
        with self._lock:
            if self._config is not None:
                return self._config
        config = load_site_config(client)
        with self._lock:
            self._config = config
        return config

    def handle_change(self, payload: Dict[str, Any]) -> None:
        record = change_record(payload, "new") or {}
        if record.get("key") not in (None, "site_config"):
            return
        value = record.get("value")
        if not value:
            return
        try:
            config = parse_site_config(value)
        except ValidationError as e:
            logger.error(f"Ignoring invalid site configuration update: {e}")
            return
        with self._lock:
            self._config = config
        logger.info("Site configuration updated")

    def clear(self) -> None:
        with self._lock:
            self._config = None
