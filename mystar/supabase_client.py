"""
Supabase platform client
Service-role client, bearer-token authentication, table/RPC helpers, audit
logging and realtime change subscriptions.
"""

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, Header
from postgrest.exceptions import APIError
from supabase import Client, ClientOptions, create_client

from .config import Settings, get_settings
from .errors import AuthError, MyStarError

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# CLIENT
# ============================================================================

@lru_cache()
def create_service_client(url: str, key: str) -> Client:
    """Service-role client that never persists or refreshes a session"""
    return create_client(
        url,
        key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def get_supabase(settings: Settings = Depends(get_settings)) -> Client:
    """FastAPI dependency: process-wide service-role client"""
    return create_service_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


# ============================================================================
# AUTHENTICATION
# ============================================================================

def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthError("No authorization header")
    return authorization.replace("Bearer ", "", 1).strip()


def resolve_user(client: Client, authorization: Optional[str]):
    """Resolve the Supabase user behind an Authorization header"""
    token = extract_bearer_token(authorization)
    try:
        response = client.auth.get_user(token)
    except Exception as e:
        logger.error(f"Authentication error: {e}")
        raise AuthError("Unauthorized")

    user = getattr(response, "user", None) if response else None
    if not user:
        raise AuthError("Unauthorized")
    return user


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    client: Client = Depends(get_supabase),
):
    """FastAPI dependency: authenticated Supabase user"""
    return resolve_user(client, authorization)


def user_display_name(user, fallback: str) -> str:
    """Name from user metadata, else the local part of the e-mail, else fallback"""
    metadata = getattr(user, "user_metadata", None) or {}
    if metadata.get("name"):
        return metadata["name"]
    email = getattr(user, "email", None)
    if email:
        return email.split("@")[0]
    return fallback


# ============================================================================
# TABLES & RPC
# ============================================================================

def fetch_rows(client: Client, table: str, filters: Dict[str, Any], columns: str = "*") -> List[Dict]:
    query = client.table(table).select(columns)
    for column, value in filters.items():
        query = query.eq(column, value)
    return query.execute().data or []


def fetch_one(client: Client, table: str, filters: Dict[str, Any], columns: str = "*") -> Optional[Dict]:
    """First row matching all equality filters, or None"""
    query = client.table(table).select(columns)
    for column, value in filters.items():
        query = query.eq(column, value)
    rows = query.limit(1).execute().data or []
    return rows[0] if rows else None


def insert_row(client: Client, table: str, row: Dict[str, Any]) -> Dict:
    """Insert a row and return its stored representation"""
    rows = client.table(table).insert(row).execute().data or []
    if not rows:
        raise MyStarError(f"Insert into {table} returned no data")
    return rows[0]


def update_rows(client: Client, table: str, values: Dict[str, Any], filters: Dict[str, Any]) -> List[Dict]:
    query = client.table(table).update(values)
    for column, value in filters.items():
        query = query.eq(column, value)
    return query.execute().data or []


def call_rpc(client: Client, name: str, params: Dict[str, Any]) -> Any:
    """Call a stored procedure, turning database errors into MyStarError"""
    try:
        return client.rpc(name, params).execute().data
    except APIError as e:
        logger.error(f"RPC {name} failed: {e.message}")
        raise MyStarError(f"RPC {name} failed", details=e.message)


def write_audit_log(
    client: Client,
    action: str,
    entity: str,
    user_id: Optional[str],
    details: Dict[str, Any],
    entity_id: Optional[str] = None,
) -> None:
    """Record an audit row; audit failures are logged and never propagate"""
    row = {
        "action": action,
        "entity": entity,
        "user_id": user_id,
        "details": {**details, "timestamp": utc_now_iso()},
    }
    if entity_id is not None:
        row["entity_id"] = entity_id

    try:
        client.table("audit_logs").insert(row).execute()
    except Exception as e:
        logger.warning(f"Could not write audit log {action}: {e}")


# ============================================================================
# REALTIME
# ============================================================================

async def create_realtime_client(settings: Settings):
    """Async client used only for realtime subscriptions"""
    from supabase import AsyncClientOptions, acreate_client

    return await acreate_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        options=AsyncClientOptions(auto_refresh_token=False, persist_session=False),
    )


async def subscribe_table_changes(
    async_client,
    channel_name: str,
    table: str,
    event: str,
    callback: Callable[[Dict[str, Any]], None],
    filter: Optional[str] = None,
):
    """Subscribe to Postgres change events on a public table"""
    channel = async_client.channel(channel_name)
    await channel.on_postgres_changes(
        event,
        callback=callback,
        table=table,
        schema="public",
        filter=filter,
    ).subscribe()
    logger.info(f"Subscribed to {event} changes on {table} ({channel_name})")
    return channel


def change_record(payload: Dict[str, Any], key: str) -> Optional[Dict]:
    """Pull the new/old record out of a realtime payload (both payload shapes)"""
    data = payload.get("data", payload)
    record = data.get(key) or data.get("record" if key == "new" else "old_record")
    return record or None


def change_type(payload: Dict[str, Any]) -> str:
    data = payload.get("data", payload)
    return (data.get("eventType") or data.get("type") or "").upper()
