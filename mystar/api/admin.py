from fastapi import APIRouter, Depends, File, UploadFile
from supabase import Client

from ..errors import ValidationFailed
from ..models import AdminSettingsUpdate
from ..storage import ASSET_RULES, upload_site_asset
from ..stores import AdminStore
from ..supabase_client import get_supabase, write_audit_log
from .dependencies import get_admin_store, require_admin

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/settings")
def read_admin_settings(admin=Depends(require_admin), store: AdminStore = Depends(get_admin_store)):
    return store.get_settings()


@router.patch("/settings")
def update_admin_settings(
    update: AdminSettingsUpdate,
    admin=Depends(require_admin),
    store: AdminStore = Depends(get_admin_store),
):
    changes = update.model_dump(exclude_unset=True)
    try:
        return store.update_settings(changes)
    except KeyError as e:
        raise ValidationFailed(str(e))


@router.post("/site-assets/{kind}")
async def upload_site_asset_endpoint(
    kind: str,
    file: UploadFile = File(...),
    admin=Depends(require_admin),
    client: Client = Depends(get_supabase),
):
    """Upload a logo or favicon and return its public URL"""
    if kind not in ASSET_RULES:
        raise ValidationFailed("Unknown asset type")

    content = await file.read()
    url = upload_site_asset(client, kind, file.filename, file.content_type, content)
    write_audit_log(client, f"upload_{kind}", "site_assets", admin.id, {"url": url})
    return {"success": True, "url": url}
