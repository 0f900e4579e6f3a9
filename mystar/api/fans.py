from fastapi import APIRouter, Depends

from ..models import FanSettingsUpdate
from ..stores import FanStore
from ..supabase_client import get_current_user
from .dependencies import get_fan_store

router = APIRouter(prefix="/fans/me", tags=["fans"])


@router.get("/favorites")
def list_favorites(current_user=Depends(get_current_user), store: FanStore = Depends(get_fan_store)):
    return {"favorites": store.get_favorites(current_user.id)}


@router.put("/favorites/{creator_id}")
def add_favorite(creator_id: str, current_user=Depends(get_current_user), store: FanStore = Depends(get_fan_store)):
    return {"favorites": store.add_favorite(current_user.id, creator_id)}


@router.delete("/favorites/{creator_id}")
def remove_favorite(creator_id: str, current_user=Depends(get_current_user), store: FanStore = Depends(get_fan_store)):
    return {"favorites": store.remove_favorite(current_user.id, creator_id)}


@router.get("/settings")
def read_fan_settings(current_user=Depends(get_current_user), store: FanStore = Depends(get_fan_store)):
    return store.get_settings(current_user.id)


@router.patch("/settings")
def update_fan_settings(
    update: FanSettingsUpdate,
    current_user=Depends(get_current_user),
    store: FanStore = Depends(get_fan_store),
):
    return store.update_settings(current_user.id, update.model_dump(exclude_unset=True))
