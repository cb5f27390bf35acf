from fastapi import APIRouter, Depends
from supabase import Client

from moneytor.api.deps import CurrentUser, get_current_user, get_db
from moneytor.schemas.settings_schema import ProfileUpdate, SettingsUpdate, UserProfile
from moneytor.services import settings_service

router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("/", response_model=UserProfile)
def read_settings(
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Get the current user's profile and settings"""
    return settings_service.get_profile(db, current_user.id)


@router.put("/", response_model=UserProfile)
def update_user_settings(
    settings_update: SettingsUpdate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Change the display currency or timezone"""
    return settings_service.update_settings(db, current_user.id, settings_update)


@router.put("/profile", response_model=UserProfile)
def update_user_profile(
    profile_update: ProfileUpdate,
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return settings_service.update_profile(db, current_user.id, profile_update)


@router.post("/reset", response_model=UserProfile)
def reset_user_settings(
    db: Client = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return settings_service.reset_settings(db, current_user.id)
