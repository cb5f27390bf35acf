import logging
from datetime import datetime, timezone
from supabase import Client

from moneytor.config import settings
from moneytor.core import profile_crud
from moneytor.core.errors import InvariantError
from moneytor.schemas.settings_schema import ProfileUpdate, SettingsUpdate

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "UTC"


def default_settings() -> dict:
    return {"currency": settings.DEFAULT_CURRENCY, "timezone": DEFAULT_TIMEZONE}


def _with_defaults(profile: dict) -> dict:
    return {**default_settings(), **{k: v for k, v in profile.items() if v is not None}}


def _touched(values: dict) -> dict:
    return {**values, "updated_at": datetime.now(timezone.utc).isoformat()}


def get_profile(db: Client, user_id: str) -> dict:
    """The user's profile and settings; first access creates it with the defaults."""
    profile = profile_crud.get_profile(db, user_id)
    if profile is None:
        profile = profile_crud.create_profile(db, user_id, default_settings())
        logger.info("👤 Created profile with default settings for user %s", user_id)
    return _with_defaults(profile)


def get_user_currency(db: Client, user_id: str) -> str:
    profile = profile_crud.get_profile(db, user_id) or {}
    return profile.get("currency") or settings.DEFAULT_CURRENCY


def update_settings(db: Client, user_id: str, payload: SettingsUpdate) -> dict:
    values = payload.model_dump(exclude_unset=True)
    if not values:
        raise InvariantError("No fields to update")

    get_profile(db, user_id)
    row = profile_crud.update_profile(db, user_id, _touched(values))
    logger.info("⚙️ Updated settings %s for user %s", sorted(values), user_id)
    return _with_defaults(row)


def update_profile(db: Client, user_id: str, payload: ProfileUpdate) -> dict:
    values = payload.model_dump(exclude_unset=True)
    if not values:
        raise InvariantError("No fields to update")

    get_profile(db, user_id)
    return _with_defaults(profile_crud.update_profile(db, user_id, _touched(values)))


def reset_settings(db: Client, user_id: str) -> dict:
    get_profile(db, user_id)
    row = profile_crud.update_profile(db, user_id, _touched(default_settings()))
    logger.info("⚙️ Reset settings to defaults for user %s", user_id)
    return _with_defaults(row)
