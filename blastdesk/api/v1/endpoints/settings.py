from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blastdesk.core.database import get_db
from blastdesk.models import GlobalSettings, User, UserSettings, GLOBAL_SETTINGS_ID
from blastdesk.modules.auth.dependencies import get_current_user
from blastdesk.schemas.settings import (
    GlobalSettingsPayload,
    GlobalSettingsResponse,
    UserSettingsResponse,
)
from blastdesk.services.activity_log_service import log_activity

router = APIRouter()


@router.get("/user/settings", response_model=UserSettingsResponse)
async def get_user_settings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the caller's header/footer, empty when none stored"""
    stored = await db.get(UserSettings, current_user.id)
    if not stored:
        return {"user_id": current_user.id, "global_header": "", "global_footer": ""}
    return stored


@router.put("/user/settings", response_model=UserSettingsResponse)
async def update_user_settings(
    payload: GlobalSettingsPayload,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stored = await db.get(UserSettings, current_user.id)
    if not stored:
        stored = UserSettings(user_id=current_user.id, global_header="", global_footer="")
        db.add(stored)

    if payload.global_header is not None:
        stored.global_header = payload.global_header
    if payload.global_footer is not None:
        stored.global_footer = payload.global_footer

    await db.flush()
    return stored


@router.get("/global-settings", response_model=GlobalSettingsResponse)
async def get_global_settings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    stored = await db.get(GlobalSettings, GLOBAL_SETTINGS_ID)
    if not stored:
        return {"global_header": "", "global_footer": ""}
    return stored


@router.put("/global-settings", response_model=GlobalSettingsResponse)
async def update_global_settings(
    payload: GlobalSettingsPayload,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Upsert the organisation-wide header and footer"""
    stored = await db.get(GlobalSettings, GLOBAL_SETTINGS_ID)
    if not stored:
        stored = GlobalSettings(id=GLOBAL_SETTINGS_ID, global_header="", global_footer="")
        db.add(stored)

    if payload.global_header is not None:
        stored.global_header = payload.global_header
    if payload.global_footer is not None:
        stored.global_footer = payload.global_footer
    stored.updated_by = current_user.username

    log_activity(db, current_user.username, "Global Settings Update", "Global email header/footer updated")
    await db.flush()
    return stored
