"""
BidHub Server - Admin Settings Endpoints

Platform settings, including the admin idle timeout and the session lifetime.
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status

from models.database import PlatformSetting
from models.api import PlatformSettingRequest
from auth import (
    RequireSettingsView, RequireSettingsEdit, MIN_ADMIN_TIMEOUT_MINUTES, MAX_ADMIN_TIMEOUT_MINUTES,
    MIN_SESSION_LIFETIME_DAYS, MAX_SESSION_LIFETIME_DAYS
)
from routes.admin.auth import SESSION_EXPIRED_RESPONSES

# Create logger
logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()

# Integer settings and their allowed ranges
INTEGER_SETTING_RANGES = {
    "admin_session_timeout_minutes": (MIN_ADMIN_TIMEOUT_MINUTES, MAX_ADMIN_TIMEOUT_MINUTES),
    "session_lifetime_days": (MIN_SESSION_LIFETIME_DAYS, MAX_SESSION_LIFETIME_DAYS),
}


def ValidateSettingValue(key: str, value: str) -> None:
    """
    Validate a setting value before it is stored

    Raises:
        HTTPException: 400 if an integer setting is not a number or out of range
    """
    if key not in INTEGER_SETTING_RANGES:
        return

    minimum, maximum = INTEGER_SETTING_RANGES[key]
    try:
        number = int(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{key} must be an integer")

    if number < minimum or number > maximum:
        raise HTTPException(status_code=400, detail=f"{key} must be between {minimum} and {maximum}")


# ==================== Admin Settings Management ====================

@router.get("/api/admin/settings", responses=SESSION_EXPIRED_RESPONSES, tags=["Admin"])
async def admin_get_settings(
    category: Optional[str] = None,
    admin: dict = Depends(RequireSettingsView)
):
    """
    Get platform settings

    Args:
        category: Only return settings of this category ('all' or omitted for every category)

    Returns:
        Dictionary with the list of settings
    """
    from database import db_manager

    db_session = db_manager.GetSession()
    try:
        query = db_session.query(PlatformSetting)
        if category and category != "all":
            query = query.filter(PlatformSetting.category == category)

        settings_records = query.order_by(PlatformSetting.category, PlatformSetting.key).all()
        return {"settings": [setting.ToDict() for setting in settings_records]}

    except Exception as e:
        logger.error(f"Error fetching platform settings: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch platform settings")
    finally:
        db_session.close()


@router.post("/api/admin/settings", responses=SESSION_EXPIRED_RESPONSES, tags=["Admin"])
async def admin_save_setting(
    request: PlatformSettingRequest,
    admin: dict = Depends(RequireSettingsEdit)
):
    """
    Update or create a platform setting

    Args:
        request: Setting key, value and optional category/description
        admin: Admin info from dependency

    Returns:
        The stored setting
    """
    ValidateSettingValue(request.key, request.value)

    from database import db_manager

    db_session = db_manager.GetSession()
    try:
        setting = db_session.query(PlatformSetting).filter(PlatformSetting.key == request.key).first()
        if setting is None:
            setting = PlatformSetting(key=request.key, category=request.category or "general")
            db_session.add(setting)
        elif request.category:
            setting.category = request.category

        setting.value = request.value
        if request.description is not None:
            setting.description = request.description
        setting.updated_by = admin['user_id']
        setting.updated_at = datetime.now(timezone.utc)

        db_session.commit()

        logger.info(f"Admin '{admin['email']}' set '{request.key}' to '{request.value}'")

        return setting.ToDict()

    except Exception as e:
        db_session.rollback()
        logger.error(f"Error saving platform setting: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save platform setting"
        )
    finally:
        db_session.close()
