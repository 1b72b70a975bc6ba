"""
NH Console - Settings Routes
"""

from fastapi import APIRouter, Depends

from models import BrandingSettings
from routes.auth import get_current_user
from services.permissions import require_permission
from services.settings import get_branding, update_branding

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/branding")
async def read_branding(user: dict = Depends(get_current_user)):
    return {"branding": await get_branding()}


@router.put("/branding")
async def write_branding(data: BrandingSettings, user: dict = Depends(require_permission("settings.manage"))):
    branding = await update_branding(data.model_dump(exclude_none=True), user.get("email", "system"))
    return {"success": True, "branding": branding}
