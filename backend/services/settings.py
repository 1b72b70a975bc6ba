"""
NH Console - Settings Service

Dynamic system settings.
Collection: settings (each document identified by key)

Available settings:
- branding: company identity shown on invoices
"""

import logging
from typing import Optional, Dict, Any

from config import now_iso
from models.settings import DEFAULT_BRANDING
from services.document_store import add_document, update_document, find_one_document

logger = logging.getLogger("settings")

BRANDING_KEY = "branding"


async def get_setting(key: str) -> Optional[Dict]:
    """Setting document by key"""
    return await find_one_document("settings", {"key": key})


async def upsert_setting(key: str, data: Dict[str, Any], updated_by: str = "system") -> Dict:
    """Create or update a setting"""
    data["key"] = key
    data["updated_at"] = now_iso()
    data["updated_by"] = updated_by

    existing = await get_setting(key)
    if existing:
        await update_document("settings", existing["id"], data)
    else:
        await add_document("settings", data)

    logger.info(f"[SETTING_SAVED] key={key} by={updated_by}")
    return await get_setting(key)


# ---- Branding helpers ----

async def get_branding() -> Dict:
    """Branding with defaults for every missing field"""
    doc = await get_setting(BRANDING_KEY) or {}
    branding = dict(DEFAULT_BRANDING)
    branding.update({k: v for k, v in doc.items() if k in DEFAULT_BRANDING and v is not None})
    return branding


async def update_branding(changes: Dict[str, Any], updated_by: str = "system") -> Dict:
    changes = {k: v for k, v in changes.items() if k in DEFAULT_BRANDING and v is not None}
    await upsert_setting(BRANDING_KEY, changes, updated_by)
    return await get_branding()
