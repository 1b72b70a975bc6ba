"""
NH Console - Permission System
Granular permission keys + role presets + FastAPI dependencies.
Permissions are the source of truth. Roles are presets only.
"""

import logging
from typing import Dict
from fastapi import Depends, HTTPException

from config import is_admin_email

logger = logging.getLogger("permissions")

# ════════════════════════════════════════════════════════════════════════
# ALL PERMISSION KEYS
# ════════════════════════════════════════════════════════════════════════

ALL_PERMISSION_KEYS = [
    "dashboard.view",

    "inventory.view",
    "inventory.manage",
    "stock_registry.view",

    "leads.view",
    "leads.manage",

    "customers.view",
    "customers.manage",

    "billing.view",
    "billing.manage",

    "referrals.view",
    "referrals.manage",

    "reports.view",

    "settings.manage",

    "users.manage",
]

# ════════════════════════════════════════════════════════════════════════
# ROLE PRESETS (defaults when creating a user with a role)
# ════════════════════════════════════════════════════════════════════════

ADMIN_ONLY_KEYS = [
    "dashboard.view",
    "inventory.manage",
    "stock_registry.view",
    "reports.view",
    "settings.manage",
    "users.manage",
]

ROLE_PRESETS: Dict[str, Dict[str, bool]] = {
    "admin": {k: True for k in ALL_PERMISSION_KEYS},

    "user": {k: k not in ADMIN_ONLY_KEYS for k in ALL_PERMISSION_KEYS},
}

VALID_ROLES = list(ROLE_PRESETS.keys())


def get_preset_permissions(role: str) -> Dict[str, bool]:
    """Returns the default permissions for a role."""
    return dict(ROLE_PRESETS.get(role, ROLE_PRESETS["user"]))


def resolve_role(user: dict) -> str:
    """Configured admin emails are always admin, whatever is stored"""
    if is_admin_email(user.get("email", "")):
        return "admin"
    return user.get("role", "user")


# ════════════════════════════════════════════════════════════════════════
# PERMISSION CHECK HELPERS
# ════════════════════════════════════════════════════════════════════════

def user_has_permission(user: dict, key: str) -> bool:
    """Check if user has a specific permission."""
    if user.get("role") == "admin":
        return True
    perms = user.get("permissions", {})
    return perms.get(key, False) is True


# ════════════════════════════════════════════════════════════════════════
# FASTAPI DEPENDENCIES
# ════════════════════════════════════════════════════════════════════════

def require_permission(permission_key: str):
    """
    FastAPI dependency factory.
    Usage: user: dict = Depends(require_permission("leads.view"))
    """
    from routes.auth import get_current_user

    async def _check(user: dict = Depends(get_current_user)):
        if not user_has_permission(user, permission_key):
            logger.warning(
                f"[PERMISSION_DENIED] user={user.get('email')} "
                f"key={permission_key} role={user.get('role')}"
            )
            raise HTTPException(
                status_code=403,
                detail=f"Permission required: {permission_key}"
            )
        return user

    return _check
