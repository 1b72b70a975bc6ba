"""
NH Console - Auth Routes
Login / Logout / Session / User CRUD with granular permissions.
"""

from fastapi import APIRouter, HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from datetime import datetime, timezone, timedelta
import logging

from models.auth import UserLogin, UserCreate, UserUpdate
from config import SESSION_DAYS, hash_password, generate_token, now_iso
from services.document_store import (
    add_document,
    update_document,
    find_one_document,
    find_documents,
    get_document_by_id,
    delete_document,
)
from services.permissions import (
    get_preset_permissions,
    resolve_role,
    require_permission,
    VALID_ROLES,
    ALL_PERMISSION_KEYS,
    ROLE_PRESETS,
)

logger = logging.getLogger("auth")

router = APIRouter(prefix="/auth", tags=["Auth"])
security = HTTPBearer(auto_error=False)


# ==================== HELPERS ====================

def _public_user(user: dict) -> dict:
    return {k: v for k, v in user.items() if k != "password"}


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Resolve the connected user from the bearer token."""
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    session = await find_one_document("sessions", {
        "token": credentials.credentials,
        "expires_at": {"$gt": now_iso()}
    })
    if not session:
        raise HTTPException(status_code=401, detail="Session expired")

    user = await get_document_by_id("users", session["user_id"])
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.get("is_active", True):
        raise HTTPException(status_code=403, detail="Account disabled")

    user = _public_user(user)
    role = resolve_role(user)
    if role != user.get("role"):
        user["role"] = role
        user["permissions"] = get_preset_permissions(role)
    elif not user.get("permissions"):
        user["permissions"] = get_preset_permissions(role)

    return user


# ==================== LOGIN / LOGOUT ====================

@router.post("/login")
async def login(data: UserLogin):
    """User login."""
    user = await find_one_document("users", {"email": data.email.lower().strip()})

    if not user or user.get("password") != hash_password(data.password):
        logger.warning(f"[LOGIN_FAILED] email={data.email.lower().strip()}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("is_active", True):
        raise HTTPException(status_code=403, detail="Account disabled")

    token = generate_token()
    expires_at = (datetime.now(timezone.utc) + timedelta(days=SESSION_DAYS)).isoformat()

    await add_document("sessions", {
        "token": token,
        "user_id": user["id"],
        "created_at": now_iso(),
        "expires_at": expires_at
    })

    role = resolve_role(user)
    permissions = user.get("permissions") if role == user.get("role") else None

    logger.info(f"[LOGIN] user={user['email']} role={role}")
    return {
        "token": token,
        "user": {
            "id": user["id"],
            "email": user["email"],
            "name": user.get("name", ""),
            "role": role,
            "permissions": permissions or get_preset_permissions(role),
        }
    }


@router.post("/logout")
async def logout(
    user: dict = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials = Depends(security)
):
    session = await find_one_document("sessions", {"token": credentials.credentials})
    if session:
        await delete_document("sessions", session["id"])
    return {"success": True}


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    """Current user + permissions."""
    return user


# ==================== USER CRUD (users.manage) ====================

@router.get("/users")
async def list_users(user: dict = Depends(require_permission("users.manage"))):
    users = await find_documents("users", sort=[("email", 1)])
    return {"users": [_public_user(u) for u in users]}


@router.post("/users")
async def create_user(data: UserCreate, user: dict = Depends(require_permission("users.manage"))):
    if await find_one_document("users", {"email": data.email}):
        raise HTTPException(status_code=400, detail="This email already exists")

    new_user = {
        "email": data.email,
        "password": hash_password(data.password),
        "name": data.name,
        "role": data.role,
        "permissions": data.permissions or get_preset_permissions(data.role),
        "is_active": True,
        "created_by": user.get("id"),
    }
    user_id = await add_document("users", new_user)
    logger.info(f"[USER_CREATED] email={data.email} role={data.role} by={user.get('email')}")

    return {"success": True, "user": _public_user(await get_document_by_id("users", user_id))}


@router.put("/users/{user_id}")
async def update_user(user_id: str, data: UserUpdate, user: dict = Depends(require_permission("users.manage"))):
    target = await get_document_by_id("users", user_id)
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    update_data = {}
    if data.name is not None:
        update_data["name"] = data.name
    if data.role is not None:
        update_data["role"] = data.role
        if data.permissions is None:
            update_data["permissions"] = get_preset_permissions(data.role)
    if data.permissions is not None:
        update_data["permissions"] = data.permissions
    if data.is_active is not None:
        update_data["is_active"] = data.is_active

    update_data["updated_at"] = now_iso()
    await update_document("users", user_id, update_data)

    return {"success": True, "user": _public_user(await get_document_by_id("users", user_id))}


@router.delete("/users/{user_id}")
async def deactivate_user(user_id: str, user: dict = Depends(require_permission("users.manage"))):
    target = await get_document_by_id("users", user_id)
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    if user_id == user.get("id"):
        raise HTTPException(status_code=400, detail="You cannot deactivate your own account")

    await update_document("users", user_id, {"is_active": False, "deactivated_at": now_iso()})
    for session in await find_documents("sessions", {"user_id": user_id}):
        await delete_document("sessions", session["id"])

    logger.info(f"[USER_DEACTIVATED] email={target.get('email')} by={user.get('email')}")
    return {"success": True}


# ==================== PERMISSION INTROSPECTION ====================

@router.get("/permission-keys")
async def list_permission_keys(user: dict = Depends(require_permission("users.manage"))):
    """All permission keys and role presets (for the user management UI)."""
    return {
        "keys": ALL_PERMISSION_KEYS,
        "presets": ROLE_PRESETS,
        "roles": VALID_ROLES
    }
