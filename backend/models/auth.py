"""
NH Console - Auth & User Models
Role + Permission hybrid model.
Roles are presets. Permissions are the real authority.
"""

from pydantic import BaseModel, validator
from typing import Optional, Dict


VALID_ROLES = ["admin", "user"]


class UserLogin(BaseModel):
    email: str
    password: str


class UserCreate(BaseModel):
    email: str
    password: str
    name: str
    role: str = "user"
    permissions: Optional[Dict[str, bool]] = None

    @validator("email")
    def normalize_email(cls, v):
        return v.strip().lower()

    @validator("role")
    def validate_role(cls, v):
        if v not in VALID_ROLES:
            raise ValueError(f"Invalid role: {v}. Valid: {VALID_ROLES}")
        return v


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    permissions: Optional[Dict[str, bool]] = None
    is_active: Optional[bool] = None

    @validator("role")
    def validate_role(cls, v):
        if v is not None and v not in VALID_ROLES:
            raise ValueError(f"Invalid role: {v}")
        return v
