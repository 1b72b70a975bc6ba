"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Lead Model                                                     ║
║                                                                              ║
║  Pipeline: New → Contacted → Qualified → Lost                                ║
║            Qualified → Converted (creates a Customer)                        ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Optional, List
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class LeadStatus(str, Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    LOST = "Lost"
    CONVERTED = "Converted"


VALID_LEAD_STATUSES = [s.value for s in LeadStatus]


def _not_converted(v):
    # Converted is only reachable through the conversion endpoint
    if v == LeadStatus.CONVERTED:
        raise ValueError("Use the convert action to mark a lead Converted")
    return v


class LeadCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    source: str = ""
    status: LeadStatus = LeadStatus.NEW
    followUpDate: Optional[str] = None  # YYYY-MM-DD
    followUpNotes: Optional[str] = None
    referralCode: Optional[str] = None  # Code of the referring customer, if any

    @field_validator("followUpDate", "followUpNotes")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("status")
    @classmethod
    def status_not_converted(cls, v):
        return _not_converted(v)


class LeadUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    source: Optional[str] = None
    status: Optional[LeadStatus] = None
    followUpDate: Optional[str] = None
    followUpNotes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def status_not_converted(cls, v):
        return _not_converted(v)


class LeadBulkDelete(BaseModel):
    ids: List[str] = Field(..., min_length=1)
