"""
NH Console - Customer Models

referralCode is never set through these models: it is issued by the
payment workflow on the customer's first paid order.
"""

from typing import Optional
from pydantic import BaseModel, Field, field_validator
import re


def is_valid_email_format(email: str) -> bool:
    """Basic email format check"""
    if not email:
        return False
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(pattern, email))


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    address: str = ""
    source: str = ""
    referralCode: Optional[str] = None  # Code of the referring customer, if any

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if v and not is_valid_email_format(v):
            raise ValueError(f"Invalid email format: {v}")
        return v


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    source: Optional[str] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        if v and not is_valid_email_format(v):
            raise ValueError(f"Invalid email format: {v}")
        return v
