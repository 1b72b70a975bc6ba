"""
NH Console - Branding Settings

Singleton stored in the settings collection under key "branding".
Shown on the public invoice page and on printed documents.
"""

from typing import Optional
from pydantic import BaseModel


DEFAULT_BRANDING = {
    "companyName": "Nature Hydrovation",
    "companyAddress": "Hyderabad",
    "companyLogo": "",
    "brandColor": "#0284c7",
    "customField": "",  # e.g. tax registration number
    "footerNotes": "Thank you for your business!",
    "template": "modern",
    "upiId": "",
}


class BrandingSettings(BaseModel):
    companyName: Optional[str] = None
    companyAddress: Optional[str] = None
    companyLogo: Optional[str] = None
    brandColor: Optional[str] = None
    customField: Optional[str] = None
    footerNotes: Optional[str] = None
    template: Optional[str] = None
    upiId: Optional[str] = None
