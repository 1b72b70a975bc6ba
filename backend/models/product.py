"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Product & Catalog Models                                       ║
║                                                                              ║
║  RULE: quantity only changes through a stock adjustment (update with a       ║
║  reason) or through an invoice being marked Paid.                            ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Optional
from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """
    Example:
    {
        "name": "RO Membrane 80 GPD",
        "sku": "ROM-80",
        "dealer": "AquaParts",
        "category": "Membranes",
        "costPrice": 650.0,
        "sellingPrice": 1100.0,
        "quantity": 25,
        "lowStockThreshold": 5
    }
    """
    name: str = Field(..., min_length=1)
    sku: str = ""
    dealer: str = ""  # Supplier name
    category: str = ""
    costPrice: float = Field(default=0.0, ge=0)
    sellingPrice: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=0, ge=0)
    lowStockThreshold: int = Field(default=0, ge=0)
    imageUrl: Optional[str] = None


class ProductUpdate(BaseModel):
    """
    Partial update. A quantity change is only written to the stock history
    when `reason` is given.
    """
    name: Optional[str] = None
    sku: Optional[str] = None
    dealer: Optional[str] = None
    category: Optional[str] = None
    costPrice: Optional[float] = Field(default=None, ge=0)
    sellingPrice: Optional[float] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    lowStockThreshold: Optional[int] = Field(default=None, ge=0)
    imageUrl: Optional[str] = None
    reason: Optional[str] = None


class SupplierCreate(BaseModel):
    name: str = Field(..., min_length=1)


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    supplier: str = Field(..., min_length=1)


class RenameRequest(BaseModel):
    """Rename a supplier or a category"""
    name: str = Field(..., min_length=1)
