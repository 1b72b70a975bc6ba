"""
NH Console - Suppliers & Categories Routes
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from models import SupplierCreate, CategoryCreate, RenameRequest
from services import catalog
from services.permissions import require_permission

router = APIRouter(tags=["Catalog"])


# ==================== SUPPLIERS ====================

@router.get("/suppliers")
async def list_suppliers(user: dict = Depends(require_permission("inventory.view"))):
    return {"suppliers": await catalog.list_suppliers()}


@router.post("/suppliers")
async def create_supplier(data: SupplierCreate, user: dict = Depends(require_permission("inventory.manage"))):
    supplier = await catalog.add_supplier(data.name)
    if not supplier:
        raise HTTPException(status_code=400, detail=f"Supplier '{data.name.strip()}' already exists")
    return {"success": True, "supplier": supplier}


@router.put("/suppliers/{name}")
async def rename_supplier(name: str, data: RenameRequest, user: dict = Depends(require_permission("inventory.manage"))):
    if not await catalog.rename_supplier(name, data.name):
        raise HTTPException(status_code=404, detail=f"Supplier '{name}' not found")
    return {"success": True, "message": f"Supplier updated to '{data.name.strip()}'"}


@router.delete("/suppliers/{name}")
async def delete_supplier(name: str, user: dict = Depends(require_permission("inventory.manage"))):
    if not await catalog.remove_supplier(name):
        raise HTTPException(status_code=404, detail=f"Supplier '{name}' not found")
    return {"success": True, "message": f"Supplier '{name}' and its categories deleted"}


# ==================== CATEGORIES ====================

@router.get("/categories")
async def list_categories(supplier: Optional[str] = None, user: dict = Depends(require_permission("inventory.view"))):
    return {"categories": await catalog.list_categories(supplier)}


@router.post("/categories")
async def create_category(data: CategoryCreate, user: dict = Depends(require_permission("inventory.manage"))):
    category = await catalog.add_category(data.name, data.supplier)
    if not category:
        raise HTTPException(status_code=400, detail="Unknown supplier or category already exists")
    return {"success": True, "category": category}


@router.put("/categories/{supplier}/{name}")
async def rename_category(
    supplier: str,
    name: str,
    data: RenameRequest,
    user: dict = Depends(require_permission("inventory.manage"))
):
    if not await catalog.rename_category(supplier, name, data.name):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"success": True}


@router.delete("/categories/{supplier}/{name}")
async def delete_category(supplier: str, name: str, user: dict = Depends(require_permission("inventory.manage"))):
    if not await catalog.remove_category(supplier, name):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"success": True}
