"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Products & Stock Registry Routes                               ║
║                                                                              ║
║  Reads open to every user (needed to build invoices),                        ║
║  writes and the stock registry are admin only                                ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from models import ProductCreate, ProductUpdate
from services.document_store import find_documents, get_document_by_id
from services.inventory import (
    MOVEMENT_TYPES,
    add_product,
    build_stock_registry,
    delete_product,
    get_product_history,
    update_product,
)
from services.live_state import live_state
from services.permissions import require_permission

router = APIRouter(tags=["Products"])


@router.get("/products")
async def list_products(
    search: Optional[str] = Query(None, description="Name or SKU"),
    dealer: Optional[str] = None,
    category: Optional[str] = None,
    user: dict = Depends(require_permission("inventory.view"))
):
    query = {}
    if dealer:
        query["dealer"] = dealer
    if category:
        query["category"] = category

    products = await find_documents("products", query, sort=[("name", 1)])
    if search:
        needle = search.strip().lower()
        products = [
            p for p in products
            if needle in (p.get("name") or "").lower() or needle in (p.get("sku") or "").lower()
        ]
    return {"products": products, "count": len(products)}


@router.post("/products")
async def create_product(data: ProductCreate, user: dict = Depends(require_permission("inventory.manage"))):
    product = await add_product(data.model_dump())
    return {"success": True, "product": product}


@router.put("/products/{product_id}")
async def edit_product(
    product_id: str,
    data: ProductUpdate,
    user: dict = Depends(require_permission("inventory.manage"))
):
    changes = data.model_dump(exclude_none=True)
    reason = changes.pop("reason", None)

    product = await update_product(product_id, changes, reason)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True, "product": product}


@router.delete("/products/{product_id}")
async def remove_product(product_id: str, user: dict = Depends(require_permission("inventory.manage"))):
    if not await delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True}


@router.get("/products/{product_id}/history")
async def product_history(product_id: str, user: dict = Depends(require_permission("inventory.view"))):
    product = await get_document_by_id("products", product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"product": product, "history": await get_product_history(product_id)}


@router.get("/stock-registry")
async def stock_registry(
    month: Optional[str] = Query(None, pattern=r"^\d{4}-\d{2}$", description="YYYY-MM"),
    search: Optional[str] = None,
    supplier: Optional[str] = None,
    product_id: Optional[str] = None,
    type: Optional[str] = Query(None, description="in | out-purchase | out-return"),
    user: dict = Depends(require_permission("stock_registry.view"))
):
    """Stock movements with per-product summary"""
    if type and type not in MOVEMENT_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid movement type. Valid: {MOVEMENT_TYPES}")

    return build_stock_registry(
        history=live_state.stockHistory,
        products=live_state.products,
        month=month,
        search=search,
        supplier=supplier,
        product_id=product_id,
        movement=type,
    )
