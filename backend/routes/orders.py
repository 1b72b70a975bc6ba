"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Orders / Billing Routes                                        ║
║                                                                              ║
║  Workflow failures (no items, missing product, insufficient stock,           ║
║  invalid transition) → 400 with the workflow message as detail               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from models import OrderCreate, OrderStatusUpdate, PaymentStatus
from services.document_store import find_documents, get_document_by_id
from services.order_workflow import create_order, update_order_status, delete_order
from services.permissions import require_permission

router = APIRouter(prefix="/orders", tags=["Orders"])


def _raise_on_failure(result: dict) -> dict:
    if not result.get("success"):
        raise HTTPException(status_code=400, detail=result.get("message", "Operation failed"))
    return result


@router.get("")
async def list_orders(
    status: Optional[PaymentStatus] = None,
    customer_id: Optional[str] = None,
    user: dict = Depends(require_permission("billing.view"))
):
    query = {}
    if status:
        query["paymentStatus"] = status.value
    if customer_id:
        query["customerId"] = customer_id

    orders = await find_documents("orders", query, sort=[("orderDate", -1)])
    return {"orders": orders, "count": len(orders)}


@router.post("")
async def new_order(data: OrderCreate, user: dict = Depends(require_permission("billing.manage"))):
    """Create an Unpaid invoice. Stock is only decremented when it is paid."""
    result = await create_order(
        customer_id=data.customerId,
        items=[item.model_dump() for item in data.items],
        service_fee=data.serviceFee,
        user=user.get("email", "system"),
    )
    return _raise_on_failure(result)


@router.get("/{order_id}")
async def get_order(order_id: str, user: dict = Depends(require_permission("billing.view"))):
    order = await get_document_by_id("orders", order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    customer = await get_document_by_id("customers", order.get("customerId"))
    return {"order": order, "customer": customer}


@router.put("/{order_id}/status")
async def set_order_status(order_id: str, data: OrderStatusUpdate, user: dict = Depends(require_permission("billing.manage"))):
    if not await get_document_by_id("orders", order_id):
        raise HTTPException(status_code=404, detail="Order not found")

    result = await update_order_status(
        order_id,
        data.status.value,
        data.paymentMethod.value if data.paymentMethod else None,
        user=user.get("email", "system"),
    )
    return _raise_on_failure(result)


@router.delete("/{order_id}")
async def remove_order(order_id: str, user: dict = Depends(require_permission("billing.manage"))):
    if not await delete_order(order_id):
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True}
