"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Customers Routes                                               ║
║                                                                              ║
║  CRUD + customer 360 views: invoices, payments, referrals made               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from models import CustomerCreate, CustomerUpdate
from services.calculations import customer_payment_history, group_orders_by_invoice
from services.document_store import find_documents, get_document_by_id
from services.lead_service import add_customer, update_customer, delete_customer
from services.permissions import require_permission
from services.referrals import customer_referrals

router = APIRouter(prefix="/customers", tags=["Customers"])


async def _get_customer_or_404(customer_id: str) -> dict:
    customer = await get_document_by_id("customers", customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


@router.get("")
async def list_customers(
    search: Optional[str] = Query(None, description="Name, email or phone"),
    user: dict = Depends(require_permission("customers.view"))
):
    customers = await find_documents("customers", sort=[("createdAt", -1)])
    if search:
        needle = search.strip().lower()
        customers = [
            c for c in customers
            if any(needle in (c.get(f) or "").lower() for f in ("name", "email", "phone"))
        ]
    return {"customers": customers, "count": len(customers)}


@router.post("")
async def create_customer(data: CustomerCreate, user: dict = Depends(require_permission("customers.manage"))):
    customer, warning = await add_customer(data.model_dump(exclude={"referralCode"}), data.referralCode)
    return {"success": True, "customer": customer, "warning": warning}


@router.get("/{customer_id}")
async def get_customer(customer_id: str, user: dict = Depends(require_permission("customers.view"))):
    customer = await _get_customer_or_404(customer_id)
    referrer = await get_document_by_id("customers", customer.get("referredById"))
    return {"customer": customer, "referrer": referrer}


@router.put("/{customer_id}")
async def edit_customer(customer_id: str, data: CustomerUpdate, user: dict = Depends(require_permission("customers.manage"))):
    customer = await update_customer(customer_id, data.model_dump(exclude_none=True))
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"success": True, "customer": customer}


@router.delete("/{customer_id}")
async def remove_customer(customer_id: str, user: dict = Depends(require_permission("customers.manage"))):
    if not await delete_customer(customer_id):
        raise HTTPException(status_code=404, detail="Customer not found")
    return {"success": True}


# ==================== CUSTOMER 360 ====================

@router.get("/{customer_id}/orders")
async def customer_orders(customer_id: str, user: dict = Depends(require_permission("billing.view"))):
    """Order history grouped per invoice, newest first"""
    await _get_customer_or_404(customer_id)
    orders = await find_documents("orders", {"customerId": customer_id})
    return {"invoices": group_orders_by_invoice(customer_id, orders), "orders": orders}


@router.get("/{customer_id}/payments")
async def customer_payments(customer_id: str, user: dict = Depends(require_permission("billing.view"))):
    await _get_customer_or_404(customer_id)
    orders = await find_documents("orders", {"customerId": customer_id})
    return {"payments": customer_payment_history(customer_id, orders)}


@router.get("/{customer_id}/referrals")
async def customer_referrals_view(customer_id: str, user: dict = Depends(require_permission("referrals.view"))):
    customer = await _get_customer_or_404(customer_id)
    referrals = await find_documents("referrals", {"referrerId": customer_id})
    customers = await find_documents("customers")
    return {"referralCode": customer.get("referralCode"), **customer_referrals(customer_id, referrals, customers)}
