"""
Public Routes
Endpoints WITHOUT authentication:
- Shareable read-only invoice, addressed by share token (or invoice number)
"""

from fastapi import APIRouter, HTTPException

from config import TAX_RATE
from services.calculations import compute_order_totals, get_order_items
from services.document_store import find_one_document, get_document_by_id
from services.settings import get_branding

router = APIRouter(prefix="/public", tags=["Public"])


@router.get("/invoice/{token}")
async def public_invoice(token: str):
    """
    Read-only invoice. Looks the order up by shareToken, then by
    invoiceNumber. Totals are recomputed from the stored lines.
    """
    order = await find_one_document("orders", {"shareToken": token})
    if not order:
        order = await find_one_document("orders", {"invoiceNumber": token})
    if not order:
        raise HTTPException(status_code=404, detail="Invoice not found")

    customer = await get_document_by_id("customers", order.get("customerId"))
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    lines = [
        {
            "productName": it.get("productName") or "Item",
            "quantity": it["quantity"],
            "salePrice": it["salePrice"],
            "discount": it["discount"],
            "lineTotal": round((it["salePrice"] - it["discount"]) * it["quantity"], 2),
        }
        for it in get_order_items(order)
    ]
    # Tax on the subtotal only, as when the order was created, so totalAmount matches the stored one
    totals = compute_order_totals(lines, order.get("serviceFee") or 0, order.get("taxRate", TAX_RATE))

    return {
        "invoiceNumber": order.get("invoiceNumber"),
        "orderDate": order.get("orderDate"),
        "paymentStatus": order.get("paymentStatus"),
        "paymentMethod": order.get("paymentMethod"),
        "paymentDate": order.get("paymentDate"),
        "customer": {
            "name": customer.get("name", ""),
            "phone": customer.get("phone", ""),
            "email": customer.get("email", ""),
            "address": customer.get("address", ""),
        },
        "lines": lines,
        "taxRate": order.get("taxRate", TAX_RATE),
        **totals,
        "branding": await get_branding(),
    }
