"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Order / Invoice Workflow                                       ║
║                                                                              ║
║  ONLY THIS MODULE creates orders and moves them to Paid.                     ║
║                                                                              ║
║  create_order:                                                               ║
║    validate lines → snapshot prices → INV-YYYYMMDD-NN → persist Unpaid       ║
║    stock is NOT touched                                                      ║
║                                                                              ║
║  update_order_status (Unpaid → Paid):                                        ║
║    1. re-validate stock for every line (nothing written on failure)          ║
║    2. decrement stock + "Sale (Invoice <n>)" history rows                    ║
║    3. write paymentStatus / paymentMethod / paymentDate                      ║
║    4. first paid order without code → issue referral code                    ║
║    5. referred customer → Completed referral record                          ║
║                                                                              ║
║  Results are {success, message, ...}; nothing is rolled back if a step       ║
║  after validation fails.                                                     ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import re
from collections import OrderedDict
from typing import Dict, List, Optional

from config import TAX_RATE, generate_share_token, now_iso
from models.order import PaymentStatus, VALID_PAYMENT_TRANSITIONS
from services.calculations import (
    compute_order_totals,
    format_invoice_number,
    get_order_items,
    invoice_prefix,
    line_total,
)
from services.document_store import (
    add_document,
    count_documents,
    delete_document,
    find_one_document,
    get_document_by_id,
    update_document,
)
from services.event_logger import log_event
from services.inventory import add_stock_history_entry
from services.referrals import issue_referral_code, record_referral

logger = logging.getLogger("orders")


class OrderWorkflowError(Exception):
    """Validation failure: reported to the caller, nothing written"""
    pass


def _failure(message: str) -> Dict:
    return {"success": False, "message": message}


# ════════════════════════════════════════════════════════════════════════
# HELPERS
# ════════════════════════════════════════════════════════════════════════

async def next_invoice_number() -> str:
    """
    INV-YYYYMMDD-NN, NN = today's invoice count + 1.
    Count-then-write: two concurrent creations can read the same count.
    """
    prefix = invoice_prefix()
    seq = await count_documents("orders", {"invoiceNumber": {"$regex": f"^{re.escape(prefix)}"}}) + 1
    number = format_invoice_number(prefix, seq)

    # A deleted invoice leaves a gap in the count; skip numbers already taken
    while await find_one_document("orders", {"invoiceNumber": number}):
        seq += 1
        number = format_invoice_number(prefix, seq)
    return number


def _required_quantities(items: List[Dict]) -> "OrderedDict[str, float]":
    """Σ quantity per productId, in first-seen order"""
    required: "OrderedDict[str, float]" = OrderedDict()
    for item in items:
        pid = item.get("productId")
        required[pid] = required.get(pid, 0) + item.get("quantity", 0)
    return required


async def _load_and_check_stock(items: List[Dict]) -> Dict[str, Dict]:
    """Products by id; raises OrderWorkflowError if one is missing or short"""
    products = {}
    for pid, qty in _required_quantities(items).items():
        product = await get_document_by_id("products", pid)
        if not product:
            name = next((it.get("productName") for it in items if it.get("productId") == pid), None)
            raise OrderWorkflowError(f"Product {name or pid} not found.")
        available = product.get("quantity") or 0
        if available < qty:
            raise OrderWorkflowError(
                f"Insufficient stock for {product.get('name')}. "
                f"Available: {available}, Required: {qty}"
            )
        products[pid] = product
    return products


# ════════════════════════════════════════════════════════════════════════
# CREATE (invoice generation, no stock change)
# ════════════════════════════════════════════════════════════════════════

async def create_order(customer_id: str, items: List[Dict], service_fee: float = 0, user: str = "system") -> Dict:
    """
    items: [{productId, quantity, discount}]
    Returns {success, message, order}.
    """
    try:
        if not items:
            raise OrderWorkflowError("No items in order.")

        customer = await get_document_by_id("customers", customer_id)
        if not customer:
            raise OrderWorkflowError("Customer not found.")

        products = await _load_and_check_stock(items)

        lines = []
        for item in items:
            product = products[item["productId"]]
            sale_price = product.get("sellingPrice") or 0
            discount = item.get("discount") or 0
            lines.append({
                "productId": product["id"],
                "productName": product.get("name", ""),
                "quantity": item["quantity"],
                "salePrice": sale_price,
                "discount": discount,
                "lineTotal": line_total(sale_price, discount, item["quantity"]),
            })

        totals = compute_order_totals(lines, service_fee, TAX_RATE)
        invoice_number = await next_invoice_number()

        payload = {
            "customerId": customer_id,
            "items": lines,
            "serviceFee": totals["serviceFee"],
            "subtotal": totals["subtotal"],
            "tax": totals["tax"],
            "taxRate": TAX_RATE,
            "totalAmount": totals["totalAmount"],
            "invoiceNumber": invoice_number,
            "orderDate": now_iso(),
            "paymentStatus": PaymentStatus.UNPAID.value,
            "paymentMethod": None,
            "paymentDate": None,
            "shareToken": generate_share_token(),
        }
        order_id = await add_document("orders", payload)

        logger.info(
            f"[INVOICE_CREATED] {invoice_number} customer={customer_id} "
            f"lines={len(lines)} total={totals['totalAmount']} by={user}"
        )
        return {
            "success": True,
            "message": f"Invoice #{invoice_number} created",
            "order": await get_document_by_id("orders", order_id),
        }

    except OrderWorkflowError as e:
        logger.warning(f"[INVOICE_REJECTED] customer={customer_id} reason={e}")
        return _failure(str(e))
    except Exception as e:
        logger.error(f"[INVOICE_ERROR] customer={customer_id} error={e}")
        return _failure("Failed to create invoice")


# ════════════════════════════════════════════════════════════════════════
# PAYMENT STATUS (stock decrement happens here)
# ════════════════════════════════════════════════════════════════════════

async def update_order_status(
    order_id: str,
    status: str,
    payment_method: Optional[str] = None,
    user: str = "system"
) -> Dict:
    """
    Returns {success, message, order, referralCode?, referralId?}.
    Paid → Paid is a no-op, Paid → Unpaid is rejected.
    """
    try:
        order = await get_document_by_id("orders", order_id)
        if not order:
            raise OrderWorkflowError("Order not found.")

        current = order.get("paymentStatus") or PaymentStatus.UNPAID.value
        if status not in VALID_PAYMENT_TRANSITIONS.get(current, []):
            raise OrderWorkflowError(f"Cannot change payment status from {current} to {status}.")

        if current == PaymentStatus.PAID.value:
            return {"success": True, "message": "Order already paid.", "order": order}

        if status == PaymentStatus.UNPAID.value:
            await update_document("orders", order_id, {
                "paymentStatus": status,
                "paymentMethod": payment_method,
                "paymentDate": None,
            })
            return {
                "success": True,
                "message": "Order status updated!",
                "order": await get_document_by_id("orders", order_id),
            }

        return await _mark_paid(order, payment_method, user)

    except OrderWorkflowError as e:
        logger.warning(f"[PAYMENT_REJECTED] order={order_id} reason={e}")
        return _failure(str(e))
    except Exception as e:
        logger.error(f"[PAYMENT_ERROR] order={order_id} error={e}")
        return _failure("Failed to update order status")


async def _mark_paid(order: Dict, payment_method: Optional[str], user: str) -> Dict:
    order_id = order["id"]
    invoice_number = order.get("invoiceNumber", "")
    items = get_order_items(order)

    # 1. Validate every line before the first write
    products = await _load_and_check_stock(items)

    # 2. Decrement stock
    for pid, qty in _required_quantities(items).items():
        product = products[pid]
        new_qty = (product.get("quantity") or 0) - qty
        await update_document("products", pid, {"quantity": new_qty})
        await add_stock_history_entry(
            product_id=pid,
            product_name=product.get("name", ""),
            change=-qty,
            reason=f"Sale (Invoice {invoice_number})",
            new_quantity=new_qty,
        )

    # 3. Payment fields
    await update_document("orders", order_id, {
        "paymentStatus": PaymentStatus.PAID.value,
        "paymentMethod": payment_method,
        "paymentDate": now_iso(),
    })

    result = {"success": True, "message": "Payment recorded and stock updated!"}

    # 4-5. Referral side effects
    customer = await get_document_by_id("customers", order.get("customerId"))
    if customer:
        other_paid = await count_documents("orders", {
            "customerId": customer["id"],
            "paymentStatus": PaymentStatus.PAID.value,
            "id": {"$ne": order_id},
        })
        if other_paid == 0 and not customer.get("referralCode"):
            result["referralCode"] = await issue_referral_code(customer)

        referral_id = await record_referral(customer, order_id)
        if referral_id:
            result["referralId"] = referral_id

    await log_event(
        action="order_paid",
        entity_type="order",
        entity_id=order_id,
        user=user,
        details={
            "invoiceNumber": invoice_number,
            "paymentMethod": payment_method,
            "totalAmount": order.get("totalAmount"),
        },
        related={"customer_id": order.get("customerId"), "referral_id": result.get("referralId")}
    )
    logger.info(f"[INVOICE_PAID] {invoice_number} order={order_id} method={payment_method} by={user}")

    result["order"] = await get_document_by_id("orders", order_id)
    return result


async def delete_order(order_id: str) -> bool:
    deleted = await delete_document("orders", order_id)
    if deleted:
        logger.info(f"[ORDER_DELETED] id={order_id}")
    return deleted
