"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Order Calculations                                             ║
║                                                                              ║
║  Pure functions over order documents. No DB access.                          ║
║                                                                              ║
║  Two order shapes are read transparently:                                   ║
║  - items[] (current)  : one order = one invoice with N lines                 ║
║  - single-line legacy : productId / quantity / salePrice / discount on the   ║
║                         order itself                                         ║
║                                                                              ║
║  lineTotal = (salePrice - discount) x quantity                               ║
║  subtotal  = Σ lineTotal                                                     ║
║  tax       = subtotal x TAX_RATE / 100                                       ║
║  total     = subtotal + tax + serviceFee                                     ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config import TAX_RATE


def safe_number(value: Any, default: float = 0) -> float:
    """Any value as a finite number, `default` when not convertible"""
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(num) or math.isinf(num):
        return default
    return num


def parse_date(value: Any) -> Optional[datetime]:
    """
    ISO string (or datetime) -> aware datetime in UTC.
    Returns None for empty or unparseable values.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# ════════════════════════════════════════════════════════════════════════
# LINES
# ════════════════════════════════════════════════════════════════════════

def get_order_items(order: Dict) -> List[Dict]:
    """Normalized lines of an order (current or legacy shape)"""
    items = order.get("items") if order else None
    if isinstance(items, list) and items:
        return [
            {
                "productId": it.get("productId"),
                "productName": it.get("productName") or it.get("name"),
                "quantity": safe_number(it.get("quantity", it.get("qty"))),
                "salePrice": safe_number(it.get("salePrice", it.get("price"))),
                "discount": safe_number(it.get("discount")),
            }
            for it in items
        ]

    if order and order.get("productId"):
        return [{
            "productId": order.get("productId"),
            "productName": order.get("productName"),
            "quantity": safe_number(order.get("quantity", order.get("qty"))),
            "salePrice": safe_number(order.get("salePrice", order.get("price"))),
            "discount": safe_number(order.get("discount")),
        }]

    return []


def line_total(sale_price: float, discount: float, quantity: float) -> float:
    return round((sale_price - discount) * quantity, 2)


def get_order_amount(order: Dict) -> float:
    """Σ line totals (before tax and service fee)"""
    return round(sum(
        (it["salePrice"] - it["discount"]) * it["quantity"]
        for it in get_order_items(order)
    ), 2)


def get_order_quantity(order: Dict) -> float:
    return sum(it["quantity"] for it in get_order_items(order))


def compute_order_totals(lines: List[Dict], service_fee: float = 0, tax_rate: float = TAX_RATE) -> Dict:
    """
    Totals for a list of priced lines (salePrice, discount, quantity).

    Example: [{salePrice 100, quantity 2, discount 10}], fee 50
        -> subtotal 180, tax 32.4, total 262.4
    """
    subtotal = round(sum(
        line_total(safe_number(l.get("salePrice")), safe_number(l.get("discount")), safe_number(l.get("quantity")))
        for l in lines
    ), 2)
    fee = round(safe_number(service_fee), 2)
    tax = round(subtotal * tax_rate / 100, 2)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "serviceFee": fee,
        "totalAmount": round(subtotal + tax + fee, 2),
    }


# ════════════════════════════════════════════════════════════════════════
# INVOICE NUMBERS
# ════════════════════════════════════════════════════════════════════════

def invoice_prefix(day: Optional[datetime] = None) -> str:
    """INV-YYYYMMDD for the given (default: current) UTC day"""
    day = day or datetime.now(timezone.utc)
    return f"INV-{day.strftime('%Y%m%d')}"


def format_invoice_number(prefix: str, seq: int) -> str:
    return f"{prefix}-{seq:02d}"


# ════════════════════════════════════════════════════════════════════════
# CUSTOMER HISTORY
# ════════════════════════════════════════════════════════════════════════

def _sort_key(value: Any) -> datetime:
    return parse_date(value) or datetime.min.replace(tzinfo=timezone.utc)


def group_orders_by_invoice(customer_id: str, orders: List[Dict]) -> List[Dict]:
    """Customer's orders grouped per invoice number, newest first"""
    grouped: Dict[str, Dict] = {}
    for order in orders:
        if order.get("customerId") != customer_id:
            continue
        number = order.get("invoiceNumber", "")
        if number not in grouped:
            grouped[number] = {
                "invoiceNumber": number,
                "date": order.get("orderDate"),
                "status": order.get("paymentStatus"),
                "method": order.get("paymentMethod") or "-",
                "total": 0.0,
                "orderId": order.get("id"),
            }
        grouped[number]["total"] = round(grouped[number]["total"] + get_order_amount(order), 2)

    return sorted(grouped.values(), key=lambda g: _sort_key(g["date"]), reverse=True)


def customer_payment_history(customer_id: str, orders: List[Dict]) -> List[Dict]:
    """Paid invoices of a customer that carry a payment date, newest payment first"""
    grouped: Dict[str, Dict] = {}
    for order in orders:
        if order.get("customerId") != customer_id:
            continue
        if order.get("paymentStatus") != "Paid" or not order.get("paymentDate"):
            continue
        number = order.get("invoiceNumber", "")
        if number not in grouped:
            grouped[number] = {
                "invoiceNumber": number,
                "paymentDate": order.get("paymentDate"),
                "method": order.get("paymentMethod") or "-",
                "total": 0.0,
                "orderId": order.get("id"),
            }
        grouped[number]["total"] = round(grouped[number]["total"] + get_order_amount(order), 2)

    return sorted(grouped.values(), key=lambda g: _sort_key(g["paymentDate"]), reverse=True)
