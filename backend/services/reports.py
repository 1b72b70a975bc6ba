"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Derived Views                                                  ║
║                                                                              ║
║  Pure functions over in-memory collections (see live_state).                 ║
║  - dashboard_stats : revenue (Paid only), counts, low stock, 7 sales days    ║
║  - build_reports   : top products, leads by status, supplier analytics       ║
║  - notifications   : overdue follow-ups, low stock, old unpaid invoices,     ║
║                      leads created today                                     ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from config import UNPAID_INVOICE_ALERT_DAYS
from models.lead import VALID_LEAD_STATUSES
from services.calculations import get_order_amount, get_order_items, parse_date, safe_number
from services.inventory import is_low_stock
from services.referrals import referral_totals

SALES_DAYS = 7
TOP_PRODUCTS = 10


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def _start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


# ════════════════════════════════════════════════════════════════════════
# DASHBOARD
# ════════════════════════════════════════════════════════════════════════

def sales_by_day(orders: List[Dict], days: int = SALES_DAYS) -> List[Dict]:
    """Paid sales per order day, the last `days` days that have sales, oldest first"""
    totals: Dict[str, float] = {}
    for order in orders:
        if order.get("paymentStatus") != "Paid":
            continue
        date = parse_date(order.get("orderDate"))
        key = date.strftime("%Y-%m-%d") if date else "Unknown"
        totals[key] = round(totals.get(key, 0) + get_order_amount(order), 2)

    rows = [{"date": k, "sales": v} for k, v in sorted(totals.items())]
    return rows[-days:]


def dashboard_stats(products: List[Dict], orders: List[Dict], leads: List[Dict]) -> Dict:
    paid = [o for o in orders if o.get("paymentStatus") == "Paid"]
    low_stock = [p for p in products if is_low_stock(p)]
    return {
        "totalRevenue": round(sum(get_order_amount(o) for o in paid), 2),
        "totalOrders": len(orders),
        "paidOrders": len(paid),
        "totalLeads": len(leads),
        "totalProducts": len(products),
        "lowStockCount": len(low_stock),
        "lowStockItems": low_stock,
        "salesByDay": sales_by_day(orders),
    }


# ════════════════════════════════════════════════════════════════════════
# REPORTS
# ════════════════════════════════════════════════════════════════════════

def top_products(products: List[Dict], orders: List[Dict], limit: int = TOP_PRODUCTS) -> List[Dict]:
    sales: Dict[str, Dict] = {
        p.get("id"): {"productId": p.get("id"), "name": p.get("name") or "Unknown", "sales": 0.0}
        for p in products
    }
    for order in orders:
        for it in get_order_items(order):
            pid = it.get("productId")
            if not pid:
                continue
            row = sales.setdefault(pid, {"productId": pid, "name": "Unknown Product", "sales": 0.0})
            row["sales"] += (it["salePrice"] - it["discount"]) * it["quantity"]

    rows = [dict(r, sales=round(r["sales"], 2)) for r in sales.values() if r["sales"] > 0]
    rows.sort(key=lambda r: r["sales"], reverse=True)
    return rows[:limit]


def leads_by_status(leads: List[Dict]) -> List[Dict]:
    """Every status listed, zero counts included"""
    return [
        {"status": status, "count": sum(1 for l in leads if l.get("status") == status)}
        for status in VALID_LEAD_STATUSES
    ]


def supplier_analytics(products: List[Dict], orders: List[Dict], suppliers: List[Dict]) -> List[Dict]:
    names = []
    for name in [s.get("name") for s in suppliers] + [p.get("dealer") for p in products]:
        if name and name not in names:
            names.append(name)

    products_by_id = {p.get("id"): p for p in products}
    stats = []
    for name in names:
        owned = [p for p in products if p.get("dealer") == name]
        sales_qty, sales_value = 0.0, 0.0
        for order in orders:
            for it in get_order_items(order):
                product = products_by_id.get(it.get("productId"))
                if product and product.get("dealer") == name:
                    sales_qty += it["quantity"]
                    sales_value += (it["salePrice"] - it["discount"]) * it["quantity"]

        stats.append({
            "name": name,
            "productCount": len(owned),
            "stockQuantity": sum(safe_number(p.get("quantity")) for p in owned),
            "stockValue": round(sum(safe_number(p.get("costPrice")) * safe_number(p.get("quantity")) for p in owned), 2),
            "salesQuantity": sales_qty,
            "salesValue": round(sales_value, 2),
        })

    stats = [s for s in stats if s["productCount"] > 0 or s["salesValue"] > 0 or s["stockQuantity"] > 0]
    stats.sort(key=lambda s: s["salesValue"], reverse=True)
    return stats


def build_reports(
    products: List[Dict],
    orders: List[Dict],
    leads: List[Dict],
    suppliers: List[Dict],
    referrals: List[Dict]
) -> Dict:
    return {
        "topProducts": top_products(products, orders),
        "leadsByStatus": leads_by_status(leads),
        "supplierStats": supplier_analytics(products, orders, suppliers),
        "referrals": referral_totals(referrals),
    }


# ════════════════════════════════════════════════════════════════════════
# NOTIFICATIONS
# ════════════════════════════════════════════════════════════════════════

def notifications(
    leads: List[Dict],
    products: List[Dict],
    orders: List[Dict],
    now: Optional[datetime] = None
) -> Dict:
    now = _now(now)
    today = _start_of_day(now)
    unpaid_cutoff = now - timedelta(days=UNPAID_INVOICE_ALERT_DAYS)

    overdue = []
    new_today = []
    for lead in leads:
        follow_up = parse_date(lead.get("followUpDate"))
        if follow_up and follow_up < today:
            overdue.append(lead)
        created = parse_date(lead.get("createdAt"))
        if created and created >= today:
            new_today.append(lead)

    low_stock = [p for p in products if is_low_stock(p)]

    unpaid = []
    for order in orders:
        order_date = parse_date(order.get("orderDate"))
        if order.get("paymentStatus") == "Unpaid" and order_date and order_date < unpaid_cutoff:
            unpaid.append(order)

    return {
        "overdueFollowUps": overdue,
        "lowStockProducts": low_stock,
        "unpaidInvoices": unpaid,
        "newLeadsToday": new_today,
        "total": len(overdue) + len(low_stock) + len(unpaid) + len(new_today),
    }
