"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Inventory Service                                              ║
║                                                                              ║
║  Products + append-only stock history (stockHistory collection)              ║
║                                                                              ║
║  Every quantity change that is written to history carries a reason:         ║
║  - "Initial Stock"          : product created with quantity != 0            ║
║  - free text                : manual adjustment through update_product       ║
║  - "Sale (Invoice <n>)"     : decrement when an invoice is marked Paid       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import re
from typing import Dict, List, Optional, Any

from config import now_iso
from services.calculations import parse_date, safe_number
from services.document_store import (
    add_document,
    update_document,
    delete_document,
    get_document_by_id,
    find_documents,
)

logger = logging.getLogger("inventory")

INITIAL_STOCK_REASON = "Initial Stock"

# Movement types of the stock registry
MOVEMENT_IN = "in"
MOVEMENT_OUT_PURCHASE = "out-purchase"  # Sold to a customer
MOVEMENT_OUT_RETURN = "out-return"      # Any other deduction
MOVEMENT_TYPES = [MOVEMENT_IN, MOVEMENT_OUT_PURCHASE, MOVEMENT_OUT_RETURN]

_SALE_REASON = re.compile(r"sale|invoice|purchase|receipt", re.IGNORECASE)


# ════════════════════════════════════════════════════════════════════════
# STOCK HISTORY
# ════════════════════════════════════════════════════════════════════════

async def add_stock_history_entry(
    product_id: str,
    product_name: str,
    change: float,
    reason: str,
    new_quantity: float,
    date: Optional[str] = None
) -> str:
    """Append one ledger row. Never updated afterwards."""
    return await add_document("stockHistory", {
        "productId": product_id,
        "productName": product_name,
        "change": change,
        "reason": reason,
        "newQuantity": new_quantity,
        "date": date or now_iso(),
    })


async def get_product_history(product_id: str) -> List[Dict]:
    return await find_documents("stockHistory", {"productId": product_id}, sort=[("date", -1)])


# ════════════════════════════════════════════════════════════════════════
# PRODUCTS
# ════════════════════════════════════════════════════════════════════════

async def add_product(data: Dict[str, Any]) -> Dict:
    """Create a product; a non-zero opening quantity is recorded as Initial Stock"""
    product_id = await add_document("products", data)
    quantity = data.get("quantity") or 0

    if quantity != 0:
        await add_stock_history_entry(
            product_id=product_id,
            product_name=data.get("name", ""),
            change=quantity,
            reason=INITIAL_STOCK_REASON,
            new_quantity=quantity,
        )

    logger.info(f"[PRODUCT_ADDED] id={product_id} name={data.get('name')} qty={quantity}")
    return await get_document_by_id("products", product_id)


async def update_product(product_id: str, data: Dict[str, Any], reason: Optional[str] = None) -> Optional[Dict]:
    """
    Partial update of a product.

    change = new quantity - stored quantity; a history row is written only
    when change != 0 AND a reason was given. Returns None if the product
    does not exist.
    """
    old = await get_document_by_id("products", product_id)
    if not old:
        return None

    old_qty = old.get("quantity") or 0
    new_qty = data.get("quantity", old_qty)
    change = new_qty - old_qty

    await update_document("products", product_id, data)

    if change != 0 and reason:
        await add_stock_history_entry(
            product_id=product_id,
            product_name=data.get("name") or old.get("name", ""),
            change=change,
            reason=reason,
            new_quantity=new_qty,
        )
        logger.info(f"[STOCK_ADJUSTED] product={product_id} change={change:+} reason={reason}")
    elif change != 0:
        logger.info(f"[STOCK_CHANGED_UNLOGGED] product={product_id} change={change:+}")

    return await get_document_by_id("products", product_id)


async def delete_product(product_id: str) -> bool:
    deleted = await delete_document("products", product_id)
    if deleted:
        logger.info(f"[PRODUCT_DELETED] id={product_id}")
    return deleted


def is_low_stock(product: Dict) -> bool:
    return safe_number(product.get("quantity")) <= safe_number(product.get("lowStockThreshold"))


# ════════════════════════════════════════════════════════════════════════
# STOCK REGISTRY
# ════════════════════════════════════════════════════════════════════════

def movement_type(entry: Dict) -> str:
    """in | out-purchase (sales) | out-return (other deductions)"""
    if safe_number(entry.get("change")) > 0:
        return MOVEMENT_IN
    if _SALE_REASON.search(entry.get("reason") or ""):
        return MOVEMENT_OUT_PURCHASE
    return MOVEMENT_OUT_RETURN


def build_stock_registry(
    history: List[Dict],
    products: List[Dict],
    month: Optional[str] = None,
    search: Optional[str] = None,
    supplier: Optional[str] = None,
    product_id: Optional[str] = None,
    movement: Optional[str] = None
) -> Dict:
    """
    Filtered stock movements (newest first) with a per-product summary and
    totals for the selection.

    month: YYYY-MM. search: matches product name or SKU (case-insensitive).
    supplier: product dealer. movement: in | out-purchase | out-return.
    """
    products_by_id = {p.get("id"): p for p in products}
    needle = (search or "").strip().lower()

    entries = []
    for entry in history:
        date = parse_date(entry.get("date") or entry.get("createdAt"))
        if month and (not date or date.strftime("%Y-%m") != month):
            continue

        product = products_by_id.get(entry.get("productId"), {})
        if product_id and entry.get("productId") != product_id:
            continue
        if supplier and product.get("dealer") != supplier:
            continue
        if needle:
            name = (entry.get("productName") or product.get("name") or "").lower()
            sku = (product.get("sku") or "").lower()
            if needle not in name and needle not in sku:
                continue

        kind = movement_type(entry)
        if movement and kind != movement:
            continue

        entries.append({**entry, "type": kind, "sku": product.get("sku", ""), "dealer": product.get("dealer", "")})

    entries.sort(key=lambda e: e.get("date") or e.get("createdAt") or "", reverse=True)

    summary: Dict[str, Dict] = {}
    totals = {"stockIn": 0, "salesOut": 0, "returnsOut": 0, "netChange": 0}
    for entry in entries:
        pid = entry.get("productId")
        row = summary.setdefault(pid, {
            "productId": pid,
            "productName": entry.get("productName", ""),
            "stockIn": 0,
            "salesOut": 0,
            "returnsOut": 0,
            "netChange": 0,
        })
        change = safe_number(entry.get("change"))
        if entry["type"] == MOVEMENT_IN:
            row["stockIn"] += change
            totals["stockIn"] += change
        elif entry["type"] == MOVEMENT_OUT_PURCHASE:
            row["salesOut"] += abs(change)
            totals["salesOut"] += abs(change)
        else:
            row["returnsOut"] += abs(change)
            totals["returnsOut"] += abs(change)
        row["netChange"] += change
        totals["netChange"] += change

    return {
        "entries": entries,
        "summary": sorted(summary.values(), key=lambda r: r["productName"]),
        "totals": totals,
        "count": len(entries),
    }
