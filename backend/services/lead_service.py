"""
NH Console - Leads & Customers

Lead/customer CRUD, referral attribution at creation, and lead → customer
conversion. The "Qualified only" rule for conversion is enforced by the
route; this module converts whatever lead it is given.
"""

import logging
from typing import Dict, List, Optional, Tuple

from services.document_store import (
    add_document,
    update_document,
    delete_document,
    get_document_by_id,
)
from services.event_logger import log_event
from services.referrals import apply_referral_code

logger = logging.getLogger("leads")


# ==================== LEADS ====================

async def add_lead(data: Dict, referral_code: Optional[str] = None) -> Tuple[Dict, Optional[str]]:
    """Returns (lead, warning). An unknown referral code is a warning, not an error."""
    payload = dict(data)
    payload.setdefault("followUpDate", None)
    warning = await apply_referral_code(payload, referral_code)

    lead_id = await add_document("leads", payload)
    logger.info(f"[LEAD_ADDED] id={lead_id} source={payload.get('source')}")
    return await get_document_by_id("leads", lead_id), warning


async def update_lead(lead_id: str, data: Dict) -> Optional[Dict]:
    if not await update_document("leads", lead_id, data):
        return None
    return await get_document_by_id("leads", lead_id)


async def delete_lead(lead_id: str) -> bool:
    return await delete_document("leads", lead_id)


async def delete_leads(lead_ids: List[str]) -> int:
    """Bulk delete. Returns the number of leads actually deleted."""
    deleted = 0
    for lead_id in lead_ids:
        if await delete_document("leads", lead_id):
            deleted += 1
    logger.info(f"[LEADS_BULK_DELETED] requested={len(lead_ids)} deleted={deleted}")
    return deleted


async def convert_lead_to_customer(lead: Dict, user: str = "system") -> Dict:
    """
    lead.status → Converted, then a new customer carrying the lead's
    contact details, source and referrer.
    Returns {success, message, customer}. Nothing is rolled back when the
    customer write fails after the lead was marked Converted.
    """
    try:
        await update_document("leads", lead["id"], {"status": "Converted"})

        customer_id = await add_document("customers", {
            "name": lead.get("name", ""),
            "email": lead.get("email", ""),
            "phone": lead.get("phone", ""),
            "address": "",
            "source": lead.get("source", ""),
            "sourceLeadId": lead["id"],
            "referredById": lead.get("referredById"),
        })

        await log_event(
            action="lead_converted",
            entity_type="lead",
            entity_id=lead["id"],
            user=user,
            related={"customer_id": customer_id}
        )
        logger.info(f"[LEAD_CONVERTED] lead={lead['id']} customer={customer_id}")
        return {
            "success": True,
            "message": "Lead converted to customer!",
            "customer": await get_document_by_id("customers", customer_id),
        }

    except Exception as e:
        logger.error(f"[LEAD_CONVERSION_ERROR] lead={lead.get('id')} error={e}")
        return {"success": False, "message": "Failed to convert lead"}


# ==================== CUSTOMERS ====================

async def add_customer(data: Dict, referral_code: Optional[str] = None) -> Tuple[Dict, Optional[str]]:
    """Returns (customer, warning)"""
    payload = dict(data)
    warning = await apply_referral_code(payload, referral_code)

    customer_id = await add_document("customers", payload)
    logger.info(f"[CUSTOMER_ADDED] id={customer_id} source={payload.get('source')}")
    return await get_document_by_id("customers", customer_id), warning


async def update_customer(customer_id: str, data: Dict) -> Optional[Dict]:
    if not await update_document("customers", customer_id, data):
        return None
    return await get_document_by_id("customers", customer_id)


async def delete_customer(customer_id: str) -> bool:
    return await delete_document("customers", customer_id)
