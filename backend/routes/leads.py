"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Leads Routes                                                   ║
║                                                                              ║
║  Pipeline: New → Contacted → Qualified → Lost                                ║
║  Only a Qualified lead can be converted to a customer                        ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional

from models import LeadCreate, LeadUpdate, LeadBulkDelete, LeadStatus
from services.document_store import find_documents, get_document_by_id
from services.lead_service import (
    add_lead,
    update_lead,
    delete_lead,
    delete_leads,
    convert_lead_to_customer,
)
from services.permissions import require_permission

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.get("")
async def list_leads(
    status: Optional[LeadStatus] = None,
    search: Optional[str] = Query(None, description="Name, email or phone"),
    user: dict = Depends(require_permission("leads.view"))
):
    query = {"status": status.value} if status else {}
    leads = await find_documents("leads", query, sort=[("createdAt", -1)])

    if search:
        needle = search.strip().lower()
        leads = [
            l for l in leads
            if any(needle in (l.get(f) or "").lower() for f in ("name", "email", "phone"))
        ]
    return {"leads": leads, "count": len(leads)}


@router.post("")
async def create_lead(data: LeadCreate, user: dict = Depends(require_permission("leads.manage"))):
    payload = data.model_dump(exclude={"referralCode"})
    payload["status"] = data.status.value

    lead, warning = await add_lead(payload, data.referralCode)
    return {"success": True, "lead": lead, "warning": warning}


@router.post("/bulk-delete")
async def bulk_delete_leads(data: LeadBulkDelete, user: dict = Depends(require_permission("leads.manage"))):
    deleted = await delete_leads(data.ids)
    return {"success": True, "deleted": deleted}


@router.put("/{lead_id}")
async def edit_lead(lead_id: str, data: LeadUpdate, user: dict = Depends(require_permission("leads.manage"))):
    changes = data.model_dump(exclude_none=True)
    if data.status is not None:
        changes["status"] = data.status.value

    lead = await update_lead(lead_id, changes)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    return {"success": True, "lead": lead}


@router.delete("/{lead_id}")
async def remove_lead(lead_id: str, user: dict = Depends(require_permission("leads.manage"))):
    if not await delete_lead(lead_id):
        raise HTTPException(status_code=404, detail="Lead not found")
    return {"success": True}


@router.post("/{lead_id}/convert")
async def convert_lead(lead_id: str, user: dict = Depends(require_permission("leads.manage"))):
    """Qualified lead → Converted + new customer"""
    lead = await get_document_by_id("leads", lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")

    if lead.get("status") != LeadStatus.QUALIFIED.value:
        raise HTTPException(
            status_code=400,
            detail=f"Only Qualified leads can be converted (current status: {lead.get('status')})"
        )

    result = await convert_lead_to_customer(lead, user=user.get("email", "system"))
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result["message"])
    return result
