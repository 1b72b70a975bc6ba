"""
NH Console - Referrals Routes
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional

from models import ReferralStatus
from services.document_store import find_documents, get_document_by_id
from services.permissions import require_permission
from services.referrals import enrich_referrals, mark_reward_paid, referral_totals

router = APIRouter(prefix="/referrals", tags=["Referrals"])


@router.get("")
async def list_referrals(
    status: Optional[ReferralStatus] = None,
    user: dict = Depends(require_permission("referrals.view"))
):
    query = {"status": status.value} if status else {}
    referrals = await find_documents("referrals", query)
    customers = await find_documents("customers")
    return {
        "referrals": enrich_referrals(referrals, customers),
        **referral_totals(referrals),
    }


@router.post("/{referral_id}/mark-paid")
async def mark_paid(referral_id: str, user: dict = Depends(require_permission("referrals.manage"))):
    if not await get_document_by_id("referrals", referral_id):
        raise HTTPException(status_code=404, detail="Referral not found")

    result = await mark_reward_paid(referral_id, user=user.get("email", "system"))
    if not result["success"]:
        raise HTTPException(status_code=400, detail=result["message"])
    return result
