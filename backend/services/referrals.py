"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Referral Service                                               ║
║                                                                              ║
║  - Referral code: issued once, on the customer's first Paid order            ║
║      NH-<id[5:9]>-<4 random uppercase alphanumerics>                         ║
║  - Referral record: created when a referred customer pays an order           ║
║      Completed → RewardPaid                                                  ║
║  - Code lookup at lead/customer creation is bounded by a timeout; on         ║
║    timeout the code is treated as unknown                                    ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import asyncio
import logging
import re
import secrets
import string
from typing import Dict, List, Optional

from config import (
    REFERRAL_CODE_PREFIX,
    REFERRAL_REWARD_AMOUNT,
    REFERRAL_LOOKUP_TIMEOUT,
    now_iso,
)
from models.referral import ReferralStatus, VALID_REFERRAL_TRANSITIONS
from services.calculations import safe_number
from services.document_store import (
    add_document,
    update_document,
    get_document_by_id,
    find_one_document,
)
from services.event_logger import log_event

logger = logging.getLogger("referrals")

INVALID_CODE_WARNING = "Invalid referral code entered."


# ════════════════════════════════════════════════════════════════════════
# CODE LOOKUP / ATTRIBUTION
# ════════════════════════════════════════════════════════════════════════

async def find_customer_by_referral_code(code: str, timeout: float = None) -> Optional[Dict]:
    """
    Customer whose (trimmed) referralCode equals the trimmed code.
    Returns None when not found or when the lookup exceeds the timeout.
    """
    code = (code or "").strip()
    if not code:
        return None

    query = {"referralCode": {"$regex": f"^\\s*{re.escape(code)}\\s*$"}}
    try:
        return await asyncio.wait_for(
            find_one_document("customers", query),
            timeout=REFERRAL_LOOKUP_TIMEOUT if timeout is None else timeout
        )
    except asyncio.TimeoutError:
        logger.warning(f"[REFERRAL_LOOKUP_TIMEOUT] code={code}")
        return None


async def apply_referral_code(payload: Dict, referral_code: Optional[str]) -> Optional[str]:
    """
    Stamp referral attribution on a new lead/customer payload in place.

    Match: referredById = referrer id, source = "Referral by <name>".
    No match: payload untouched, returns a warning message.
    No code: referredById = None.
    """
    payload.setdefault("referredById", None)
    if not referral_code or not referral_code.strip():
        return None

    referrer = await find_customer_by_referral_code(referral_code)
    if not referrer:
        logger.warning(f"[REFERRAL_CODE_UNKNOWN] code={referral_code.strip()}")
        return INVALID_CODE_WARNING

    payload["referredById"] = referrer["id"]
    payload["source"] = f"Referral by {referrer.get('name', '')}"
    return None


# ════════════════════════════════════════════════════════════════════════
# CODE ISSUE / REWARD RECORDS (called on Unpaid → Paid)
# ════════════════════════════════════════════════════════════════════════

def generate_referral_code(customer_id: str) -> str:
    alphabet = string.ascii_uppercase + string.digits
    suffix = "".join(secrets.choice(alphabet) for _ in range(4))
    # uuid ids: dashes dropped so the segment is always 4 hex chars
    segment = (customer_id or "").replace("-", "")[5:9]
    return f"{REFERRAL_CODE_PREFIX}-{segment}-{suffix}"


async def issue_referral_code(customer: Dict) -> str:
    code = generate_referral_code(customer["id"])
    await update_document("customers", customer["id"], {"referralCode": code})
    logger.info(f"[REFERRAL_CODE_ISSUED] customer={customer['id']} code={code}")
    return code


async def record_referral(customer: Dict, order_id: str) -> Optional[str]:
    """Create the Completed referral for a paying referred customer. Returns its id."""
    referrer_id = customer.get("referredById")
    if not referrer_id:
        return None

    referral_id = await add_document("referrals", {
        "referrerId": referrer_id,
        "refereeId": customer["id"],
        "orderId": order_id,
        "date": now_iso(),
        "status": ReferralStatus.COMPLETED.value,
        "rewardAmount": REFERRAL_REWARD_AMOUNT,
    })
    logger.info(
        f"[REFERRAL_RECORDED] referrer={referrer_id} referee={customer['id']} "
        f"order={order_id} reward={REFERRAL_REWARD_AMOUNT}"
    )
    return referral_id


# ════════════════════════════════════════════════════════════════════════
# REWARD SETTLEMENT
# ════════════════════════════════════════════════════════════════════════

async def mark_reward_paid(referral_id: str, user: str = "system") -> Dict:
    """Completed → RewardPaid. Any other starting state is rejected."""
    try:
        referral = await get_document_by_id("referrals", referral_id)
        if not referral:
            return {"success": False, "message": "Referral not found"}

        current = referral.get("status")
        if ReferralStatus.REWARD_PAID.value not in VALID_REFERRAL_TRANSITIONS.get(current, []):
            logger.warning(f"[REWARD_TRANSITION_REJECTED] referral={referral_id} status={current}")
            return {"success": False, "message": f"Cannot mark reward as paid from status {current}"}

        await update_document("referrals", referral_id, {"status": ReferralStatus.REWARD_PAID.value})
        await log_event(
            action="referral_reward_paid",
            entity_type="referral",
            entity_id=referral_id,
            user=user,
            details={"rewardAmount": referral.get("rewardAmount")},
            related={"referrer_id": referral.get("referrerId"), "order_id": referral.get("orderId")}
        )
        logger.info(f"[REWARD_PAID] referral={referral_id}")
        return {"success": True, "message": "Reward marked as paid."}

    except Exception as e:
        logger.error(f"[REWARD_PAYMENT_ERROR] referral={referral_id} error={e}")
        return {"success": False, "message": "Failed to mark reward as paid"}


# ════════════════════════════════════════════════════════════════════════
# VIEWS
# ════════════════════════════════════════════════════════════════════════

def referral_totals(referrals: List[Dict]) -> Dict:
    pending = sum(safe_number(r.get("rewardAmount")) for r in referrals
                  if r.get("status") == ReferralStatus.COMPLETED.value)
    paid = sum(safe_number(r.get("rewardAmount")) for r in referrals
               if r.get("status") == ReferralStatus.REWARD_PAID.value)
    return {
        "count": len(referrals),
        "pendingRewards": round(pending, 2),
        "paidRewards": round(paid, 2),
    }


def enrich_referrals(referrals: List[Dict], customers: List[Dict]) -> List[Dict]:
    """Referrals newest first, with referrer/referee names attached"""
    names = {c.get("id"): c.get("name", "") for c in customers}
    rows = [
        {**r, "referrerName": names.get(r.get("referrerId"), ""), "refereeName": names.get(r.get("refereeId"), "")}
        for r in referrals
    ]
    return sorted(rows, key=lambda r: r.get("date") or "", reverse=True)


def customer_referrals(customer_id: str, referrals: List[Dict], customers: List[Dict]) -> Dict:
    """Referrals made by one customer plus reward totals"""
    made = [r for r in referrals if r.get("referrerId") == customer_id]
    return {
        "referrals": enrich_referrals(made, customers),
        **referral_totals(made),
    }
