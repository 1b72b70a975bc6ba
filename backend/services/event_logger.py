"""
NH Console - Event Logger

Centralized audit trail for sensitive workflow transitions
(order paid, reward paid, lead converted).
Single function to call from any route/service.
"""

from services.document_store import add_document
from config import now_iso


async def log_event(
    action: str,
    entity_type: str,
    entity_id: str,
    user: str = "system",
    details: dict = None,
    related: dict = None
):
    """
    Write a single event to the event_log collection.

    Args:
        action: e.g. order_paid, referral_reward_paid, lead_converted
        entity_type: order | referral | lead | customer | product
        entity_id: ID of the primary entity
        user: email of user performing action
        details: free-form dict (invoice number, amounts, old/new values)
        related: linked entity IDs (customer_id, order_id, ...)
    """
    await add_document("event_log", {
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "user": user,
        "details": details or {},
        "related": related or {},
        "created_at": now_iso()
    })
