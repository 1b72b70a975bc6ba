"""
NH Console - Document Store

Thin layer over the MongoDB collections. Every read and write in the
application goes through these functions.

Contract:
    add_document(collection, data) -> id
    update_document(collection, id, partial)
    delete_document(collection, id)
    get_document_by_id(collection, id) -> doc | None
    subscribe_to_collection(collection, callback) -> unsubscribe

Documents are addressed by their own string "id" field (uuid4); the Mongo
"_id" never leaves this module.

Subscriptions are in-process: after a write made through this module, every
callback registered on that collection receives a fresh snapshot of the whole
collection. Writes made by other processes are not observed.
"""

import inspect
import logging
import uuid
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple

from config import db, now_iso

logger = logging.getLogger("document_store")

NO_MONGO_ID = {"_id": 0}

_subscribers: Dict[str, List["_Subscription"]] = defaultdict(list)
_write_seq: Dict[str, int] = defaultdict(int)


# ════════════════════════════════════════════════════════════════════════
# READS
# ════════════════════════════════════════════════════════════════════════

async def get_document_by_id(collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
    """Returns the document or None if not found"""
    if not doc_id:
        return None
    return await db[collection].find_one({"id": doc_id}, NO_MONGO_ID)


async def find_one_document(collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return await db[collection].find_one(query, NO_MONGO_ID)


async def find_documents(
    collection: str,
    query: Optional[Dict[str, Any]] = None,
    sort: Optional[List[Tuple[str, int]]] = None,
    limit: int = 0
) -> List[Dict[str, Any]]:
    cursor = db[collection].find(query or {}, NO_MONGO_ID)
    if sort:
        cursor = cursor.sort(sort)
    if limit:
        cursor = cursor.limit(limit)
    return await cursor.to_list(limit or None)


async def count_documents(collection: str, query: Optional[Dict[str, Any]] = None) -> int:
    return await db[collection].count_documents(query or {})


# ════════════════════════════════════════════════════════════════════════
# WRITES
# ════════════════════════════════════════════════════════════════════════

async def add_document(collection: str, data: Dict[str, Any]) -> str:
    """Insert a new document and return its generated id"""
    doc = {k: v for k, v in data.items() if k not in ("id", "_id")}
    doc["id"] = str(uuid.uuid4())
    doc.setdefault("createdAt", now_iso())

    await db[collection].insert_one(doc)
    await _notify(collection)
    return doc["id"]


async def update_document(collection: str, doc_id: str, data: Dict[str, Any]) -> bool:
    """
    Partial update ($set). The id itself is never rewritten.
    Returns False when no document matched.
    """
    changes = {k: v for k, v in data.items() if k not in ("id", "_id")}
    if not changes:
        return await count_documents(collection, {"id": doc_id}) > 0

    result = await db[collection].update_one({"id": doc_id}, {"$set": changes})
    await _notify(collection)
    return result.matched_count > 0


async def delete_document(collection: str, doc_id: str) -> bool:
    result = await db[collection].delete_one({"id": doc_id})
    await _notify(collection)
    return result.deleted_count > 0


# ════════════════════════════════════════════════════════════════════════
# SUBSCRIPTIONS
# ════════════════════════════════════════════════════════════════════════

class _Subscription:
    """A listener plus the sequence number of the last snapshot it received"""

    def __init__(self, callback: Callable):
        self.callback = callback
        self.last_seq = -1


async def subscribe_to_collection(collection: str, callback: Callable) -> Callable[[], None]:
    """
    Register a listener on a collection.

    The callback receives the full list of documents, once immediately and
    again after every write to the collection. It may be a plain function or
    a coroutine function. Returns an unsubscribe function.
    """
    subscription = _Subscription(callback)
    _subscribers[collection].append(subscription)
    seq = _write_seq[collection]
    await _deliver(collection, subscription, seq, await find_documents(collection))

    def unsubscribe():
        if subscription in _subscribers[collection]:
            _subscribers[collection].remove(subscription)

    return unsubscribe


async def _notify(collection: str):
    """
    Push a fresh snapshot after a write.

    Snapshots are numbered per collection when the write completes. A
    snapshot read later can overtake an earlier one, so a listener never
    receives a snapshot older than the last one it got.
    """
    _write_seq[collection] += 1
    seq = _write_seq[collection]
    subscriptions = list(_subscribers.get(collection, []))
    if not subscriptions:
        return
    items = await find_documents(collection)
    for subscription in subscriptions:
        await _deliver(collection, subscription, seq, items)


async def _deliver(collection: str, subscription: _Subscription, seq: int, items: List[Dict[str, Any]]):
    if seq <= subscription.last_seq:
        logger.debug(f"[SNAPSHOT_SKIPPED] collection={collection} seq={seq} last={subscription.last_seq}")
        return
    subscription.last_seq = seq

    # A failing listener must not fail the write that triggered it
    try:
        result = subscription.callback(items)
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.error(f"[SUBSCRIBER_ERROR] collection={collection} error={e}")


# ════════════════════════════════════════════════════════════════════════
# INDEXES
# ════════════════════════════════════════════════════════════════════════

async def ensure_indexes():
    await db.users.create_index("email", unique=True)
    await db.sessions.create_index("token")
    await db.orders.create_index("id")
    await db.orders.create_index("invoiceNumber")
    await db.orders.create_index("shareToken")
    await db.orders.create_index("customerId")
    await db.products.create_index("id")
    await db.customers.create_index("id")
    await db.customers.create_index("referralCode")
    await db.leads.create_index("id")
    await db.referrals.create_index("referrerId")
    await db.stockHistory.create_index("productId")
    logger.info("MongoDB indexes ready")
