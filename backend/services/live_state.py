"""
NH Console - Live State

In-memory copy of the business collections, kept current through
document_store subscriptions. Derived views (dashboard, reports,
notifications, stock registry) read from here instead of querying.

Started on application startup, stopped on shutdown.
"""

import logging
from typing import Callable, Dict, List

from services.document_store import subscribe_to_collection

logger = logging.getLogger("live_state")

LIVE_COLLECTIONS = [
    "products",
    "leads",
    "customers",
    "orders",
    "referrals",
    "stockHistory",
    "suppliers",
    "categories",
]


class LiveState:
    def __init__(self, collections: List[str] = None):
        self.collections = list(collections or LIVE_COLLECTIONS)
        self._data: Dict[str, List[Dict]] = {name: [] for name in self.collections}
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def started(self) -> bool:
        return bool(self._unsubscribers)

    async def start(self):
        if self.started:
            return
        for name in self.collections:
            self._unsubscribers.append(await subscribe_to_collection(name, self._setter(name)))
        logger.info(f"Live state subscribed to {len(self.collections)} collections")

    def stop(self):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._data = {name: [] for name in self.collections}

    def _setter(self, name: str):
        def _set(items: List[Dict]):
            self._data[name] = items
        return _set

    def get(self, name: str) -> List[Dict]:
        return list(self._data.get(name, []))

    def __getattr__(self, name: str) -> List[Dict]:
        data = self.__dict__.get("_data", {})
        if name in data:
            return list(data[name])
        raise AttributeError(name)


live_state = LiveState()
