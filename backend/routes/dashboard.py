"""
NH Console - Dashboard, Reports & Notifications Routes

All three read the live in-memory collections.
"""

from fastapi import APIRouter, Depends

from services.live_state import live_state
from services.permissions import require_permission
from services.reports import build_reports, dashboard_stats, notifications

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard")
async def get_dashboard(user: dict = Depends(require_permission("dashboard.view"))):
    return dashboard_stats(live_state.products, live_state.orders, live_state.leads)


@router.get("/reports")
async def get_reports(user: dict = Depends(require_permission("reports.view"))):
    return build_reports(
        products=live_state.products,
        orders=live_state.orders,
        leads=live_state.leads,
        suppliers=live_state.suppliers,
        referrals=live_state.referrals,
    )


@router.get("/notifications")
async def get_notifications(user: dict = Depends(require_permission("leads.view"))):
    return notifications(live_state.leads, live_state.products, live_state.orders)
