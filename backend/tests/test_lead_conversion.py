"""
NH Console - Leads & Customers service tests
Run: cd backend && pytest tests/test_lead_conversion.py -v
"""

import asyncio
import logging

from services.document_store import add_document, find_documents, get_document_by_id
from services.lead_service import (
    add_customer,
    add_lead,
    convert_lead_to_customer,
    delete_leads,
    update_lead,
)


def _db_op(coro):
    """Run async DB operation in a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class TestAddLead:
    def test_lead_with_valid_referral_code(self):
        referrer_id = _db_op(add_document("customers", {"name": "Meera", "referralCode": "NH-ab12-XY34"}))
        lead, warning = _db_op(add_lead(
            {"name": "Kiran", "email": "k@x.com", "phone": "1", "source": "Web", "status": "New"},
            "NH-ab12-XY34"
        ))
        assert warning is None
        assert lead["referredById"] == referrer_id
        assert lead["source"] == "Referral by Meera"
        assert lead["followUpDate"] is None
        assert lead["createdAt"]

    def test_invalid_code_still_creates_lead(self):
        lead, warning = _db_op(add_lead({"name": "Kiran", "source": "Web", "status": "New"}, "BAD-CODE"))
        assert warning == "Invalid referral code entered."
        assert lead["source"] == "Web"
        assert len(_db_op(find_documents("leads"))) == 1
        print("✅ Unknown code is a warning, lead created")

    def test_update_missing_lead(self):
        assert _db_op(update_lead("missing", {"status": "Contacted"})) is None


class TestBulkDelete:
    def test_counts_only_existing(self):
        ids = [_db_op(add_document("leads", {"name": f"L{i}", "status": "New"})) for i in range(3)]
        deleted = _db_op(delete_leads(ids[:2] + ["missing"]))
        assert deleted == 2
        assert [l["id"] for l in _db_op(find_documents("leads"))] == [ids[2]]


class TestConversion:
    def test_converted_lead_becomes_customer(self):
        lead_id = _db_op(add_document("leads", {
            "name": "Kiran", "email": "k@x.com", "phone": "123", "source": "Referral by Meera",
            "status": "Qualified", "referredById": "referrer-1",
        }))
        lead = _db_op(get_document_by_id("leads", lead_id))

        result = _db_op(convert_lead_to_customer(lead, user="staff@test.local"))
        assert result["success"] is True
        customer = result["customer"]

        assert _db_op(get_document_by_id("leads", lead_id))["status"] == "Converted"
        assert customer["name"] == "Kiran"
        assert customer["email"] == "k@x.com"
        assert customer["phone"] == "123"
        assert customer["source"] == "Referral by Meera"
        assert customer["referredById"] == "referrer-1"
        assert customer["sourceLeadId"] == lead_id
        assert customer["address"] == ""
        assert "referralCode" not in customer

        events = _db_op(find_documents("event_log", {"action": "lead_converted"}))
        assert events[0]["related"]["customer_id"] == customer["id"]

    def test_backend_failure_is_reported_and_logged(self, monkeypatch, caplog):
        from services import lead_service

        lead_id = _db_op(add_document("leads", {"name": "Kiran", "status": "Qualified"}))
        lead = _db_op(get_document_by_id("leads", lead_id))

        async def backend_down(collection, data):
            raise RuntimeError("backend down")

        monkeypatch.setattr(lead_service, "add_document", backend_down)

        with caplog.at_level(logging.ERROR, logger="leads"):
            result = _db_op(convert_lead_to_customer(lead))

        assert result == {"success": False, "message": "Failed to convert lead"}
        assert "LEAD_CONVERSION_ERROR" in caplog.text
        assert _db_op(find_documents("customers")) == []
        print("✅ Conversion failure returned as a result, not raised")


class TestAddCustomer:
    def test_customer_with_referral(self):
        referrer_id = _db_op(add_document("customers", {"name": "Meera", "referralCode": "NH-ab12-XY34"}))
        customer, warning = _db_op(add_customer({"name": "Ravi", "source": ""}, " NH-ab12-XY34 "))
        assert warning is None
        assert customer["referredById"] == referrer_id
        assert customer["source"] == "Referral by Meera"

    def test_customer_without_referral(self):
        customer, warning = _db_op(add_customer({"name": "Ravi", "source": "Expo"}))
        assert warning is None
        assert customer["referredById"] is None
        assert customer["source"] == "Expo"
