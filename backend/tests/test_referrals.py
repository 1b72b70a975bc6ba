"""
NH Console - Referral tests
Code lookup (trimmed match, timeout), attribution, reward settlement.
Run: cd backend && pytest tests/test_referrals.py -v
"""

import asyncio
import logging

from services import referrals
from services.document_store import add_document, get_document_by_id, find_documents
from services.referrals import (
    INVALID_CODE_WARNING,
    apply_referral_code,
    find_customer_by_referral_code,
    mark_reward_paid,
    referral_totals,
    customer_referrals,
)


def _db_op(coro):
    """Run async DB operation in a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _referrer(code="NH-ab12-XY34"):
    return _db_op(add_document("customers", {"name": "Meera", "referralCode": code}))


class TestLookup:
    def test_exact_match(self):
        referrer_id = _referrer()
        found = _db_op(find_customer_by_referral_code("NH-ab12-XY34"))
        assert found["id"] == referrer_id

    def test_input_and_stored_code_are_trimmed(self):
        referrer_id = _referrer(code="  NH-ab12-XY34 ")
        found = _db_op(find_customer_by_referral_code("   NH-ab12-XY34\t"))
        assert found["id"] == referrer_id
        print("✅ Trimmed referral code matched")

    def test_partial_code_does_not_match(self):
        _referrer()
        assert _db_op(find_customer_by_referral_code("NH-ab12")) is None

    def test_regex_characters_are_literal(self):
        _referrer()
        assert _db_op(find_customer_by_referral_code("NH-.*")) is None

    def test_blank_code(self):
        assert _db_op(find_customer_by_referral_code("   ")) is None

    def test_timeout_treated_as_not_found(self, monkeypatch):
        async def slow_lookup(collection, query):
            await asyncio.sleep(1)
            return {"id": "late"}

        monkeypatch.setattr(referrals, "find_one_document", slow_lookup)
        assert _db_op(find_customer_by_referral_code("NH-ab12-XY34", timeout=0.05)) is None
        print("✅ Slow lookup gave up after timeout")


class TestAttribution:
    def test_match_sets_referrer_and_source(self):
        referrer_id = _referrer()
        payload = {"name": "New Lead", "source": "Walk-in"}
        warning = _db_op(apply_referral_code(payload, "NH-ab12-XY34"))
        assert warning is None
        assert payload["referredById"] == referrer_id
        assert payload["source"] == "Referral by Meera"

    def test_unknown_code_returns_warning_and_keeps_source(self):
        payload = {"name": "New Lead", "source": "Walk-in"}
        warning = _db_op(apply_referral_code(payload, "NH-0000-ZZZZ"))
        assert warning == INVALID_CODE_WARNING
        assert payload["source"] == "Walk-in"
        assert payload["referredById"] is None

    def test_no_code(self):
        payload = {"name": "New Lead"}
        assert _db_op(apply_referral_code(payload, None)) is None
        assert payload["referredById"] is None


class TestRewardSettlement:
    def _referral(self, status="Completed"):
        return _db_op(add_document("referrals", {
            "referrerId": "r1", "refereeId": "c1", "orderId": "o1",
            "date": "2024-01-01T00:00:00+00:00", "status": status, "rewardAmount": 500,
        }))

    def test_completed_to_reward_paid(self):
        referral_id = self._referral()
        result = _db_op(mark_reward_paid(referral_id, user="admin@test.local"))
        assert result["success"] is True
        assert _db_op(get_document_by_id("referrals", referral_id))["status"] == "RewardPaid"
        events = _db_op(find_documents("event_log", {"action": "referral_reward_paid"}))
        assert len(events) == 1

    def test_reward_paid_is_terminal(self):
        referral_id = self._referral(status="RewardPaid")
        result = _db_op(mark_reward_paid(referral_id))
        assert result["success"] is False
        assert _db_op(get_document_by_id("referrals", referral_id))["status"] == "RewardPaid"

    def test_unknown_referral(self):
        assert _db_op(mark_reward_paid("missing"))["success"] is False

    def test_write_failure_is_reported(self, monkeypatch, caplog):
        referral_id = self._referral()

        async def backend_down(*args, **kwargs):
            raise RuntimeError("backend down")

        monkeypatch.setattr(referrals, "update_document", backend_down)

        with caplog.at_level(logging.ERROR, logger="referrals"):
            result = _db_op(mark_reward_paid(referral_id))

        assert result == {"success": False, "message": "Failed to mark reward as paid"}
        assert "REWARD_PAYMENT_ERROR" in caplog.text
        assert _db_op(get_document_by_id("referrals", referral_id))["status"] == "Completed"


class TestTotals:
    ROWS = [
        {"referrerId": "r1", "refereeId": "c1", "status": "Completed", "rewardAmount": 500, "date": "2024-01-02"},
        {"referrerId": "r1", "refereeId": "c2", "status": "RewardPaid", "rewardAmount": 500, "date": "2024-01-03"},
        {"referrerId": "r2", "refereeId": "c3", "status": "Completed", "rewardAmount": 250, "date": "2024-01-01"},
    ]

    def test_pending_and_paid(self):
        totals = referral_totals(self.ROWS)
        assert totals == {"count": 3, "pendingRewards": 750, "paidRewards": 500}

    def test_customer_view(self):
        customers = [{"id": "r1", "name": "Meera"}, {"id": "c1", "name": "Asha"}, {"id": "c2", "name": "Ravi"}]
        view = customer_referrals("r1", self.ROWS, customers)
        assert view["count"] == 2
        assert view["pendingRewards"] == 500
        assert view["paidRewards"] == 500
        assert [r["refereeName"] for r in view["referrals"]] == ["Ravi", "Asha"]
