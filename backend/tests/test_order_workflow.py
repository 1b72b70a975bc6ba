"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  NH Console - Order / Invoice Workflow Tests                                 ║
║                                                                              ║
║  1. Invoice creation never touches stock                                     ║
║  2. Invoice numbers are daily-sequenced and zero-padded                      ║
║  3. Marking Paid re-validates stock, then decrements + writes history        ║
║  4. Referral code issued once, on the first paid order                       ║
║  5. Referral record created only for referred customers                      ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import asyncio
import re

import pytest

from services.calculations import invoice_prefix
from services.document_store import add_document, find_documents, get_document_by_id, update_document
from services.order_workflow import create_order, next_invoice_number, update_order_status


def _db_op(coro):
    """Run async DB operation in a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@pytest.fixture
def shop():
    """One product with 10 in stock, one plain customer"""
    product_id = _db_op(add_document("products", {
        "name": "RO Purifier", "sku": "RO-1", "dealer": "AquaParts",
        "costPrice": 60, "sellingPrice": 100, "quantity": 10, "lowStockThreshold": 2,
    }))
    customer_id = _db_op(add_document("customers", {"name": "Asha", "email": "", "phone": "999"}))
    return {"product_id": product_id, "customer_id": customer_id}


def _order(shop, quantity=2, discount=10, fee=50):
    return _db_op(create_order(
        shop["customer_id"],
        [{"productId": shop["product_id"], "quantity": quantity, "discount": discount}],
        service_fee=fee,
    ))


def _quantity(product_id):
    return _db_op(get_document_by_id("products", product_id))["quantity"]


class TestCreateOrder:
    def test_creates_unpaid_invoice_without_touching_stock(self, shop):
        result = _order(shop)
        assert result["success"] is True

        order = result["order"]
        assert order["paymentStatus"] == "Unpaid"
        assert order["subtotal"] == 180
        assert order["tax"] == 32.4
        assert order["serviceFee"] == 50
        assert order["totalAmount"] == 262.4
        assert order["items"][0]["salePrice"] == 100
        assert order["items"][0]["lineTotal"] == 180
        assert order["items"][0]["productName"] == "RO Purifier"
        assert len(order["shareToken"]) == 20
        assert _quantity(shop["product_id"]) == 10
        assert _db_op(find_documents("stockHistory")) == []
        print(f"✅ {order['invoiceNumber']} created Unpaid, stock untouched")

    def test_invoice_number_format(self, shop):
        order = _order(shop)["order"]
        assert re.match(rf"^{invoice_prefix()}-\d{{2,}}$", order["invoiceNumber"])

    def test_invoice_numbers_increase_within_the_day(self, shop):
        numbers = [_order(shop, quantity=1)["order"]["invoiceNumber"] for _ in range(3)]
        seqs = [int(n.rsplit("-", 1)[1]) for n in numbers]
        assert seqs == [1, 2, 3]
        assert numbers[0].endswith("-01")

    def test_next_number_skips_existing(self, shop):
        prefix = invoice_prefix()
        _db_op(add_document("orders", {"invoiceNumber": f"{prefix}-02", "customerId": shop["customer_id"]}))
        # count = 1 -> 02 is taken -> 03
        assert _db_op(next_invoice_number()) == f"{prefix}-03"

    def test_empty_items_rejected(self, shop):
        result = _db_op(create_order(shop["customer_id"], []))
        assert result == {"success": False, "message": "No items in order."}

    def test_unknown_product_rejected(self, shop):
        result = _db_op(create_order(shop["customer_id"], [{"productId": "nope", "quantity": 1}]))
        assert result["success"] is False
        assert "not found" in result["message"]
        assert _db_op(find_documents("orders")) == []

    def test_unknown_customer_rejected(self, shop):
        result = _db_op(create_order("ghost", [{"productId": shop["product_id"], "quantity": 1}]))
        assert result["success"] is False
        assert result["message"] == "Customer not found."

    def test_insufficient_stock_rejected(self, shop):
        result = _order(shop, quantity=11)
        assert result["success"] is False
        assert "Insufficient stock" in result["message"]

    def test_repeated_product_lines_are_summed(self, shop):
        """Two lines of 6 on a product with 10 in stock must fail"""
        result = _db_op(create_order(shop["customer_id"], [
            {"productId": shop["product_id"], "quantity": 6},
            {"productId": shop["product_id"], "quantity": 6},
        ]))
        assert result["success"] is False
        assert "Required: 12" in result["message"]


class TestMarkPaid:
    def test_paid_decrements_stock_and_writes_history(self, shop):
        order = _order(shop, quantity=3)["order"]
        result = _db_op(update_order_status(order["id"], "Paid", "Cash"))
        assert result["success"] is True

        assert _quantity(shop["product_id"]) == 7
        history = _db_op(find_documents("stockHistory"))
        assert len(history) == 1
        assert history[0]["change"] == -3
        assert history[0]["newQuantity"] == 7
        assert history[0]["reason"] == f"Sale (Invoice {order['invoiceNumber']})"

        stored = _db_op(get_document_by_id("orders", order["id"]))
        assert stored["paymentStatus"] == "Paid"
        assert stored["paymentMethod"] == "Cash"
        assert stored["paymentDate"]
        print("✅ Stock decremented only on payment")

    def test_stock_moved_since_creation_rejects_whole_update(self, shop):
        order = _order(shop, quantity=5)["order"]
        # Stock sold elsewhere in the meantime
        _db_op(update_document("products", shop["product_id"], {"quantity": 4}))

        result = _db_op(update_order_status(order["id"], "Paid", "UPI"))
        assert result["success"] is False
        assert "Insufficient stock" in result["message"]

        assert _quantity(shop["product_id"]) == 4
        assert _db_op(find_documents("stockHistory")) == []
        assert _db_op(get_document_by_id("orders", order["id"]))["paymentStatus"] == "Unpaid"

    def test_no_partial_decrement_across_products(self, shop):
        second = _db_op(add_document("products", {"name": "Filter", "sellingPrice": 10, "quantity": 1}))
        order = _db_op(create_order(shop["customer_id"], [
            {"productId": shop["product_id"], "quantity": 2},
            {"productId": second, "quantity": 1},
        ]))["order"]

        _db_op(update_document("products", second, {"quantity": 0}))

        result = _db_op(update_order_status(order["id"], "Paid", "Cash"))
        assert result["success"] is False
        assert _quantity(shop["product_id"]) == 10

    def test_paid_twice_is_noop(self, shop):
        order = _order(shop, quantity=2)["order"]
        _db_op(update_order_status(order["id"], "Paid", "Cash"))
        again = _db_op(update_order_status(order["id"], "Paid", "Cash"))

        assert again["success"] is True
        assert again["message"] == "Order already paid."
        assert _quantity(shop["product_id"]) == 8
        assert len(_db_op(find_documents("stockHistory"))) == 1

    def test_paid_cannot_go_back_to_unpaid(self, shop):
        order = _order(shop)["order"]
        _db_op(update_order_status(order["id"], "Paid", "Cash"))
        result = _db_op(update_order_status(order["id"], "Unpaid"))
        assert result["success"] is False
        assert _db_op(get_document_by_id("orders", order["id"]))["paymentStatus"] == "Paid"

    def test_unpaid_update_only_touches_status_fields(self, shop):
        order = _order(shop)["order"]
        result = _db_op(update_order_status(order["id"], "Unpaid", "Bank Transfer"))
        assert result["success"] is True
        stored = _db_op(get_document_by_id("orders", order["id"]))
        assert stored["paymentMethod"] == "Bank Transfer"
        assert stored["paymentDate"] is None
        assert _quantity(shop["product_id"]) == 10

    def test_unknown_order(self):
        result = _db_op(update_order_status("missing", "Paid", "Cash"))
        assert result == {"success": False, "message": "Order not found."}

    def test_legacy_single_line_order_can_be_paid(self, shop):
        order_id = _db_op(add_document("orders", {
            "customerId": shop["customer_id"], "invoiceNumber": "INV-20230101-01",
            "productId": shop["product_id"], "productName": "RO Purifier",
            "quantity": 4, "salePrice": 100, "discount": 0, "paymentStatus": "Unpaid",
        }))
        result = _db_op(update_order_status(order_id, "Paid", "Cash"))
        assert result["success"] is True
        assert _quantity(shop["product_id"]) == 6


class TestReferralSideEffects:
    def test_first_paid_order_issues_referral_code(self, shop):
        order = _order(shop, quantity=1)["order"]
        result = _db_op(update_order_status(order["id"], "Paid", "Cash"))

        customer = _db_op(get_document_by_id("customers", shop["customer_id"]))
        assert re.match(r"^NH-[0-9a-f]{4}-[A-Z0-9]{4}$", customer["referralCode"])
        assert result["referralCode"] == customer["referralCode"]
        print(f"✅ Referral code issued: {customer['referralCode']}")

    def test_code_issued_only_once(self, shop):
        first = _order(shop, quantity=1)["order"]
        second = _order(shop, quantity=1)["order"]
        _db_op(update_order_status(first["id"], "Paid", "Cash"))
        code = _db_op(get_document_by_id("customers", shop["customer_id"]))["referralCode"]

        result = _db_op(update_order_status(second["id"], "Paid", "Cash"))
        assert "referralCode" not in result
        assert _db_op(get_document_by_id("customers", shop["customer_id"]))["referralCode"] == code

    def test_referred_customer_creates_referral_per_paid_order(self, shop):
        referee_id = _db_op(add_document("customers", {"name": "Ravi", "referredById": shop["customer_id"]}))
        orders = [
            _db_op(create_order(referee_id, [{"productId": shop["product_id"], "quantity": 1}]))["order"]
            for _ in range(2)
        ]
        for order in orders:
            _db_op(update_order_status(order["id"], "Paid", "Cash"))
        # Paying again must not create another record
        _db_op(update_order_status(orders[0]["id"], "Paid", "Cash"))

        referrals = _db_op(find_documents("referrals"))
        assert len(referrals) == 2
        assert {r["orderId"] for r in referrals} == {o["id"] for o in orders}
        for r in referrals:
            assert r["referrerId"] == shop["customer_id"]
            assert r["refereeId"] == referee_id
            assert r["status"] == "Completed"
            assert r["rewardAmount"] == 500

    def test_unreferred_customer_creates_no_referral(self, shop):
        order = _order(shop, quantity=1)["order"]
        _db_op(update_order_status(order["id"], "Paid", "Cash"))
        assert _db_op(find_documents("referrals")) == []

    def test_payment_is_audited(self, shop):
        order = _order(shop, quantity=1)["order"]
        _db_op(update_order_status(order["id"], "Paid", "Cash", user="admin@test.local"))
        events = _db_op(find_documents("event_log", {"action": "order_paid"}))
        assert len(events) == 1
        assert events[0]["entity_id"] == order["id"]
        assert events[0]["user"] == "admin@test.local"
