"""
NH Console - Order calculation tests (pure functions, no DB)
Run: cd backend && pytest tests/test_calculations.py -v
"""

from datetime import datetime, timezone

from services.calculations import (
    compute_order_totals,
    customer_payment_history,
    format_invoice_number,
    get_order_amount,
    get_order_items,
    get_order_quantity,
    group_orders_by_invoice,
    invoice_prefix,
    parse_date,
    safe_number,
)


class TestSafeNumber:
    def test_converts_numeric_strings(self):
        assert safe_number("12.5") == 12.5

    def test_invalid_values_default(self):
        assert safe_number(None) == 0
        assert safe_number("abc") == 0
        assert safe_number(float("nan")) == 0
        assert safe_number(float("inf"), 7) == 7


class TestOrderItems:
    def test_items_shape(self):
        order = {"items": [
            {"productId": "p1", "quantity": 2, "salePrice": 100, "discount": 10},
            {"productId": "p2", "qty": "3", "price": "50"},
        ]}
        items = get_order_items(order)
        assert [i["productId"] for i in items] == ["p1", "p2"]
        assert items[1]["quantity"] == 3
        assert items[1]["salePrice"] == 50
        assert items[1]["discount"] == 0

    def test_legacy_single_line_order(self):
        order = {"productId": "p1", "quantity": 4, "salePrice": 25, "discount": 5}
        items = get_order_items(order)
        assert len(items) == 1
        assert get_order_amount(order) == 80
        assert get_order_quantity(order) == 4
        print("✅ Legacy single-line order read transparently")

    def test_order_without_lines(self):
        assert get_order_items({}) == []
        assert get_order_amount({"items": []}) == 0


class TestTotals:
    def test_reference_example(self):
        """[{price 100, qty 2, discount 10}], fee 50 -> 180 / 32.4 / 262.4"""
        totals = compute_order_totals(
            [{"salePrice": 100, "quantity": 2, "discount": 10}], service_fee=50, tax_rate=18
        )
        assert totals["subtotal"] == 180
        assert totals["tax"] == 32.4
        assert totals["serviceFee"] == 50
        assert totals["totalAmount"] == 262.4
        print("✅ subtotal=180 tax=32.4 total=262.4")

    def test_total_is_sum_of_parts(self):
        lines = [
            {"salePrice": 19.99, "quantity": 3, "discount": 0},
            {"salePrice": 250, "quantity": 1, "discount": 25},
        ]
        totals = compute_order_totals(lines, service_fee=12.5)
        assert totals["totalAmount"] == round(totals["subtotal"] + totals["tax"] + totals["serviceFee"], 2)

    def test_service_fee_is_not_taxed(self):
        with_fee = compute_order_totals([{"salePrice": 100, "quantity": 1}], service_fee=100, tax_rate=18)
        without_fee = compute_order_totals([{"salePrice": 100, "quantity": 1}], service_fee=0, tax_rate=18)
        assert with_fee["tax"] == without_fee["tax"] == 18


class TestInvoiceNumbers:
    def test_prefix_uses_utc_day(self):
        day = datetime(2024, 3, 7, 23, 30, tzinfo=timezone.utc)
        assert invoice_prefix(day) == "INV-20240307"

    def test_sequence_zero_padded(self):
        assert format_invoice_number("INV-20240307", 1) == "INV-20240307-01"
        assert format_invoice_number("INV-20240307", 12) == "INV-20240307-12"
        assert format_invoice_number("INV-20240307", 123) == "INV-20240307-123"


class TestParseDate:
    def test_date_only_is_utc_midnight(self):
        assert parse_date("2024-05-01") == datetime(2024, 5, 1, tzinfo=timezone.utc)

    def test_z_suffix(self):
        assert parse_date("2024-05-01T10:00:00Z").hour == 10

    def test_garbage(self):
        assert parse_date("not a date") is None
        assert parse_date(None) is None


class TestCustomerHistory:
    ORDERS = [
        {"id": "o1", "customerId": "c1", "invoiceNumber": "INV-20240101-01", "orderDate": "2024-01-01T10:00:00+00:00",
         "paymentStatus": "Paid", "paymentMethod": "Cash", "paymentDate": "2024-01-02T10:00:00+00:00",
         "items": [{"productId": "p1", "quantity": 1, "salePrice": 100, "discount": 0}]},
        {"id": "o2", "customerId": "c1", "invoiceNumber": "INV-20240201-01", "orderDate": "2024-02-01T10:00:00+00:00",
         "paymentStatus": "Unpaid",
         "items": [{"productId": "p1", "quantity": 2, "salePrice": 100, "discount": 0}]},
        {"id": "o3", "customerId": "c2", "invoiceNumber": "INV-20240201-02", "orderDate": "2024-02-01T11:00:00+00:00",
         "paymentStatus": "Paid", "paymentDate": "2024-02-01T12:00:00+00:00",
         "items": [{"productId": "p1", "quantity": 5, "salePrice": 100, "discount": 0}]},
    ]

    def test_group_by_invoice_newest_first(self):
        groups = group_orders_by_invoice("c1", self.ORDERS)
        assert [g["invoiceNumber"] for g in groups] == ["INV-20240201-01", "INV-20240101-01"]
        assert groups[0]["total"] == 200
        assert groups[0]["method"] == "-"

    def test_payment_history_only_paid_with_date(self):
        payments = customer_payment_history("c1", self.ORDERS)
        assert len(payments) == 1
        assert payments[0]["invoiceNumber"] == "INV-20240101-01"
        assert payments[0]["method"] == "Cash"
        assert payments[0]["total"] == 100
