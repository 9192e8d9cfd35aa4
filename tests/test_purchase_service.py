"""Tests for purchase recording, invoice lookup and the product catalog."""

import re
from datetime import timedelta

import pytest

from services.coupon.app.core.errors import NotFoundError
from services.coupon.app.core.PurchaseService import PurchaseService
from services.coupon.app.db.seed import DEMO_PRODUCTS, seed_demo_products
from tests.conftest import run


class TestCreatePurchase:
    def test_printer_purchase_generates_coupon(self, purchase_service, make_product, notifier, clock):
        product = make_product(category="Printers", price=150)

        result = run(
            purchase_service.create_purchase(
                customer_name="Jane Doe",
                email="jane@example.com",
                product_id=product.productId,
                total_amount=150,
                serial_number="SN-42",
            )
        )

        assert re.match(r"^PAN-\d+-[A-Z0-9]{6}$", result.purchase_order.orderNumber)
        assert result.purchase_order.product.category == "Printers"
        assert result.coupon.discountValue == 15
        assert result.coupon.minimumOrderValue == 100
        assert result.coupon.maxDiscountAmount == 50
        assert result.coupon.usageLimit == 1
        assert result.coupon.expiresAt == clock() + timedelta(days=90)
        assert result.coupon.purchaseOrderId == result.purchase_order.purchaseOrderId
        assert result.email_sent is True
        assert notifier.emails == [
            ("jane@example.com", "Jane Doe", result.coupon.code, result.purchase_order.orderNumber)
        ]

    def test_email_failure_keeps_order(self, purchase_service, purchase_repository, make_product, notifier):
        product = make_product()
        notifier.fail = True

        result = run(
            purchase_service.create_purchase(
                customer_name="Jane Doe",
                email="jane@example.com",
                product_id=product.productId,
                total_amount=150,
            )
        )

        assert result.email_sent is False
        stored = run(purchase_repository.find_purchase_order_by_number(result.purchase_order.orderNumber))
        assert stored is not None

    def test_unknown_product(self, purchase_service):
        with pytest.raises(NotFoundError):
            run(purchase_service.create_purchase("Jane Doe", "jane@example.com", 99, 10))

    def test_demo_mode_falls_back_to_first_product(
        self, purchase_repository, coupon_service, notifier, clock, make_product
    ):
        first = make_product(category="Paper", name="Copy Paper", price=12.99)
        service = PurchaseService(purchase_repository, coupon_service, notifier, demo_mode=True, clock=clock)

        result = run(service.create_purchase("Jane Doe", "jane@example.com", 999, 30))

        assert result.purchase_order.productId == first.productId
        assert result.coupon.discountValue == 10


class TestValidateInvoice:
    @pytest.fixture
    def order(self, make_product, make_order):
        return make_order(make_product(), order_number="PAN-3001", serial_number="SN-3001")

    def test_by_invoice_number(self, purchase_service, order):
        found = run(purchase_service.validate_invoice("jane@example.com", invoice_number="PAN-3001"))
        assert found.purchaseOrderId == order.purchaseOrderId

    def test_by_serial_number(self, purchase_service, order):
        found = run(purchase_service.validate_invoice("jane@example.com", serial_number="SN-3001"))
        assert found.purchaseOrderId == order.purchaseOrderId

    def test_email_must_match(self, purchase_service, order):
        with pytest.raises(NotFoundError) as exc_info:
            run(purchase_service.validate_invoice("other@example.com", invoice_number="PAN-3001"))
        assert exc_info.value.message == "Purchase not found with provided details"

    def test_requires_a_number(self, purchase_service, order):
        with pytest.raises(NotFoundError):
            run(purchase_service.validate_invoice("jane@example.com"))


class TestProducts:
    def test_list_only_active(self, purchase_service, make_product):
        make_product(name="B Printer")
        make_product(name="A Paper", category="Paper")
        make_product(name="Retired", is_active=False)

        names = [product.name for product in run(purchase_service.list_products())]

        assert names == ["A Paper", "B Printer"]

    def test_get_product_not_found(self, purchase_service):
        with pytest.raises(NotFoundError):
            run(purchase_service.get_product(12345))

    def test_seed_runs_once(self, purchase_repository):
        assert run(seed_demo_products(purchase_repository)) == len(DEMO_PRODUCTS)
        assert run(seed_demo_products(purchase_repository)) == 0
        assert run(purchase_repository.count_products()) == len(DEMO_PRODUCTS)
