"""Tests for the per-category discount policy."""

import pytest

from libs.schemas import DiscountType
from services.coupon.app.core.DiscountRules import (
    ProductCategory,
    default_rule,
    rules_for_category,
)


class TestCategoryRules:
    @pytest.mark.parametrize(
        "category, discount_type, value, minimum, cap",
        [
            ("Printers", DiscountType.PERCENTAGE, 15, 100, 50),
            ("Cartridges", DiscountType.PERCENTAGE, 20, 50, 30),
            ("Paper", DiscountType.FIXED_AMOUNT, 10, 25, None),
            ("Accessories", DiscountType.PERCENTAGE, 10, 30, 20),
        ],
    )
    def test_known_categories(self, category, discount_type, value, minimum, cap):
        rule = rules_for_category(category, 500)
        assert rule.type == discount_type
        assert rule.value == value
        assert rule.minimum_order_value == minimum
        assert rule.max_discount_amount == cap

    def test_enum_member_is_accepted(self):
        assert rules_for_category(ProductCategory.PAPER, 10).type == DiscountType.FIXED_AMOUNT

    def test_unknown_category_uses_default(self):
        rule = rules_for_category("Scanners", 100)
        assert rule == default_rule(100)

    def test_missing_category_uses_default(self):
        assert rules_for_category(None, 100) == default_rule(100)


class TestDefaultRule:
    def test_small_order_minimum_is_fifty(self):
        rule = default_rule(100)
        assert rule.type == DiscountType.PERCENTAGE
        assert rule.value == 10
        assert rule.minimum_order_value == 50
        assert rule.max_discount_amount == 25

    def test_large_order_minimum_is_thirty_percent(self):
        assert default_rule(1000).minimum_order_value == pytest.approx(300)

    def test_parse_unknown_returns_none(self):
        assert ProductCategory.parse("Toys") is None
