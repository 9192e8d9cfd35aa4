"""
Default discount policy per product category.
"""
from dataclasses import dataclass
from enum import Enum

from libs.schemas import DiscountType


class ProductCategory(str, Enum):
    PRINTERS = "Printers"
    CARTRIDGES = "Cartridges"
    PAPER = "Paper"
    ACCESSORIES = "Accessories"

    @classmethod
    def parse(cls, value: "str | ProductCategory | None") -> "ProductCategory | None":
        """Returns the matching category, or None for categories without a rule."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class DiscountRule:
    type: DiscountType
    value: float
    minimum_order_value: float | None
    max_discount_amount: float | None


CATEGORY_RULES: dict[ProductCategory, DiscountRule] = {
    ProductCategory.PRINTERS: DiscountRule(DiscountType.PERCENTAGE, 15, 100, 50),
    ProductCategory.CARTRIDGES: DiscountRule(DiscountType.PERCENTAGE, 20, 50, 30),
    ProductCategory.PAPER: DiscountRule(DiscountType.FIXED_AMOUNT, 10, 25, None),
    ProductCategory.ACCESSORIES: DiscountRule(DiscountType.PERCENTAGE, 10, 30, 20),
}


def default_rule(order_amount: float) -> DiscountRule:
    # minimum order follows the triggering order: at least 50, else 30% of it
    return DiscountRule(
        type=DiscountType.PERCENTAGE,
        value=10,
        minimum_order_value=max(50, order_amount * 0.3),
        max_discount_amount=25,
    )


def rules_for_category(category: "str | ProductCategory | None", order_amount: float) -> DiscountRule:
    known = ProductCategory.parse(category)
    if known is None:
        return default_rule(order_amount)
    return CATEGORY_RULES[known]
