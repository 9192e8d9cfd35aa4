from libs.schemas.coupon import Coupon
from libs.schemas.coupon_status import CouponStatus, DiscountType
from libs.schemas.coupon_usage import CouponUsage
from libs.schemas.product import Product
from libs.schemas.purchase_order import PurchaseOrder

__all__ = [
    "Coupon",
    "CouponStatus",
    "CouponUsage",
    "DiscountType",
    "Product",
    "PurchaseOrder",
]
