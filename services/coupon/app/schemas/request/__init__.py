from services.coupon.app.schemas.request.CouponApplySchema import CouponApplySchema
from services.coupon.app.schemas.request.CouponCreateSchema import CouponCreateSchema
from services.coupon.app.schemas.request.CouponStatusUpdateSchema import CouponStatusUpdateSchema
from services.coupon.app.schemas.request.InvoiceValidateSchema import InvoiceValidateSchema
from services.coupon.app.schemas.request.OtpRequestSchema import (
    OtpRequestSchema,
    OtpResendSchema,
    OtpVerifySchema,
)
from services.coupon.app.schemas.request.PurchaseCreateSchema import PurchaseCreateSchema

__all__ = [
    "CouponApplySchema",
    "CouponCreateSchema",
    "CouponStatusUpdateSchema",
    "InvoiceValidateSchema",
    "OtpRequestSchema",
    "OtpResendSchema",
    "OtpVerifySchema",
    "PurchaseCreateSchema",
]
