from services.coupon.app.schemas.response.CouponAnalyticsResponse import (
    CouponAnalyticsResponse,
    CouponStatistics,
)
from services.coupon.app.schemas.response.CouponValidateResponse import (
    CouponApplyResponse,
    CouponValidateResponse,
)
from services.coupon.app.schemas.response.GenerateResponse import (
    InvoiceResponse,
    OtpRequestResponse,
    OtpVerifyResponse,
)
from services.coupon.app.schemas.response.PurchaseResponse import (
    InvoiceValidateResponse,
    PurchaseCreateResponse,
)

__all__ = [
    "CouponAnalyticsResponse",
    "CouponApplyResponse",
    "CouponStatistics",
    "CouponValidateResponse",
    "InvoiceResponse",
    "InvoiceValidateResponse",
    "OtpRequestResponse",
    "OtpVerifyResponse",
    "PurchaseCreateResponse",
]
