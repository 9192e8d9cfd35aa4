"""
Coupon service error types.
Each error carries a machine readable code and a human readable message;
routers translate them into HTTP responses.
"""


class CouponError(Exception):
    code = "ERR-COUPON"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class NotFoundError(CouponError):
    """Missing coupon, purchase order or product"""
    code = "ERR-NOT-FOUND"


class ValidationFailedError(CouponError):
    """Business rule rejection (inactive, expired, limit reached, below minimum)"""
    code = "ERR-IVD-VALUE"


class GenerationExhaustedError(CouponError):
    code = "ERR-CODE-EXHAUSTED"


class InvalidSessionError(CouponError):
    code = "ERR-REQ-NOT-FOUND"


class OtpExpiredError(CouponError):
    code = "ERR-REQ-EXPIRED"


class OtpMismatchError(CouponError):
    code = "ERR-OTP-MISMATCH"


class AlreadyIssuedError(CouponError):
    code = "ERR-ALREADY-ISSUED"

    def __init__(self, message: str, existing_code: str):
        super().__init__(message)
        self.existing_code = existing_code


class NotificationFailedError(CouponError):
    code = "ERR-NOTIFY-FAILED"
