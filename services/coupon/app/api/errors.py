from fastapi import HTTPException, status

from services.coupon.app.core.errors import (
    AlreadyIssuedError,
    CouponError,
    GenerationExhaustedError,
    NotFoundError,
    OtpMismatchError,
)

_STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (OtpMismatchError, status.HTTP_401_UNAUTHORIZED),
    (GenerationExhaustedError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def to_http_exception(exc: CouponError) -> HTTPException:
    """
    Maps a service error to an HTTP error with {"code", "message"} detail.
    Business rule rejections and OTP session errors default to 400.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    for error_type, mapped_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = mapped_status
            break

    detail = {"code": exc.code, "message": exc.message}
    if isinstance(exc, AlreadyIssuedError):
        detail["existingCoupon"] = exc.existing_code
    return HTTPException(status_code=status_code, detail=detail)
