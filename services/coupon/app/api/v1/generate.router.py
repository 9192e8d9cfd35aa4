"""
Manual coupon generation API router (invoice + OTP)
"""
from fastapi import APIRouter, Depends, Response, status

from services.coupon.app.api.errors import to_http_exception
from services.coupon.app.core.errors import CouponError
from services.coupon.app.core.IssuanceService import IssuanceService
from services.coupon.app.dependencies import get_issuance_service
from services.coupon.app.schemas.request import OtpRequestSchema, OtpResendSchema, OtpVerifySchema
from services.coupon.app.schemas.response import InvoiceResponse, OtpRequestResponse, OtpVerifyResponse

router = APIRouter(prefix="/generate", tags=["Generate"])


@router.get("/invoice/{order_number}", response_model=InvoiceResponse)
async def get_invoice(
    order_number: str,
    issuance_service: IssuanceService = Depends(get_issuance_service),
):
    """
    Invoice details (phone number) shown before requesting an OTP.

    **Response:**
    - HTTP 200 OK: order number, phone, customer name, email
    - HTTP 404 Not Found: unknown invoice
    """
    try:
        purchase_order = await issuance_service.get_invoice(order_number)
    except CouponError as exc:
        raise to_http_exception(exc) from exc

    return InvoiceResponse(
        orderNumber=purchase_order.orderNumber,
        phone=purchase_order.phone,
        customerName=purchase_order.customerName,
        email=purchase_order.email,
    )


@router.post("/request-otp", response_model=OtpRequestResponse)
async def request_otp(
    payload: OtpRequestSchema,
    issuance_service: IssuanceService = Depends(get_issuance_service),
):
    """
    Step 1: sends a verification code for the invoice.

    **Response:**
    - HTTP 200 OK: session ID and expiry (`devOtp` outside production)
    - HTTP 400 Bad Request: coupon already issued `{"code": "ERR-ALREADY-ISSUED", "existingCoupon": ...}`
    - HTTP 404 Not Found: unknown invoice
    """
    try:
        result = await issuance_service.request_otp(payload.phoneNumber, payload.invoiceNumber)
    except CouponError as exc:
        raise to_http_exception(exc) from exc

    return OtpRequestResponse(
        sessionId=result.session_id,
        message="OTP sent successfully" if result.notification_sent else "OTP could not be sent",
        expiresIn=result.expires_in,
        devOtp=result.dev_code,
    )


@router.post("/verify-and-generate", response_model=OtpVerifyResponse)
async def verify_and_generate(
    payload: OtpVerifySchema,
    response: Response,
    issuance_service: IssuanceService = Depends(get_issuance_service),
):
    """
    Step 2: verifies the code and issues the coupon.

    **Response:**
    - HTTP 201 Created: new coupon
    - HTTP 200 OK: the invoice already had an ACTIVE coupon, which is returned
    - HTTP 400 Bad Request: unknown or expired session
    - HTTP 401 Unauthorized: wrong code `{"code": "ERR-OTP-MISMATCH"}`
    """
    try:
        result = await issuance_service.verify_and_generate(payload.sessionId, payload.otp)
    except CouponError as exc:
        raise to_http_exception(exc) from exc

    if result.created:
        response.status_code = status.HTTP_201_CREATED
        message = "Coupon generated successfully"
    else:
        message = "Existing coupon retrieved"

    return OtpVerifyResponse(
        coupon=result.coupon,
        created=result.created,
        message=message,
        phoneNumber=result.phone,
        invoiceNumber=result.invoice_number,
    )


@router.post("/resend-otp", response_model=OtpRequestResponse)
async def resend_otp(
    payload: OtpResendSchema,
    issuance_service: IssuanceService = Depends(get_issuance_service),
):
    """
    Sends a new code for an existing session and restarts its expiry.

    **Response:**
    - HTTP 200 OK: session ID and expiry (`devOtp` outside production)
    - HTTP 400 Bad Request: unknown session
    """
    try:
        result = await issuance_service.resend_otp(payload.sessionId)
    except CouponError as exc:
        raise to_http_exception(exc) from exc

    return OtpRequestResponse(
        sessionId=result.session_id,
        message="New OTP sent successfully" if result.notification_sent else "OTP could not be sent",
        expiresIn=result.expires_in,
        devOtp=result.dev_code,
    )
