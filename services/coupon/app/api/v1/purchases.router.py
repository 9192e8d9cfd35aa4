"""
Purchase API router
"""
from fastapi import APIRouter, Depends, status

from services.coupon.app.api.errors import to_http_exception
from services.coupon.app.core.errors import CouponError
from services.coupon.app.core.PurchaseService import PurchaseService
from services.coupon.app.dependencies import get_purchase_service
from services.coupon.app.schemas.request import InvoiceValidateSchema, PurchaseCreateSchema
from services.coupon.app.schemas.response import InvoiceValidateResponse, PurchaseCreateResponse

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.post("/create", response_model=PurchaseCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_purchase(
    payload: PurchaseCreateSchema,
    purchase_service: PurchaseService = Depends(get_purchase_service),
):
    """
    Records a purchase and generates its coupon automatically.

    **Response:**
    - HTTP 201 Created: purchase order, coupon and whether the email was sent
    - HTTP 404 Not Found: unknown product
    """
    try:
        result = await purchase_service.create_purchase(
            customer_name=payload.customerName,
            email=payload.email,
            phone=payload.phone,
            product_id=payload.productId,
            total_amount=payload.totalAmount,
            serial_number=payload.serialNumber,
        )
    except CouponError as exc:
        raise to_http_exception(exc) from exc

    if result.email_sent:
        message = "Purchase created successfully! Coupon has been sent to your email."
    else:
        message = "Purchase created successfully, but the coupon email could not be sent."

    return PurchaseCreateResponse(
        purchaseOrder=result.purchase_order,
        coupon=result.coupon,
        emailSent=result.email_sent,
        message=message,
    )


@router.post("/validate-invoice", response_model=InvoiceValidateResponse)
async def validate_invoice(
    payload: InvoiceValidateSchema,
    purchase_service: PurchaseService = Depends(get_purchase_service),
):
    """
    Looks up a purchase by invoice number or serial number plus email.

    **Response:**
    - HTTP 200 OK: matching purchase
    - HTTP 404 Not Found: no matching purchase
    """
    try:
        purchase_order = await purchase_service.validate_invoice(
            email=payload.email,
            invoice_number=payload.invoiceNumber,
            serial_number=payload.serialNumber,
        )
    except CouponError as exc:
        raise to_http_exception(exc) from exc

    return InvoiceValidateResponse(isValid=True, purchaseData=purchase_order)
