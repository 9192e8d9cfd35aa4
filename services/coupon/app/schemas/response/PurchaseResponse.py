from pydantic import BaseModel, Field

from libs.schemas import Coupon, PurchaseOrder


class PurchaseCreateResponse(BaseModel):
    """Purchase creation result"""
    purchaseOrder: PurchaseOrder = Field(..., description="Created purchase order")
    coupon: Coupon = Field(..., description="Automatically generated coupon")
    emailSent: bool = Field(..., description="Whether the coupon email went out")
    message: str = Field(..., description="Human readable result")


class InvoiceValidateResponse(BaseModel):
    """Invoice validation result"""
    isValid: bool = Field(..., description="Whether a matching purchase exists")
    purchaseData: PurchaseOrder = Field(..., description="Matching purchase order")
