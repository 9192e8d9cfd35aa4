from pydantic import BaseModel, Field

from libs.schemas import Coupon


class InvoiceResponse(BaseModel):
    """Invoice details shown before requesting an OTP"""
    orderNumber: str = Field(..., description="Invoice (order) number")
    phone: str | None = Field(None, description="Phone number on the order")
    customerName: str = Field(..., description="Customer name")
    email: str = Field(..., description="Customer email")


class OtpRequestResponse(BaseModel):
    """OTP request / resend result"""
    sessionId: str = Field(..., description="Session ID to verify against")
    message: str = Field(..., description="Human readable result")
    expiresIn: int = Field(..., description="Seconds until the code expires")
    devOtp: str | None = Field(None, description="The code itself (non-production only)")


class OtpVerifyResponse(BaseModel):
    """Coupon issued after OTP verification"""
    coupon: Coupon = Field(..., description="Issued (or already existing) coupon")
    created: bool = Field(..., description="False when an existing ACTIVE coupon was returned")
    message: str = Field(..., description="Human readable result")
    phoneNumber: str = Field(..., description="Verified phone number")
    invoiceNumber: str = Field(..., description="Invoice (order) number")
