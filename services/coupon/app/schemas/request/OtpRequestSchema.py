from pydantic import BaseModel, Field


class OtpRequestSchema(BaseModel):
    """OTP request for manual coupon generation"""
    phoneNumber: str = Field(..., description="Phone number receiving the code", pattern=r"^\+?[1-9]\d{1,14}$")
    invoiceNumber: str = Field(..., description="Invoice (order) number", min_length=3)

    class Config:
        from_attributes = True
        str_strip_whitespace = True


class OtpVerifySchema(BaseModel):
    """OTP verification request"""
    sessionId: str = Field(..., description="Session ID from the OTP request", min_length=1)
    otp: str = Field(..., description="6 digit code", min_length=6, max_length=6)

    class Config:
        from_attributes = True


class OtpResendSchema(BaseModel):
    """OTP resend request"""
    sessionId: str = Field(..., description="Session ID from the OTP request", min_length=1)

    class Config:
        from_attributes = True
