# app/schemas/otp/otp.py
from pydantic import BaseModel
from typing import Optional


class SendOTPRequest(BaseModel):
    leadId: Optional[str] = None
    phoneNumber: Optional[str] = None


class SendOTPResponse(BaseModel):
    success: bool
    verificationId: Optional[str] = None
    expiresIn: Optional[int] = None
    phoneDisplay: Optional[str] = None
    alreadyVerified: Optional[bool] = None
    message: Optional[str] = None


class VerifyOTPRequest(BaseModel):
    verificationId: Optional[str] = None
    otp: Optional[str] = None


class VerifyOTPResponse(BaseModel):
    success: bool
    verified: bool = True
    leadId: str
    alreadyVerified: Optional[bool] = None
    message: Optional[str] = None
