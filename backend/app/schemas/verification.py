from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class VerificationCodeRequest(BaseModel):
    email: EmailStr


class VerificationCodeIssued(BaseModel):
    email: EmailStr
    expires_at: datetime


class VerificationCheckRequest(BaseModel):
    email: EmailStr
    code: str = Field(min_length=6, max_length=6, pattern=r"^\d{6}$")


class VerificationCheckResult(BaseModel):
    verified: bool
