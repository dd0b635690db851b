from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class RegistrationEmailRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1)


class MentorInviteEmailRequest(BaseModel):
    mentor_name: str = Field(min_length=1)
    mentee_email: EmailStr


class InviteAcceptedEmailRequest(BaseModel):
    mentor_email: EmailStr
    mentee_name: str = Field(min_length=1)


class DailyTargetEmailRequest(BaseModel):
    email: EmailStr
    name: str = Field(min_length=1)
    profit: float
    target: float = Field(gt=0)


class RawEmailRequest(BaseModel):
    to: EmailStr
    subject: str = Field(min_length=1)
    html: str = Field(min_length=1)


class EmailSentResponse(BaseModel):
    success: bool = True
