import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from ..core.config import settings

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
OTP_PATTERN = re.compile(r"[0-9]{6}")


def normalize_email(value: str) -> str:
    if not value:
        raise PydanticCustomError("required", "Email is required")
    if not EMAIL_PATTERN.fullmatch(value):
        raise PydanticCustomError("email_format", "Invalid email format")
    return value.strip().lower()


class SendOTPRequest(BaseModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return normalize_email(value)


class SendOTPResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    expiry_minutes: Optional[int] = Field(default=None, serialization_alias="expiryMinutes")


class VerifyOTPRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    otp: str
    new_password: str = Field(alias="newPassword")

    # Presence is checked per field; length and format only once all three are present

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "Email is required")
        return value.strip().lower()

    @field_validator("otp")
    @classmethod
    def check_otp(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "OTP is required")
        return value

    @field_validator("new_password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("required", "New password is required")
        return value

    @model_validator(mode="after")
    def check_formats(self) -> "VerifyOTPRequest":
        if len(self.new_password) < settings.MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password_length",
                "Password must be at least {min_length} characters long",
                {"min_length": settings.MIN_PASSWORD_LENGTH},
            )
        if not OTP_PATTERN.fullmatch(self.otp):
            raise PydanticCustomError("otp_format", "Invalid OTP format")
        return self


class VerifyOTPResponse(BaseModel):
    success: bool = True
    message: str
