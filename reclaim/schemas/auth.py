from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

from ..core.config import settings


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: EmailStr
    password: str
    college: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise PydanticCustomError("name_length", "Name must be at least 2 characters")
        return value

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        if len(value) < settings.MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password_length",
                "Password must be at least {min_length} characters",
                {"min_length": settings.MIN_PASSWORD_LENGTH},
            )
        return value


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    email: str
    college: Optional[str] = None
    created_at: datetime = Field(serialization_alias="createdAt")


class SignupResponse(BaseModel):
    message: str = "User created successfully"
    user: UserResponse


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
