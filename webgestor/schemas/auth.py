"""
Authentication request/response schemas.
"""
from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field

from webgestor.schemas.user import User


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(max_length=128)
    name: str = Field(max_length=255)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(max_length=128)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthResponse(Token):
    user: User


class RegisterAdminRequest(RegisterRequest):
    pass


class RegisterAdminResponse(BaseModel):
    user_id: str
