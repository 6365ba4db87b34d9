"""Pydantic schemas for authentication endpoints."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    """User role enum."""

    EMPLOYEE = "employee"
    ADMIN = "admin"


# --- Request Schemas ---


class RegisterRequest(BaseModel):
    """Request schema for user registration."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Password (min 8 characters)",
    )
    full_name: str | None = Field(None, max_length=128, description="User's full name")
    role: UserRole = Field(default=UserRole.EMPLOYEE, description="User role")


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


# --- Response Schemas ---


class TokenResponse(BaseModel):
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token TTL in seconds")


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    role: str
    status: str
    created_at: datetime
    last_login_at: datetime | None = None


class RegisterResponse(BaseModel):
    message: str = Field(default="Registration successful")
    user: UserResponse
    tokens: TokenResponse


class LoginResponse(BaseModel):
    message: str = Field(default="Login successful")
    user: UserResponse
    tokens: TokenResponse


class MeResponse(BaseModel):
    user: UserResponse
