"""
Affiliate Tracker Backend: Auth Request/Response Schemas
========================================================

What:  Pydantic models for POST /register and POST /login.
How:   Each request model is the declarative rule set for its route
       (required fields + shape checks). FastAPI validates the body against
       it before the handler runs; failures become a 400 violation list.

Rules:
    register: name non-empty, email well-formed, password at least 6 chars
    login:    email well-formed, password present
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from affiliate_tracker.schemas.common import wire_name

MIN_PASSWORD_LENGTH = 6


class RegisterRequest(BaseModel):
    """Body of POST /register."""
    name: str = Field(description="Display name")
    email: EmailStr = Field(description="Login email, unique across users")
    password: str = Field(description=f"Plaintext password, at least {MIN_PASSWORD_LENGTH} characters")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return v


class LoginRequest(BaseModel):
    """Body of POST /login."""
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_present(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserPublic(BaseModel):
    """
    What:  The only representation of a User that leaves the service layer.
    Note:  Deliberately has no password/password_hash field, so serializing
           it can never leak credentials.
    """
    id: uuid.UUID
    name: str
    email: str
    role: str
    created_at: datetime = wire_name("created_at", "createdAt")

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    """201 body of POST /register."""
    success: bool = Field(default=True)
    message: str = Field(default="User registered successfully")
    user: UserPublic


class LoginResponse(BaseModel):
    """200 body of POST /login."""
    success: bool = Field(default=True)
    token: str = Field(description="Signed bearer token, valid for one hour")
