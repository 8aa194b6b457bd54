"""
Affiliate Tracker Backend: Platform Schemas
===========================================

What:  Request and response models for the /platform(s) routes.

Wire format uses camelCase (commissionRate, apiUrl, joinSteps, createdAt);
Python code uses snake_case. Request models accept either spelling.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from affiliate_tracker.schemas.common import wire_name


def _required_text(v: Optional[str], label: str) -> str:
    if v is None or not v.strip():
        raise ValueError(f"{label} is required")
    return v.strip()


def _empty_if_null(v: Any) -> Any:
    # An explicit null means "no entries", on create and on update alike
    return [] if v is None else v


class PlatformCreate(BaseModel):
    """Body of POST /platform. name and description are required."""
    name: str
    description: str
    niches: List[str] = Field(default_factory=list)
    commission_rate: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("commissionRate", "commission_rate"),
    )
    api_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("apiUrl", "api_url"),
    )
    join_steps: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("joinSteps", "join_steps"),
    )

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        return _required_text(v, "Name")

    @field_validator("description")
    @classmethod
    def description_required(cls, v: str) -> str:
        return _required_text(v, "Description")

    @field_validator("niches", "join_steps", mode="before")
    @classmethod
    def lists_not_null(cls, v: Any) -> Any:
        return _empty_if_null(v)


class PlatformUpdate(BaseModel):
    """
    Body of PUT /platform/{id}: any subset of platform fields.

    Only the fields actually present in the request are applied
    (see `changes()`); omitted fields keep their stored values.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    niches: Optional[List[str]] = None
    commission_rate: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("commissionRate", "commission_rate"),
    )
    api_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("apiUrl", "api_url"),
    )
    join_steps: Optional[List[str]] = Field(
        default=None,
        validation_alias=AliasChoices("joinSteps", "join_steps"),
    )

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> str:
        return _required_text(v, "Name")

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: Optional[str]) -> str:
        return _required_text(v, "Description")

    @field_validator("niches", "join_steps", mode="before")
    @classmethod
    def lists_not_null(cls, v: Any) -> Any:
        return _empty_if_null(v)

    def changes(self) -> dict:
        """Snake_case dict of the fields the client explicitly sent."""
        return self.model_dump(exclude_unset=True)


class PlatformResponse(BaseModel):
    """Public representation of a Platform."""
    id: uuid.UUID
    name: str
    description: str
    niches: List[str]
    commission_rate: Optional[str] = wire_name("commission_rate", "commissionRate")
    api_url: Optional[str] = wire_name("api_url", "apiUrl")
    join_steps: List[str] = wire_name("join_steps", "joinSteps")
    created_at: datetime = wire_name("created_at", "createdAt")

    model_config = {"from_attributes": True}


class PlatformEnvelope(BaseModel):
    """Body of GET/PUT /platform/{id}."""
    success: bool = Field(default=True)
    platform: PlatformResponse


class PlatformCreatedResponse(PlatformEnvelope):
    """201 body of POST /platform."""
    message: str = Field(default="Platform created successfully")


class PlatformListResponse(BaseModel):
    """Body of GET /platforms."""
    success: bool = Field(default=True)
    platforms: List[PlatformResponse]
