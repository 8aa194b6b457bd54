"""
Affiliate Tracker Backend: Affiliate Link Schemas
=================================================

What:  Request and response models for /affiliate-link(s), and the URL shape
       rule shared with AffiliateLinkService.

URL rule:
    scheme http, https or ftp, then "://", then at least one character that
    is neither a space nor a double quote. "notaurl", "mailto:x@y" and
    "http://" are all rejected.
"""

import re
import uuid
from datetime import datetime
from typing import List

from pydantic import AliasChoices, BaseModel, Field, field_validator

from affiliate_tracker.schemas.common import wire_name

URL_PATTERN = re.compile(r'^(ftp|http|https)://[^ "]+$')


def is_valid_url(url: str) -> bool:
    return bool(URL_PATTERN.match(url or ""))


class AffiliateLinkCreate(BaseModel):
    """Body of POST /affiliate-link."""
    url: str
    platform_id: uuid.UUID = Field(
        validation_alias=AliasChoices("platform", "platformId", "platform_id"),
        description="Id of the platform this link belongs to",
    )

    @field_validator("url")
    @classmethod
    def url_shape(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_url(v):
            raise ValueError("Please enter a valid URL")
        return v


class AffiliateLinkResponse(BaseModel):
    """Public representation of an AffiliateLink."""
    id: uuid.UUID
    url: str
    platform_id: uuid.UUID = wire_name("platform_id", "platform")
    created_at: datetime = wire_name("created_at", "createdAt")

    model_config = {"from_attributes": True}


class AffiliateLinkCreatedResponse(BaseModel):
    """201 body of POST /affiliate-link."""
    success: bool = Field(default=True)
    message: str = Field(default="Affiliate link created successfully")
    affiliate_link: AffiliateLinkResponse = wire_name("affiliate_link", "affiliateLink")


class AffiliateLinkListResponse(BaseModel):
    """Body of GET /affiliate-links."""
    success: bool = Field(default=True)
    affiliate_links: List[AffiliateLinkResponse] = wire_name("affiliate_links", "affiliateLinks")
