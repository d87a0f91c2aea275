"""Field sets a caller may write onto the primary record during a merge."""

from __future__ import annotations

from typing import Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from crm_dedupe.errors import ValidationError
from crm_dedupe.schema import EntityKind


class Address(BaseModel):
    model_config = ConfigDict(extra="forbid")

    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class ContactMergeData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    last_name: str = Field(min_length=1)
    first_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    company_id: Optional[str] = None
    linkedin_url: Optional[str] = None
    twitter_handle: Optional[str] = None
    source: Optional[str] = None
    address: Optional[Address] = None
    tags: Optional[list[str]] = None


class CompanyMergeData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    domain: Optional[str] = None
    logo_url: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    annual_revenue: Optional[float] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[Address] = None
    tags: Optional[list[str]] = None


_PAYLOADS: dict[EntityKind, type[BaseModel]] = {
    EntityKind.CONTACT: ContactMergeData,
    EntityKind.COMPANY: CompanyMergeData,
}


def validate_merge_data(kind: EntityKind, merged_data: Any) -> dict[str, Any]:
    """Validate ``merged_data`` for ``kind`` and return only the supplied fields."""
    try:
        payload = _PAYLOADS[kind].model_validate(merged_data)
    except pydantic.ValidationError as exc:
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        field = f"merged_data.{location}" if location else "merged_data"
        raise ValidationError(field, error["msg"]) from exc
    return payload.model_dump(exclude_unset=True)
