# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the SafeBridge case and access domain.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator, ConfigDict
from pydantic.alias_generators import to_camel
from .base import BaseEntity, utc_now
from .enums import (
    Role,
    ResourceType,
    ContactPreference,
    CaseStatus,
    DirectoryCollection
)

CURRENT_SCHEMA_VERSION = 1


def _blank_if_none(v):
    return "" if v is None else v


def _assume_utc(v: datetime) -> datetime:
    # Legacy snapshots may carry timestamps without an offset
    return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v


class User(BaseEntity):
    """Directory user; the role is fixed for the lifetime of the record."""

    name: str = Field(..., description="Display name")
    role: Role = Field(..., description="Operator role")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate user name."""
        if not v.strip():
            raise ValueError('User name cannot be empty')
        return v.strip()

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, v):
        """Accept legacy role labels."""
        return Role(v) if isinstance(v, str) else v


class Resource(BaseEntity):
    """Helpline, shelter or other support resource."""

    type: ResourceType = Field(..., description="Resource kind")
    title: str = Field(..., description="Resource title")
    contact: str = Field(default="", description="Phone number or other contact")
    region: str = Field(default="", description="Region served")
    url: str = Field(default="", description="Website")
    notes: str = Field(default="", description="Free-text notes")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate resource title."""
        if not v.strip():
            raise ValueError('Resource title cannot be empty')
        return v.strip()

    @field_validator('type', mode='before')
    @classmethod
    def normalize_type(cls, v):
        """Accept legacy resource type labels."""
        return ResourceType(v) if isinstance(v, str) else v

    @field_validator('contact', 'region', 'url', 'notes', mode='before')
    @classmethod
    def default_blank(cls, v):
        return _blank_if_none(v)


class LegalEntry(BaseEntity):
    """Legal-information reference entry."""

    title: str = Field(..., description="Statute or right")
    summary: str = Field(default="", description="Plain-language summary")
    link: str = Field(default="", description="Reference link")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Validate legal entry title."""
        if not v.strip():
            raise ValueError('Legal entry title cannot be empty')
        return v.strip()

    @field_validator('summary', 'link', mode='before')
    @classmethod
    def default_blank(cls, v):
        return _blank_if_none(v)


class CaseUpdate(BaseModel):
    """Single entry of a case's append-only update log."""

    model_config = ConfigDict(frozen=True)

    at: datetime = Field(default_factory=utc_now, description="When the update was written")
    note: str = Field(default="", description="Progress note, may be empty")

    @field_validator('note', mode='before')
    @classmethod
    def default_blank(cls, v):
        return _blank_if_none(v)

    @field_validator('at')
    @classmethod
    def aware_timestamp(cls, v):
        return _assume_utc(v)


class HelpRequest(BaseEntity):
    """Help request (case) raised by or on behalf of a survivor."""

    created_at: datetime = Field(default_factory=utc_now, description="Creation timestamp")
    status: CaseStatus = Field(default=CaseStatus.NEW, description="Lifecycle status")
    by_name: str = Field(default="", description="Requester name, may be withheld")
    contact_pref: ContactPreference = Field(default=ContactPreference.HIDDEN, description="Contact preference")
    details: str = Field(default="", description="Free-text details")
    region: str = Field(default="", description="Region")
    assigned_to: str = Field(default="", description="Assigned counsellor user ID")
    updates: Tuple[CaseUpdate, ...] = Field(default=(), description="Update log, newest first")

    @field_validator('by_name', 'details', 'region', 'assigned_to', mode='before')
    @classmethod
    def default_blank(cls, v):
        return _blank_if_none(v)

    @field_validator('contact_pref', mode='before')
    @classmethod
    def default_contact_pref(cls, v):
        """Missing contact preference means hidden."""
        return v or ContactPreference.HIDDEN

    @field_validator('created_at')
    @classmethod
    def aware_created_at(cls, v):
        """Timestamps without an offset are taken as UTC."""
        return _assume_utc(v)

    def is_assigned_to(self, user_id: str) -> bool:
        """Check if the case is assigned to the given user."""
        return bool(user_id) and self.assigned_to == user_id

    def is_closed(self) -> bool:
        """Check if the case is closed."""
        return self.status == CaseStatus.CLOSED


class ActorContext(BaseModel):
    """Role and simulated identity of the caller for request processing."""

    role: Role = Field(..., description="Selected role")
    user_id: str = Field(default="", description="Selected user ID")
    name: Optional[str] = Field(None, description="User display name")
    capabilities: List[str] = Field(default_factory=list, description="Capabilities granted to the role")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")

    model_config = ConfigDict(
        use_enum_values=True
    )

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, v):
        return Role(v) if isinstance(v, str) else v

    def has_capability(self, capability: str) -> bool:
        """Check if the actor holds a specific capability."""
        return capability in self.capabilities

    def has_any_capability(self, capabilities: List[str]) -> bool:
        """Check if the actor holds any of the specified capabilities."""
        return any(cap in self.capabilities for cap in capabilities)


class DomainState(BaseModel):
    """Immutable point-in-time copy of the whole domain graph."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        alias_generator=to_camel,
        frozen=True
    )

    schema_version: int = Field(default=CURRENT_SCHEMA_VERSION, description="Snapshot schema version")
    users: Tuple[User, ...] = Field(default=())
    resources: Tuple[Resource, ...] = Field(default=())
    legal: Tuple[LegalEntry, ...] = Field(default=())
    help_requests: Tuple[HelpRequest, ...] = Field(default=())
    sessions: Tuple[Any, ...] = Field(default=(), description="Reserved, unused")

    def collection(self, name: DirectoryCollection) -> tuple:
        """Return one of the directory collections by name."""
        return getattr(self, DirectoryCollection(name).value)

    def replace(self, **changes) -> "DomainState":
        """Return a new snapshot with the given collections swapped in."""
        return self.model_copy(update=changes)

    def to_document(self):
        """Serialize to the persisted blob shape."""
        return self.model_dump(mode="json", by_alias=True)
