# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.

Required-field checks live in the domain layer so that every caller gets the
same ValidationError; these models only coerce types.
"""

from typing import Optional
from pydantic import BaseModel, Field
from .base import BaseDraft
from .enums import ContactPreference, Role


class CreateResourceRequest(BaseDraft):
    """Request model for adding a resource."""

    type: str = Field(..., description="Resource kind")
    title: str = Field(default="", description="Resource title")
    contact: str = Field(default="", description="Phone number or other contact")
    region: str = Field(default="", description="Region served")
    url: str = Field(default="", description="Website")
    notes: str = Field(default="", description="Free-text notes")


class UpdateResourceRequest(BaseDraft):
    """Request model for updating a resource."""

    type: Optional[str] = Field(None, description="Resource kind")
    title: Optional[str] = Field(None, description="Resource title")
    contact: Optional[str] = Field(None, description="Phone number or other contact")
    region: Optional[str] = Field(None, description="Region served")
    url: Optional[str] = Field(None, description="Website")
    notes: Optional[str] = Field(None, description="Free-text notes")


class CreateLegalEntryRequest(BaseDraft):
    """Request model for adding a legal entry."""

    title: str = Field(default="", description="Statute or right")
    summary: str = Field(default="", description="Plain-language summary")
    link: str = Field(default="", description="Reference link")


class UpdateLegalEntryRequest(BaseDraft):
    """Request model for updating a legal entry."""

    title: Optional[str] = Field(None, description="Statute or right")
    summary: Optional[str] = Field(None, description="Plain-language summary")
    link: Optional[str] = Field(None, description="Reference link")


class CreateUserRequest(BaseDraft):
    """Request model for adding a user."""

    name: str = Field(default="", description="Display name")
    role: str = Field(default=Role.COUNSELLOR.value, description="Operator role")


class CreateHelpRequest(BaseDraft):
    """Request model for the get-help intake form."""

    by_name: str = Field(default="", description="Requester name, optional")
    contact_pref: str = Field(default=ContactPreference.HIDDEN.value, description="Contact preference")
    details: str = Field(default="", description="What kind of help is needed")
    region: str = Field(default="", description="Region")
    assigned_to: str = Field(default="", description="Preferred counsellor user ID")


class AssignCaseRequest(BaseDraft):
    """Request model for assigning a case to a counsellor."""

    counsellor_id: str = Field(default="", description="Counsellor user ID, empty clears")


class UpdateCaseStatusRequest(BaseDraft):
    """Request model for changing a case's status."""

    status: str = Field(..., description="New lifecycle status")
    note: str = Field(default="", description="Progress note")


class EntryPath(BaseModel):
    """Path parameters for directory entries."""

    entry_id: str = Field(..., description="Entry identifier")


class CasePath(BaseModel):
    """Path parameters for cases."""

    case_id: str = Field(..., description="Case identifier")
