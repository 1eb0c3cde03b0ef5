# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the SafeBridge domain.
"""

# Base models
from .base import BaseEntity, BaseDraft, generate_object_id, utc_now

# Enumerations
from .enums import (
    Role,
    ResourceType,
    ContactPreference,
    CaseStatus,
    DirectoryCollection,
    View,
    Capability
)

# Core entities
from .entities import (
    CURRENT_SCHEMA_VERSION,
    User,
    Resource,
    LegalEntry,
    CaseUpdate,
    HelpRequest,
    ActorContext,
    DomainState
)

# Request models
from .requests import (
    CreateResourceRequest,
    UpdateResourceRequest,
    CreateLegalEntryRequest,
    UpdateLegalEntryRequest,
    CreateUserRequest,
    CreateHelpRequest,
    AssignCaseRequest,
    UpdateCaseStatusRequest,
    EntryPath,
    CasePath
)

# Response models
from .responses import HalLink

__all__ = [
    # Base models
    "BaseEntity",
    "BaseDraft",
    "generate_object_id",
    "utc_now",

    # Enumerations
    "Role",
    "ResourceType",
    "ContactPreference",
    "CaseStatus",
    "DirectoryCollection",
    "View",
    "Capability",

    # Core entities
    "CURRENT_SCHEMA_VERSION",
    "User",
    "Resource",
    "LegalEntry",
    "CaseUpdate",
    "HelpRequest",
    "ActorContext",
    "DomainState",

    # Request models
    "CreateResourceRequest",
    "UpdateResourceRequest",
    "CreateLegalEntryRequest",
    "UpdateLegalEntryRequest",
    "CreateUserRequest",
    "CreateHelpRequest",
    "AssignCaseRequest",
    "UpdateCaseStatusRequest",
    "EntryPath",
    "CasePath",

    # Response models
    "HalLink"
]
