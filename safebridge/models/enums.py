# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the SafeBridge case and access domain.
"""

from enum import Enum


class Role(str, Enum):
    """Operator roles selectable in the application."""
    ADMIN = "Admin"
    COUNSELLOR = "Counsellor"
    LEGAL_ADVISOR = "Legal Advisor"
    SURVIVOR = "Survivor"

    @classmethod
    def _missing_(cls, value):
        # Labels used by older snapshots and by the role selector
        aliases = {
            "Victim/Survivor": cls.SURVIVOR,
            "LegalAdvisor": cls.LEGAL_ADVISOR,
        }
        return aliases.get(value)


class ResourceType(str, Enum):
    """Kinds of support resources listed in the directory."""
    HELPLINE = "Helpline"
    POLICE = "Police"
    HEALTH = "Health"
    SHELTER = "Shelter"
    NGO = "NGO"
    LEGAL_AID = "Legal Aid"
    COUNSELLING = "Counselling"

    @classmethod
    def _missing_(cls, value):
        if value == "LegalAid":
            return cls.LEGAL_AID
        return None


class ContactPreference(str, Enum):
    """How a survivor prefers to be contacted."""
    HIDDEN = "Hidden"
    PHONE = "Phone"
    SMS = "SMS"
    WHATSAPP = "WhatsApp"
    EMAIL = "Email"


class CaseStatus(str, Enum):
    """Help request lifecycle status."""
    NEW = "New"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "In progress"
    CLOSED = "Closed"


class DirectoryCollection(str, Enum):
    """Keyed collections held by the directory store."""
    RESOURCES = "resources"
    LEGAL = "legal"
    USERS = "users"


class View(str, Enum):
    """Top-level views (tabs) a role may open."""
    OVERVIEW = "Overview"
    RESOURCES = "Resources"
    GET_HELP = "Get Help"
    LEGAL_RIGHTS = "Legal Rights"
    SAFETY_PLAN = "Safety Plan"
    ASSIGNED_CASES = "Assigned Cases"
    PROGRESS_NOTES = "Progress Notes"
    LEGAL_RESOURCES = "Legal Resources"
    CASE_ACTIONS = "Case Actions"
    CONTENT = "Content"
    USERS = "Users"
    DATA_SECURITY = "Data & Security"


class Capability(str, Enum):
    """Mutations and reads gated by the access policy."""
    RESOURCE_CREATE = "resource:create"
    RESOURCE_UPDATE = "resource:update"
    RESOURCE_DELETE = "resource:delete"
    LEGAL_CREATE = "legal:create"
    LEGAL_UPDATE = "legal:update"
    LEGAL_DELETE = "legal:delete"
    USER_CREATE = "user:create"
    USER_DELETE = "user:delete"
    CASE_CREATE = "case:create"
    CASE_READ_MINE = "case:read_mine"
    CASE_READ_ALL = "case:read_all"
    CASE_ASSIGN = "case:assign"
    CASE_UPDATE_STATUS = "case:update_status"
    DIRECTORY_STATS = "directory:stats"
    DATA_CLEAR = "data:clear"
