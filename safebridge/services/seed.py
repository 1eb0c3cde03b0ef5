# SPDX-License-Identifier: Apache-2.0

"""
Demo data used when no persisted snapshot exists.
"""

from ..models.base import generate_object_id
from ..models.entities import DomainState, LegalEntry, Resource, User
from ..models.enums import ResourceType, Role


def seed_users():
    return (
        User(id="u-admin", name="Admin", role=Role.ADMIN),
        User(id="u-c1", name="Counsellor A", role=Role.COUNSELLOR),
        User(id="u-l1", name="Legal Advisor A", role=Role.LEGAL_ADVISOR),
    )


def seed_resources():
    return (
        Resource(
            id=generate_object_id(), type=ResourceType.HELPLINE, title="National DV Helpline",
            contact="181", region="India", notes="24x7, women-centric"
        ),
        Resource(
            id=generate_object_id(), type=ResourceType.POLICE, title="Emergency Police",
            contact="112", region="India", notes="Immediate danger"
        ),
        Resource(
            id=generate_object_id(), type=ResourceType.NGO, title="Sakhi One Stop Centre",
            region="State-wise", notes="Medical, legal, counselling support"
        ),
        Resource(
            id=generate_object_id(), type=ResourceType.HEALTH, title="Medical Emergency",
            contact="108", region="India", notes="Ambulance"
        ),
    )


def seed_legal():
    return (
        LegalEntry(
            id=generate_object_id(),
            title="Protection of Women from Domestic Violence Act, 2005",
            summary="Civil remedies: protection, residence, monetary, custody, compensation orders."
        ),
        LegalEntry(
            id=generate_object_id(),
            title="Section 498A IPC",
            summary="Cruelty by husband/relatives; cognizable offense."
        ),
        LegalEntry(
            id=generate_object_id(),
            title="POCSO Act (if minor involved)",
            summary="Protection of children from sexual offenses."
        ),
    )


def seed_state() -> DomainState:
    """Fresh demo snapshot: three staff users, four resources, three legal entries, no cases."""
    return DomainState(
        users=seed_users(),
        resources=seed_resources(),
        legal=seed_legal(),
    )
