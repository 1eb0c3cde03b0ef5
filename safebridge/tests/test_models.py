# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for Pydantic models.
"""

import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from safebridge.models.entities import ActorContext, DomainState, HelpRequest, Resource, User
from safebridge.models.enums import CaseStatus, ContactPreference, DirectoryCollection, ResourceType, Role
from safebridge.models.requests import AssignCaseRequest, CreateHelpRequest, UpdateResourceRequest


class TestEntities:
    """Test domain entities."""

    def test_entities_are_frozen(self):
        """Snapshot entities cannot be mutated in place."""
        user = User(name="Admin", role=Role.ADMIN)

        with pytest.raises(ValidationError):
            user.name = "Other"

    def test_generated_ids_are_object_ids(self):
        """Default identifiers are 24-character hex ObjectIds."""
        resource = Resource(type=ResourceType.POLICE, title="Emergency Police")

        assert len(resource.id) == 24
        int(resource.id, 16)

    def test_legacy_labels(self):
        """Legacy role and resource type labels are normalized."""
        assert User(name="S", role="Victim/Survivor").role == Role.SURVIVOR.value
        assert Resource(type="LegalAid", title="Aid").type == ResourceType.LEGAL_AID.value

    def test_names_are_trimmed(self):
        """Names and titles are stripped and must not be blank."""
        assert User(name="  Admin ", role="Admin").name == "Admin"
        with pytest.raises(ValidationError):
            Resource(type="NGO", title="  ")

    def test_help_request_defaults(self):
        """Missing optional fields default to empty values."""
        case = HelpRequest(by_name=None, contact_pref="", details=None)

        assert case.status == CaseStatus.NEW.value
        assert case.contact_pref == ContactPreference.HIDDEN.value
        assert case.by_name == ""
        assert case.updates == ()

    def test_is_assigned_to(self):
        """Empty ids never match, even against an empty assignee."""
        case = HelpRequest(assigned_to="")

        assert not case.is_assigned_to("")
        assert HelpRequest(assigned_to="u-c1").is_assigned_to("u-c1")

    def test_is_closed(self):
        """Only the Closed status counts as closed."""
        assert HelpRequest(status="Closed").is_closed()
        assert not HelpRequest(status="In progress").is_closed()

    def test_naive_timestamps_are_utc(self):
        """Legacy timestamps without an offset are read as UTC."""
        case = HelpRequest.model_validate({
            "createdAt": "2024-03-01T10:30:00",
            "updates": [{"at": "2024-03-02T08:00:00", "note": "called"}],
        })

        assert case.created_at == datetime(2024, 3, 1, 10, 30, tzinfo=timezone.utc)
        assert case.updates[0].at.tzinfo is not None

    def test_document_uses_camel_case(self):
        """Documents use camelCase keys."""
        document = HelpRequest(by_name="R", assigned_to="u1").to_document()

        assert document["byName"] == "R"
        assert document["assignedTo"] == "u1"
        assert document["status"] == "New"


class TestDomainState:
    """Test the snapshot model."""

    def test_collection_lookup(self, seeded_state):
        """Directory collections are addressable by name."""
        assert seeded_state.collection(DirectoryCollection.USERS) is seeded_state.users
        assert seeded_state.collection("legal") is seeded_state.legal

    def test_replace_returns_new_snapshot(self, seeded_state):
        """Replacing a collection leaves the original snapshot intact."""
        state = seeded_state.replace(legal=())

        assert state.legal == ()
        assert len(seeded_state.legal) == 3
        assert isinstance(state, DomainState)


class TestRequestModels:
    """Test request body models."""

    def test_camel_case_aliases(self):
        """Bodies accept camelCase keys."""
        draft = CreateHelpRequest.model_validate({"byName": "R", "assignedTo": "u-c1"})

        assert draft.by_name == "R"
        assert draft.assigned_to == "u-c1"
        assert AssignCaseRequest.model_validate({"counsellorId": "u-c1"}).counsellor_id == "u-c1"

    def test_unknown_fields_ignored(self):
        """Unknown keys are dropped."""
        draft = UpdateResourceRequest.model_validate({"title": "X", "id": "evil"})

        assert draft.model_dump(exclude_none=True) == {"title": "X"}

    def test_actor_context_capabilities(self):
        """Actor contexts answer capability questions."""
        actor = ActorContext(role="Counsellor", capabilities=["case:read_mine"])

        assert actor.has_capability("case:read_mine")
        assert actor.has_any_capability(["case:read_all", "case:read_mine"])
        assert not actor.has_capability("case:read_all")
