# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for directory domain logic.
"""

import pytest
from itertools import count

from safebridge.domain import directory as directory_domain
from safebridge.domain.errors import NotFoundError, ValidationError
from safebridge.models.entities import LegalEntry, Resource, User
from safebridge.models.enums import DirectoryCollection, Role


class TestAddEntry:
    """Test adding entries to directory collections."""

    def test_add_resource_prepends(self, seeded_state):
        """New resources come first and keep the rest in order."""
        entries = directory_domain.add_entry(
            seeded_state.resources,
            DirectoryCollection.RESOURCES,
            {"type": "Shelter", "title": "City Shelter"}
        )

        assert len(entries) == len(seeded_state.resources) + 1
        assert entries[0].title == "City Shelter"
        assert entries[0].type == "Shelter"
        assert entries[1:] == seeded_state.resources

    def test_add_does_not_mutate_input(self, seeded_state):
        """The original collection is left untouched."""
        before = seeded_state.legal
        directory_domain.add_entry(before, DirectoryCollection.LEGAL, {"title": "New right"})

        assert seeded_state.legal is before
        assert len(before) == 3

    def test_add_assigns_fresh_id(self, seeded_state):
        """Client-supplied ids are replaced by a fresh unique id."""
        existing = seeded_state.resources[0].id
        entries = directory_domain.add_entry(
            seeded_state.resources,
            DirectoryCollection.RESOURCES,
            {"id": existing, "type": "NGO", "title": "Duplicate attempt"}
        )

        ids = [entry.id for entry in entries]
        assert len(ids) == len(set(ids))
        assert entries[0].id != existing

    def test_fresh_id_skips_taken_ids(self):
        """Generated ids that collide with existing ones are retried."""
        entries = (LegalEntry(id="id-1", title="A"),)
        ids = iter(["id-1", "id-1", "id-2"])

        assert directory_domain.fresh_id(entries, lambda: next(ids)) == "id-2"

    def test_add_with_custom_id_factory(self):
        """The id factory decides the identifier of the new entry."""
        counter = count(1)
        entries = directory_domain.add_entry(
            (),
            DirectoryCollection.USERS,
            {"name": "Counsellor B", "role": "Counsellor"},
            id_factory=lambda: f"u-{next(counter)}"
        )

        assert entries[0].id == "u-1"
        assert entries[0].role == Role.COUNSELLOR.value

    @pytest.mark.parametrize("collection,draft", [
        (DirectoryCollection.RESOURCES, {"type": "Helpline", "title": "   "}),
        (DirectoryCollection.LEGAL, {"summary": "No title"}),
        (DirectoryCollection.USERS, {"name": "", "role": "Admin"}),
    ])
    def test_blank_required_field_rejected(self, collection, draft):
        """A blank title or name is rejected without a new entry."""
        with pytest.raises(ValidationError) as exc_info:
            directory_domain.add_entry((), collection, draft)

        assert exc_info.value.status_code == 400
        assert exc_info.value.validation_errors

    def test_unknown_resource_type_rejected(self):
        """Resource types outside the enumeration are rejected."""
        with pytest.raises(ValidationError):
            directory_domain.add_entry(
                (), DirectoryCollection.RESOURCES, {"type": "Spaceport", "title": "X"}
            )

    def test_legacy_role_label_accepted(self):
        """The original survivor role label maps onto the Survivor role."""
        entries = directory_domain.add_entry(
            (), DirectoryCollection.USERS, {"name": "S", "role": "Victim/Survivor"}
        )

        assert entries[0].role == Role.SURVIVOR.value


class TestUpdateEntry:
    """Test updating directory entries."""

    def test_update_keeps_position(self, seeded_state):
        """Updated entries stay where they were."""
        target = seeded_state.resources[1]
        entries = directory_domain.update_entry(
            seeded_state.resources,
            DirectoryCollection.RESOURCES,
            target.id,
            {"contact": "100"}
        )

        assert entries[1].id == target.id
        assert entries[1].contact == "100"
        assert entries[1].title == target.title

    def test_none_values_are_ignored(self, seeded_state):
        """Fields given as None keep their current value."""
        target = seeded_state.legal[0]
        entries = directory_domain.update_entry(
            seeded_state.legal,
            DirectoryCollection.LEGAL,
            target.id,
            {"title": None, "link": "https://example.org"}
        )

        assert entries[0].title == target.title
        assert entries[0].link == "https://example.org"

    def test_unknown_id_raises_not_found(self, seeded_state):
        """Updating an unknown identifier fails."""
        with pytest.raises(NotFoundError):
            directory_domain.update_entry(
                seeded_state.legal, DirectoryCollection.LEGAL, "missing", {"title": "X"}
            )

    def test_id_cannot_change(self, seeded_state):
        """The identifier of an entry is immutable."""
        target = seeded_state.resources[0]
        with pytest.raises(ValidationError):
            directory_domain.update_entry(
                seeded_state.resources, DirectoryCollection.RESOURCES, target.id, {"id": "other"}
            )

    def test_blank_title_rejected_on_update(self, seeded_state):
        """Updates run the same required-field validation as adds."""
        target = seeded_state.resources[0]
        with pytest.raises(ValidationError):
            directory_domain.update_entry(
                seeded_state.resources, DirectoryCollection.RESOURCES, target.id, {"title": " "}
            )

    def test_user_role_change_rejected(self, seeded_state):
        """A user's role cannot be changed in place."""
        with pytest.raises(ValidationError) as exc_info:
            directory_domain.update_entry(
                seeded_state.users, DirectoryCollection.USERS, "u-c1", {"role": "Admin"}
            )

        assert "role" in exc_info.value.validation_errors[0].lower()

    def test_user_same_role_allowed(self, seeded_state):
        """Repeating the current role is not a change."""
        entries = directory_domain.update_entry(
            seeded_state.users,
            DirectoryCollection.USERS,
            "u-c1",
            {"role": "Counsellor", "name": "Counsellor Alpha"}
        )

        assert directory_domain.find_entry(entries, "u-c1").name == "Counsellor Alpha"


class TestRemoveEntry:
    """Test removing directory entries."""

    def test_remove_existing(self, seeded_state):
        """Removing an entry drops exactly that entry."""
        target = seeded_state.resources[2]
        entries = directory_domain.remove_entry(seeded_state.resources, target.id)

        assert len(entries) == 3
        assert target.id not in [entry.id for entry in entries]

    def test_remove_is_idempotent(self, seeded_state):
        """Removing twice, or an unknown id, changes nothing further."""
        target = seeded_state.legal[0].id
        once = directory_domain.remove_entry(seeded_state.legal, target)
        twice = directory_domain.remove_entry(once, target)
        unknown = directory_domain.remove_entry(twice, "missing")

        assert once == twice == unknown


class TestLookups:
    """Test directory lookup helpers."""

    def test_find_entry(self, seeded_state):
        """find_entry returns None for unknown ids."""
        assert directory_domain.find_entry(seeded_state.users, "u-admin").name == "Admin"
        assert directory_domain.find_entry(seeded_state.users, "nobody") is None

    def test_get_entry_raises_not_found(self, seeded_state):
        """get_entry raises for unknown ids."""
        with pytest.raises(NotFoundError):
            directory_domain.get_entry(seeded_state.users, DirectoryCollection.USERS, "nobody")

    def test_list_counsellors(self, staff_users):
        """Only counsellors can be picked for a help request."""
        counsellors = directory_domain.list_counsellors(staff_users)

        assert [user.id for user in counsellors] == ["u-c1", "u-c2"]

    def test_directory_counts(self, seeded_state):
        """Admin overview counts every collection."""
        assert directory_domain.directory_counts(seeded_state) == {
            "users": 3,
            "resources": 4,
            "legal": 3,
            "cases": 0,
        }
