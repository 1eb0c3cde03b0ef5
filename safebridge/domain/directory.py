# SPDX-License-Identifier: Apache-2.0

"""
Directory domain logic for resources, legal entries and users.

This module contains pure functions over the three keyed directory
collections. Collections are tuples ordered newest-first; every operation
returns a new tuple and never mutates its input.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union, Callable
from dataclasses import dataclass, field
from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..models.base import BaseEntity, generate_object_id
from ..models.entities import User, Resource, LegalEntry, DomainState
from ..models.enums import DirectoryCollection, Role
from .errors import ValidationError, NotFoundError, from_pydantic


ENTITY_TYPES = {
    DirectoryCollection.RESOURCES: Resource,
    DirectoryCollection.LEGAL: LegalEntry,
    DirectoryCollection.USERS: User,
}

REQUIRED_FIELDS = {
    DirectoryCollection.RESOURCES: "title",
    DirectoryCollection.LEGAL: "title",
    DirectoryCollection.USERS: "name",
}

ENTITY_LABELS = {
    DirectoryCollection.RESOURCES: "resource",
    DirectoryCollection.LEGAL: "legal entry",
    DirectoryCollection.USERS: "user",
}

Draft = Union[Mapping[str, Any], BaseModel]


@dataclass
class ValidationResult:
    """Result of draft validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _as_dict(draft: Draft, exclude_none: bool = False) -> Dict[str, Any]:
    if isinstance(draft, BaseModel):
        return draft.model_dump(exclude_none=exclude_none)
    data = dict(draft or {})
    if exclude_none:
        data = {key: value for key, value in data.items() if value is not None}
    return data


def _build(collection: DirectoryCollection, data: Dict[str, Any]) -> BaseEntity:
    entity_type = ENTITY_TYPES[collection]
    try:
        return entity_type.model_validate(data)
    except PydanticValidationError as e:
        raise from_pydantic(e, f"Invalid {ENTITY_LABELS[collection]}") from e


def _index_of(entries: Sequence[BaseEntity], entry_id: str) -> Optional[int]:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return None


def fresh_id(entries: Sequence[BaseEntity], id_factory: Callable[[], str] = generate_object_id) -> str:
    """
    Generate an identifier not used by any entry of the collection.

    Args:
        entries: Existing collection
        id_factory: Identifier generator

    Returns:
        Unused identifier
    """
    taken = {entry.id for entry in entries}
    new_id = id_factory()
    while new_id in taken:
        new_id = id_factory()
    return new_id


def validate_draft(collection: DirectoryCollection, draft: Mapping[str, Any]) -> ValidationResult:
    """
    Validate the required field of a directory draft.

    Args:
        collection: Target collection
        draft: Draft field values

    Returns:
        ValidationResult with validation status and errors
    """
    errors = []
    required = REQUIRED_FIELDS[DirectoryCollection(collection)]
    value = draft.get(required)

    if value is None or not str(value).strip():
        errors.append(f"Field '{required}' is required")

    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def add_entry(
    entries: Sequence[BaseEntity],
    collection: DirectoryCollection,
    draft: Draft,
    id_factory: Callable[[], str] = generate_object_id
) -> Tuple[BaseEntity, ...]:
    """
    Add a new entry to the front of a directory collection.

    Args:
        entries: Current collection (newest first)
        collection: Which collection the entries belong to
        draft: Field values for the new entry; any supplied id is ignored
        id_factory: Identifier generator

    Returns:
        New collection with the created entry first

    Raises:
        ValidationError: If the required field is blank or a value is invalid
    """
    collection = DirectoryCollection(collection)
    data = _as_dict(draft)

    validation = validate_draft(collection, data)
    if not validation.is_valid:
        raise ValidationError(f"Invalid {ENTITY_LABELS[collection]}", validation.errors)

    data["id"] = fresh_id(entries, id_factory)
    entry = _build(collection, data)

    return (entry,) + tuple(entries)


def update_entry(
    entries: Sequence[BaseEntity],
    collection: DirectoryCollection,
    entry_id: str,
    changes: Draft
) -> Tuple[BaseEntity, ...]:
    """
    Replace fields of an existing entry, keeping its position.

    Fields given as None are left unchanged. The identifier cannot change, and
    a user's role cannot change in place.

    Args:
        entries: Current collection
        collection: Which collection the entries belong to
        entry_id: Identifier of the entry to update
        changes: Field values to replace

    Returns:
        New collection with the updated entry

    Raises:
        NotFoundError: If no entry has the given identifier
        ValidationError: If the result would fail the add validation
    """
    collection = DirectoryCollection(collection)
    label = ENTITY_LABELS[collection]

    index = _index_of(entries, entry_id)
    if index is None:
        raise NotFoundError(f"{label.capitalize()} {entry_id} not found")

    current = entries[index]
    data = _as_dict(changes, exclude_none=True)

    if data.get("id", entry_id) != entry_id:
        raise ValidationError(f"Invalid {label}", ["Field 'id' cannot be changed"])

    if collection == DirectoryCollection.USERS and "role" in data:
        try:
            requested_role = Role(data["role"]).value
        except ValueError:
            requested_role = data["role"]
        if requested_role != current.role:
            raise ValidationError(
                f"Invalid {label}",
                ["User role cannot be changed in place; remove and re-add the user"]
            )

    merged = {**current.model_dump(), **data, "id": entry_id}

    validation = validate_draft(collection, merged)
    if not validation.is_valid:
        raise ValidationError(f"Invalid {label}", validation.errors)

    updated = _build(collection, merged)
    entries = tuple(entries)

    return entries[:index] + (updated,) + entries[index + 1:]


def remove_entry(entries: Sequence[BaseEntity], entry_id: str) -> Tuple[BaseEntity, ...]:
    """
    Remove an entry by identifier.

    Removing an unknown identifier is a no-op.

    Args:
        entries: Current collection
        entry_id: Identifier to remove

    Returns:
        New collection without the entry
    """
    return tuple(entry for entry in entries if entry.id != entry_id)


def find_entry(entries: Sequence[BaseEntity], entry_id: str) -> Optional[BaseEntity]:
    """Find an entry by identifier."""
    index = _index_of(entries, entry_id)
    return None if index is None else entries[index]


def get_entry(entries: Sequence[BaseEntity], collection: DirectoryCollection, entry_id: str) -> BaseEntity:
    """Find an entry by identifier or raise NotFoundError."""
    entry = find_entry(entries, entry_id)
    if entry is None:
        label = ENTITY_LABELS[DirectoryCollection(collection)]
        raise NotFoundError(f"{label.capitalize()} {entry_id} not found")
    return entry


def list_counsellors(users: Sequence[User]) -> Tuple[User, ...]:
    """Users that can be picked as a case's counsellor."""
    return tuple(user for user in users if user.role == Role.COUNSELLOR)


def directory_counts(state: DomainState) -> Dict[str, int]:
    """Collection sizes shown on the admin overview."""
    return {
        "users": len(state.users),
        "resources": len(state.resources),
        "legal": len(state.legal),
        "cases": len(state.help_requests),
    }
