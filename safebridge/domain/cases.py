# SPDX-License-Identifier: Apache-2.0

"""
Case lifecycle domain logic.

This module contains pure functions for help request creation, counsellor
assignment, status transitions and the append-only update log. The case
collection is a tuple ordered newest-first; every operation returns a new
collection and leaves its input untouched.

Authorization is not checked here; callers run the access policy first.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime
from pydantic import BaseModel, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..models.base import generate_object_id, utc_now
from ..models.entities import HelpRequest, CaseUpdate
from ..models.enums import CaseStatus, ContactPreference
from .directory import fresh_id
from .errors import ValidationError, NotFoundError, from_pydantic


# Any status may follow any other, including reopening a closed case.
STATUS_TRANSITIONS = {
    status: frozenset(CaseStatus) for status in CaseStatus
}

DRAFT_FIELDS = ("by_name", "contact_pref", "details", "region", "assigned_to")


@dataclass
class TransitionResult:
    """Result of a status transition check."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class CaseMutation:
    """Result of a case lifecycle operation."""
    cases: Tuple[HelpRequest, ...]
    case: HelpRequest


def parse_status(value: Union[str, CaseStatus]) -> CaseStatus:
    """
    Parse a lifecycle status.

    Raises:
        ValidationError: If the value is not a known status
    """
    try:
        return CaseStatus(value)
    except ValueError:
        allowed = ", ".join(status.value for status in CaseStatus)
        raise ValidationError(
            f"Unknown case status: {value!r}",
            [f"Status must be one of: {allowed}"]
        ) from None


def validate_status_transition(
    current_status: Union[str, CaseStatus],
    new_status: Union[str, CaseStatus]
) -> TransitionResult:
    """
    Validate a case status transition against the transition table.

    Args:
        current_status: Current case status
        new_status: Desired new status

    Returns:
        TransitionResult with validation status and errors
    """
    errors = []

    try:
        current = CaseStatus(current_status)
        target = CaseStatus(new_status)
    except ValueError:
        return TransitionResult(
            is_valid=False,
            errors=[f"Unknown status in transition {current_status!r} -> {new_status!r}"]
        )

    if target not in STATUS_TRANSITIONS.get(current, frozenset()):
        errors.append(f"Invalid status transition from {current.value} to {target.value}")

    return TransitionResult(is_valid=len(errors) == 0, errors=errors)


def _index_of(cases: Sequence[HelpRequest], case_id: str) -> int:
    for index, case in enumerate(cases):
        if case.id == case_id:
            return index
    raise NotFoundError(f"Case {case_id} not found")


def _replace(cases: Sequence[HelpRequest], index: int, case: HelpRequest) -> Tuple[HelpRequest, ...]:
    cases = tuple(cases)
    return cases[:index] + (case,) + cases[index + 1:]


def find_case(cases: Sequence[HelpRequest], case_id: str) -> HelpRequest:
    """
    Look up a case by identifier.

    Raises:
        NotFoundError: If the case does not exist
    """
    return cases[_index_of(cases, case_id)]


def create_case(
    cases: Sequence[HelpRequest],
    draft: Union[Mapping[str, Any], BaseModel, None] = None,
    now: Optional[datetime] = None
) -> CaseMutation:
    """
    Open a new help request.

    The optional assignee is stored as given and is not checked against the
    user directory. Status starts at New regardless of the assignee.

    Args:
        cases: Current case collection (newest first)
        draft: byName, contactPref, details, region, assignedTo; all optional
        now: Creation time (defaults to current UTC time)

    Returns:
        CaseMutation with the new case first in the collection
    """
    if isinstance(draft, BaseModel):
        data = draft.model_dump()
    else:
        data = dict(draft or {})

    values = {}
    for name in DRAFT_FIELDS:
        # Drafts may use snake_case or the persisted camelCase keys
        camel = to_camel(name)
        if name in data:
            values[name] = data[name]
        elif camel in data:
            values[name] = data[camel]

    if not values.get("contact_pref"):
        values["contact_pref"] = ContactPreference.HIDDEN

    try:
        case = HelpRequest(
            id=fresh_id(cases, generate_object_id),
            created_at=now or utc_now(),
            status=CaseStatus.NEW,
            updates=(),
            **values
        )
    except PydanticValidationError as e:
        raise from_pydantic(e, "Invalid help request") from e

    return CaseMutation(cases=(case,) + tuple(cases), case=case)


def assign_case(
    cases: Sequence[HelpRequest],
    case_id: str,
    counsellor_id: Optional[str]
) -> CaseMutation:
    """
    Assign a case to a counsellor.

    The status always becomes Assigned, whatever it was before, including
    Closed. An empty counsellor id clears the assignee and still sets
    Assigned.

    Args:
        cases: Current case collection
        case_id: Case to assign
        counsellor_id: Counsellor user ID, or empty to clear

    Returns:
        CaseMutation with the updated case

    Raises:
        NotFoundError: If the case does not exist
    """
    index = _index_of(cases, case_id)

    updated = cases[index].model_copy(update={
        "assigned_to": counsellor_id or "",
        "status": CaseStatus.ASSIGNED.value,
    })

    return CaseMutation(cases=_replace(cases, index, updated), case=updated)


def update_case_status(
    cases: Sequence[HelpRequest],
    case_id: str,
    new_status: Union[str, CaseStatus],
    note: Optional[str] = "",
    now: Optional[datetime] = None
) -> CaseMutation:
    """
    Change a case's status and log the change.

    Every call prepends one entry to the update log, even when the note is
    empty; the note is stored exactly as given.

    Args:
        cases: Current case collection
        case_id: Case to update
        new_status: Target lifecycle status
        note: Progress note
        now: Timestamp of the log entry (defaults to current UTC time)

    Returns:
        CaseMutation with the updated case

    Raises:
        ValidationError: If the status is unknown or the transition is not allowed
        NotFoundError: If the case does not exist
    """
    status = parse_status(new_status)
    index = _index_of(cases, case_id)
    current = cases[index]

    transition = validate_status_transition(current.status, status)
    if not transition.is_valid:
        raise ValidationError("Status transition not allowed", transition.errors)

    entry = CaseUpdate(at=now or utc_now(), note=note if note is not None else "")

    updated = current.model_copy(update={
        "status": status.value,
        "updates": (entry,) + tuple(current.updates),
    })

    return CaseMutation(cases=_replace(cases, index, updated), case=updated)


def summarize_cases(cases: Sequence[HelpRequest]) -> Dict[str, int]:
    """
    Count cases for the role overviews.

    "assigned" counts every case that has left New; "open" counts every case
    that is not Closed.
    """
    return {
        "total": len(cases),
        "new": sum(1 for c in cases if c.status == CaseStatus.NEW),
        "assigned": sum(1 for c in cases if c.status != CaseStatus.NEW),
        "in_progress": sum(1 for c in cases if c.status == CaseStatus.IN_PROGRESS),
        "closed": sum(1 for c in cases if c.is_closed()),
        "open": sum(1 for c in cases if not c.is_closed()),
        "unassigned": sum(1 for c in cases if not c.assigned_to),
    }


def recent_cases(cases: Sequence[HelpRequest], limit: int = 5) -> Tuple[HelpRequest, ...]:
    """Most recently created cases, newest first."""
    return tuple(sorted(cases, key=lambda c: c.created_at, reverse=True)[:limit])
