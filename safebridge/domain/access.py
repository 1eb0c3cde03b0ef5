# SPDX-License-Identifier: Apache-2.0

"""
Access policy domain logic for role-based views and capabilities.

This module contains pure functions mapping a role and a user identity to the
views, mutations and case subsets it may use. The lifecycle and directory
functions trust their caller; every entry point composes these checks on top.
"""

from typing import Dict, List, Optional, Sequence, Tuple, Union
from dataclasses import dataclass, field

from ..models.entities import ActorContext, HelpRequest, User
from ..models.enums import Capability, DirectoryCollection, Role, View
from .errors import ForbiddenError


ROLE_VIEWS: Dict[Role, Tuple[View, ...]] = {
    Role.SURVIVOR: (
        View.OVERVIEW, View.RESOURCES, View.GET_HELP, View.LEGAL_RIGHTS, View.SAFETY_PLAN
    ),
    Role.COUNSELLOR: (
        View.OVERVIEW, View.ASSIGNED_CASES, View.PROGRESS_NOTES, View.RESOURCES
    ),
    Role.LEGAL_ADVISOR: (
        View.OVERVIEW, View.LEGAL_RESOURCES, View.CASE_ACTIONS
    ),
    Role.ADMIN: (
        View.OVERVIEW, View.CONTENT, View.USERS, View.DATA_SECURITY
    ),
}

ROLE_CAPABILITIES: Dict[Role, frozenset] = {
    Role.SURVIVOR: frozenset({
        Capability.CASE_CREATE,
        Capability.DATA_CLEAR,
    }),
    Role.COUNSELLOR: frozenset({
        Capability.CASE_READ_MINE,
        Capability.CASE_ASSIGN,
        Capability.CASE_UPDATE_STATUS,
        Capability.DATA_CLEAR,
    }),
    Role.LEGAL_ADVISOR: frozenset({
        Capability.LEGAL_CREATE,
        Capability.LEGAL_UPDATE,
        Capability.LEGAL_DELETE,
        Capability.CASE_READ_ALL,
        Capability.CASE_ASSIGN,
        Capability.CASE_UPDATE_STATUS,
        Capability.DATA_CLEAR,
    }),
    Role.ADMIN: frozenset({
        Capability.RESOURCE_CREATE,
        Capability.RESOURCE_UPDATE,
        Capability.RESOURCE_DELETE,
        Capability.LEGAL_CREATE,
        Capability.LEGAL_UPDATE,
        Capability.LEGAL_DELETE,
        Capability.USER_CREATE,
        Capability.USER_DELETE,
        Capability.DIRECTORY_STATS,
        Capability.DATA_CLEAR,
    }),
}

# Users have no in-place update capability
COLLECTION_CAPABILITIES: Dict[Tuple[DirectoryCollection, str], Capability] = {
    (DirectoryCollection.RESOURCES, "create"): Capability.RESOURCE_CREATE,
    (DirectoryCollection.RESOURCES, "update"): Capability.RESOURCE_UPDATE,
    (DirectoryCollection.RESOURCES, "delete"): Capability.RESOURCE_DELETE,
    (DirectoryCollection.LEGAL, "create"): Capability.LEGAL_CREATE,
    (DirectoryCollection.LEGAL, "update"): Capability.LEGAL_UPDATE,
    (DirectoryCollection.LEGAL, "delete"): Capability.LEGAL_DELETE,
    (DirectoryCollection.USERS, "create"): Capability.USER_CREATE,
    (DirectoryCollection.USERS, "delete"): Capability.USER_DELETE,
}


@dataclass
class AuthorizationResult:
    """Result of an authorization check."""
    allowed: bool
    reason: Optional[str] = None
    missing_capabilities: List[str] = field(default_factory=list)


def views_for_role(role: Union[str, Role]) -> Tuple[View, ...]:
    """
    Views (tabs) available to a role.

    Args:
        role: Role or role label

    Returns:
        Ordered tuple of views; Overview only for an unmapped role
    """
    return ROLE_VIEWS.get(Role(role), (View.OVERVIEW,))


def can_access_view(role: Union[str, Role], view: Union[str, View]) -> AuthorizationResult:
    """
    Check if a role may open a view.

    Args:
        role: Role or role label
        view: View or view label

    Returns:
        AuthorizationResult indicating if the view is available
    """
    view = View(view)
    if view in views_for_role(role):
        return AuthorizationResult(allowed=True)

    return AuthorizationResult(
        allowed=False,
        reason=f"View '{view.value}' is not available to role {Role(role).value}"
    )


def capabilities_for_role(role: Union[str, Role]) -> List[str]:
    """Sorted capability strings granted to a role."""
    return sorted(cap.value for cap in ROLE_CAPABILITIES.get(Role(role), frozenset()))


def build_actor_context(
    role: Union[str, Role],
    user_id: str = "",
    users: Sequence[User] = (),
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None
) -> ActorContext:
    """
    Build the actor context for a selected role and simulated user.

    The role selector and the user selector are independent, as in the
    single-operator application; the role alone decides capabilities.

    Args:
        role: Selected role
        user_id: Selected user ID, may be empty
        users: User directory, used to resolve the display name
        ip_address: Client IP address
        user_agent: Client user agent

    Returns:
        ActorContext with aggregated capabilities
    """
    name = None
    for user in users:
        if user.id == user_id:
            name = user.name
            break

    return ActorContext(
        role=Role(role),
        user_id=user_id or "",
        name=name,
        capabilities=capabilities_for_role(role),
        ip_address=ip_address,
        user_agent=user_agent
    )


def check_capability(actor: ActorContext, capability: Union[str, Capability]) -> AuthorizationResult:
    """
    Check if the actor holds a capability.

    Args:
        actor: Actor context with capabilities
        capability: Capability to check

    Returns:
        AuthorizationResult indicating if the capability is granted
    """
    capability = Capability(capability).value
    if actor.has_capability(capability):
        return AuthorizationResult(allowed=True)

    return AuthorizationResult(
        allowed=False,
        reason=f"Role {actor.role} lacks capability: {capability}",
        missing_capabilities=[capability]
    )


def check_capabilities(
    actor: ActorContext,
    capabilities: Sequence[Union[str, Capability]],
    require_all: bool = True
) -> AuthorizationResult:
    """
    Check if the actor holds several capabilities.

    Args:
        actor: Actor context with capabilities
        capabilities: Capabilities to check
        require_all: If True, all are needed. If False, any one is sufficient.

    Returns:
        AuthorizationResult indicating if the capabilities are granted
    """
    held = set(actor.capabilities)
    required = {Capability(cap).value for cap in capabilities}

    if require_all:
        missing = required - held
        if not missing:
            return AuthorizationResult(allowed=True)

        return AuthorizationResult(
            allowed=False,
            reason=f"Role {actor.role} lacks capabilities: {', '.join(sorted(missing))}",
            missing_capabilities=sorted(missing)
        )

    if held & required:
        return AuthorizationResult(allowed=True)

    return AuthorizationResult(
        allowed=False,
        reason=f"Role {actor.role} lacks any of: {', '.join(sorted(required))}",
        missing_capabilities=sorted(required)
    )


def enforce(result: AuthorizationResult) -> None:
    """
    Raise ForbiddenError for a denied authorization result.

    Raises:
        ForbiddenError: If the result is not allowed
    """
    if not result.allowed:
        raise ForbiddenError(result.reason or "Forbidden", result.missing_capabilities)


def require_capability(actor: ActorContext, capability: Union[str, Capability]) -> None:
    """Raise ForbiddenError unless the actor holds the capability."""
    enforce(check_capability(actor, capability))


def collection_capability(collection: Union[str, DirectoryCollection], action: str) -> Optional[Capability]:
    """
    Capability needed to create, update or delete entries of a collection.

    Returns:
        The capability, or None when no role may perform the action
    """
    return COLLECTION_CAPABILITIES.get((DirectoryCollection(collection), action))


def check_collection_access(
    actor: ActorContext,
    collection: Union[str, DirectoryCollection],
    action: str
) -> AuthorizationResult:
    """
    Check if the actor may mutate a directory collection.

    Args:
        actor: Actor context
        collection: Target collection
        action: "create", "update" or "delete"

    Returns:
        AuthorizationResult indicating if the mutation is allowed
    """
    capability = collection_capability(collection, action)
    if capability is None:
        return AuthorizationResult(
            allowed=False,
            reason=f"Action '{action}' is not offered on {DirectoryCollection(collection).value}"
        )

    return check_capability(actor, capability)


def filter_mine(cases: Sequence[HelpRequest], user_id: str) -> Tuple[HelpRequest, ...]:
    """
    Cases assigned to the given user.

    Cases with an empty or different assignee are never included.
    """
    return tuple(case for case in cases if case.is_assigned_to(user_id))


def scope_cases(actor: ActorContext, cases: Sequence[HelpRequest]) -> Tuple[HelpRequest, ...]:
    """
    Case subset the actor may see.

    Args:
        actor: Actor context
        cases: Full case collection

    Returns:
        All cases for case:read_all, assigned cases for case:read_mine

    Raises:
        ForbiddenError: If the actor may not list cases
    """
    if actor.has_capability(Capability.CASE_READ_ALL.value):
        return tuple(cases)

    if actor.has_capability(Capability.CASE_READ_MINE.value):
        return filter_mine(cases, actor.user_id)

    raise ForbiddenError(
        f"Role {actor.role} may not view cases",
        [Capability.CASE_READ_MINE.value]
    )


def check_case_access(actor: ActorContext, case: HelpRequest) -> AuthorizationResult:
    """
    Check if a specific case is within the actor's scope.

    Args:
        actor: Actor context
        case: Case being accessed

    Returns:
        AuthorizationResult indicating if the case is in scope
    """
    if actor.has_capability(Capability.CASE_READ_ALL.value):
        return AuthorizationResult(allowed=True)

    if actor.has_capability(Capability.CASE_READ_MINE.value) and case.is_assigned_to(actor.user_id):
        return AuthorizationResult(allowed=True)

    return AuthorizationResult(
        allowed=False,
        reason=f"Case {case.id} is outside the scope of role {actor.role}"
    )


def require_case_access(actor: ActorContext, case: HelpRequest) -> None:
    """Raise ForbiddenError unless the case is within the actor's scope."""
    enforce(check_case_access(actor, case))


def check_case_mutation(
    actor: ActorContext,
    case: HelpRequest,
    capability: Union[str, Capability]
) -> AuthorizationResult:
    """
    Check if the actor may assign or update a specific case.

    Args:
        actor: Actor context
        case: Case to mutate
        capability: case:assign or case:update_status

    Returns:
        AuthorizationResult combining the capability and scope checks
    """
    capability_check = check_capability(actor, capability)
    if not capability_check.allowed:
        return capability_check

    return check_case_access(actor, case)


def case_affordances(actor: ActorContext, case: HelpRequest) -> Dict[str, bool]:
    """Which case mutations to advertise to the actor."""
    return {
        "assign": check_case_mutation(actor, case, Capability.CASE_ASSIGN).allowed,
        "status": check_case_mutation(actor, case, Capability.CASE_UPDATE_STATUS).allowed,
    }
