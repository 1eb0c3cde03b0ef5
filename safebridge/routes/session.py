# SPDX-License-Identifier: Apache-2.0

"""
Session, overview and data-wipe endpoints.

The session describes what the selected role may see and do; the overview
returns the role's landing statistics; the data wipe backs the quick-exit
control available to every role.
"""

from flask import current_app, jsonify
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging
from typing import Any, Dict

from ..domain import access
from ..domain import cases as case_domain
from ..domain import directory as directory_domain
from ..middleware.role_context import current_actor
from ..models.entities import ActorContext, DomainState
from ..models.enums import Capability, Role
from ..services.guidance import FEATURED_RESOURCE_COUNT, survivor_guidance

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

session_tag = Tag(name="Session", description="Role selection, overview and quick exit")
session_bp = APIBlueprint('session', __name__, url_prefix='/api', abp_tags=[session_tag])

RECENT_CASES_LIMIT = 5


@session_bp.get('/session')
def get_session():
    """
    Describe the selected role: user, views and capabilities.
    """
    actor = current_actor()

    with tracer.start_as_current_span("session.get", attributes={"actor.role": actor.role}):
        data = {
            "role": actor.role,
            "user": {"id": actor.user_id, "name": actor.name} if actor.name else None,
            "views": [view.value for view in access.views_for_role(actor.role)],
            "capabilities": list(actor.capabilities),
            "quickExitUrl": current_app.config['QUICK_EXIT_URL'],
        }

        return jsonify(current_app.hal_formatter.format_session(data, actor))


def _recent_rows(cases, state: DomainState):
    names = {user.id: user.name for user in state.users}
    rows = []
    for case in case_domain.recent_cases(cases, RECENT_CASES_LIMIT):
        rows.append({
            "id": case.id,
            "createdAt": case.created_at.isoformat(),
            "status": case.status,
            "region": case.region,
            "assignedTo": case.assigned_to,
            "assignedName": names.get(case.assigned_to),
        })
    return rows


def build_overview(actor: ActorContext, state: DomainState) -> Dict[str, Any]:
    """
    Landing statistics for the actor's role.

    Survivors get featured resources and safety guidance, case-handling roles
    get counts over the cases they may see, and admins get directory sizes.
    """
    overview: Dict[str, Any] = {"role": actor.role}

    if actor.role == Role.SURVIVOR:
        overview["featuredResources"] = [
            resource.to_document() for resource in state.resources[:FEATURED_RESOURCE_COUNT]
        ]
        overview.update(survivor_guidance())
        return overview

    if actor.has_any_capability([Capability.CASE_READ_ALL.value, Capability.CASE_READ_MINE.value]):
        visible = access.scope_cases(actor, state.help_requests)
        overview["cases"] = case_domain.summarize_cases(visible)
        overview["recent"] = _recent_rows(visible, state)

    if actor.has_capability(Capability.DIRECTORY_STATS.value):
        overview["counts"] = directory_domain.directory_counts(state)

    return overview


@session_bp.get('/overview')
def get_overview():
    """Role-specific overview statistics."""
    actor = current_actor()

    with tracer.start_as_current_span("session.overview", attributes={"actor.role": actor.role}):
        overview = build_overview(actor, current_app.state_store.snapshot)
        return jsonify(current_app.hal_formatter.format_overview(overview))


@session_bp.post('/data/clear')
def clear_data():
    """
    Quick exit: wipe all persisted data and return the safe exit URL.

    The in-memory state resets to the start-up snapshot.
    """
    actor = current_actor()

    with tracer.start_as_current_span("session.clear_data", attributes={"actor.role": actor.role}):
        access.require_capability(actor, Capability.DATA_CLEAR)

        current_app.state_store.clear_all()

        logger.warning("Quick exit performed", extra={"role": actor.role})

        return jsonify({
            "cleared": True,
            "redirect": current_app.config['QUICK_EXIT_URL']
        })
