# SPDX-License-Identifier: Apache-2.0

"""
Help request lifecycle endpoints.

This module implements intake, listing, detail view, assignment and status
updates for help requests. Every handler runs the access policy before the
lifecycle engine.
"""

from flask import current_app, jsonify, request
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import logging

from ..domain import access
from ..domain import cases as case_domain
from ..middleware.role_context import current_actor
from ..models.enums import Capability
from ..models.requests import AssignCaseRequest, CasePath, CreateHelpRequest, UpdateCaseStatusRequest
from ..utils.request import RequestParser

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

cases_tag = Tag(name="Cases", description="Help request lifecycle")
cases_bp = APIBlueprint(
    'cases',
    __name__,
    url_prefix='/api/cases',
    abp_tags=[cases_tag]
)


@cases_bp.get('')
def list_cases():
    """
    List help requests visible to the current role.

    Counsellors see the cases assigned to them, legal advisors see all cases.
    Optional filters: ``status`` (exact lifecycle status) and ``limit`` (most
    recent N).
    """
    actor = current_actor()

    with tracer.start_as_current_span(
        "cases.list",
        attributes={"actor.role": actor.role, "operation": "list_cases"}
    ) as span:
        visible = access.scope_cases(actor, current_app.state_store.snapshot.help_requests)

        status_filter = request.args.get('status')
        if status_filter:
            status = case_domain.parse_status(status_filter)
            visible = tuple(case for case in visible if case.status == status.value)
            span.set_attribute("filter.status", status.value)

        limit = RequestParser.get_limit_param()
        if limit is not None:
            visible = case_domain.recent_cases(visible, limit)

        span.set_attribute("cases.count", len(visible))

        return jsonify(current_app.hal_formatter.format_case_collection(visible, actor))


@cases_bp.post('')
def create_case():
    """
    Submit a help request.

    All fields are optional; the case starts as New and is placed first.
    """
    actor = current_actor()

    with tracer.start_as_current_span(
        "cases.create",
        attributes={"actor.role": actor.role, "operation": "create_case"}
    ) as span:
        access.require_capability(actor, Capability.CASE_CREATE)

        draft = RequestParser.parse_body(CreateHelpRequest)
        case = current_app.state_store.create_case(draft)

        span.set_attributes({
            "case.id": case.id,
            "case.preassigned": bool(case.assigned_to)
        })

        # Survivor details stay out of the logs
        logger.info(
            "Help request submitted",
            extra={"case_id": case.id, "preassigned": bool(case.assigned_to)}
        )

        return jsonify(current_app.hal_formatter.format_case(case, actor)), 201


@cases_bp.get('/<case_id>')
def get_case(path: CasePath):
    """Get a single help request with its progress log."""
    actor = current_actor()

    with tracer.start_as_current_span(
        "cases.get",
        attributes={"actor.role": actor.role, "case.id": path.case_id}
    ):
        case = case_domain.find_case(current_app.state_store.snapshot.help_requests, path.case_id)
        access.require_case_access(actor, case)

        return jsonify(current_app.hal_formatter.format_case(case, actor))


@cases_bp.post('/<case_id>/assign')
def assign_case(path: CasePath):
    """
    Assign a help request to a counsellor.

    The status becomes Assigned whatever it was before. An empty
    ``counsellorId`` clears the assignee.
    """
    actor = current_actor()

    with tracer.start_as_current_span(
        "cases.assign",
        attributes={"actor.role": actor.role, "case.id": path.case_id, "operation": "assign_case"}
    ) as span:
        body = RequestParser.parse_body(AssignCaseRequest)
        store = current_app.state_store

        with store.transaction() as snapshot:
            case = case_domain.find_case(snapshot.help_requests, path.case_id)
            result = access.check_case_mutation(actor, case, Capability.CASE_ASSIGN)
            if not result.allowed:
                span.set_status(Status(StatusCode.ERROR, "Forbidden"))
                logger.warning(
                    "Case assignment denied",
                    extra={"case_id": case.id, "role": actor.role, "reason": result.reason}
                )
                access.enforce(result)

            updated = store.assign_case(case.id, body.counsellor_id)

        span.set_attribute("case.assigned", bool(updated.assigned_to))
        logger.info(
            "Case assigned",
            extra={
                "case_id": updated.id,
                "assigned_to": updated.assigned_to,
                "previous_status": case.status,
                "role": actor.role
            }
        )

        return jsonify(current_app.hal_formatter.format_case(updated, actor))


@cases_bp.post('/<case_id>/status')
def update_case_status(path: CasePath):
    """
    Change a help request's status and log a progress note.

    The note is stored even when empty; the newest entry comes first.
    """
    actor = current_actor()

    with tracer.start_as_current_span(
        "cases.update_status",
        attributes={"actor.role": actor.role, "case.id": path.case_id, "operation": "update_case_status"}
    ) as span:
        body = RequestParser.parse_body(UpdateCaseStatusRequest)
        new_status = case_domain.parse_status(body.status)
        store = current_app.state_store

        with store.transaction() as snapshot:
            case = case_domain.find_case(snapshot.help_requests, path.case_id)
            result = access.check_case_mutation(actor, case, Capability.CASE_UPDATE_STATUS)
            if not result.allowed:
                span.set_status(Status(StatusCode.ERROR, "Forbidden"))
                logger.warning(
                    "Case status update denied",
                    extra={"case_id": case.id, "role": actor.role, "reason": result.reason}
                )
                access.enforce(result)

            updated = store.update_case_status(case.id, new_status, body.note)

        span.set_attributes({
            "case.previous_status": case.status,
            "case.status": updated.status
        })
        logger.info(
            "Case status updated",
            extra={
                "case_id": updated.id,
                "previous_status": case.status,
                "status": updated.status,
                "updates": len(updated.updates),
                "role": actor.role
            }
        )

        return jsonify(current_app.hal_formatter.format_case(updated, actor))
