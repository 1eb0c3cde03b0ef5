# SPDX-License-Identifier: Apache-2.0

"""
Role context middleware.

The application has no authentication: the caller selects a role and,
optionally, a user, exactly like the role and user selectors of the
single-operator UI. This module turns those request headers into an
ActorContext that the access policy evaluates.
"""

from flask import current_app, g, request
from typing import Any, Dict, Optional
from opentelemetry import trace
import logging

from ..domain import access
from ..domain.errors import ValidationError
from ..models.entities import ActorContext
from ..models.enums import Role

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

ROLE_HEADER = "X-Role"
USER_HEADER = "X-User-Id"


class RoleContextMiddleware:
    """
    Builds actor contexts from the role and user selector headers.
    """

    def __init__(self, state_store):
        """
        Initialize the role context middleware.

        Args:
            state_store: StateStore used to resolve user display names
        """
        self.state_store = state_store

    def extract_role(self) -> Role:
        """
        Extract the selected role from request headers.

        Raises:
            ValidationError: If the header is missing or names an unknown role
        """
        label = request.headers.get(ROLE_HEADER, "").strip()
        if not label:
            raise ValidationError(
                "Role selection required",
                [f"{ROLE_HEADER} header is missing"]
            )

        try:
            return Role(label)
        except ValueError:
            allowed = ", ".join(role.value for role in Role)
            raise ValidationError(
                f"Unknown role: {label}",
                [f"{ROLE_HEADER} must be one of: {allowed}"]
            ) from None

    def get_request_info(self) -> Dict[str, Any]:
        """
        Extract request metadata for the actor context.

        Returns:
            Dictionary with request information
        """
        return {
            "ip_address": request.remote_addr,
            "user_agent": request.headers.get('User-Agent', '')
        }

    def build_actor_context(self) -> ActorContext:
        """
        Build the actor context for the current request.

        Returns:
            ActorContext with the role's capabilities
        """
        with tracer.start_as_current_span("role_context.build") as span:
            role = self.extract_role()
            user_id = request.headers.get(USER_HEADER, "").strip()
            request_info = self.get_request_info()

            actor = access.build_actor_context(
                role,
                user_id,
                self.state_store.snapshot.users,
                ip_address=request_info.get("ip_address"),
                user_agent=request_info.get("user_agent")
            )

            span.set_attributes({
                "actor.role": actor.role,
                "actor.has_user": bool(actor.user_id)
            })

            logger.debug(
                "Actor context built",
                extra={"role": actor.role, "user_id": actor.user_id}
            )

            return actor


def current_actor() -> ActorContext:
    """
    Actor context for the current request, built once per request.

    Returns:
        ActorContext stored on flask.g
    """
    actor: Optional[ActorContext] = getattr(g, "actor_context", None)
    if actor is None:
        actor = current_app.role_context.build_actor_context()
        g.actor_context = actor
    return actor
