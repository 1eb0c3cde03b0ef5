# SPDX-License-Identifier: Apache-2.0

"""
Directory endpoints.

Resources, legal entries and operator users share the same list, add, edit
and remove operations; the access policy decides which role may mutate
which collection.
"""

from flask import current_app, jsonify
from flask_openapi3 import APIBlueprint, Tag
from opentelemetry import trace
import logging
from typing import Type

from pydantic import BaseModel

from ..domain import access
from ..domain import directory as directory_domain
from ..middleware.role_context import current_actor
from ..models.enums import Capability, DirectoryCollection
from ..models.requests import (
    CreateResourceRequest, UpdateResourceRequest,
    CreateLegalEntryRequest, UpdateLegalEntryRequest,
    CreateUserRequest, EntryPath
)
from ..utils.request import RequestParser

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

resources_tag = Tag(name="Resources", description="Helplines, shelters and other support services")
legal_tag = Tag(name="Legal", description="Legal rights and statutes")
users_tag = Tag(name="Users", description="Operator directory")

resources_bp = APIBlueprint('resources', __name__, url_prefix='/api/resources', abp_tags=[resources_tag])
legal_bp = APIBlueprint('legal', __name__, url_prefix='/api/legal', abp_tags=[legal_tag])
users_bp = APIBlueprint('users', __name__, url_prefix='/api/users', abp_tags=[users_tag])


def _list_entries(collection: DirectoryCollection):
    actor = current_actor()

    with tracer.start_as_current_span(
        f"{collection.value}.list",
        attributes={"actor.role": actor.role, "operation": "list"}
    ) as span:
        entries = current_app.state_store.snapshot.collection(collection)
        span.set_attribute("directory.count", len(entries))

        return jsonify(current_app.hal_formatter.format_entry_collection(collection, entries, actor))


def _add_entry(collection: DirectoryCollection, model: Type[BaseModel]):
    actor = current_actor()

    with tracer.start_as_current_span(
        f"{collection.value}.add",
        attributes={"actor.role": actor.role, "operation": "add"}
    ) as span:
        access.enforce(access.check_collection_access(actor, collection, "create"))

        draft = RequestParser.parse_body(model).model_dump()
        entry = current_app.state_store.add_entry(collection, draft)

        span.set_attribute("entry.id", entry.id)
        logger.info(
            "Directory entry added",
            extra={"collection": collection.value, "entry_id": entry.id, "role": actor.role}
        )

        return jsonify(current_app.hal_formatter.format_entry(collection, entry, actor)), 201


def _update_entry(collection: DirectoryCollection, entry_id: str, model: Type[BaseModel]):
    actor = current_actor()

    with tracer.start_as_current_span(
        f"{collection.value}.update",
        attributes={"actor.role": actor.role, "operation": "update", "entry.id": entry_id}
    ):
        access.enforce(access.check_collection_access(actor, collection, "update"))

        changes = RequestParser.parse_body(model).model_dump(exclude_none=True)
        entry = current_app.state_store.update_entry(collection, entry_id, changes)

        logger.info(
            "Directory entry updated",
            extra={
                "collection": collection.value,
                "entry_id": entry_id,
                "fields": sorted(changes),
                "role": actor.role
            }
        )

        return jsonify(current_app.hal_formatter.format_entry(collection, entry, actor))


def _remove_entry(collection: DirectoryCollection, entry_id: str):
    actor = current_actor()

    with tracer.start_as_current_span(
        f"{collection.value}.remove",
        attributes={"actor.role": actor.role, "operation": "remove", "entry.id": entry_id}
    ) as span:
        access.enforce(access.check_collection_access(actor, collection, "delete"))

        removed = current_app.state_store.remove_entry(collection, entry_id)
        span.set_attribute("entry.removed", removed)

        logger.info(
            "Directory entry removed",
            extra={
                "collection": collection.value,
                "entry_id": entry_id,
                "removed": removed,
                "role": actor.role
            }
        )

        return '', 204


# Resources

@resources_bp.get('')
def list_resources():
    """List support resources, newest first."""
    return _list_entries(DirectoryCollection.RESOURCES)


@resources_bp.post('')
def create_resource():
    """Add a support resource."""
    return _add_entry(DirectoryCollection.RESOURCES, CreateResourceRequest)


@resources_bp.patch('/<entry_id>')
def update_resource(path: EntryPath):
    """Edit a support resource."""
    return _update_entry(DirectoryCollection.RESOURCES, path.entry_id, UpdateResourceRequest)


@resources_bp.delete('/<entry_id>')
def delete_resource(path: EntryPath):
    """Remove a support resource. Unknown identifiers are ignored."""
    return _remove_entry(DirectoryCollection.RESOURCES, path.entry_id)


# Legal entries

@legal_bp.get('')
def list_legal_entries():
    """List legal rights entries, newest first."""
    return _list_entries(DirectoryCollection.LEGAL)


@legal_bp.post('')
def create_legal_entry():
    """Add a legal rights entry."""
    return _add_entry(DirectoryCollection.LEGAL, CreateLegalEntryRequest)


@legal_bp.patch('/<entry_id>')
def update_legal_entry(path: EntryPath):
    """Edit a legal rights entry."""
    return _update_entry(DirectoryCollection.LEGAL, path.entry_id, UpdateLegalEntryRequest)


@legal_bp.delete('/<entry_id>')
def delete_legal_entry(path: EntryPath):
    """Remove a legal rights entry. Unknown identifiers are ignored."""
    return _remove_entry(DirectoryCollection.LEGAL, path.entry_id)


# Users

@users_bp.get('')
def list_users():
    """
    List operator users.

    Only roles that manage users may see the full directory.
    """
    access.enforce(access.check_capabilities(
        current_actor(),
        [Capability.USER_CREATE, Capability.USER_DELETE],
        require_all=False
    ))
    return _list_entries(DirectoryCollection.USERS)


@users_bp.post('')
def create_user():
    """Add an operator user."""
    return _add_entry(DirectoryCollection.USERS, CreateUserRequest)


@users_bp.delete('/<entry_id>')
def delete_user(path: EntryPath):
    """Remove an operator user. Unknown identifiers are ignored."""
    return _remove_entry(DirectoryCollection.USERS, path.entry_id)


@users_bp.get('/counsellors')
def list_counsellors():
    """
    List counsellors that a help request can be routed to.

    Available to every role; only identifiers and display names are returned.
    """
    actor = current_actor()

    with tracer.start_as_current_span("users.counsellors", attributes={"actor.role": actor.role}):
        counsellors = directory_domain.list_counsellors(current_app.state_store.snapshot.users)
        items = [{"id": user.id, "name": user.name} for user in counsellors]

        return jsonify({"total": len(items), "counsellors": items})
