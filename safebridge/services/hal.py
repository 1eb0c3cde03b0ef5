# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.

Affordance links are only emitted for mutations the access policy grants, so
a client never sees a control it may not use.
"""

from typing import Any, Dict, List, Optional, Sequence

from ..models.base import BaseEntity
from ..models.entities import ActorContext, HelpRequest
from ..models.enums import DirectoryCollection
from ..models.responses import HalLink
from ..domain import access

PROBLEM_BASE_URL = "https://safebridge.example.org/problems"

COLLECTION_PATHS = {
    DirectoryCollection.RESOURCES: "/api/resources",
    DirectoryCollection.LEGAL: "/api/legal",
    DirectoryCollection.USERS: "/api/users",
}


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        return HalLink(
            href=f"{self.base_url}/{path.lstrip('/')}",
            method=method,
            type=content_type,
            title=title
        )

    def build_action_link(
        self,
        resource_path: str,
        action: str,
        method: str = "POST",
        title: Optional[str] = None
    ) -> HalLink:
        """Build action link for a resource."""
        return self.build_link(
            f"{resource_path}/{action}",
            method=method,
            content_type="application/json",
            title=title or action.title()
        )


class AffordanceLinkBuilder:
    """Builder for conditional affordance links based on the access policy."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def build_case_affordances(self, case: HelpRequest, actor: ActorContext) -> Dict[str, HalLink]:
        """Build conditional affordance links for a case."""
        base_path = f"/api/cases/{case.id}"
        links = {
            'self': self.link_builder.build_link(base_path, title="Self"),
            'collection': self.link_builder.build_link("/api/cases", title="Collection"),
        }

        allowed = access.case_affordances(actor, case)
        if allowed["assign"]:
            links['assign'] = self.link_builder.build_action_link(
                base_path, "assign", title="Assign counsellor"
            )
        if allowed["status"]:
            links['status'] = self.link_builder.build_action_link(
                base_path, "status", title="Update status"
            )

        return links

    def build_entry_affordances(
        self,
        collection: DirectoryCollection,
        entry_id: str,
        actor: ActorContext
    ) -> Dict[str, HalLink]:
        """Build conditional affordance links for a directory entry."""
        collection_path = COLLECTION_PATHS[collection]
        base_path = f"{collection_path}/{entry_id}"
        links = {
            'collection': self.link_builder.build_link(collection_path, title="Collection"),
        }

        if access.check_collection_access(actor, collection, "update").allowed:
            links['edit'] = self.link_builder.build_link(
                base_path,
                method="PATCH",
                content_type="application/json",
                title="Edit entry"
            )

        if access.check_collection_access(actor, collection, "delete").allowed:
            links['delete'] = self.link_builder.build_link(
                base_path,
                method="DELETE",
                title="Delete entry"
            )

        return links


class HalResponseBuilder:
    """Main HAL response builder."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.affordance_builder = AffordanceLinkBuilder(base_url)

    @staticmethod
    def _dump_links(links: Dict[str, HalLink]) -> Dict[str, Dict[str, Any]]:
        return {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}

    def build_resource_response(self, data: Dict[str, Any], links: Dict[str, HalLink]) -> Dict[str, Any]:
        """Attach links to a resource representation."""
        response = dict(data)
        response['_links'] = self._dump_links(links)
        return response

    def build_collection_response(
        self,
        items: List[Dict[str, Any]],
        collection_path: str,
        embedded_name: str,
        extra_links: Optional[Dict[str, HalLink]] = None
    ) -> Dict[str, Any]:
        """Build a HAL collection response."""
        links = {'self': self.link_builder.build_link(collection_path, title="Self")}
        links.update(extra_links or {})

        return {
            'total': len(items),
            '_links': self._dump_links(links),
            '_embedded': {embedded_name: items}
        }

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response."""
        error_response = {
            'type': f"{PROBLEM_BASE_URL}/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['validation_errors'] = validation_errors

        links = {}
        if error_type == "insufficient-permissions":
            links['session'] = self.link_builder.build_link(
                "/api/session",
                title="Views and capabilities of the current role"
            )
        if links:
            error_response['_links'] = self._dump_links(links)

        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_case(self, case: HelpRequest, actor: ActorContext) -> Dict[str, Any]:
        """Format a case with HAL links."""
        links = self.builder.affordance_builder.build_case_affordances(case, actor)
        return self.builder.build_resource_response(case.to_document(), links)

    def format_case_collection(self, cases: Sequence[HelpRequest], actor: ActorContext) -> Dict[str, Any]:
        """Format a case collection with HAL links."""
        items = [self.format_case(case, actor) for case in cases]
        extra = {}
        if actor.has_capability("case:create"):
            extra['create'] = self.builder.link_builder.build_link(
                "/api/cases", method="POST", content_type="application/json", title="Request help"
            )
        return self.builder.build_collection_response(items, "/api/cases", "cases", extra)

    def format_entry(
        self,
        collection: DirectoryCollection,
        entry: BaseEntity,
        actor: ActorContext
    ) -> Dict[str, Any]:
        """Format a directory entry with HAL links."""
        collection = DirectoryCollection(collection)
        links = {
            'self': self.builder.link_builder.build_link(
                f"{COLLECTION_PATHS[collection]}/{entry.id}", title="Self"
            )
        }
        links.update(self.builder.affordance_builder.build_entry_affordances(collection, entry.id, actor))
        return self.builder.build_resource_response(entry.to_document(), links)

    def format_entry_collection(
        self,
        collection: DirectoryCollection,
        entries: Sequence[BaseEntity],
        actor: ActorContext
    ) -> Dict[str, Any]:
        """Format a directory collection with HAL links."""
        collection = DirectoryCollection(collection)
        items = [self.format_entry(collection, entry, actor) for entry in entries]
        extra = {}
        if access.check_collection_access(actor, collection, "create").allowed:
            extra['create'] = self.builder.link_builder.build_link(
                COLLECTION_PATHS[collection],
                method="POST",
                content_type="application/json",
                title="Add entry"
            )
        return self.builder.build_collection_response(
            items, COLLECTION_PATHS[collection], collection.value, extra
        )

    def format_session(self, data: Dict[str, Any], actor: ActorContext) -> Dict[str, Any]:
        """Format the session document with navigation links for the actor's role."""
        link_builder = self.builder.link_builder
        links = {
            'self': link_builder.build_link("/api/session", title="Self"),
            'overview': link_builder.build_link("/api/overview", title="Overview"),
            'resources': link_builder.build_link("/api/resources", title="Resources"),
            'legal': link_builder.build_link("/api/legal", title="Legal rights"),
        }

        if actor.has_any_capability(["case:read_mine", "case:read_all"]):
            links['cases'] = link_builder.build_link("/api/cases", title="Cases")

        if actor.has_capability("case:create"):
            links['request_help'] = link_builder.build_link(
                "/api/cases", method="POST", content_type="application/json", title="Request help"
            )

        if actor.has_any_capability(["user:create", "user:delete"]):
            links['users'] = link_builder.build_link("/api/users", title="Users")

        if actor.has_capability("data:clear"):
            links['quick_exit'] = link_builder.build_link(
                "/api/data/clear", method="POST", title="Clear all data and leave"
            )

        return self.builder.build_resource_response(data, links)

    def format_overview(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Format a role overview."""
        links = {
            'self': self.builder.link_builder.build_link("/api/overview", title="Self"),
            'session': self.builder.link_builder.build_link("/api/session", title="Session"),
        }
        return self.builder.build_resource_response(data, links)

    def format_error(self, error_type: str, title: str, status: int, detail: str, instance: str,
                     validation_errors: Optional[List[str]] = None) -> Dict[str, Any]:
        """Format an error response."""
        return self.builder.build_error_response(
            error_type, title, status, detail, instance, validation_errors
        )


def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
