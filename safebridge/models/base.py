# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base entity models with common fields and validation.
"""

from datetime import datetime, timezone
from typing import Any, Dict
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from bson import ObjectId


def generate_object_id() -> str:
    """Generate a new ObjectId as string."""
    return str(ObjectId())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseEntity(BaseModel):
    """Base entity for all domain objects held in a snapshot."""

    model_config = ConfigDict(
        # Allow population by field name or camelCase alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        # Persisted documents use camelCase keys
        alias_generator=to_camel,
        # Entities are never mutated in place
        frozen=True
    )

    id: str = Field(default_factory=generate_object_id, description="Unique identifier")

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the JSON-compatible persisted shape."""
        return self.model_dump(mode="json", by_alias=True)


class BaseDraft(BaseModel):
    """Base model for create/update request bodies."""

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        alias_generator=to_camel,
        extra="ignore"
    )
