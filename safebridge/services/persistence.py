# SPDX-License-Identifier: Apache-2.0

"""
Snapshot persistence for the domain state.

The whole domain graph is stored as one JSON blob under a single key. This
module provides the blob codec with schema versioning and the storage
backends: in-memory, local file and Redis.
"""

import os
import json
import tempfile
import logging
from typing import Any, Dict, Optional
from pydantic import ValidationError as PydanticValidationError
import redis
from opentelemetry import trace

from ..models.entities import CURRENT_SCHEMA_VERSION, DomainState
from ..domain.errors import ValidationError, from_pydantic

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

STORAGE_KEY = "fedf_ps03_state_v1"

COLLECTION_KEYS = ("users", "resources", "legal", "helpRequests", "sessions")

# Browser snapshots carry no version field
LEGACY_SCHEMA_VERSION = 0


def migrate_document(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a persisted blob up to the current schema version.

    Args:
        raw: Decoded JSON blob

    Returns:
        Blob in the current schema

    Raises:
        ValidationError: If the blob is not an object or comes from a newer schema
    """
    if not isinstance(raw, dict):
        raise ValidationError("Snapshot must be a JSON object")

    version = raw.get("schemaVersion", LEGACY_SCHEMA_VERSION)
    if not isinstance(version, int) or isinstance(version, bool):
        raise ValidationError(f"Invalid snapshot schema version: {version!r}")

    if version > CURRENT_SCHEMA_VERSION:
        raise ValidationError(
            f"Snapshot schema version {version} is newer than supported version {CURRENT_SCHEMA_VERSION}"
        )

    document = dict(raw)

    if version == LEGACY_SCHEMA_VERSION:
        # Legacy role/resource labels are normalized by the entity validators
        for key in COLLECTION_KEYS:
            if document.get(key) is None:
                document[key] = []
        logger.info(
            "Migrated legacy snapshot",
            extra={"from_version": version, "to_version": CURRENT_SCHEMA_VERSION}
        )

    document["schemaVersion"] = CURRENT_SCHEMA_VERSION
    return document


def decode_snapshot(raw: Dict[str, Any]) -> DomainState:
    """
    Build a snapshot from a persisted blob.

    Raises:
        ValidationError: If the blob cannot be migrated or holds invalid entities
    """
    document = migrate_document(raw)
    try:
        return DomainState.model_validate(document)
    except PydanticValidationError as e:
        raise from_pydantic(e, "Invalid snapshot") from e


def encode_snapshot(state: DomainState) -> Dict[str, Any]:
    """Serialize a snapshot to its persisted blob."""
    return state.to_document()


class SnapshotBackend:
    """Storage for the single snapshot blob."""

    name = "abstract"

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored blob, or None when nothing is stored."""
        raise NotImplementedError

    def save(self, blob: Dict[str, Any]) -> bool:
        """Replace the stored blob. Returns True on success."""
        raise NotImplementedError

    def clear(self) -> bool:
        """Discard the stored blob. Returns True on success."""
        raise NotImplementedError


class MemorySnapshotBackend(SnapshotBackend):
    """Keeps the blob in process memory as serialized JSON."""

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._raw = json.dumps(initial) if initial is not None else None

    def load(self) -> Optional[Dict[str, Any]]:
        return json.loads(self._raw) if self._raw is not None else None

    def save(self, blob: Dict[str, Any]) -> bool:
        self._raw = json.dumps(blob)
        return True

    def clear(self) -> bool:
        self._raw = None
        return True


class FileSnapshotBackend(SnapshotBackend):
    """Stores the blob in a local JSON file, replaced atomically on save."""

    name = "file"

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Optional[Dict[str, Any]]:
        with tracer.start_as_current_span("snapshot.file.load") as span:
            span.set_attribute("snapshot.path", self.path)
            if not os.path.exists(self.path):
                span.set_attribute("snapshot.found", False)
                return None

            with open(self.path, "r", encoding="utf-8") as handle:
                blob = json.load(handle)

            span.set_attribute("snapshot.found", True)
            return blob

    def save(self, blob: Dict[str, Any]) -> bool:
        with tracer.start_as_current_span("snapshot.file.save") as span:
            span.set_attribute("snapshot.path", self.path)
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)

            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".snapshot-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(blob, handle)
                os.replace(tmp_path, self.path)
            except OSError:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

            return True

    def clear(self) -> bool:
        if not os.path.exists(self.path):
            return True
        try:
            os.unlink(self.path)
        except OSError as e:
            logger.error(f"Snapshot file {self.path} could not be removed: {str(e)}")
            return False

        logger.info("Snapshot file removed", extra={"path": self.path})
        return True


class RedisSnapshotBackend(SnapshotBackend):
    """Stores the blob under a single Redis key."""

    name = "redis"

    def __init__(self, client=None, redis_url: Optional[str] = None, key: str = STORAGE_KEY):
        self.key = key
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")
        self.client = client if client is not None else redis.from_url(self.redis_url, decode_responses=True)

    def load(self) -> Optional[Dict[str, Any]]:
        with tracer.start_as_current_span("snapshot.redis.load") as span:
            span.set_attribute("redis.key", self.key)
            try:
                raw = self.client.get(self.key)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                raise OSError(f"Redis snapshot load failed for key {self.key}: {str(e)}") from e

            if raw is None:
                span.set_attribute("snapshot.found", False)
                return None

            span.set_attribute("snapshot.found", True)
            return json.loads(raw)

    def save(self, blob: Dict[str, Any]) -> bool:
        with tracer.start_as_current_span("snapshot.redis.save") as span:
            span.set_attribute("redis.key", self.key)
            try:
                result = self.client.set(self.key, json.dumps(blob))
                span.set_attribute("redis.result", "success")
                return bool(result)
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis snapshot save failed for key {self.key}: {str(e)}")
                return False

    def clear(self) -> bool:
        with tracer.start_as_current_span("snapshot.redis.clear") as span:
            span.set_attribute("redis.key", self.key)
            try:
                self.client.delete(self.key)
                span.set_attribute("redis.result", "success")
                return True
            except redis.RedisError as e:
                span.set_attribute("redis.result", "error")
                logger.error(f"Redis snapshot clear failed for key {self.key}: {str(e)}")
                return False


def create_backend(
    kind: str = "memory",
    path: Optional[str] = None,
    redis_url: Optional[str] = None,
    key: str = STORAGE_KEY
) -> SnapshotBackend:
    """
    Create a snapshot backend from configuration.

    Args:
        kind: "memory", "file" or "redis"
        path: File path for the file backend
        redis_url: Connection URL for the Redis backend
        key: Storage key for the Redis backend

    Returns:
        Configured SnapshotBackend

    Raises:
        ValueError: If the backend kind is unknown or a file path is missing
    """
    kind = (kind or "memory").lower()

    if kind == "memory":
        return MemorySnapshotBackend()

    if kind == "file":
        if not path:
            raise ValueError("SNAPSHOT_PATH is required for the file backend")
        return FileSnapshotBackend(path)

    if kind == "redis":
        return RedisSnapshotBackend(redis_url=redis_url, key=key)

    raise ValueError(f"Unknown snapshot backend: {kind}")
