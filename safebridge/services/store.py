# SPDX-License-Identifier: Apache-2.0

"""
Process-wide state store.

The store owns the current immutable DomainState. Mutations run one at a time
behind a single lock: the domain function computes a new snapshot from the
current one, the store persists the blob, commits the snapshot and hands it
to subscribers. A mutation or save that raises leaves the previous snapshot
in place.
"""

import threading
import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, List, Optional, Tuple, Union
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ..models.base import BaseEntity
from ..models.entities import DomainState, HelpRequest
from ..models.enums import CaseStatus, DirectoryCollection
from ..domain import cases as case_domain
from ..domain import directory as directory_domain
from ..domain.errors import SafeBridgeError, ValidationError
from .persistence import MemorySnapshotBackend, SnapshotBackend, decode_snapshot, encode_snapshot
from .seed import seed_state

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

Mutation = Callable[[DomainState], Tuple[DomainState, Any]]
Listener = Callable[[DomainState], None]


class StateStore:
    """
    Single owner of the domain snapshot.

    Reads return the current snapshot without copying; it is immutable.
    """

    def __init__(
        self,
        backend: Optional[SnapshotBackend] = None,
        seed_on_empty: bool = True,
        initial: Optional[DomainState] = None
    ):
        """
        Initialize the store and load the persisted snapshot.

        Args:
            backend: Snapshot storage (in-memory when omitted)
            seed_on_empty: Start from demo data when nothing is stored
            initial: Explicit starting snapshot, skips loading
        """
        self.backend = backend or MemorySnapshotBackend()
        self.seed_on_empty = seed_on_empty
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._state = initial if initial is not None else self._load()

    def _startup_state(self) -> DomainState:
        return seed_state() if self.seed_on_empty else DomainState()

    def _load(self) -> DomainState:
        with tracer.start_as_current_span("store.load") as span:
            span.set_attribute("store.backend", self.backend.name)
            try:
                raw = self.backend.load()
            except (OSError, ValueError) as e:
                logger.warning(
                    "Persisted snapshot unreadable, starting fresh",
                    extra={"backend": self.backend.name, "error": str(e)}
                )
                return self._startup_state()

            if raw is None:
                span.set_attribute("store.source", "startup")
                return self._startup_state()

            try:
                state = decode_snapshot(raw)
            except ValidationError as e:
                logger.warning(
                    "Persisted snapshot invalid, starting fresh",
                    extra={
                        "backend": self.backend.name,
                        "error": e.message,
                        "validation_errors": e.validation_errors
                    }
                )
                return self._startup_state()

            span.set_attribute("store.source", "persisted")
            return state

    @property
    def snapshot(self) -> DomainState:
        """Current snapshot."""
        return self._state

    @contextmanager
    def transaction(self) -> Iterator[DomainState]:
        """
        Hold the store lock for a check followed by mutations.

        The yielded snapshot stays current until the block exits; mutations
        issued inside the block re-enter the same lock.
        """
        with self._lock:
            yield self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a callback receiving every committed snapshot.

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _persist(self, state: DomainState) -> None:
        if not self.backend.save(encode_snapshot(state)):
            logger.error(
                "Snapshot could not be persisted",
                extra={"backend": self.backend.name}
            )

    def _broadcast(self, state: DomainState) -> None:
        for listener in list(self._listeners):
            listener(state)

    def apply(self, operation: str, mutation: Mutation) -> Any:
        """
        Run a mutation against the current snapshot and commit the result.

        Args:
            operation: Operation name for logs and traces
            mutation: Function returning (new snapshot, result)

        Returns:
            The mutation's result
        """
        with tracer.start_as_current_span("store.apply") as span:
            span.set_attribute("store.operation", operation)

            with self._lock:
                try:
                    new_state, result = mutation(self._state)
                except SafeBridgeError as e:
                    span.set_status(Status(StatusCode.ERROR, e.message))
                    span.set_attribute("store.result", e.error_type)
                    raise

                self._persist(new_state)
                self._state = new_state

            span.set_attribute("store.result", "committed")
            logger.info("Snapshot mutation committed", extra={"operation": operation})

            self._broadcast(new_state)
            return result

    # Directory

    def add_entry(self, collection: Union[str, DirectoryCollection], draft) -> BaseEntity:
        """Add a directory entry and return it."""
        collection = DirectoryCollection(collection)

        def mutation(state: DomainState):
            entries = directory_domain.add_entry(state.collection(collection), collection, draft)
            return state.replace(**{collection.value: entries}), entries[0]

        return self.apply(f"{collection.value}.add", mutation)

    def update_entry(self, collection: Union[str, DirectoryCollection], entry_id: str, changes) -> BaseEntity:
        """Update a directory entry and return the new version."""
        collection = DirectoryCollection(collection)

        def mutation(state: DomainState):
            entries = directory_domain.update_entry(
                state.collection(collection), collection, entry_id, changes
            )
            return state.replace(**{collection.value: entries}), directory_domain.find_entry(entries, entry_id)

        return self.apply(f"{collection.value}.update", mutation)

    def remove_entry(self, collection: Union[str, DirectoryCollection], entry_id: str) -> bool:
        """Remove a directory entry. Returns False when the id was unknown."""
        collection = DirectoryCollection(collection)

        def mutation(state: DomainState):
            before = state.collection(collection)
            entries = directory_domain.remove_entry(before, entry_id)
            return state.replace(**{collection.value: entries}), len(entries) != len(before)

        return self.apply(f"{collection.value}.remove", mutation)

    # Cases

    def create_case(self, draft=None) -> HelpRequest:
        """Open a help request and return it."""
        def mutation(state: DomainState):
            result = case_domain.create_case(state.help_requests, draft)
            return state.replace(help_requests=result.cases), result.case

        return self.apply("cases.create", mutation)

    def assign_case(self, case_id: str, counsellor_id: Optional[str]) -> HelpRequest:
        """Assign a case and return the updated case."""
        def mutation(state: DomainState):
            result = case_domain.assign_case(state.help_requests, case_id, counsellor_id)
            return state.replace(help_requests=result.cases), result.case

        return self.apply("cases.assign", mutation)

    def update_case_status(
        self,
        case_id: str,
        new_status: Union[str, CaseStatus],
        note: Optional[str] = ""
    ) -> HelpRequest:
        """Change a case's status, log the note and return the updated case."""
        def mutation(state: DomainState):
            result = case_domain.update_case_status(state.help_requests, case_id, new_status, note)
            return state.replace(help_requests=result.cases), result.case

        return self.apply("cases.update_status", mutation)

    # Data wipe

    def clear_all(self) -> DomainState:
        """
        Discard the persisted blob and reset to the start-up snapshot.

        Memory is reset even when the backend fails to discard the blob.

        Nothing is written back, so the next process start behaves like a
        first run.
        """
        with tracer.start_as_current_span("store.clear_all") as span:
            span.set_attribute("store.backend", self.backend.name)
            with self._lock:
                try:
                    cleared = self.backend.clear()
                finally:
                    self._state = self._startup_state()
                state = self._state

            if not cleared:
                span.set_status(Status(StatusCode.ERROR, "Persisted snapshot not cleared"))
                logger.error("Persisted snapshot could not be cleared", extra={"backend": self.backend.name})
            else:
                logger.warning("All persisted data cleared", extra={"backend": self.backend.name})
            self._broadcast(state)
            return state
