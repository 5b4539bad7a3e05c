"""Store interfaces (repository pattern).

Stores must be swappable and return plain record dicts. The booking core only
talks to this contract, so the persistence engine can change without touching
the inventory rules.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

EVENTS = "events"
BOOKINGS = "bookings"

Record = Dict[str, Any]
Predicate = Callable[[Record], bool]


class StoreError(Exception):
    """Base class for record store failures."""


class ConditionFailedError(StoreError):
    """Raised when an atomic conditional update's guard does not hold."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"Condition failed for {collection}/{record_id}")
        self.collection = collection
        self.record_id = record_id


class DuplicateRecordError(StoreError):
    """Raised when inserting a record whose id already exists."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"Record {collection}/{record_id} already exists")
        self.collection = collection
        self.record_id = record_id


class StoreUnavailableError(StoreError):
    """Transient I/O failure talking to the backing store."""


@dataclass(frozen=True)
class Clause:
    field: str
    op: str  # one of "gte", "eq", "ne"
    value: Any

    def holds(self, record: Record) -> bool:
        current = record.get(self.field)
        if self.op == "gte":
            return current is not None and current >= self.value
        if self.op == "eq":
            return current == self.value
        if self.op == "ne":
            return current != self.value
        raise ValueError(f"Unknown condition operator: {self.op}")


@dataclass(frozen=True)
class Condition:
    """Conjunction of clauses; the record must also exist."""

    clauses: tuple = ()

    @classmethod
    def exists(cls) -> "Condition":
        return cls()

    def gte(self, field_name: str, value: Any) -> "Condition":
        return Condition(self.clauses + (Clause(field_name, "gte", value),))

    def eq(self, field_name: str, value: Any) -> "Condition":
        return Condition(self.clauses + (Clause(field_name, "eq", value),))

    def ne(self, field_name: str, value: Any) -> "Condition":
        return Condition(self.clauses + (Clause(field_name, "ne", value),))

    def holds(self, record: Record) -> bool:
        return all(clause.holds(record) for clause in self.clauses)


@dataclass(frozen=True)
class Mutation:
    """Field assignments and numeric increments applied in one write."""

    sets: Dict[str, Any] = field(default_factory=dict)
    increments: Dict[str, int] = field(default_factory=dict)

    def apply(self, record: Record) -> Record:
        updated = dict(record)
        updated.update(self.sets)
        for name, amount in self.increments.items():
            updated[name] = updated.get(name, 0) + amount
        return updated


class RecordStore(ABC):
    """Interface for persistence of events and bookings."""

    @abstractmethod
    def find_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        """Return a record by ID, or None if not found."""
        ...

    @abstractmethod
    def find_many(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        sort_by: Optional[Callable[[Record], Any]] = None,
        descending: bool = False,
    ) -> List[Record]:
        """Return records matching `where` (exact equality) and `predicate`."""
        ...

    @abstractmethod
    def insert(self, collection: str, record: Record) -> Record:
        """Persist a new record, assigning an id when missing.

        Raises:
            DuplicateRecordError: If a record with the same id exists.
        """
        ...

    @abstractmethod
    def atomic_conditional_update(
        self,
        collection: str,
        record_id: str,
        condition: Condition,
        mutation: Mutation,
    ) -> Record:
        """Apply `mutation` only if the record exists and `condition` holds.

        Check and write happen as one atomic step against the store.

        Raises:
            ConditionFailedError: If the record is missing or the guard fails.
        """
        ...

    @abstractmethod
    def delete_by_id(self, collection: str, record_id: str) -> bool:
        """Delete a record, returning whether it existed."""
        ...
