"""In-process record store, used for tests and local development.

Every write happens under one lock, which makes the conditional update
linearizable for all callers sharing the store instance.
"""

import copy
import threading
import uuid
from typing import Any, Callable, Dict, List, Optional

from app.stores.interfaces import (
    Condition,
    ConditionFailedError,
    DuplicateRecordError,
    Mutation,
    Predicate,
    Record,
    RecordStore,
)


class MemoryRecordStore(RecordStore):
    def __init__(self) -> None:
        self._collections: Dict[str, Dict[str, Record]] = {}
        self._lock = threading.Lock()

    def _collection(self, name: str) -> Dict[str, Record]:
        return self._collections.setdefault(name, {})

    def find_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        with self._lock:
            record = self._collection(collection).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def find_many(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        predicate: Optional[Predicate] = None,
        sort_by: Optional[Callable[[Record], Any]] = None,
        descending: bool = False,
    ) -> List[Record]:
        with self._lock:
            records = [copy.deepcopy(r) for r in self._collection(collection).values()]

        if where:
            records = [
                r for r in records if all(r.get(k) == v for k, v in where.items())
            ]
        if predicate is not None:
            records = [r for r in records if predicate(r)]
        if sort_by is not None:
            records.sort(key=sort_by, reverse=descending)
        return records

    def insert(self, collection: str, record: Record) -> Record:
        item = copy.deepcopy(record)
        item.setdefault("id", str(uuid.uuid4()))

        with self._lock:
            items = self._collection(collection)
            if item["id"] in items:
                raise DuplicateRecordError(collection, item["id"])
            items[item["id"]] = item
            return copy.deepcopy(item)

    def atomic_conditional_update(
        self,
        collection: str,
        record_id: str,
        condition: Condition,
        mutation: Mutation,
    ) -> Record:
        with self._lock:
            items = self._collection(collection)
            current = items.get(record_id)
            if current is None or not condition.holds(current):
                raise ConditionFailedError(collection, record_id)

            updated = mutation.apply(current)
            items[record_id] = updated
            return copy.deepcopy(updated)

    def delete_by_id(self, collection: str, record_id: str) -> bool:
        with self._lock:
            return self._collection(collection).pop(record_id, None) is not None
