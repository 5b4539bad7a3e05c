"""Search predicates for event listing."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from app.stores.interfaces import Record

SEARCHABLE_FIELDS = ("title", "description", "location")


@dataclass(frozen=True)
class EventFilter:
    category: Optional[str] = None
    search: Optional[str] = None

    @classmethod
    def build(cls, category: Optional[str] = None, search: Optional[str] = None) -> "EventFilter":
        # Empty strings from query parameters mean "no filter"
        return cls(category=category or None, search=search or None)

    def where(self) -> Dict[str, Any]:
        """Exact-match part, pushed down to the store"""
        return {"category": self.category} if self.category else {}

    def __call__(self, event: Record) -> bool:
        if self.category and event.get("category") != self.category:
            return False
        if self.search:
            needle = self.search.casefold()
            return any(
                needle in str(event.get(name) or "").casefold()
                for name in SEARCHABLE_FIELDS
            )
        return True


def event_sort_key(event: Record):
    """Ascending by date, then time"""
    return (str(event.get("date", "")), str(event.get("time", "")))
