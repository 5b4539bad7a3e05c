"""Authorization policy: pure decisions over an explicitly passed actor."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.services.errors import UnauthorizedError


class Role(str, Enum):
    USER = "user"
    ORGANIZER = "organizer"
    ADMIN = "admin"


class Relation(str, Enum):
    OWNER = "owner"
    ORGANIZER = "organizer"


@dataclass(frozen=True)
class Actor:
    """Verified identity of the caller, supplied by the identity gateway."""

    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def can_access(
    actor: Actor,
    relation: Relation,
    owner_id: Optional[str] = None,
    organizer_id: Optional[str] = None,
) -> bool:
    if actor.is_admin:
        return True
    if relation == Relation.OWNER:
        return owner_id is not None and actor.id == owner_id
    if relation == Relation.ORGANIZER:
        return organizer_id is not None and actor.id == organizer_id
    return False


def require_access(
    actor: Actor,
    relation: Relation,
    owner_id: Optional[str] = None,
    organizer_id: Optional[str] = None,
    message: str = "Not authorized",
) -> None:
    if not can_access(actor, relation, owner_id=owner_id, organizer_id=organizer_id):
        raise UnauthorizedError(message)


def can_publish(actor: Actor) -> bool:
    """Only organizers and admins may create events."""
    return actor.role in (Role.ORGANIZER, Role.ADMIN)
