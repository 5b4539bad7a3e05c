"""Actor extraction for the HTTP surface.

Credentials are verified upstream by the identity gateway, which forwards the
caller's id and role as headers. Nothing here is cached between requests.
"""

from typing import Optional

from fastapi import Header, HTTPException

from app.services.authorization import Actor, Role


def get_current_actor(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Role = Header(Role.USER),
) -> Actor:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return Actor(id=x_user_id, role=x_user_role)
