# backend/services/identity_service.py
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from database.session import get_db
from models.user_model import User
from services.errors import AuthenticationError


@dataclass(frozen=True)
class Actor:
    """The caller of a service operation, passed explicitly to every handler."""
    user_id: str
    roles: FrozenSet[str] = field(default_factory=frozenset)
    email: Optional[str] = None
    full_name: Optional[str] = None

    @property
    def is_buyer(self) -> bool:
        return "buyer" in self.roles

    @property
    def is_seller(self) -> bool:
        return "seller" in self.roles

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles


def actor_for_user(user: User) -> Actor:
    return Actor(
        user_id=user.id,
        roles=frozenset(user.role_names),
        email=user.email,
        full_name=user.full_name,
    )


def resolve_actor(db: Session, user_id: Optional[str]) -> Actor:
    if not user_id:
        raise AuthenticationError("Missing user identity")
    user = db.get(User, user_id.strip())
    if not user:
        raise AuthenticationError("Unknown user")
    return actor_for_user(user)


def get_current_actor(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> Actor:
    """FastAPI dependency: identity comes from the auth proxy in the X-User-Id header."""
    return resolve_actor(db, x_user_id)
