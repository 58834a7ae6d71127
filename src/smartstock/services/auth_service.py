from __future__ import annotations

import logging
import uuid
from typing import Optional

from smartstock.domain.errors import AuthorizationError
from smartstock.domain.models import Role, User
from smartstock.repositories.storage import CollectionStore

log = logging.getLogger(__name__)

PERMISSIONS: dict[str, set[Role]] = {
    "delete_item": {Role.ADMIN},
}


class AuthService:
    def __init__(self, storage: CollectionStore):
        self.storage = storage

    def login(self, username: str, role: Role | str) -> User:
        username_clean = (username or "").strip()
        if not username_clean:
            raise AuthorizationError("Username is required.")
        try:
            target_role = Role(str(role or "").strip().lower())
        except ValueError:
            raise AuthorizationError(f"Unknown role '{role}'.") from None

        user = User(id=uuid.uuid4().hex, username=username_clean, role=target_role)
        self.storage.set_user(user)
        log.info("user_logged_in username=%s role=%s", user.username, user.role.value)
        return user

    def logout(self) -> None:
        self.storage.clear_user()
        log.info("user_logged_out")

    def current_user(self) -> Optional[User]:
        return self.storage.get_user()

    def can(self, user: Optional[User], action: str) -> bool:
        if user is None:
            return False
        allowed_roles = PERMISSIONS.get(action)
        if not allowed_roles:
            return False
        return user.role in allowed_roles

    def require_action(self, user: Optional[User], action: str) -> None:
        if not self.can(user, action):
            role = user.role.value if user else "anonymous"
            raise AuthorizationError(f"Role '{role}' is not allowed to perform '{action}'.")
