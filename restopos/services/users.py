from __future__ import annotations

import logging
from typing import Optional

from restopos.core.errors import ValidationError
from restopos.repositories.users import UserRepository, ensure_unique_username
from restopos.schemas.entities import AppUser, build_record, revise
from restopos.services.passwords import hash_password, needs_rehash, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

DEMO_USERS = (
    {"name": "Owner", "username": "owner", "password": "admin123", "role": "owner"},
    {"name": "Staff", "username": "staff", "password": "staff123", "role": "staff"},
)


def _check_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must have at least {MIN_PASSWORD_LENGTH} characters")


class UserService:
    def __init__(self, users: UserRepository) -> None:
        self._users = users

    def list_users(self) -> list[AppUser]:
        return self._users.load()

    def get_user(self, user_id: str) -> AppUser:
        return self._users.get(user_id)

    def ensure_seed_users(self) -> list[AppUser]:
        existing = self._users.load()
        if existing:
            return existing
        seeded = [
            build_record(
                AppUser,
                {
                    "name": entry["name"],
                    "username": entry["username"],
                    "password_hash": hash_password(entry["password"]),
                    "role": entry["role"],
                },
            )
            for entry in DEMO_USERS
        ]
        self._users.save(seeded)
        logger.info("Demo users seeded count=%s", len(seeded))
        return seeded

    def create_user(self, name: str, username: str, password: str, role: str) -> AppUser:
        _check_password(password)
        user = build_record(
            AppUser,
            {
                "name": name,
                "username": username,
                "password_hash": hash_password(password),
                "role": role,
            },
        )
        self._users.upsert(user, check=ensure_unique_username)
        logger.info("User created id=%s role=%s", user.id, user.role)
        return user

    def update_user(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        role: Optional[str] = None,
    ) -> AppUser:
        changes: dict = {}
        if name is not None:
            changes["name"] = name
        if username is not None:
            changes["username"] = username
        if role is not None:
            changes["role"] = role
        if password:
            _check_password(password)
            changes["password_hash"] = hash_password(password)

        updated = self._users.mutate(
            user_id,
            lambda current: revise(current, **changes),
            check=ensure_unique_username,
        )
        logger.info("User updated id=%s", user_id)
        return updated

    def delete_user(self, user_id: str) -> None:
        self._users.delete(user_id)
        logger.info("User deleted id=%s", user_id)

    def authenticate(self, username: str, password: str) -> Optional[AppUser]:
        user = self._users.find_by_username(username)
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("Login failed username=%s", (username or "").strip().lower())
            return None
        if needs_rehash(user.password_hash):
            # Upgrade browser-era SHA-256 hashes on first successful login
            user = self._users.mutate(
                user.id,
                lambda current: revise(current, password_hash=hash_password(password)),
            )
        logger.info("Login succeeded user_id=%s role=%s", user.id, user.role)
        return user
