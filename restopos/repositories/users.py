from __future__ import annotations

from restopos.core.errors import ValidationError
from restopos.repositories.base import CollectionRepository
from restopos.schemas.entities import AppUser


def ensure_unique_username(records: list[AppUser], candidate: AppUser) -> None:
    wanted = candidate.username.lower()
    for record in records:
        if record.username.lower() == wanted and record.id != candidate.id:
            raise ValidationError(f"Username {candidate.username} is already taken")


class UserRepository(CollectionRepository[AppUser]):
    key = "users"
    model = AppUser
    label = "user"

    def find_by_username(self, username: str) -> AppUser | None:
        wanted = (username or "").strip().lower()
        for user in self.load():
            if user.username.lower() == wanted:
                return user
        return None
