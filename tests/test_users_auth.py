import hashlib

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from restopos.core.errors import NotFoundError, ValidationError
from restopos.repositories.users import UserRepository
from restopos.schemas.entities import AppUser, build_record
from restopos.services.auth import create_access_token, decode_access_token
from restopos.services.kv_store import KeyValueStore
from restopos.services.passwords import hash_password, is_legacy_hash, verify_password
from restopos.services.users import UserService
from tests.fixtures_data import DEMO_OWNER, DEMO_STAFF


def _build_service() -> UserService:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    return UserService(UserRepository(KeyValueStore(engine)))


@pytest.mark.parametrize("demo", [DEMO_OWNER, DEMO_STAFF])
def test_demo_users_authenticate_with_their_roles(demo):
    service = _build_service()
    service.ensure_seed_users()

    user = service.authenticate(demo["username"], demo["password"])

    assert user is not None
    assert user.role == demo["role"]
    assert service.authenticate(demo["username"], "wrong-password") is None


def test_seeding_is_skipped_when_users_exist():
    service = _build_service()
    service.create_user("Rina", "rina", "secret99", "staff")

    seeded = service.ensure_seed_users()

    assert [user.username for user in seeded] == ["rina"]


def test_username_lookup_is_case_insensitive_and_unique():
    service = _build_service()
    service.create_user("Rina", "Rina", "secret99", "staff")

    assert service.authenticate("RINA", "secret99") is not None
    with pytest.raises(ValidationError):
        service.create_user("Other", "rina", "secret99", "staff")


def test_short_password_is_rejected():
    service = _build_service()

    with pytest.raises(ValidationError):
        service.create_user("Rina", "rina", "123", "staff")


def test_update_user_changes_password_and_role():
    service = _build_service()
    user = service.create_user("Rina", "rina", "secret99", "staff")

    updated = service.update_user(user.id, password="newsecret", role="owner")

    assert updated.role == "owner"
    assert service.authenticate("rina", "secret99") is None
    assert service.authenticate("rina", "newsecret") is not None


def test_update_user_rejects_taken_username():
    service = _build_service()
    service.create_user("Rina", "rina", "secret99", "staff")
    other = service.create_user("Andi", "andi", "secret99", "staff")

    with pytest.raises(ValidationError):
        service.update_user(other.id, username="RINA")


def test_delete_user():
    service = _build_service()
    user = service.create_user("Rina", "rina", "secret99", "staff")

    service.delete_user(user.id)

    with pytest.raises(NotFoundError):
        service.get_user(user.id)


def test_legacy_sha256_hash_verifies_and_is_upgraded_on_login():
    service = _build_service()
    legacy = hashlib.sha256(b"admin123").hexdigest()
    service._users.upsert(build_record(AppUser, {"name": "Owner", "username": "owner", "password_hash": legacy, "role": "owner"}))

    user = service.authenticate("owner", "admin123")

    assert user is not None
    assert not is_legacy_hash(user.password_hash)
    assert verify_password("admin123", user.password_hash)


def test_password_hash_round_trip():
    hashed = hash_password("staff123")

    assert hashed != "staff123"
    assert verify_password("staff123", hashed)
    assert not verify_password("staff124", hashed)
    assert not verify_password("staff123", "")


def test_access_token_round_trip_and_tampering():
    token = create_access_token("user-1", extra={"role": "owner"})

    payload = decode_access_token(token)

    assert payload["sub"] == "user-1"
    assert payload["role"] == "owner"
    with pytest.raises(ValueError):
        decode_access_token("not-a-token")
