"""
Unit tests for schemas.user module.
"""
import datetime as dt
import uuid
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from app import schemas
from app.schemas.user import UserCreate, UserOut, UserUpdate


class TestUserCreate:

    def test_normalizes_fields(self):
        body = UserCreate(name="  Ann ", email=" ANN@Example.COM ", password=" Secret#12 ")
        assert body.name == "Ann"
        assert body.email == "ann@example.com"
        assert body.password == "Secret#12"
        assert body.age is None

    @pytest.mark.parametrize(
        "overrides",
        [{"name": "   "}, {"email": "ann@"}, {"email": "a@-.-"}, {"email": "a@b..c"}, {"email": "a@.b.c"}, {"password": "123"}, {"age": -5}],
    )
    def test_rejects_invalid(self, overrides):
        payload = {"name": "Ann", "email": "ann@example.com", "password": "Secret#12", **overrides}
        with pytest.raises(ValidationError):
            UserCreate(**payload)


class TestUserUpdate:

    def test_tracks_sent_fields(self):
        update = UserUpdate.model_validate({"age": None, "name": "Bo"})
        assert update.model_fields_set == {"age", "name"}
        assert update.age is None

    def test_rejects_unknown_key(self):
        with pytest.raises(ValidationError):
            UserUpdate.model_validate({"tokens": []})

    @pytest.mark.parametrize("field", ["name", "email", "password"])
    def test_required_attributes_cannot_be_null(self, field):
        with pytest.raises(ValidationError):
            UserUpdate.model_validate({field: None})


class TestUserOut:

    def test_from_model_hides_secrets(self):
        now = dt.datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt.timezone.utc)
        user = SimpleNamespace(
            id=uuid.uuid4(),
            name="Ann",
            email="ann@example.com",
            age=30,
            password_hash="$argon2...",
            tokens=["t1"],
            avatar=b"png",
            created_at=now,
            updated_at=now,
        )
        data = UserOut.from_model(user).model_dump()
        assert set(data) == {"id", "name", "email", "age", "createdAt", "updatedAt"}
        assert data["id"] == str(user.id)
        assert data["createdAt"] == now.isoformat()


class TestUserUpdateEmail:

    def test_email_is_normalized(self):
        update = UserUpdate.model_validate({"email": " Bo@Example.COM "})
        assert update.email == "bo@example.com"

    @pytest.mark.parametrize("email", ["bo@", "a@b..c", "plain"])
    def test_invalid_email_rejected(self, email):
        with pytest.raises(ValidationError):
            UserUpdate.model_validate({"email": email})


def test_package_exports_only_schemas():
    assert set(schemas.__all__) >= {"UserCreate", "UserUpdate", "UserOut", "AuthOut", "LoginRequest"}
    assert not hasattr(schemas, "_clean_name")
    assert not hasattr(schemas, "Optional")
