# app/models/user.py
"""
Database model for users.
Represents a user account: profile fields, the hashed password, the list of
session tokens currently issued to the account and an optional avatar image.
"""
import uuid
from tortoise import fields, models, timezone
from tortoise.validators import MinValueValidator

from app.core.errors import ValidationError
from app.core.security import create_access_token, verify_password


class User(models.Model):
    """
    User database model.

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Email must be unique across all users
    - A session token is only honoured while it is listed in `tokens`
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: unique user identifier
    name = fields.CharField(max_length=128)
    email = fields.CharField(
        max_length=256,
        unique=True,
        index=True
    )  # Login identifier, stored lower-cased
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never plain text
    age = fields.IntField(null=True, validators=[MinValueValidator(0)])
    tokens = fields.JSONField(default=list)  # Issued session tokens, oldest first
    avatar = fields.BinaryField(null=True)  # 250x250 PNG bytes
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"  # Database table name

    def __str__(self) -> str:
        return self.email

    @classmethod
    async def find_by_credentials(cls, email: str, password: str) -> "User":
        """
        Look a user up by email and check the password.

        Unknown email and wrong password raise the same error so callers
        cannot tell which one failed.
        """
        user = await cls.get_or_none(email=email.strip().lower())
        if not user or not verify_password(password, user.password_hash):
            raise ValidationError()
        return user

    # Token list changes re-read the stored list and write only that column.
    # The instance loaded by the auth gate may be stale by the time a
    # handler saves, so a full-row save would resurrect revoked tokens.

    async def _stored_tokens(self) -> list[str]:
        rows = await User.filter(id=self.id).values_list("tokens", flat=True)
        return list(rows[0] or []) if rows else []

    async def _write_tokens(self, tokens: list[str]) -> None:
        await User.filter(id=self.id).update(tokens=tokens, updated_at=timezone.now())
        self.tokens = tokens

    async def issue_token(self) -> str:
        """Sign a new session token and append it to the stored `tokens`."""
        token = create_access_token(str(self.id))
        await self._write_tokens([*(await self._stored_tokens()), token])
        return token

    async def revoke_token(self, token: str) -> None:
        """Remove one session token, leaving the others valid."""
        await self._write_tokens([t for t in await self._stored_tokens() if t != token])

    async def revoke_all_tokens(self) -> None:
        await self._write_tokens([])

    def owns_token(self, token: str) -> bool:
        return token in (self.tokens or [])
