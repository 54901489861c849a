# app/core/security.py
"""
Security module for authentication.
Handles password hashing, session token creation/validation and the password policy.
"""
import os
import secrets
import datetime as dt
import jwt  # PyJWT
from passlib.context import CryptContext
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from project root
ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(dotenv_path=ENV_PATH)

# Password hashing context
# Argon2 is a modern, salted, memory-hard password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# JWT configuration
JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret")  # Secret key for JWT signing (use strong secret in production)
# 0 means tokens never expire on their own; they live until logout
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "0"))
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

PASSWORD_MIN_LENGTH = 7


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Args:
        plain: Plain text password to verify
        hashed: Hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)


def check_password_policy(plain: str) -> str:
    """
    Validate a candidate password and return it trimmed.

    Raises:
        ValueError: if the password is too short or contains the word "password"
    """
    value = plain.strip()
    if len(value) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if "password" in value.lower():
        raise ValueError('Password cannot contain "password"')
    return value


def create_access_token(user_id: str) -> str:
    """
    Create a signed session token for a user.

    The token only proves who it was issued to. It is accepted by the API
    while it is also present in the user's stored token list, so logout can
    revoke it.

    Token payload includes:
        - sub: Subject (user ID)
        - iat: Issued at timestamp
        - jti: Random identifier, keeps tokens issued in the same second distinct
        - exp: Expiration timestamp (only when ACCESS_TOKEN_EXPIRE_MINUTES > 0)
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "jti": secrets.token_hex(8),
    }
    if ACCESS_TOKEN_EXPIRE_MINUTES > 0:
        payload["exp"] = now + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a session token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or malformed
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
