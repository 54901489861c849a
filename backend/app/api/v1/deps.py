# app/api/v1/deps.py
import uuid
from dataclasses import dataclass

from fastapi import Depends, Header, Request

from app.core.errors import AuthenticationError
from app.core.security import decode_access_token
from app.models.user import User


@dataclass
class AuthSession:
    """The authenticated user and the exact token the request presented."""
    user: User
    token: str


def _extract_token(request: Request, authorization: str | None) -> str | None:
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        if token:
            return token
    # 2) Secondly HttpOnly Cookie: accessToken
    return request.cookies.get("accessToken") or None


async def get_current_session(
    request: Request,
    authorization: str | None = Header(default=None),
) -> AuthSession:
    """
    FastAPI dependency that authenticates a request by its session token.

    The token must carry a valid signature and must still be listed on the
    user it names; a token removed by logout is rejected even though its
    signature is fine.

    Raises:
        AuthenticationError (401): no token, bad signature, unknown user,
            or token no longer issued to that user
    """
    token = _extract_token(request, authorization)
    if not token:
        raise AuthenticationError()

    try:
        payload = decode_access_token(token)
        user_id = uuid.UUID(str(payload.get("sub")))
    except Exception:
        raise AuthenticationError()

    user = await User.get_or_none(id=user_id)
    if not user or not user.owns_token(token):
        raise AuthenticationError()
    return AuthSession(user=user, token=token)


async def get_current_user(session: AuthSession = Depends(get_current_session)) -> User:
    """Shortcut dependency for handlers that only need the user."""
    return session.user
