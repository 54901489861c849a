# app/api/v1/routers/users.py
import logging
import uuid
from typing import Any

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Body,
    Depends,
    File,
    Header,
    Request,
    Response,
    UploadFile,
    status,
)
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from tortoise.exceptions import BaseORMException, IntegrityError

from app.api.v1.deps import AuthSession, get_current_session, get_current_user
from app.config import settings
from app.core.errors import NotFoundError, StorageError, ValidationError
from app.core.security import hash_password
from app.models.user import User
from app.schemas.user import (
    UPDATABLE_FIELDS,
    AuthOut,
    LoginRequest,
    UserCreate,
    UserOut,
    UserUpdate,
)
from app.services import mailer
from app.services.avatar import AvatarError, is_allowed_filename, normalize_avatar

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/users", tags=["users"])

DUPLICATE_EMAIL = "Email is already registered"


def _first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    return f"{loc}: {err['msg']}" if loc else err["msg"]


@router.post("", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register(body: UserCreate, background_tasks: BackgroundTasks):
    """
    Register a new user account and sign them in.

    The password is hashed before storage. A welcome mail is scheduled as a
    background task; its outcome never affects this response.

    Returns:
        AuthOut: the created user and a fresh session token (201)

    Raises:
        ValidationError (400): email already registered or the store rejected the record
    """
    try:
        user = await User.create(
            name=body.name,
            email=body.email,
            password_hash=hash_password(body.password),
            age=body.age,
        )
    except IntegrityError:
        raise ValidationError(DUPLICATE_EMAIL)
    except BaseORMException as exc:
        raise ValidationError(str(exc))

    background_tasks.add_task(mailer.send_welcome_email, user.email, user.name)

    try:
        token = await user.issue_token()
    except BaseORMException as exc:
        raise ValidationError(str(exc))

    logger.info("[users] registered id=%s email=%s", user.id, user.email)
    return {"user": UserOut.from_model(user), "token": token}


@router.post("/login", response_model=AuthOut)
async def login(body: LoginRequest):
    """
    Authenticate with email and password and issue another session token.

    Tokens issued earlier stay valid. Unknown email and wrong password both
    answer 400 with an empty body.
    """
    try:
        user = await User.find_by_credentials(body.email, body.password)
    except ValidationError:
        logger.warning("[users] rejected login for %s", body.email)
        raise
    try:
        token = await user.issue_token()
    except BaseORMException:
        raise ValidationError()
    return {"user": UserOut.from_model(user), "token": token}


@router.post("/logout")
async def logout(session: AuthSession = Depends(get_current_session)):
    """Revoke only the token this request was authenticated with."""
    user = session.user
    try:
        await user.revoke_token(session.token)
    except BaseORMException:
        logger.exception("[users] logout failed for id=%s", user.id)
        raise StorageError()
    logger.info("[users] logout id=%s remaining_sessions=%d", user.id, len(user.tokens))
    return Response(status_code=status.HTTP_200_OK)


@router.post("/logoutAll")
async def logout_all(user: User = Depends(get_current_user)):
    """Revoke every session token of the current user."""
    try:
        await user.revoke_all_tokens()
    except BaseORMException:
        logger.exception("[users] logoutAll failed for id=%s", user.id)
        raise StorageError()
    logger.info("[users] logoutAll id=%s", user.id)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return UserOut.from_model(user)


@router.get("", response_model=list[UserOut])
async def list_users(
    request: Request,
    authorization: str | None = Header(default=None),
):
    """
    List every user, oldest first.

    Public unless PUBLIC_USER_LIST is disabled, in which case the caller must
    present a valid session token.
    """
    if not settings.public_user_list:
        await get_current_session(request, authorization)
    try:
        users = await User.all().order_by("created_at")
    except BaseORMException:
        logger.exception("[users] listing users failed")
        raise StorageError()
    return [UserOut.from_model(u) for u in users]


@router.patch("/me", response_model=UserOut)
async def update_me(
    body: dict[str, Any] = Body(...),
    user: User = Depends(get_current_user),
):
    """
    Update the current user's profile.

    Only name, email, password and age may be sent. Any other key rejects
    the whole request before anything is changed.

    Raises:
        ValidationError (400): unknown key, invalid value, or the save failed
            (for example the new email belongs to someone else)
    """
    if not set(body).issubset(UPDATABLE_FIELDS):
        raise ValidationError("Invalid updates!")
    try:
        update = UserUpdate.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError(_first_error(exc))

    sent = update.model_fields_set
    columns = ["updated_at"]
    if "name" in sent:
        user.name = update.name
        columns.append("name")
    if "email" in sent:
        user.email = update.email
        columns.append("email")
    if "password" in sent:
        user.password_hash = hash_password(update.password)
        columns.append("password_hash")
    if "age" in sent:
        user.age = update.age
        columns.append("age")

    try:
        await user.save(update_fields=columns)
    except IntegrityError:
        raise ValidationError(DUPLICATE_EMAIL)
    except BaseORMException as exc:
        raise ValidationError(str(exc))

    logger.info("[users] updated id=%s fields=%s", user.id, sorted(sent))
    return UserOut.from_model(user)


@router.delete("/me", response_model=UserOut)
async def delete_me(
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
):
    """Delete the current account and send a farewell mail in the background."""
    deleted = UserOut.from_model(user)
    try:
        await user.delete()
    except BaseORMException:
        logger.exception("[users] delete failed for id=%s", user.id)
        raise StorageError()
    background_tasks.add_task(mailer.send_farewell_email, user.email, user.name)
    logger.info("[users] deleted id=%s", deleted.id)
    return deleted


@router.post("/me/avatar")
async def upload_avatar(
    avatar: UploadFile | None = File(default=None),
    user: User = Depends(get_current_user),
):
    """
    Store a new avatar for the current user.

    The upload must be a .jpg, .jpeg or .png file (lowercase extension) of at
    most AVATAR_MAX_BYTES. It is resized to a square and stored as PNG.

    Raises:
        ValidationError (400): missing file, wrong extension, too large,
            not an image, or the save failed
    """
    if avatar is None:
        raise ValidationError("Please upload an image")
    if not is_allowed_filename(avatar.filename):
        raise ValidationError("Please upload an image")

    data = await avatar.read(settings.avatar_max_bytes + 1)
    if len(data) > settings.avatar_max_bytes:
        raise ValidationError("File too large")

    try:
        user.avatar = await run_in_threadpool(normalize_avatar, data, settings.avatar_size)
    except AvatarError as exc:
        raise ValidationError(str(exc))

    try:
        await user.save(update_fields=["avatar", "updated_at"])
    except BaseORMException as exc:
        raise ValidationError(str(exc))

    logger.info("[users] avatar stored id=%s bytes=%d", user.id, len(user.avatar))
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/me/avatar")
async def delete_avatar(user: User = Depends(get_current_user)):
    user.avatar = None
    try:
        await user.save(update_fields=["avatar", "updated_at"])
    except BaseORMException:
        logger.exception("[users] avatar removal failed for id=%s", user.id)
        raise StorageError()
    return Response(status_code=status.HTTP_200_OK)


@router.get("/{user_id}/avatar")
async def get_avatar(user_id: str):
    """Serve a user's avatar as PNG; 404 when the user or the avatar is missing."""
    try:
        pk = uuid.UUID(user_id)
    except ValueError:
        raise NotFoundError()
    try:
        user = await User.get_or_none(id=pk)
    except BaseORMException:
        raise NotFoundError()
    if not user or not user.avatar:
        raise NotFoundError()
    return Response(content=bytes(user.avatar), media_type="image/png")
