"""Authentication routes (first-run setup, login, refresh, logout) and the authorization gate."""

import json
import logging
from collections.abc import Callable
from typing import Annotated, Any, TypeVar

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from sqlalchemy.orm import Session

from famli.core.database import get_db
from famli.core.errors import Conflict, Forbidden, Unauthorized, ValidationError
from famli.core.permissions import is_allowed
from famli.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    InvalidTokenError,
    hash_password,
    verify_access_token,
    verify_password,
)
from famli.models import User
from famli.schemas.auth import (
    AuthResponse,
    CurrentUser,
    FirstRunResponse,
    LoginRequest,
    MessageResponse,
    RefreshRequest,
    SetupRequest,
    TokenPairResponse,
    UserProfile,
)
from famli.services import credentials as credential_store
from famli.services.sessions import (
    SessionNotFoundError,
    UserNotFoundError,
    create_session,
    refresh_session,
    revoke_session,
)

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_password(password: str) -> None:
    if len(password) < PASSWORD_MIN_LEN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LEN} characters")
    if len(password) > PASSWORD_MAX_LEN:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_LEN} characters")


def validate_username(username: str) -> None:
    if len(username) > USERNAME_MAX_LEN:
        raise ValidationError("Invalid username length")


async def json_body(request: Request) -> Any:
    """
    Dependency: the request body decoded as JSON, or None when it is empty or
    not JSON. The auth handlers judge the payload themselves so that their
    own checks (first-run, token validity) decide the response.
    """
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _parse(schema: type[SchemaT], body: Any) -> SchemaT | None:
    """Validate body against schema; None when it is not an object or does not fit."""
    if not isinstance(body, dict):
        return None
    try:
        return schema.model_validate(body)
    except SchemaError:
        return None


def user_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
        preferences=user.preferences or {},
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """
    Dependency: require a valid Bearer access token and return its claims.

    Verification is stateless (signature and exp only). Raises 401 when the
    header is missing or malformed and when the token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Access token required", headers=BEARER_CHALLENGE)
    try:
        claims = verify_access_token(credentials.credentials)
    except InvalidTokenError:
        raise Unauthorized("Invalid or expired token", headers=BEARER_CHALLENGE)
    return CurrentUser(id=claims.id, username=claims.username, role=claims.role)


def require(capability: str) -> Callable[[CurrentUser], CurrentUser]:
    """Dependency factory: authenticated caller whose role is on the capability's allow-list, else 403."""

    def _check(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ) -> CurrentUser:
        if not is_allowed(current_user.role, capability):
            logger.info(
                "Denied %s to user_id=%s role=%s", capability, current_user.id, current_user.role
            )
            raise Forbidden("Insufficient permissions")
        return current_user

    return _check


@router.get("/first-run", response_model=FirstRunResponse)
def first_run(db: Annotated[Session, Depends(get_db)]) -> FirstRunResponse:
    """True until the first user exists."""
    return FirstRunResponse(is_first_run=credential_store.count_users(db) == 0)


@router.post("/setup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def setup(
    db: Annotated[Session, Depends(get_db)],
    body: Annotated[Any, Depends(json_body)],
) -> AuthResponse:
    """
    Create the initial admin account and sign it in.
    Only available while no user exists; afterwards every call fails with 400,
    whatever the payload.
    """
    if credential_store.count_users(db) > 0:
        raise ValidationError("Setup already completed")
    data = _parse(SetupRequest, body)
    if data is None or not data.username or not data.email or not data.password:
        raise ValidationError("All fields are required")
    validate_username(data.username)
    validate_password(data.password)

    try:
        user = credential_store.insert_user(
            db,
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
            role="admin",
        )
    except credential_store.DuplicateUserError as e:
        raise Conflict(e.message) from e
    tokens = create_session(db, user)
    logger.info("First-run setup completed by user_id=%s", user.id)
    return AuthResponse(
        message="Setup completed successfully",
        user=user_profile(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/login", response_model=AuthResponse)
def login(
    db: Annotated[Session, Depends(get_db)],
    body: Annotated[Any, Depends(json_body)],
) -> AuthResponse:
    """
    Authenticate with username and password; returns the user and a token pair.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    data = _parse(LoginRequest, body)
    if data is None or not data.username or not data.password:
        raise ValidationError("Username and password are required")

    user = credential_store.find_by_username(db, data.username)
    if user is None or not verify_password(data.password, user.password_hash):
        logger.info("Failed login for username=%s", data.username)
        raise Unauthorized("Invalid credentials")

    tokens = create_session(db, user)
    logger.info("User logged in: user_id=%s", user.id)
    return AuthResponse(
        user=user_profile(user),
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.post("/refresh", response_model=TokenPairResponse)
def refresh(
    db: Annotated[Session, Depends(get_db)],
    body: Annotated[Any, Depends(json_body)],
) -> TokenPairResponse:
    """
    Exchange a refresh token for a new pair. The presented refresh token stops working.
    A missing or empty token is a 400; anything else that is not a live refresh token is a 403.
    """
    presented = body.get("refreshToken") if isinstance(body, dict) else None
    if not presented:
        raise ValidationError("Refresh token required")
    data = _parse(RefreshRequest, body)
    if data is None or not data.refresh_token:
        raise Forbidden("Invalid refresh token")
    try:
        tokens = refresh_session(db, data.refresh_token)
    except (InvalidTokenError, SessionNotFoundError) as e:
        raise Forbidden("Invalid refresh token") from e
    except UserNotFoundError as e:
        raise Forbidden(e.message) from e
    return TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/logout", response_model=MessageResponse)
def logout(
    db: Annotated[Session, Depends(get_db)],
    body: Annotated[Any, Depends(json_body)],
) -> MessageResponse:
    """Revoke the session for the given refresh token. Always succeeds, whatever the body."""
    data = _parse(RefreshRequest, body)
    if data is not None and data.refresh_token:
        revoke_session(db, data.refresh_token)
    return MessageResponse(message="Logged out successfully")
