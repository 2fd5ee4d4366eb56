"""
Authentication endpoints.

Routes:
- POST /api/v1/auth/register-user    new user in an existing organization -> user and token pair
- POST /api/v1/auth/login            email + password -> user and token pair
- POST /api/v1/auth/refresh          refresh token -> new access token
- POST /api/v1/auth/logout           clears the stored refresh token
- POST /api/v1/auth/change-password  rotates the password, forces re-login
- GET  /api/v1/auth/me               the authenticated user

All responses use the DataResponse envelope; failures are raised as
AppError subclasses and rendered by the registered error handlers.
"""

from typing import Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from routrauth.db import get_db
from routrauth.errors.exceptions import ConflictError, UnauthorizedError
from routrauth.logging import ensure_logger
from routrauth.schemas.request import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterUserRequest,
)
from routrauth.schemas.response import (
    AccessTokenResponse,
    DataResponse,
    LoginResponse,
    UserResponse,
)
from routrauth.security.dependencies import get_current_claims, get_token_service
from routrauth.security.exceptions import (
    AccountDisabledError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from routrauth.security.password import check_password_policy, get_password_hash, verify_password
from routrauth.security.tokens.models import ClaimSet, TokenPair
from routrauth.security.tokens.service import TokenService
from routrauth.security.users import User, UserRepository

logger = ensure_logger(None, __name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def get_user_repository(session: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(session)


def _login_response(user: User, pair: TokenPair, message: str) -> DataResponse[LoginResponse]:
    return DataResponse[LoginResponse](
        data=LoginResponse(
            user=UserResponse.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            token_type=pair.token_type,
            expires_in=pair.expires_in,
        ),
        message=message,
    )


@router.post(
    "/register-user",
    response_model=DataResponse[LoginResponse],
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    body: RegisterUserRequest,
    users: UserRepository = Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service),
) -> DataResponse[LoginResponse]:
    logger.info(f"Registration attempt for email: {body.email}")

    check_password_policy(body.password)

    if await users.get_by_email(body.email) is not None:
        logger.warning(f"Registration failed: email already exists {body.email}")
        raise ConflictError(
            message="Email address is already registered", code="EMAIL_EXISTS"
        )

    user = await users.create(
        {
            "organization_id": body.organization_id,
            "email": body.email,
            "password_hash": get_password_hash(body.password),
            "role": body.role,
            "first_name": body.first_name,
            "last_name": body.last_name,
            "active": True,
        }
    )
    pair = token_service.issue_token_pair(
        user.id, user.organization_id, user.email, user.role
    )
    await users.store_refresh_token(user, pair.refresh_token)

    logger.info(f"User {body.email} registered successfully")
    return _login_response(user, pair, "User registered successfully")


@router.post("/login", response_model=DataResponse[LoginResponse])
async def login(
    body: LoginRequest,
    users: UserRepository = Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service),
) -> DataResponse[LoginResponse]:
    logger.info(f"Login attempt for email: {body.email}")

    user = await users.get_by_email(body.email)
    if user is None:
        logger.warning(f"Login failed: user not found for email {body.email}")
        raise InvalidCredentialsError()

    if not user.active:
        logger.warning(f"Login failed: user {body.email} is inactive")
        raise AccountDisabledError()

    if not verify_password(body.password, user.password_hash):
        logger.warning(f"Login failed: invalid password for email {body.email}")
        raise InvalidCredentialsError()

    pair = token_service.issue_token_pair(
        user.id, user.organization_id, user.email, user.role
    )
    await users.store_refresh_token(user, pair.refresh_token)

    logger.info(f"User {body.email} logged in successfully")
    return _login_response(user, pair, "Login successful")


@router.post("/refresh", response_model=DataResponse[AccessTokenResponse])
async def refresh(
    body: RefreshTokenRequest,
    users: UserRepository = Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service),
) -> DataResponse[AccessTokenResponse]:
    claims = token_service.validate_refresh_token(body.refresh_token)

    user = await users.get_one_by(id=claims.user_id)
    if user is None:
        logger.warning(f"User not found for refresh token: {claims.user_id}")
        raise InvalidTokenError(message="Invalid refresh token", code="INVALID_REFRESH_TOKEN")

    if not user.active:
        logger.warning(f"Token refresh failed: user {user.id} is inactive")
        raise AccountDisabledError()

    # Only the most recently issued refresh token is accepted
    if user.refresh_token != body.refresh_token:
        logger.warning(f"Refresh token mismatch for user {user.id}")
        raise InvalidTokenError(message="Invalid refresh token", code="INVALID_REFRESH_TOKEN")

    access_token = token_service.issue_access_token(
        user.id, user.organization_id, user.email, user.role
    )
    logger.info(f"Token refreshed successfully for user {user.id}")
    return DataResponse[AccessTokenResponse](
        data=AccessTokenResponse(
            access_token=access_token,
            expires_in=int(token_service.access_token_ttl.total_seconds()),
        ),
        message="Token refreshed successfully",
    )


@router.post("/logout", response_model=DataResponse[Dict[str, bool]])
async def logout(
    claims: ClaimSet = Depends(get_current_claims),
    users: UserRepository = Depends(get_user_repository),
) -> DataResponse[Dict[str, bool]]:
    logger.info(f"Logout request for user ID: {claims.user_id}")
    await users.clear_refresh_token(claims.user_id)
    return DataResponse[Dict[str, bool]](
        data={"logged_out": True}, message="Logout successful"
    )


@router.post("/change-password", response_model=DataResponse[Dict[str, bool]])
async def change_password(
    body: ChangePasswordRequest,
    claims: ClaimSet = Depends(get_current_claims),
    users: UserRepository = Depends(get_user_repository),
) -> DataResponse[Dict[str, bool]]:
    user = await users.get_active_by_id(claims.user_id)
    if user is None:
        raise UnauthorizedError(message="User not found", code="USER_NOT_FOUND")

    if not verify_password(body.current_password, user.password_hash):
        logger.warning(f"Password change failed: wrong current password for user {user.id}")
        raise InvalidCredentialsError(message="Current password is incorrect")

    check_password_policy(body.new_password)
    await users.update_password(user.id, get_password_hash(body.new_password))

    logger.info(f"Password changed successfully for user {user.id}")
    return DataResponse[Dict[str, bool]](
        data={"password_changed": True},
        message="Password changed successfully. Please log in again.",
    )


@router.get("/me", response_model=DataResponse[UserResponse])
async def me(
    claims: ClaimSet = Depends(get_current_claims),
    users: UserRepository = Depends(get_user_repository),
) -> DataResponse[UserResponse]:
    user = await users.get_active_by_id(claims.user_id)
    if user is None:
        raise UnauthorizedError(message="User not found", code="USER_NOT_FOUND")
    return DataResponse[UserResponse](data=UserResponse.model_validate(user))
