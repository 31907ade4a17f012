"""
Authentication API endpoints for registration, login, password reset and the current user.
Provides JWT-based authentication with role-based access control.
"""

from fastapi import APIRouter, Depends, status
from app.services.auth import AuthService, RESET_REQUESTED_MESSAGE
from app.services.error_handler import error_responses
from app.schemas.common import ApiResponse, ok
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    AuthPayload,
    ForgotPasswordRequest,
    ResetPasswordRequest
)
from app.schemas.user import UserResponse
from app.utils.dependencies import Session, get_auth_service, get_session
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Register a user account",
    description="Create a user account with the 'user' role and return a bearer token",
    responses=error_responses(409, 422)
)
async def register(
    data: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Register a new user account.

    Raises:
        DuplicateResourceError: If the email is already registered
    """
    _, payload = await auth_service.register(data)
    return ok(payload, "Registration successful")


@router.post(
    "/login",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns a JWT token",
    responses=error_responses(401, 422)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Authenticate user and return a JWT token.

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    _, payload = await auth_service.login(email=login_data.email, password=login_data.password)
    return ok(payload, "Login successful")


@router.get(
    "/me",
    response_model=ApiResponse[UserResponse],
    summary="Get current user",
    description="Get the authenticated user's account",
    responses=error_responses(401)
)
async def get_me(session: Session = Depends(get_session)):
    return ok(session.user.to_dict())


@router.post(
    "/logout",
    response_model=ApiResponse[None],
    summary="Logout",
    description="Tokens are stateless; the client discards its token",
    responses=error_responses(401)
)
async def logout(session: Session = Depends(get_session)):
    logger.info(f"User {session.user.email} logged out")
    return ok(message="Logged out successfully")


@router.post(
    "/forgot-password",
    response_model=ApiResponse[None],
    summary="Request a password reset",
    description="Always answers with the same message whether or not the account exists",
    responses=error_responses(422)
)
async def forgot_password(
    data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    await auth_service.request_password_reset(data.email)
    return ok(message=RESET_REQUESTED_MESSAGE)


@router.post(
    "/reset-password",
    response_model=ApiResponse[None],
    summary="Reset password",
    description="Set a new password using a reset token",
    responses=error_responses(400, 422)
)
async def reset_password(
    data: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    Raises:
        BadRequestError: If the token is invalid, used or expired
    """
    await auth_service.reset_password(data.token, data.password)
    return ok(message="Password has been reset successfully")
