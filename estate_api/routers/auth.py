"""
Authentication and user management API endpoints.
Provides JWT-based registration and login plus account administration.
"""

from fastapi import APIRouter, Depends, status, Path
from estate_api.models.user import User
from estate_api.services.auth import AuthService
from estate_api.services.user import UserService
from estate_api.schemas.auth import LoginRequest, AuthResponse
from estate_api.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserListResponse,
    ProfileResponse
)
from estate_api.schemas.property import MessageResponse
from estate_api.schemas.error import get_error_responses, get_auth_error_responses
from estate_api.utils.dependencies import (
    get_auth_service,
    get_user_service,
    get_current_active_user
)


router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(auth_service: AuthService, user: User, access_token: str) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user.to_dict()),
        access_token=access_token,
        token_type="bearer",
        expires_in=auth_service.expires_in
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account (role user or agent) and return a JWT access token",
    responses=get_error_responses(400, 409)
)
async def register(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a new user.

    Raises:
        DuplicateEmailError: If the email is already registered (409)
    """
    user, access_token = await auth_service.register(user_data)
    return _auth_response(auth_service, user, access_token)


@router.post(
    "/login",
    response_model=AuthResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate user with email and password, returns a JWT access token",
    responses=get_error_responses(400, 401)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Authenticate user and return a JWT access token.

    Args:
        login_data: Login credentials (email and password)
        auth_service: Authentication service

    Returns:
        The user and a bearer token

    Raises:
        InvalidCredentialsError: If credentials are invalid
    """
    user, access_token = await auth_service.login(
        email=login_data.email,
        password=login_data.password
    )
    return _auth_response(auth_service, user, access_token)


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Current user profile",
    responses=get_auth_error_responses()
)
async def get_profile(
    current_user: User = Depends(get_current_active_user)
) -> ProfileResponse:
    return ProfileResponse(user=UserResponse.model_validate(current_user.to_dict()))


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
    description="All users with the number of listings each owns, newest first"
)
async def list_users(
    user_service: UserService = Depends(get_user_service)
) -> UserListResponse:
    users = await user_service.list_users()
    return UserListResponse(users=users)


@router.put(
    "/{user_id}",
    response_model=ProfileResponse,
    summary="Update user",
    description="Partially update an account. Admins may update anyone; others only themselves. Only admins may change roles.",
    responses=get_error_responses(400, 401, 403, 404, 409)
)
async def update_user(
    update_data: UserUpdate,
    user_id: int = Path(..., description="User ID"),
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
) -> ProfileResponse:
    """
    Update a user account.

    Raises:
        InsufficientPermissionsError: If the caller may not update this account or role
        NotFoundError: If the user does not exist
        DuplicateEmailError: If the new email is taken (409)
    """
    user = await user_service.update_user(user_id, update_data, current_user)
    return ProfileResponse(user=UserResponse.model_validate(user.to_dict()))


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete user",
    description="Delete an account with its favorites and listings. Admins may delete anyone; others only themselves.",
    responses=get_error_responses(400, 401, 403, 404)
)
async def delete_user(
    user_id: int = Path(..., description="User ID"),
    current_user: User = Depends(get_current_active_user),
    user_service: UserService = Depends(get_user_service)
) -> MessageResponse:
    await user_service.delete_user(user_id, current_user)
    return MessageResponse(message="User deleted successfully")
