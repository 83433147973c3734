"""Authentication routes.

This module handles HTTP endpoints for user authentication and registration,
and provides the ``get_current_user`` dependency used by every other router.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, JWT_SECRET_KEY
from core.dependencies import UserManagerDep
from core.exceptions import AuthenticationError
from schemas.user import AuthResponse, LoginRequest, RegisterRequest, User, UserPublic
from utils.converters import user_to_public

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security
security = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def create_user_token(user: User) -> str:
    return create_access_token(
        data={"sub": user.user_id, "email": user.email, "role": user.role.value},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def verify_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        AuthenticationError: If the token is missing, invalid or expired.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    token = credentials.credentials
    try:
        payload = jwt.decode(token, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError("Invalid authentication credentials") from e
    if payload.get("sub") is None:
        raise AuthenticationError("Invalid authentication credentials")
    return payload


def get_current_user(
    token_payload: dict = Depends(verify_token),
    user_manager: UserManagerDep = None,
) -> User:
    """Get current authenticated user.

    The user is looked up again on every request, so a token issued to a
    deleted account stops working immediately.

    Args:
        token_payload: Decoded JWT token payload.
        user_manager: Injected UserManager instance.

    Returns:
        Current User object.

    Raises:
        AuthenticationError: If the user no longer exists.
    """
    user = user_manager.get_user_by_id(token_payload["sub"])
    if user is None:
        raise AuthenticationError("User not found")
    return user


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
)
def register(
    req: RegisterRequest,
    user_manager: UserManagerDep = None,
) -> AuthResponse:
    """Register a new user and log them in.

    Raises:
        UserAlreadyExistsError: If the email is already registered (409).
    """
    user = user_manager.create_user(
        email=req.email,
        password=req.password,
        name=req.name,
        role=req.role,
    )
    return AuthResponse(token=create_user_token(user), user=user_to_public(user))


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(
    req: LoginRequest,
    user_manager: UserManagerDep = None,
) -> AuthResponse:
    """Login with email and password.

    Raises:
        AuthenticationError: If the credentials do not match (401).
    """
    user = user_manager.authenticate(req.email, req.password)
    logger.info("User logged in: %s", user.user_id)
    return AuthResponse(token=create_user_token(user), user=user_to_public(user))


@router.get("/me", response_model=UserPublic, summary="Current user")
def get_current_user_info(
    current_user: User = Depends(get_current_user),
) -> UserPublic:
    return user_to_public(current_user)
