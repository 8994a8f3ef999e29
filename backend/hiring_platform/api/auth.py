"""
Authentication endpoints and dependencies.

Development-grade auth: login creates the user on first use and sets an
httpOnly cookie holding "<user_id>.<signature>", signed with SECRET_KEY.
Real identity (Supabase/JWT) plugs in at get_current_user.
"""
import hashlib
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, Cookie
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_platform.config import settings
from hiring_platform.database import get_db
from hiring_platform.errors import AuthenticationError, AuthorizationError
from hiring_platform.models.company import Company
from hiring_platform.models.user import User, UserRole
from hiring_platform.schemas.auth import LoginRequest, UserResponse, AuthResponse

logger = logging.getLogger(__name__)
router = APIRouter()

AUTH_COOKIE = "auth_token"
SESSION_MAX_AGE = 86400 * 30  # 30 days


def sign_session(user_id: str) -> str:
    signature = hmac.new(settings.secret_key.encode(), user_id.encode(), hashlib.sha256).hexdigest()
    return f"{user_id}.{signature}"


def verify_session(token: str) -> Optional[str]:
    """Return the user id from a signed session token, or None if tampered."""
    user_id, _, signature = token.rpartition(".")
    if not user_id:
        return None
    expected = sign_session(user_id).rpartition(".")[2]
    if not hmac.compare_digest(signature, expected):
        return None
    return user_id


def build_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        company_id=user.company_id,
    )


# Authentication Dependencies
async def get_current_user(
    auth_token: Optional[str] = Cookie(None),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Dependency to get current authenticated user from the httpOnly cookie.

    Raises:
        AuthenticationError 401: If cookie is missing, tampered or the user is gone
    """
    if not auth_token:
        raise AuthenticationError("Not authenticated. Please log in.")

    user_id = verify_session(auth_token)
    if not user_id:
        logger.warning("Rejected session cookie with invalid signature")
        raise AuthenticationError("Invalid session token.")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise AuthenticationError("Invalid session token. User not found.")

    return user


def require_roles(*roles: UserRole):
    """
    Dependency factory restricting an endpoint to the given roles.

    Example:
        @router.get("/stats/overview")
        async def stats(admin: User = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(*roles):
            logger.warning(
                f"User {current_user.email} (role={current_user.role.value}) "
                f"attempted to access endpoint restricted to {[r.value for r in roles]}"
            )
            raise AuthorizationError(
                f"User role {current_user.role.value} is not authorized to access this route"
            )
        return current_user

    return dependency


# Endpoints
@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """
    Log in (creating the user, and their company, on first use).

    NOT FOR PRODUCTION: the caller picks its own role on first login. Creating
    an admin this way is only allowed when DEBUG is on.

    Returns:
        200: Session cookie set
        403: Admin role requested outside debug mode
    """
    try:
        result = await db.execute(select(User).where(User.email == request.email))
        user = result.scalar_one_or_none()

        if not user:
            if request.role == UserRole.ADMIN and not settings.debug:
                logger.warning(f"Refused self-assigned admin role for {request.email}")
                raise AuthorizationError("Admin accounts cannot be created through login")
            user = User(email=request.email, name=request.name, role=request.role)
            db.add(user)
            logger.info(f"Created user {request.email} with role {request.role.value}")

        if request.company_name and not user.company_id:
            result = await db.execute(select(Company).where(Company.name == request.company_name))
            company = result.scalar_one_or_none()
            if not company:
                company = Company(name=request.company_name)
                db.add(company)
                await db.flush()
            user.company_id = company.id

        await db.commit()
        await db.refresh(user)
    except Exception:
        await db.rollback()
        raise

    response.set_cookie(
        key=AUTH_COOKIE,
        value=sign_session(user.id),
        httponly=True,  # Prevents JavaScript access (XSS protection)
        samesite="lax",  # CSRF protection
        max_age=SESSION_MAX_AGE,
        secure=settings.cookie_secure,
    )

    logger.info(f"Successful login: {user.email}")
    return AuthResponse(user=build_user_response(user))


@router.get("/me", response_model=AuthResponse)
async def me(current_user: User = Depends(get_current_user)):
    return AuthResponse(user=build_user_response(current_user))


@router.post("/logout")
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user)
):
    """Logout user by clearing the authentication cookie."""
    response.delete_cookie(
        key=AUTH_COOKIE,
        httponly=True,
        samesite="lax"
    )

    logger.info(f"User logged out: {current_user.email}")

    return {"success": True, "message": "Successfully logged out"}
