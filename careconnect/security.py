from datetime import datetime, timedelta, timezone
from typing import List, Optional, Callable

from beanie import PydanticObjectId as OID
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext

from careconnect.config import get_settings
from careconnect.constants import Role
from careconnect.models.user import User

settings = get_settings()

# tokenUrl is only used by the Swagger "Authorize" dialog.
# auto_error is off so browser clients can fall back to the session cookie.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# ------------------------ Password hashing helpers ------------------------

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password; False when no hash is stored."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ------------------------ JWT helpers ------------------------


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT access token (short-lived - 1 hour by default)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_refresh_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed JWT refresh token (long-lived - 30 days by default)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )
    to_encode.update({"exp": expire, "type": "refresh"})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def token_claims(user: User) -> dict:
    return {"sub": str(user.id), "role": user.role.value, "email": user.email}


def decode_token(token: str, token_type: str = "access") -> dict:
    """Decode JWT token and verify its type."""
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )
    if payload.get("type") != token_type:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token type. Expected {token_type}",
        )
    return payload


# ------------------------ Session cookie ------------------------


def set_session_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=access_token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")


async def user_from_token(token: str | None) -> User | None:
    """Resolve an access token to its User, or None. Used by HTTP and Socket.IO auth."""
    if not token:
        return None
    try:
        payload = decode_token(token, token_type="access")
    except HTTPException:
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    try:
        return await User.get(OID(user_id))
    except Exception:
        return None


async def get_current_user(
    request: Request,
    token: str | None = Depends(oauth2_scheme),
) -> User:
    """Authenticate via Bearer header, falling back to the session cookie.
    Raises 401 if token missing, invalid, expired, or user not found.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    token = token or request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise credentials_exception

    payload = decode_token(token, token_type="access")
    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    try:
        user = await User.get(OID(user_id))
    except Exception:
        user = None
    if not user:
        raise credentials_exception
    return user


# ------------------------ RBAC helpers ------------------------


def require_roles(allowed: List[Role]) -> Callable:
    """FastAPI dependency factory to enforce role-based access.
    Usage: Depends(require_roles([Role.VITAL]))
    """

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            needed = "/".join(r.value for r in allowed)
            raise HTTPException(
                status_code=403,
                detail=f"Forbidden: {needed} role required",
            )
        return current_user

    return checker


require_vital = require_roles([Role.VITAL])
require_guardian = require_roles([Role.GUARDIAN])
