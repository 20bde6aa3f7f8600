from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError

from careconnect.constants import Role
from careconnect.models import User
from careconnect.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token,
    token_claims,
)
from careconnect.utils.ids import to_oid
from careconnect.utils.logger import get_logger

logger = get_logger("auth_service")

MIN_PASSWORD_LENGTH = 6


def issue_tokens(user: User) -> tuple[str, str]:
    claims = token_claims(user)
    return create_access_token(claims), create_refresh_token(claims)


async def register_user(*, email: str, password: str, role: Role) -> tuple[tuple[str, str], User]:
    """Create an account and log it in. Returns ((access_token, refresh_token), user)."""
    email = email.strip().lower()
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")
    if await User.find_one(User.email == email):
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(email=email, password_hash=hash_password(password), role=role)
    try:
        await user.insert()
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")
    logger.info(f"👤 Registered {user.role.value} user {user.id}")
    return issue_tokens(user), user


async def login(*, email: str, password: str) -> tuple[tuple[str, str], User]:
    user = await User.find_one(User.email == (email or "").strip().lower())
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid email or password")
    return issue_tokens(user), user


async def refresh_tokens(refresh_token: str) -> tuple[str, str]:
    """Trade a refresh token for a fresh (access, refresh) pair."""
    payload = decode_token(refresh_token, token_type="refresh")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    try:
        user = await User.get(to_oid(user_id))
    except HTTPException:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return issue_tokens(user)
