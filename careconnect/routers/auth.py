from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from careconnect.rate_limit import limiter
from careconnect.schemas import RegisterIn, RefreshIn, Token, AuthOut, UserOut
from careconnect.models import User
from careconnect.security import get_current_user, set_session_cookie, clear_session_cookie
from careconnect.services import auth_service
from careconnect.services.profile_service import has_profile
from careconnect.utils.serializers import user_out

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
async def register(request: Request, response: Response, payload: RegisterIn):
    """Create a VITAL or GUARDIAN account. Rate limit: 10/minute per IP."""
    (access_token, refresh_token), user = await auth_service.register_user(
        email=payload.email,
        password=payload.password,
        role=payload.role,
    )
    set_session_cookie(response, access_token)
    return AuthOut(access_token=access_token, refresh_token=refresh_token, user=user_out(user))


@router.post("/login", response_model=AuthOut)
@limiter.limit("10/minute")
async def login(request: Request, response: Response, form_data: OAuth2PasswordRequestForm = Depends()):
    """OAuth2 password form: username is the e-mail address."""
    (access_token, refresh_token), user = await auth_service.login(
        email=form_data.username,
        password=form_data.password,
    )
    set_session_cookie(response, access_token)
    return AuthOut(
        access_token=access_token,
        refresh_token=refresh_token,
        user=user_out(user, has_profile=await has_profile(user)),
    )


@router.post("/refresh", response_model=Token)
@limiter.limit("20/minute")
async def refresh(request: Request, response: Response, payload: RefreshIn):
    access_token, refresh_token = await auth_service.refresh_tokens(payload.refresh_token)
    set_session_cookie(response, access_token)
    return Token(access_token=access_token, refresh_token=refresh_token)


@router.post("/logout")
async def logout(response: Response):
    clear_session_cookie(response)
    return {"ok": True}


@router.get("/me", response_model=UserOut)
async def me(current: User = Depends(get_current_user)):
    return user_out(current, has_profile=await has_profile(current))
