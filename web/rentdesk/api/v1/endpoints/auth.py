from typing import Optional

from fastapi import APIRouter, Depends, Response, status, Cookie

from rentdesk.api.v1.schemas import (
    SignupRequest, LoginRequest, LoginResponse, RefreshTokenRequest, RefreshTokenResponse,
    ChangePasswordRequest, UserOut
)
from rentdesk.core import AuthenticationError, get_settings
from rentdesk.deps import SessionDep
from rentdesk.roles import Role
from rentdesk.security import current_user, ACCESS_TOKEN_EXP_SECONDS, REFRESH_TOKEN_EXP_SECONDS
from rentdesk.services import AuthService
from rentdesk.api.v1.endpoints.utils import get_user_id


router = APIRouter()


def _set_auth_cookies(response: Response, access_token: str, refresh_token: Optional[str] = None) -> None:
    secure = get_settings().COOKIE_SECURE
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=secure,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXP_SECONDS
    )
    if refresh_token:
        response.set_cookie(
            key="refresh_token",
            value=refresh_token,
            httponly=True,
            secure=secure,
            samesite="lax",
            max_age=REFRESH_TOKEN_EXP_SECONDS
        )


async def _signup(payload: SignupRequest, role: Role, response: Response, sess) -> LoginResponse:
    service = AuthService(sess)
    user = await service.signup(payload.email, payload.password, payload.name, role.value)
    await sess.commit()

    access_token, refresh_token = service.issue_tokens(user)
    _set_auth_cookies(response, access_token, refresh_token)
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        redirect=service.home_path(user.role),
        user=UserOut.model_validate(user),
    )


@router.post("/signup/landlord", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def signup_landlord(payload: SignupRequest, response: Response, sess: SessionDep):
    """Create a landlord account and sign it in"""
    return await _signup(payload, Role.landlord, response, sess)


@router.post("/signup/renter", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def signup_renter(payload: SignupRequest, response: Response, sess: SessionDep):
    """Create a renter account and sign it in"""
    return await _signup(payload, Role.renter, response, sess)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    sess: SessionDep
):
    """Login with email and password"""
    service = AuthService(sess)

    user, access_token, refresh_token = await service.authenticate_user(
        email=payload.email,
        password=payload.password
    )

    # Cookies for browser clients; API clients use the returned tokens
    _set_auth_cookies(response, access_token, refresh_token)

    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        redirect=service.home_path(user.role),
        user=UserOut.model_validate(user),
    )


@router.post("/refresh", response_model=RefreshTokenResponse)
async def refresh_token(
    response: Response,
    sess: SessionDep,
    refresh_token: Optional[str] = Cookie(None),
    payload: Optional[RefreshTokenRequest] = None
):
    """Get new access token using refresh token (body first, cookie as fallback)"""
    service = AuthService(sess)

    token = payload.refresh_token if payload and payload.refresh_token else refresh_token
    if not token:
        raise AuthenticationError("Missing refresh token")

    access_token = await service.refresh_access_token(token)
    _set_auth_cookies(response, access_token)
    return RefreshTokenResponse(access_token=access_token)


@router.post("/logout")
async def logout(response: Response):
    """Logout (clear auth cookies)"""
    response.delete_cookie(key="access_token", httponly=True, samesite="lax")
    response.delete_cookie(key="refresh_token", httponly=True, samesite="lax")
    return {"success": True}


@router.post("/change-password", response_model=UserOut)
async def change_password(
    payload: ChangePasswordRequest,
    sess: SessionDep,
    user=Depends(current_user)
):
    """Change current user's password"""
    service = AuthService(sess)

    updated_user = await service.change_password(
        user_id=get_user_id(user),
        current_password=payload.current_password,
        new_password=payload.new_password
    )
    await sess.commit()

    return UserOut.model_validate(updated_user)


@router.get("/me", response_model=UserOut)
async def get_current_user(
    sess: SessionDep,
    user=Depends(current_user)
):
    """Get current user info"""
    user_obj = await AuthService(sess).get_user(get_user_id(user))
    return UserOut.model_validate(user_obj)
