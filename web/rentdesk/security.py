from __future__ import annotations

import time
from typing import Annotated, Callable, Iterable

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt

from .core import get_settings
from .roles import Role

# ---------------------------------------------------------------------------
#  Basic JWT helpers
# ---------------------------------------------------------------------------
settings = get_settings()

ALGORITHM = settings.ALGORITHM

# Short-lived access token (default 15 min) and longer refresh token (default 30 days)
ACCESS_TOKEN_EXP_SECONDS: int = settings.ACCESS_TOKEN_EXPIRE_SECONDS
REFRESH_TOKEN_EXP_SECONDS: int = settings.REFRESH_TOKEN_EXPIRE_SECONDS

DEFAULT_EXP_SECONDS = ACCESS_TOKEN_EXP_SECONDS


def _now() -> int:
    return int(time.time())


def create_token(
    sub: int | str,
    role: str,
    *,
    expires_in: int = DEFAULT_EXP_SECONDS,
    **extra_claims,
) -> str:
    """Return a signed JWT including any *extra_claims*.

    Standard claims:
    • sub  – user identifier
    • role – user role string
    • exp  – expiry (unix epoch)

    Additional keyword arguments are merged into the payload; renters and
    landlords carry ``email`` so invitations and notices can be matched
    without a database round-trip.
    """
    payload = {
        "sub": str(sub),
        "role": role,
        "exp": _now() + expires_in,
    }
    payload.update(extra_claims)
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify *token* and return its payload."""
    try:
        payload: dict = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token") from exc
    return payload


# Convenience helper: returns *(access, refresh)* tokens pair
def mint_tokens(sub: int | str, role: str, **extra_claims) -> tuple[str, str]:
    """Return *(access, refresh)* pair embedding *extra_claims* in both."""
    access = create_token(sub, role, expires_in=ACCESS_TOKEN_EXP_SECONDS, **extra_claims)
    refresh = create_token(
        sub,
        role,
        expires_in=REFRESH_TOKEN_EXP_SECONDS,
        typ="refresh",
        **extra_claims,
    )
    return access, refresh


# ---------------------------------------------------------------------------
#  Dependencies
# ---------------------------------------------------------------------------
async def _extract_token(req: Request) -> str | None:
    """Return JWT from Authorization header *or* access_token cookie."""
    auth: str | None = req.headers.get("Authorization")
    if auth and auth.startswith("Bearer "):
        return auth.split(" ", 1)[1]
    return req.cookies.get("access_token")


async def current_user(req: Request) -> dict:
    """FastAPI dependency returning the JWT payload or raises 401."""
    token = await _extract_token(req)
    if not token:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Missing credentials")
    payload = decode_token(token)
    if payload.get("typ") == "refresh":
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    return payload


def _to_role_str(value: "str | Role") -> str:
    """Return the *string* value of a Role or raw str."""
    if isinstance(value, Role):
        return value.value
    return str(value)


def role_required(*allowed: "str | Role | Iterable[str | Role]") -> Callable[[dict], dict]:
    """Return a dependency that checks *current_user* role is within *allowed*.

    Usage:
        @router.get("/stats", dependencies=[Depends(role_required("admin"))])
        async def stats():
            ...
    """
    if len(allowed) == 1 and isinstance(allowed[0], (list, tuple, set)):
        allowed = tuple(allowed[0])
    allowed_set = {_to_role_str(a) for a in allowed}

    async def _dep(user: Annotated[dict, Depends(current_user)]):
        role: str | None = user.get("role")
        if role not in allowed_set:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Forbidden")
        return user

    return _dep


def user_id(user: dict) -> int:
    """Integer user id from a token payload."""
    return int(user["sub"])


def client_ip(req: Request) -> str | None:
    forwarded = req.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return req.client.host if req.client else None
