"""Admin login, session check and password change."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from src.api.auth_utils import ADMIN_COOKIE, clear_auth_cookie, client_ip, set_auth_cookie
from src.api.deps import (
    Settings,
    get_admin_auth_service,
    get_rate_limiter,
    get_rules,
    get_settings,
    raise_for_errors,
    require_admin,
)
from src.app_shell.rate_limit import RateLimiter
from src.components.auth import AdminAuthService
from src.rules.models import Rules

router = APIRouter()


class AdminLoginRequest(BaseModel):
    password: str = ""


class PasswordChangeRequest(BaseModel):
    currentPassword: str = ""
    newPassword: str = ""


@router.post("/login")
def login(
    data: AdminLoginRequest,
    request: Request,
    response: Response,
    service: AdminAuthService = Depends(get_admin_auth_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    if not limiter.check_login(client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts, try again later",
        )

    token, errors = service.login(data.password)
    if token is None:
        raise_for_errors(errors)

    cookie = rules.auth.cookie
    set_auth_cookie(
        response, ADMIN_COOKIE, token, cookie.max_age_seconds, cookie, settings.is_production
    )
    return {"success": True, "message": "Login successful"}


@router.post("/logout")
def logout(response: Response) -> dict[str, Any]:
    clear_auth_cookie(response, ADMIN_COOKIE)
    return {"success": True}


@router.get("/check-auth", dependencies=[Depends(require_admin)])
def check_auth() -> dict[str, Any]:
    return {"success": True, "message": "Authenticated"}


@router.post("/password", dependencies=[Depends(require_admin)])
def change_password(
    data: PasswordChangeRequest,
    service: AdminAuthService = Depends(get_admin_auth_service),
) -> dict[str, Any]:
    errors = service.change_password(data.currentPassword, data.newPassword)
    if errors:
        raise_for_errors(errors)
    return {"success": True, "message": "Password updated successfully"}
