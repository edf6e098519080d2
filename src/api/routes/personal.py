"""Personal area login; the gallery routes sit behind the same cookie."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from src.api.auth_utils import PERSONAL_COOKIE, clear_auth_cookie, client_ip, set_auth_cookie
from src.api.deps import (
    Settings,
    get_personal_auth_service,
    get_rate_limiter,
    get_rules,
    get_settings,
    raise_for_errors,
    require_personal,
)
from src.api.routes.family import MemberLoginRequest
from src.app_shell.rate_limit import RateLimiter
from src.components.auth import MemberSession, PersonalAuthService
from src.rules.models import Rules

router = APIRouter()


class PersonalLoginResponse(BaseModel):
    success: bool
    user: dict[str, str]


@router.post("/login", response_model=PersonalLoginResponse)
def login(
    data: MemberLoginRequest,
    request: Request,
    response: Response,
    service: PersonalAuthService = Depends(get_personal_auth_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> PersonalLoginResponse:
    if not limiter.check_login(client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts, try again later",
        )

    result, errors = service.login(data.username, data.password)
    if result is None:
        raise_for_errors(errors)

    set_auth_cookie(
        response,
        PERSONAL_COOKIE,
        result.token,
        service.session_seconds,
        rules.auth.cookie,
        settings.is_production,
    )
    return PersonalLoginResponse(
        success=True, user={"username": result.username, "role": result.role}
    )


@router.get("/check-auth")
def check_auth(session: MemberSession = Depends(require_personal)) -> dict[str, Any]:
    return {
        "authenticated": True,
        "user": {"username": session.username, "role": session.role},
    }


@router.post("/logout")
def logout(response: Response) -> dict[str, Any]:
    clear_auth_cookie(response, PERSONAL_COOKIE)
    return {"success": True}
