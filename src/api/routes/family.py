"""Family area: member registration, login and password management."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import BaseModel

from src.api.auth_utils import FAMILY_COOKIE, clear_auth_cookie, client_ip, set_auth_cookie
from src.api.deps import (
    Settings,
    get_family_auth_service,
    get_member_directory,
    get_rate_limiter,
    get_rules,
    get_settings,
    raise_for_errors,
    require_admin,
    require_family_member,
)
from src.app_shell.rate_limit import RateLimiter
from src.components.auth import FamilyAuthService, MemberDirectory, MemberSession
from src.domain.entities import FamilyMember
from src.rules.models import Rules

router = APIRouter()


class MemberLoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class MemberRegisterRequest(BaseModel):
    username: str = ""
    password: str = ""
    role: str | None = None


class PasswordChangeRequest(BaseModel):
    currentPassword: str = ""
    newPassword: str = ""


def member_summary(member: FamilyMember) -> dict[str, Any]:
    """Public view of a member; the password hash never leaves the store."""
    return {
        "username": member.username,
        "role": member.role,
        "createdAt": member.created_at,
        "lastLogin": member.last_login,
    }


@router.post("/register", status_code=201, dependencies=[Depends(require_admin)])
def register(
    data: MemberRegisterRequest,
    members: MemberDirectory = Depends(get_member_directory),
) -> dict[str, Any]:
    member, errors = members.register(data.username, data.password, data.role)
    if member is None:
        raise_for_errors(errors)
    return {"success": True, "user": member_summary(member)}


@router.post("/login")
def login(
    data: MemberLoginRequest,
    request: Request,
    response: Response,
    service: FamilyAuthService = Depends(get_family_auth_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    if not limiter.check_login(client_ip(request)):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts, try again later",
        )

    result, errors = service.login(data.username, data.password)
    if result is None:
        raise_for_errors(errors)

    cookie = rules.auth.cookie
    set_auth_cookie(
        response,
        FAMILY_COOKIE,
        result.token,
        cookie.max_age_seconds,
        cookie,
        settings.is_production,
    )
    return {
        "success": True,
        "message": "Login successful",
        "user": {"username": result.username, "role": result.role},
    }


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    service: FamilyAuthService = Depends(get_family_auth_service),
) -> dict[str, Any]:
    service.logout(request.cookies.get(FAMILY_COOKIE))
    clear_auth_cookie(response, FAMILY_COOKIE)
    return {"success": True}


@router.get("/check-auth")
def check_auth(session: MemberSession = Depends(require_family_member)) -> dict[str, Any]:
    return {
        "success": True,
        "message": "Authenticated",
        "user": {"username": session.username, "role": session.role},
    }


@router.post("/password")
def change_password(
    data: PasswordChangeRequest,
    session: MemberSession = Depends(require_family_member),
    members: MemberDirectory = Depends(get_member_directory),
) -> dict[str, Any]:
    errors = members.change_password(session.username, data.currentPassword, data.newPassword)
    if errors:
        raise_for_errors(errors)
    return {"success": True, "message": "Password updated successfully"}


@router.get("/members", dependencies=[Depends(require_admin)])
def list_members(
    members: MemberDirectory = Depends(get_member_directory),
) -> list[dict[str, Any]]:
    return [member_summary(m) for m in members.list_all()]


@router.delete("/members/{username}", dependencies=[Depends(require_admin)])
def delete_member(
    username: str,
    members: MemberDirectory = Depends(get_member_directory),
) -> dict[str, Any]:
    if not members.delete(username):
        raise HTTPException(status_code=404, detail="Member not found")
    return {"success": True}
