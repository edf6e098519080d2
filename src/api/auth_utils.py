"""Cookie names and helpers shared by the auth routes and guards."""

from fastapi import Request, Response

from src.rules.models import CookieRules

ADMIN_COOKIE = "admin-auth-token"
FAMILY_COOKIE = "family-auth-token"
PERSONAL_COOKIE = "personal-auth-token"


def set_auth_cookie(
    response: Response,
    name: str,
    value: str,
    max_age: int,
    cookie_rules: CookieRules,
    production: bool,
) -> None:
    response.set_cookie(
        key=name,
        value=value,
        httponly=cookie_rules.http_only,
        max_age=max_age,
        expires=max_age,
        samesite=cookie_rules.same_site,  # type: ignore[arg-type]
        secure=cookie_rules.secure_in_production and production,
        path="/",
    )


def clear_auth_cookie(response: Response, name: str) -> None:
    response.delete_cookie(key=name, path="/")


def client_ip(request: Request) -> str:
    """Best-effort caller address; the first X-Forwarded-For hop wins."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"
