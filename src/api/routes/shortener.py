"""URL shortener: admin management API and the public ``/s/{code}`` redirect."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from src.api.deps import (
    Settings,
    get_rules,
    get_settings,
    get_shortener_service,
    raise_for_errors,
    require_admin,
)
from src.components.shortener import ShortenerService, ShortLink
from src.rules.models import Rules

router = APIRouter(dependencies=[Depends(require_admin)])
redirect_router = APIRouter()


class ShortenRequest(BaseModel):
    url: str = ""
    expiresAt: str | None = None


def base_url(request: Request, settings: Settings) -> str:
    """Public origin for short links; the request origin when none is configured."""
    if settings.public_url:
        return settings.public_url
    return str(request.base_url).rstrip("/")


def link_payload(link: ShortLink, origin: str) -> dict[str, Any]:
    return {
        "id": link.code,
        "shortCode": link.code,
        "originalUrl": link.original_url,
        "shortUrl": f"{origin}/s/{link.code}",
        "clickCount": link.clicks,
        "createdAt": link.created_at,
        "expiresAt": link.expires_at,
        "isRevoked": link.is_revoked,
    }


@router.post("")
def shorten(
    data: ShortenRequest,
    request: Request,
    service: ShortenerService = Depends(get_shortener_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    result, errors = service.shorten(data.url, data.expiresAt)
    if result is None:
        raise_for_errors(errors)
    return {**link_payload(result.link, base_url(request, settings)), "exists": result.exists}


@router.get("")
def list_links(
    request: Request,
    service: ShortenerService = Depends(get_shortener_service),
    settings: Settings = Depends(get_settings),
) -> list[dict[str, Any]]:
    origin = base_url(request, settings)
    return [link_payload(link, origin) for link in service.list_all()]


@router.post("/migrate-indexes")
def migrate_indexes(service: ShortenerService = Depends(get_shortener_service)) -> dict[str, Any]:
    report = service.migrate_indexes()
    return {
        "success": not report.errors,
        "migratedCount": report.migrated,
        "errors": report.errors,
    }


@router.get("/{code}")
def get_link(
    code: str,
    request: Request,
    service: ShortenerService = Depends(get_shortener_service),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    link = service.get(code)
    if link is None:
        raise HTTPException(status_code=404, detail="URL not found")
    return link_payload(link, base_url(request, settings))


@router.post("/{code}/revoke")
def toggle_revoke(
    code: str, service: ShortenerService = Depends(get_shortener_service)
) -> dict[str, Any]:
    revoked = service.toggle_revoke(code)
    if revoked is None:
        raise HTTPException(status_code=404, detail="URL not found")
    message = "URL revoked successfully" if revoked else "URL reactivated successfully"
    return {"success": True, "message": message, "isRevoked": revoked}


@router.delete("/{code}")
def delete_link(
    code: str,
    action: str | None = Query(default=None),
    service: ShortenerService = Depends(get_shortener_service),
) -> dict[str, Any]:
    """Delete a short link; ``?action=revoke`` toggles revocation instead."""
    if action == "revoke":
        return toggle_revoke(code, service)
    if not service.delete(code):
        raise HTTPException(status_code=404, detail="URL not found")
    return {"success": True, "message": "URL deleted successfully"}


@redirect_router.get("/s/{code}")
def follow(
    code: str,
    service: ShortenerService = Depends(get_shortener_service),
    rules: Rules = Depends(get_rules),
) -> RedirectResponse:
    result = service.follow(code)
    status_code = rules.shortener.redirect_status_code if result.followed else 307
    return RedirectResponse(url=result.location, status_code=status_code)
