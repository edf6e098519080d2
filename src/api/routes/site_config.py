"""Profile, profile backups and footer configuration."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from src.api.deps import get_footer_service, get_profile_service, require_admin
from src.components.site_config import FooterService, ProfileService

profile_router = APIRouter()
footer_router = APIRouter()


class BackupRequest(BaseModel):
    backupName: str = ""


# --- Profile ---


@profile_router.get("")
def get_profile(service: ProfileService = Depends(get_profile_service)) -> dict[str, Any]:
    profile = service.load()
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return service.public_view(profile)


@profile_router.post("", dependencies=[Depends(require_admin)])
def save_profile(
    data: dict[str, Any] = Body(...),
    service: ProfileService = Depends(get_profile_service),
) -> dict[str, Any]:
    saved = service.save(data)
    return {"success": True, "profile": service.public_view(saved)}


@profile_router.delete("", dependencies=[Depends(require_admin)])
def delete_profile(service: ProfileService = Depends(get_profile_service)) -> dict[str, Any]:
    if not service.delete():
        raise HTTPException(status_code=404, detail="Profile not found")
    return {"success": True}


@profile_router.post("/backup", dependencies=[Depends(require_admin)])
def create_backup(
    data: BackupRequest,
    service: ProfileService = Depends(get_profile_service),
) -> dict[str, Any]:
    if not data.backupName.strip():
        raise HTTPException(status_code=400, detail="Backup name is required")
    key = service.create_backup(data.backupName.strip())
    if key is None:
        raise HTTPException(status_code=404, detail="No profile data to backup")
    return {"success": True, "message": "Backup created successfully", "backupKey": key}


@profile_router.get("/backup", dependencies=[Depends(require_admin)])
def list_backups(service: ProfileService = Depends(get_profile_service)) -> dict[str, Any]:
    return {"success": True, "backups": sorted(service.list_backups())}


# --- Footer ---


@footer_router.get("")
def get_footer(service: FooterService = Depends(get_footer_service)) -> dict[str, Any]:
    return service.load()


@footer_router.post("", dependencies=[Depends(require_admin)])
def save_footer(
    data: dict[str, Any] = Body(...),
    service: FooterService = Depends(get_footer_service),
) -> dict[str, Any]:
    return {"success": True, "config": service.save(data)}
