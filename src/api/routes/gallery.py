"""Private gallery: folders and media, behind the personal-area cookie."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from src.api.deps import get_gallery_service, raise_for_errors, require_personal
from src.components.gallery import GalleryService

router = APIRouter(dependencies=[Depends(require_personal)])

LOCKED_STATUS = {"all_photos_locked": 403}


class FolderRequest(BaseModel):
    name: str = ""


# --- Folders ---


@router.get("/folders")
def list_folders(service: GalleryService = Depends(get_gallery_service)) -> list[dict[str, Any]]:
    return service.list_folders()


@router.post("/folders", status_code=201)
def create_folder(
    data: FolderRequest,
    service: GalleryService = Depends(get_gallery_service),
) -> dict[str, Any]:
    folder, errors = service.create_folder(data.name)
    if folder is None:
        raise_for_errors(errors)
    return {**folder.to_store(), "itemCount": 0}


@router.get("/folders/{folder_id}")
def get_folder(
    folder_id: str, service: GalleryService = Depends(get_gallery_service)
) -> dict[str, Any]:
    folder = service.get_folder(folder_id)
    if folder is None:
        raise HTTPException(status_code=404, detail="Folder not found")
    return folder


@router.put("/folders/{folder_id}")
def update_folder(
    folder_id: str,
    data: dict[str, Any] = Body(...),
    service: GalleryService = Depends(get_gallery_service),
) -> dict[str, Any]:
    try:
        folder, errors = service.update_folder(folder_id, data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid folder data: {e.error_count()} error(s)"
        ) from e
    if errors:
        raise_for_errors(errors, LOCKED_STATUS)
    if folder is None:
        raise HTTPException(status_code=404, detail="Folder not found")
    return folder.to_store()


@router.delete("/folders/{folder_id}")
def delete_folder(
    folder_id: str, service: GalleryService = Depends(get_gallery_service)
) -> dict[str, Any]:
    deleted, errors = service.delete_folder(folder_id)
    if errors:
        raise_for_errors(errors, LOCKED_STATUS)
    if not deleted:
        raise HTTPException(status_code=404, detail="Folder not found")
    return {"success": True}


# --- Media ---


@router.get("/media")
def list_media(
    folderId: str | None = None,
    service: GalleryService = Depends(get_gallery_service),
) -> list[dict[str, Any]]:
    return [m.to_store() for m in service.list_media(folderId)]


@router.post("/media", status_code=201)
def add_media(
    data: dict[str, Any] = Body(...),
    service: GalleryService = Depends(get_gallery_service),
) -> dict[str, Any]:
    try:
        item, errors = service.add_media(data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid media data: {e.error_count()} error(s)"
        ) from e
    if item is None:
        raise_for_errors(errors)
    return item.to_store()


@router.get("/media/{media_id}")
def get_media(
    media_id: str, service: GalleryService = Depends(get_gallery_service)
) -> dict[str, Any]:
    item = service.get_media(media_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Media not found")
    return item.to_store()


@router.put("/media/{media_id}")
def update_media(
    media_id: str,
    data: dict[str, Any] = Body(...),
    service: GalleryService = Depends(get_gallery_service),
) -> dict[str, Any]:
    try:
        item = service.update_media(media_id, data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid media data: {e.error_count()} error(s)"
        ) from e
    if item is None:
        raise HTTPException(status_code=404, detail="Media not found")
    return item.to_store()


@router.delete("/media/{media_id}")
def delete_media(
    media_id: str, service: GalleryService = Depends(get_gallery_service)
) -> dict[str, Any]:
    if not service.delete_media(media_id):
        raise HTTPException(status_code=404, detail="Media not found")
    return {"success": True}
