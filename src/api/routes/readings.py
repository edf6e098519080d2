"""Reading list routes (books and courses)."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel

from src.api.deps import get_reading_service, raise_for_errors, require_admin
from src.components.readings import ReadingService
from src.domain.entities import ReadingItem, ReadingType

router = APIRouter()


class ReorderRequest(BaseModel):
    orderedIds: list[str]


class BookImportRequest(BaseModel):
    books: list[dict[str, Any]] | None = None


def _resolve_or_404(service: ReadingService, slug: str) -> ReadingItem:
    reading = service.resolve(slug)
    if reading is None:
        raise HTTPException(status_code=404, detail="Reading not found")
    return reading


@router.get("")
def list_readings(
    type: ReadingType | None = None,
    service: ReadingService = Depends(get_reading_service),
) -> list[dict[str, Any]]:
    readings = service.list_by_type(type) if type else service.list_all()
    return [r.to_store() for r in readings]


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_reading(
    data: dict[str, Any] = Body(...),
    service: ReadingService = Depends(get_reading_service),
) -> dict[str, Any]:
    reading, errors = service.create(data)
    if reading is None:
        raise_for_errors(errors)
    return reading.to_store()


@router.get("/counts")
def reading_counts(service: ReadingService = Depends(get_reading_service)) -> dict[str, int]:
    counts = service.counts()
    return {"total": counts.total, "books": counts.books, "courses": counts.courses}


@router.post("/reorder", dependencies=[Depends(require_admin)])
def reorder_readings(
    data: ReorderRequest,
    service: ReadingService = Depends(get_reading_service),
) -> dict[str, Any]:
    return {"success": True, "updated": service.reorder(data.orderedIds)}


@router.post("/migrate", dependencies=[Depends(require_admin)])
def migrate_books(
    data: BookImportRequest | None = None,
    service: ReadingService = Depends(get_reading_service),
) -> dict[str, Any]:
    """Import legacy books, from the body or from the old expertise hash."""
    result = service.migrate_books(data.books if data else None)
    return {
        "success": result.success,
        "migrated": result.migrated,
        "skipped": result.skipped,
        "failed": result.failed,
        "errors": result.errors,
        "details": result.details,
    }


@router.get("/{slug}")
def get_reading(
    slug: str, service: ReadingService = Depends(get_reading_service)
) -> dict[str, Any]:
    return _resolve_or_404(service, slug).to_store()


@router.put("/{slug}", dependencies=[Depends(require_admin)])
def update_reading(
    slug: str,
    data: dict[str, Any] = Body(...),
    service: ReadingService = Depends(get_reading_service),
) -> dict[str, Any]:
    existing = _resolve_or_404(service, slug)
    reading, errors = service.update(existing.id, data)
    if reading is None:
        raise_for_errors(errors)
    return reading.to_store()


@router.delete("/{slug}", dependencies=[Depends(require_admin)])
def delete_reading(
    slug: str, service: ReadingService = Depends(get_reading_service)
) -> dict[str, Any]:
    existing = _resolve_or_404(service, slug)
    service.delete(existing.id)
    return {"success": True}
