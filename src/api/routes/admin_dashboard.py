"""Admin dashboard: sections, categories, usage analytics and reset."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from src.api.deps import (
    get_category_service,
    get_section_service,
    get_store,
    raise_for_errors,
    require_admin,
)
from src.components.admin_dashboard import (
    AdminCategoryService,
    AdminSectionService,
    reset_dashboard,
)
from src.core.ports.kv import KVStorePort

# Every dashboard route is admin-only.
router = APIRouter(dependencies=[Depends(require_admin)])


class UsageRequest(BaseModel):
    userId: str | None = None


class ReorderRequest(BaseModel):
    orderedIds: list[str]


# --- Sections ---


@router.get("/sections")
def list_sections(
    service: AdminSectionService = Depends(get_section_service),
) -> list[dict[str, Any]]:
    return [s.to_store() for s in service.list_active()]


@router.post("/sections", status_code=201)
def create_section(
    data: dict[str, Any] = Body(...),
    service: AdminSectionService = Depends(get_section_service),
) -> dict[str, Any]:
    section, errors = service.create(data)
    if section is None:
        raise_for_errors(errors)
    return section.to_store()


@router.post("/sections/initialize")
def initialize_sections(
    service: AdminSectionService = Depends(get_section_service),
) -> dict[str, Any]:
    report = service.initialize_defaults()
    return {
        "success": True,
        "created": report.created,
        "realigned": report.realigned,
        "duplicatesRemoved": report.duplicates_removed,
    }


@router.get("/sections/analytics")
def section_analytics(
    service: AdminSectionService = Depends(get_section_service),
) -> list[dict[str, Any]]:
    return [
        {
            "sectionId": a.section_id,
            "title": a.title,
            "totalUsage": a.total_usage,
            "dailyUsage": a.daily_usage,
            "weeklyUsage": a.weekly_usage,
            "monthlyUsage": a.monthly_usage,
            "lastUsed": a.last_used,
        }
        for a in service.analytics()
    ]


@router.get("/sections/{section_id}")
def get_section(
    section_id: str, service: AdminSectionService = Depends(get_section_service)
) -> dict[str, Any]:
    section = service.get(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail="Section not found")
    return section.to_store()


@router.put("/sections/{section_id}")
def update_section(
    section_id: str,
    data: dict[str, Any] = Body(...),
    service: AdminSectionService = Depends(get_section_service),
) -> dict[str, Any]:
    section, errors = service.update(section_id, data)
    if section is None:
        raise_for_errors(errors)
    return section.to_store()


@router.delete("/sections/{section_id}")
def delete_section(
    section_id: str, service: AdminSectionService = Depends(get_section_service)
) -> dict[str, Any]:
    if not service.delete(section_id):
        raise HTTPException(status_code=404, detail="Section not found")
    return {"success": True}


@router.post("/sections/{section_id}/usage")
def record_section_usage(
    section_id: str,
    data: UsageRequest | None = None,
    service: AdminSectionService = Depends(get_section_service),
) -> dict[str, Any]:
    usage = service.record_usage(section_id, data.userId if data else None)
    if usage is None:
        raise HTTPException(status_code=404, detail="Section not found")
    return {"success": True, "usage": usage.to_store()}


# --- Categories ---


@router.get("/categories")
def list_categories(
    service: AdminCategoryService = Depends(get_category_service),
) -> list[dict[str, Any]]:
    return [c.to_store() for c in service.list_active()]


@router.post("/categories", status_code=201)
def add_category(
    data: dict[str, Any] = Body(...),
    service: AdminCategoryService = Depends(get_category_service),
) -> dict[str, Any]:
    category, errors = service.add(data)
    if category is None:
        raise_for_errors(errors)
    return category.to_store()


@router.post("/categories/reorder")
def reorder_categories(
    data: ReorderRequest,
    service: AdminCategoryService = Depends(get_category_service),
) -> dict[str, Any]:
    return {"success": True, "updated": service.reorder(data.orderedIds)}


@router.get("/categories/{category_id}")
def get_category(
    category_id: str, service: AdminCategoryService = Depends(get_category_service)
) -> dict[str, Any]:
    category = service.get(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category.to_store()


@router.put("/categories/{category_id}")
def update_category(
    category_id: str,
    data: dict[str, Any] = Body(...),
    service: AdminCategoryService = Depends(get_category_service),
) -> dict[str, Any]:
    try:
        category = service.update(category_id, data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid category data: {e.error_count()} error(s)"
        ) from e
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category.to_store()


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: str, service: AdminCategoryService = Depends(get_category_service)
) -> dict[str, Any]:
    if not service.delete(category_id):
        raise HTTPException(status_code=404, detail="Category not found")
    return {"success": True}


# --- Reset ---


@router.post("/reset")
def reset(store: KVStorePort = Depends(get_store)) -> dict[str, Any]:
    reset_dashboard(store)
    return {"success": True, "message": "Admin dashboard reset"}
