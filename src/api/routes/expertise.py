"""
Expertise routes.

The three ordered collections share one set of handlers, mounted at
``/api/certifications``, ``/api/competitions`` and ``/api/expertise-areas``.
Reads are public; writes need the admin cookie.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ValidationError

from src.api.deps import get_expertise_service, require_admin
from src.components.expertise import ExpertiseService, OrderedCollectionService

# --- Request Models ---


class ReorderRequest(BaseModel):
    orderedIds: list[str]


class ExpertiseImportRequest(BaseModel):
    expertiseAreas: list[dict[str, Any]] = []
    certifications: list[dict[str, Any]] = []
    competitions: list[dict[str, Any]] = []


def _invalid(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=[
            {
                "code": "invalid_field",
                "message": err["msg"],
                "field": ".".join(str(p) for p in err["loc"]),
            }
            for err in e.errors()
        ],
    )


def build_collection_router(name: str, label: str) -> APIRouter:
    """CRUD and reorder routes for one expertise collection."""
    router = APIRouter()

    def collection(
        service: ExpertiseService = Depends(get_expertise_service),
    ) -> OrderedCollectionService[Any]:
        found = service.collection(name)
        if found is None:
            raise HTTPException(status_code=404, detail=f"Unknown collection: {name}")
        return found

    @router.get("")
    def list_items(
        items: OrderedCollectionService[Any] = Depends(collection),
    ) -> list[dict[str, Any]]:
        return [i.to_store() for i in items.list_all()]

    @router.post("", status_code=201, dependencies=[Depends(require_admin)])
    def create_item(
        data: dict[str, Any] = Body(...),
        items: OrderedCollectionService[Any] = Depends(collection),
    ) -> dict[str, Any]:
        try:
            item = items.create(data)
        except ValidationError as e:
            raise _invalid(e) from e
        return item.to_store()

    @router.post("/reorder", dependencies=[Depends(require_admin)])
    def reorder_items(
        data: ReorderRequest,
        items: OrderedCollectionService[Any] = Depends(collection),
    ) -> dict[str, Any]:
        return {"success": True, "updated": items.reorder(data.orderedIds)}

    @router.get("/{item_id}")
    def get_item(
        item_id: str, items: OrderedCollectionService[Any] = Depends(collection)
    ) -> dict[str, Any]:
        item = items.get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return item.to_store()

    @router.put("/{item_id}", dependencies=[Depends(require_admin)])
    def update_item(
        item_id: str,
        data: dict[str, Any] = Body(...),
        items: OrderedCollectionService[Any] = Depends(collection),
    ) -> dict[str, Any]:
        try:
            item = items.update(item_id, data)
        except ValidationError as e:
            raise _invalid(e) from e
        if item is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return item.to_store()

    @router.delete("/{item_id}", dependencies=[Depends(require_admin)])
    def delete_item(
        item_id: str, items: OrderedCollectionService[Any] = Depends(collection)
    ) -> dict[str, Any]:
        if not items.delete(item_id):
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return {"success": True}

    return router


certifications_router = build_collection_router("certifications", "Certification")
competitions_router = build_collection_router("competitions", "Competition")
areas_router = build_collection_router("areas", "Expertise area")

# /api/expertise
router = APIRouter()


@router.post("/clear", dependencies=[Depends(require_admin)])
def clear_expertise(service: ExpertiseService = Depends(get_expertise_service)) -> dict[str, Any]:
    service.clear_all()
    return {"success": True, "message": "All expertise data cleared"}


@router.post("/migrate", dependencies=[Depends(require_admin)])
def import_expertise(
    data: ExpertiseImportRequest,
    service: ExpertiseService = Depends(get_expertise_service),
) -> dict[str, Any]:
    """Load exported expertise data, keeping ids and skipping ones already stored."""
    results: dict[str, Any] = {"errors": []}
    for key, items, collection in (
        ("expertiseAreas", data.expertiseAreas, service.areas),
        ("certifications", data.certifications, service.certifications),
        ("competitions", data.competitions, service.competitions),
    ):
        migrated, skipped, errors = collection.import_items(items)
        results[key] = {"migrated": migrated, "skipped": skipped}
        results["errors"].extend(errors)
    results["success"] = not results["errors"]
    return results
