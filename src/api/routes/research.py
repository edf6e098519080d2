"""Research studies and research domains."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from pydantic import BaseModel, ValidationError

from src.api.deps import get_research_service, raise_for_errors, require_admin
from src.components.research import ResearchService

router = APIRouter()


class DomainRequest(BaseModel):
    name: str = ""
    description: str | None = None


# --- Studies ---


@router.get("")
def list_studies(
    query: str | None = None,
    domain: str | None = None,
    year: int | None = None,
    tags: str | None = Query(default=None, description="Comma separated"),
    featured: bool = False,
    service: ResearchService = Depends(get_research_service),
) -> list[dict[str, Any]]:
    """All studies, or those matching a search query or filters."""
    if query:
        studies = service.search(query)
    elif domain or year or tags:
        tag_list = [t.strip() for t in tags.split(",") if t.strip()] if tags else None
        studies = service.filter_by(domain=domain, year=year, tags=tag_list)
    elif featured:
        studies = service.featured()
    else:
        studies = service.list_all()
    return [s.to_store() for s in studies]


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_study(
    data: dict[str, Any] = Body(...),
    service: ResearchService = Depends(get_research_service),
) -> dict[str, Any]:
    study, errors = service.create(data)
    if study is None:
        raise_for_errors(errors)
    return study.to_store()


@router.post("/initialize", dependencies=[Depends(require_admin)])
def initialize_studies(
    service: ResearchService = Depends(get_research_service),
) -> dict[str, Any]:
    created = service.initialize_defaults()
    message = "Research data initialized" if created else "Research data already exists"
    return {"success": True, "initialized": created, "message": message}


# --- Domains ---


@router.get("/domains")
def list_domains(
    service: ResearchService = Depends(get_research_service),
) -> list[dict[str, Any]]:
    return service.list_domains()


@router.post("/domains", status_code=201, dependencies=[Depends(require_admin)])
def add_domain(
    data: DomainRequest,
    service: ResearchService = Depends(get_research_service),
) -> dict[str, Any]:
    domain, errors = service.add_domain(data.name, data.description or "")
    if domain is None:
        raise_for_errors(errors)
    return domain


@router.put("/domains/{domain_id}", dependencies=[Depends(require_admin)])
def update_domain(
    domain_id: str,
    data: DomainRequest,
    service: ResearchService = Depends(get_research_service),
) -> dict[str, Any]:
    domain, errors = service.update_domain(domain_id, data.name, data.description)
    if domain is None:
        raise_for_errors(errors)
    return domain


@router.delete("/domains/{domain_id}", dependencies=[Depends(require_admin)])
def delete_domain(
    domain_id: str, service: ResearchService = Depends(get_research_service)
) -> dict[str, Any]:
    deleted, errors = service.delete_domain(domain_id)
    if errors:
        raise_for_errors(errors)
    if not deleted:
        raise HTTPException(status_code=404, detail="Domain not found")
    return {"success": True}


# --- Single study ---


@router.get("/{study_id}")
def get_study(
    study_id: str, service: ResearchService = Depends(get_research_service)
) -> dict[str, Any]:
    """A study by id; each fetch counts as a view."""
    study = service.get(study_id)
    if study is None:
        raise HTTPException(status_code=404, detail="Research study not found")
    return study.to_store()


@router.put("/{study_id}", dependencies=[Depends(require_admin)])
def update_study(
    study_id: str,
    data: dict[str, Any] = Body(...),
    service: ResearchService = Depends(get_research_service),
) -> dict[str, Any]:
    try:
        study = service.update(study_id, data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid study data: {e.error_count()} error(s)"
        ) from e
    if study is None:
        raise HTTPException(status_code=404, detail="Research study not found")
    return study.to_store()


@router.delete("/{study_id}", dependencies=[Depends(require_admin)])
def delete_study(
    study_id: str, service: ResearchService = Depends(get_research_service)
) -> dict[str, Any]:
    if not service.delete(study_id):
        raise HTTPException(status_code=404, detail="Research study not found")
    return {"success": True}
