"""CaseVault routes: public case directory, admin edits."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from src.api.deps import get_casevault_service, raise_for_errors, require_admin
from src.components.casevault import CaseVaultService

router = APIRouter()


@router.get("")
def list_cases(
    service: CaseVaultService = Depends(get_casevault_service),
) -> list[dict[str, Any]]:
    return [c.to_store() for c in service.list_all()]


@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_case(
    data: dict[str, Any] = Body(...),
    service: CaseVaultService = Depends(get_casevault_service),
) -> dict[str, Any]:
    try:
        case, errors = service.create(data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid case data: {e.error_count()} error(s)"
        ) from e
    if case is None:
        raise_for_errors(errors)
    return case.to_store()


@router.get("/{case_id}")
def get_case(
    case_id: str, service: CaseVaultService = Depends(get_casevault_service)
) -> dict[str, Any]:
    case = service.get(case_id)
    if case is None:
        raise HTTPException(status_code=404, detail="Case not found")
    return case.to_store()


@router.put("/{case_id}", dependencies=[Depends(require_admin)])
def update_case(
    case_id: str,
    data: dict[str, Any] = Body(...),
    service: CaseVaultService = Depends(get_casevault_service),
) -> dict[str, Any]:
    try:
        case = service.update(case_id, data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400, detail=f"Invalid case data: {e.error_count()} error(s)"
        ) from e
    if case is None:
        raise HTTPException(status_code=404, detail="Case not found")
    return case.to_store()


@router.delete("/{case_id}", dependencies=[Depends(require_admin)])
def delete_case(
    case_id: str, service: CaseVaultService = Depends(get_casevault_service)
) -> dict[str, Any]:
    if not service.delete(case_id):
        raise HTTPException(status_code=404, detail="Case not found")
    return {"success": True}
