"""
CaseVaultService - legal case records, one key per case.

Cases live at ``casevault:case:<id>``. Fields beyond the required
title/citation/legalArea are stored as submitted.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document
from src.domain.entities import CaseRecord
from src.domain.timeutil import sort_key_desc

logger = logging.getLogger(__name__)

CASE_PREFIX = "casevault:case:"
REQUIRED_FIELDS = ("title", "citation", "legalArea")


@dataclass(frozen=True)
class CaseValidationError:
    code: str
    message: str
    field: str | None = None


def validate_case_data(data: dict[str, Any]) -> list[CaseValidationError]:
    missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
    return [
        CaseValidationError(code="missing_field", message=f"{name} is required", field=name)
        for name in missing
    ]


class CaseVaultService:
    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    def _key(self, case_id: str) -> str:
        return f"{CASE_PREFIX}{case_id}"

    def _parse(self, raw: Any) -> CaseRecord | None:
        doc = as_document(raw)
        if doc is None:
            return None
        try:
            return CaseRecord.model_validate(doc)
        except ValidationError:
            logger.warning("Skipping malformed case %s", doc.get("id"))
            return None

    def list_all(self) -> list[CaseRecord]:
        """Every case, most recent judgment first."""
        keys = self._store.keys(f"{CASE_PREFIX}*")
        cases = [c for c in (self._parse(self._store.get(k)) for k in keys) if c]
        return sorted(cases, key=lambda c: sort_key_desc(c.judgment_date))

    def get(self, case_id: str) -> CaseRecord | None:
        return self._parse(self._store.get(self._key(case_id)))

    def create(
        self, data: dict[str, Any]
    ) -> tuple[CaseRecord | None, list[CaseValidationError]]:
        errors = validate_case_data(data)
        if errors:
            return None, errors

        fields = dict(data)
        fields["id"] = data.get("id") or str(uuid.uuid4())
        fields["tags"] = data.get("tags") or []
        fields["legalPrinciples"] = data.get("legalPrinciples") or []
        fields["relatedCases"] = data.get("relatedCases") or []
        fields["hasDocument"] = bool(data.get("hasDocument"))
        fields["isOwnCase"] = bool(data.get("isOwnCase"))
        fields["year"] = data.get("year") or self._clock.now_utc().year

        case = CaseRecord.model_validate(fields)
        self._store.set(self._key(case.id), case.to_store())
        logger.info("Created case %s", case.id)
        return case, []

    def update(self, case_id: str, updates: dict[str, Any]) -> CaseRecord | None:
        """Merge updates into a case; the id never changes."""
        existing = self.get(case_id)
        if existing is None:
            return None
        merged = existing.to_store()
        merged.update(updates)
        merged["id"] = case_id
        updated = CaseRecord.model_validate(merged)
        self._store.set(self._key(case_id), updated.to_store())
        return updated

    def delete(self, case_id: str) -> bool:
        return self._store.delete(self._key(case_id)) > 0
