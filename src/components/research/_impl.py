"""
ResearchService - published studies kept as one list document.

- ``research:studies`` list of study documents (defaults served when absent)
- ``research:views`` hash of view counts added on top of each stored ``views``
- ``research:domains`` list of domain documents (seeded on first read)
"""

from __future__ import annotations

import copy
import logging
import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.entities import ResearchStudy
from src.domain.text import random_code
from src.domain.timeutil import to_iso

from .defaults import DEFAULT_DOMAINS, DEFAULT_STUDIES

logger = logging.getLogger(__name__)

STUDIES_KEY = "research:studies"
VIEWS_KEY = "research:views"
DOMAINS_KEY = "research:domains"


@dataclass(frozen=True)
class ResearchValidationError:
    code: str
    message: str
    field: str | None = None


class ResearchService:
    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    # --- Studies ---

    def _documents(self) -> list[Any]:
        """Stored entries as-is, including any this version cannot parse."""
        stored = self._store.get(STUDIES_KEY)
        if not isinstance(stored, list):
            return copy.deepcopy(DEFAULT_STUDIES)
        return stored

    def _parse(self, doc: Any) -> ResearchStudy | None:
        if not isinstance(doc, dict):
            return None
        try:
            return ResearchStudy.model_validate(doc)
        except ValidationError:
            logger.warning("Skipping malformed research study %s", doc.get("id"))
            return None

    def _with_views(self, study: ResearchStudy, counts: dict[str, Any]) -> ResearchStudy:
        extra = counts.get(study.id)
        if not isinstance(extra, int) or not extra:
            return study
        return study.model_copy(update={"views": study.views + extra})

    def _index_of(self, docs: list[Any], study_id: str) -> int | None:
        return next(
            (i for i, d in enumerate(docs) if isinstance(d, dict) and d.get("id") == study_id),
            None,
        )

    def list_all(self) -> list[ResearchStudy]:
        counts = self._store.hgetall(VIEWS_KEY)
        studies = []
        for doc in self._documents():
            study = self._parse(doc)
            if study is not None:
                studies.append(self._with_views(study, counts))
        return studies

    def initialize_defaults(self) -> bool:
        """Persist the default studies if nothing is stored yet."""
        if self._store.exists(STUDIES_KEY):
            return False
        self._store.set(STUDIES_KEY, copy.deepcopy(DEFAULT_STUDIES))
        return True

    def get(self, study_id: str) -> ResearchStudy | None:
        """Fetch a study and count the view."""
        docs = self._documents()
        index = self._index_of(docs, study_id)
        study = self._parse(docs[index]) if index is not None else None
        if study is None:
            return None
        extra = self._store.hincrby(VIEWS_KEY, study_id, 1)
        return study.model_copy(update={"views": study.views + extra})

    def create(
        self, data: dict[str, Any]
    ) -> tuple[ResearchStudy | None, list[ResearchValidationError]]:
        fields = {k: v for k, v in data.items() if k not in ("id", "views", "publishedAt")}
        fields.update(
            id=random_code(7),
            views=0,
            publishedAt=to_iso(self._clock.now_utc()),
        )
        try:
            study = ResearchStudy.model_validate(fields)
        except ValidationError as e:
            return None, [
                ResearchValidationError(
                    code="invalid_study",
                    message=f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}",
                    field=str(err["loc"][0]) if err["loc"] else None,
                )
                for err in e.errors()
            ]

        self._store.set(STUDIES_KEY, [*self._documents(), study.to_store()])
        logger.info("Created research study %s", study.id)
        return study, []

    def update(self, study_id: str, updates: dict[str, Any]) -> ResearchStudy | None:
        """
        Merge ``updates`` into a study.

        Raises pydantic ValidationError when the merged document is invalid;
        nothing is written in that case.
        """
        docs = self._documents()
        index = self._index_of(docs, study_id)
        if index is None:
            return None
        changes = {k: v for k, v in updates.items() if k not in ("id", "views")}
        merged = {**docs[index], **changes}
        study = ResearchStudy.model_validate(merged)
        docs[index] = study.to_store()
        self._store.set(STUDIES_KEY, docs)
        return self._with_views(study, self._store.hgetall(VIEWS_KEY))

    def delete(self, study_id: str) -> bool:
        docs = self._documents()
        index = self._index_of(docs, study_id)
        if index is None:
            return False
        del docs[index]
        self._store.set(STUDIES_KEY, docs)
        self._store.hdel(VIEWS_KEY, study_id)
        return True

    def search(self, query: str) -> list[ResearchStudy]:
        q = query.lower().strip()
        return [
            s
            for s in self.list_all()
            if q in s.title.lower()
            or q in s.abstract.lower()
            or q in s.domain.lower()
            or any(q in tag.lower() for tag in s.tags)
        ]

    def filter_by(
        self,
        domain: str | None = None,
        year: int | None = None,
        tags: list[str] | None = None,
    ) -> list[ResearchStudy]:
        """Studies matching every given criterion; any listed tag matches."""
        return [
            s
            for s in self.list_all()
            if (not domain or s.domain == domain)
            and (not year or s.year == year)
            and (not tags or any(tag in s.tags for tag in tags))
        ]

    def featured(self) -> list[ResearchStudy]:
        return [s for s in self.list_all() if s.featured]

    # --- Domains ---

    def list_domains(self) -> list[dict[str, Any]]:
        domains = self._store.get(DOMAINS_KEY)
        if isinstance(domains, list):
            return domains
        now = to_iso(self._clock.now_utc())
        seeded = [
            {"id": str(uuid.uuid4()), "name": name, "description": "", "createdAt": now}
            for name in DEFAULT_DOMAINS
        ]
        self._store.set(DOMAINS_KEY, seeded)
        return seeded

    def add_domain(
        self, name: Any, description: str = ""
    ) -> tuple[dict[str, Any] | None, list[ResearchValidationError]]:
        if not isinstance(name, str) or not name.strip():
            return None, [
                ResearchValidationError(
                    code="name_required", message="Domain name is required", field="name"
                )
            ]
        domains = self.list_domains()
        if any(d.get("name", "").lower() == name.lower() for d in domains):
            return None, [
                ResearchValidationError(
                    code="duplicate",
                    message="Domain with this name already exists",
                    field="name",
                )
            ]
        domain = {
            "id": str(uuid.uuid4()),
            "name": name,
            "description": description,
            "createdAt": to_iso(self._clock.now_utc()),
        }
        self._store.set(DOMAINS_KEY, [*domains, domain])
        return domain, []

    def update_domain(
        self, domain_id: str, name: Any, description: str | None = None
    ) -> tuple[dict[str, Any] | None, list[ResearchValidationError]]:
        """Rename a domain; the description is kept unless a new one is given."""
        if not isinstance(name, str) or not name.strip():
            return None, [
                ResearchValidationError(
                    code="name_required", message="Domain name is required", field="name"
                )
            ]
        domains = self.list_domains()
        index = next((i for i, d in enumerate(domains) if d.get("id") == domain_id), None)
        if index is None:
            return None, [ResearchValidationError(code="not_found", message="Domain not found")]
        if any(
            d.get("id") != domain_id and d.get("name", "").lower() == name.lower()
            for d in domains
        ):
            return None, [
                ResearchValidationError(
                    code="duplicate",
                    message="Another domain with this name already exists",
                    field="name",
                )
            ]
        updated = {
            **domains[index],
            "name": name,
            "description": description or domains[index].get("description", ""),
        }
        domains[index] = updated
        self._store.set(DOMAINS_KEY, domains)
        return updated, []

    def delete_domain(self, domain_id: str) -> tuple[bool, list[ResearchValidationError]]:
        """Remove a domain unless a study still uses it."""
        domains = self.list_domains()
        target = next((d for d in domains if d.get("id") == domain_id), None)
        if target is None:
            return False, []
        if any(s.domain == target.get("name") for s in self.list_all()):
            return False, [
                ResearchValidationError(
                    code="domain_in_use",
                    message="Cannot delete domain that is in use by research publications",
                )
            ]
        self._store.set(DOMAINS_KEY, [d for d in domains if d.get("id") != domain_id])
        return True, []
