"""
Unit tests for CaseVaultService.
"""

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.components.casevault import CaseVaultService


@pytest.fixture
def service(store: InMemoryKVStore, clock: FixedClock) -> CaseVaultService:
    return CaseVaultService(store, clock)


CASE = {
    "title": "Kesavananda Bharati v. State of Kerala",
    "citation": "(1973) 4 SCC 225",
    "legalArea": "Constitutional Law",
    "judgmentDate": "1973-04-24",
    "court": "Supreme Court of India",
}


def test_create_case_defaults(service: CaseVaultService):
    case, errors = service.create(CASE)

    assert errors == []
    stored = case.to_store()
    assert stored["tags"] == []
    assert stored["hasDocument"] is False
    assert stored["year"] == 2025
    # unknown fields survive
    assert stored["court"] == "Supreme Court of India"
    assert service.get(case.id).title == CASE["title"]


def test_create_requires_fields(service: CaseVaultService):
    case, errors = service.create({"title": "Only a title"})

    assert case is None
    assert [e.field for e in errors] == ["citation", "legalArea"]


def test_list_newest_judgment_first(service: CaseVaultService):
    old, _ = service.create({**CASE, "judgmentDate": "1950-01-01"})
    new, _ = service.create({**CASE, "judgmentDate": "2017-08-24"})
    undated, _ = service.create({**CASE, "judgmentDate": None})

    assert [c.id for c in service.list_all()] == [new.id, old.id, undated.id]


def test_update_keeps_id(service: CaseVaultService):
    case, _ = service.create(CASE)
    updated = service.update(case.id, {"id": "other", "tags": ["basic-structure"]})

    assert updated.id == case.id
    assert updated.tags == ["basic-structure"]
    assert service.update("missing", {}) is None


def test_delete(service: CaseVaultService):
    case, _ = service.create(CASE)
    assert service.delete(case.id) is True
    assert service.delete(case.id) is False
    assert service.list_all() == []
