"""
Unit tests for the expertise collections.
"""

import pytest
from pydantic import ValidationError

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.components.expertise import ExpertiseService


@pytest.fixture
def service(store: InMemoryKVStore, clock: FixedClock) -> ExpertiseService:
    return ExpertiseService(store, clock)


def test_create_certification(service: ExpertiseService):
    cert = service.certifications.create(
        {"name": "CKA", "issuingBody": "CNCF", "order": 2, "id": "ignored"}
    )

    assert cert.id.startswith("cert_")
    assert cert.issuing_body == "CNCF"
    assert cert.to_store()["createdAt"] == "2025-01-01T12:00:00.000Z"
    assert service.certifications.get(cert.id) == cert


def test_create_without_name_raises(service: ExpertiseService):
    with pytest.raises(ValidationError):
        service.competitions.create({"year": "2024"})


def test_list_sorted_by_order(service: ExpertiseService):
    b = service.areas.create({"name": "B", "order": 2})
    a = service.areas.create({"name": "A", "order": 1})
    assert [i.id for i in service.areas.list_all()] == [a.id, b.id]


def test_update_keeps_id_and_created_at(service: ExpertiseService, clock: FixedClock):
    comp = service.competitions.create({"name": "Kaggle", "year": "2023"})
    clock.advance(days=1)

    updated = service.competitions.update(
        comp.id, {"outcome": "Top 5%", "id": "other", "createdAt": "1999-01-01"}
    )

    assert updated.id == comp.id
    assert updated.created_at == comp.created_at
    assert updated.outcome == "Top 5%"
    assert service.competitions.update("missing", {"name": "x"}) is None


def test_reorder_assigns_positions(service: ExpertiseService):
    first = service.certifications.create({"name": "One", "order": 0})
    second = service.certifications.create({"name": "Two", "order": 1})

    assert service.certifications.reorder([second.id, "unknown", first.id]) == 2
    # unknown ids still consume a position
    assert service.certifications.get(second.id).order == 0
    assert service.certifications.get(first.id).order == 2


def test_delete(service: ExpertiseService, store: InMemoryKVStore):
    cert = service.certifications.create({"name": "One"})
    assert service.certifications.delete(cert.id) is True
    assert service.certifications.delete(cert.id) is False
    assert store.smembers("expertise:certifications:ids") == set()


def test_import_items_keeps_ids_and_skips_existing(service: ExpertiseService):
    service.areas.create({"name": "Existing"}, preserve_id="area_1")

    migrated, skipped, errors = service.areas.import_items(
        [
            {"id": "area_1", "name": "Existing"},
            {"id": "area_2", "name": "Data Science"},
            {"id": "area_3"},
        ]
    )

    assert (migrated, skipped) == (1, 1)
    assert len(errors) == 1
    assert service.areas.get("area_2").name == "Data Science"


def test_clear_all(service: ExpertiseService):
    service.areas.create({"name": "A"})
    service.certifications.create({"name": "C"})
    service.clear_all()
    assert service.areas.list_all() == []
    assert service.certifications.list_all() == []


def test_collection_lookup(service: ExpertiseService):
    assert service.collection("competitions") is service.competitions
    assert service.collection("books") is None
