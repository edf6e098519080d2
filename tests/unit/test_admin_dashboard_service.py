"""
Unit tests for the admin dashboard sections and categories.
"""

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.components.admin_dashboard import (
    DEFAULT_CATEGORIES,
    DEFAULT_SECTIONS,
    AdminCategoryService,
    AdminSectionService,
    reset_dashboard,
)


@pytest.fixture
def sections(store: InMemoryKVStore, clock: FixedClock) -> AdminSectionService:
    return AdminSectionService(store, clock)


@pytest.fixture
def categories(store: InMemoryKVStore, clock: FixedClock) -> AdminCategoryService:
    return AdminCategoryService(store, clock)


# --- Sections ---


def test_create_section(sections: AdminSectionService):
    section, errors = sections.create(
        {"title": "Blog", "linkHref": "/admin/blogs", "category": "content", "usageCount": 99}
    )

    assert errors == []
    assert section.usage_count == 0
    assert section.id.startswith("section_")
    assert sections.get(section.id) == section


def test_create_section_validation(sections: AdminSectionService):
    section, errors = sections.create({"title": "", "category": "misc"})

    assert section is None
    assert {e.code for e in errors} == {"title_required", "linkHref_required", "invalid_category"}


def test_update_section_partial(sections: AdminSectionService):
    section, _ = sections.create({"title": "Blog", "linkHref": "/admin/blogs"})

    updated, errors = sections.update(section.id, {"priority": 7})
    assert errors == []
    assert updated.priority == 7
    assert updated.title == "Blog"

    assert sections.update(section.id, {"title": " "})[1][0].code == "title_required"
    assert sections.update("missing", {})[1][0].code == "not_found"


def test_list_active_sorted_by_priority(sections: AdminSectionService):
    low, _ = sections.create({"title": "B", "linkHref": "/b", "priority": 2})
    high, _ = sections.create({"title": "A", "linkHref": "/a", "priority": 1})
    sections.create({"title": "Off", "linkHref": "/off", "isActive": False})

    assert [s.id for s in sections.list_active()] == [high.id, low.id]


def test_record_usage_and_analytics(sections: AdminSectionService, clock: FixedClock):
    section, _ = sections.create({"title": "Blog", "linkHref": "/admin/blogs"})
    idle, _ = sections.create({"title": "Idle", "linkHref": "/idle"})

    sections.record_usage(section.id)
    clock.advance(days=3)
    sections.record_usage(section.id, user_id="admin")
    clock.advance(days=2)

    assert sections.record_usage("missing") is None
    stats = sections.analytics()
    assert [a.section_id for a in stats] == [section.id, idle.id]
    top = stats[0]
    assert top.total_usage == 2
    assert (top.daily_usage, top.weekly_usage, top.monthly_usage) == (0, 2, 2)
    assert top.last_used == "2025-01-04T12:00:00.000Z"


def test_initialize_defaults_is_idempotent(sections: AdminSectionService, clock: FixedClock):
    first = sections.initialize_defaults()
    assert first.created == len(DEFAULT_SECTIONS)

    blog = next(s for s in sections.list_active() if s.link_href == "/admin/blogs")
    sections.update(blog.id, {"priority": 50})
    clock.advance(seconds=1)
    sections.create({"title": "Dup", "linkHref": "/admin/blogs"})

    second = sections.initialize_defaults()
    assert second.created == 0
    assert second.realigned == 1
    assert second.duplicates_removed == 1
    assert len(sections.list_active()) == len(DEFAULT_SECTIONS)
    assert sections.get(blog.id).priority == 1


def test_delete_section(sections: AdminSectionService):
    section, _ = sections.create({"title": "Blog", "linkHref": "/admin/blogs"})
    assert sections.delete(section.id) is True
    assert sections.delete(section.id) is False


# --- Categories ---


def test_categories_seeded_on_first_read(categories: AdminCategoryService):
    listed = categories.list_active()
    assert [c.name for c in listed] == [c["name"] for c in DEFAULT_CATEGORIES]


def test_corrupted_categories_are_dropped(
    categories: AdminCategoryService, store: InMemoryKVStore
):
    categories.list_active()
    store.hset("admin:categories", {"junk": "not json", "bad": {"name": "no ids"}})

    assert len(categories.list_active()) == len(DEFAULT_CATEGORIES)
    assert "junk" not in store.hgetall("admin:categories")


def test_all_corrupted_restores_defaults(
    categories: AdminCategoryService, store: InMemoryKVStore
):
    store.hset("admin:categories", {"junk": 42})
    assert len(categories.list_active()) == len(DEFAULT_CATEGORIES)


def test_add_update_reorder_category(categories: AdminCategoryService):
    a, errors = categories.add({"name": "Alpha"})
    assert errors == []
    b, _ = categories.add({"name": "Beta"})
    assert categories.add({"name": ""})[1][0].code == "name_required"

    assert categories.update(a.id, {"description": "First"}).description == "First"
    assert categories.update("missing", {}) is None

    assert categories.reorder([b.id, a.id, "missing"]) == 2
    assert [c.id for c in categories.list_active()] == [b.id, a.id]


def test_reset_dashboard(
    sections: AdminSectionService, categories: AdminCategoryService, store: InMemoryKVStore
):
    sections.initialize_defaults()
    categories.list_active()
    reset_dashboard(store)
    assert store.keys("admin:*") == []
