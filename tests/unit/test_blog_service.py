"""
Unit tests for BlogService.

Tests the functional core business logic without HTTP concerns.
"""

import json

import pytest

from src.adapters.clock import FixedClock
from src.adapters.memory_kv import InMemoryKVStore
from src.components.blogs import BlogService
from src.domain.entities import Blog


@pytest.fixture
def service(store: InMemoryKVStore, clock: FixedClock) -> BlogService:
    return BlogService(store, clock)


def make_blog(service: BlogService, title: str = "Hello World", **extra) -> Blog:
    blog, errors = service.create({"title": title, "summary": "A summary", **extra})
    assert errors == []
    assert blog is not None
    return blog


# --- Create Tests ---


def test_create_blog_success(service: BlogService):
    """Test successful blog creation with derived fields."""
    blog = make_blog(service, content="word " * 401, tags=["AI", "python"])

    assert blog.slug == "hello-world"
    assert blog.id.startswith("blog_")
    assert blog.status == "draft"
    assert blog.reading_time == "3 min read"
    assert blog.views == 0
    assert blog.created_at == "2025-01-01T12:00:00.000Z"
    assert blog.date == blog.created_at


def test_create_requires_title_and_summary(service: BlogService):
    blog, errors = service.create({"title": "  ", "summary": ""})

    assert blog is None
    assert {e.code for e in errors} == {"title_required", "summary_required"}


def test_create_duplicate_slug(service: BlogService):
    make_blog(service)
    blog, errors = service.create({"title": "Hello, World!", "summary": "again"})

    assert blog is None
    assert errors[0].code == "slug_exists"


def test_create_uses_explicit_slug(service: BlogService):
    blog = make_blog(service, slug="custom-slug")
    assert service.get_by_slug("custom-slug") == blog


# --- Update Tests ---


def test_update_title_regenerates_slug(service: BlogService, clock: FixedClock):
    blog = make_blog(service)
    clock.advance(seconds=60)

    updated, errors = service.update(blog.id, {"title": "New Title"})

    assert errors == []
    assert updated is not None
    assert updated.slug == "new-title"
    assert updated.last_updated == "2025-01-01T12:01:00.000Z"
    assert service.get_by_slug("hello-world") is None
    assert service.get_by_slug("new-title").id == blog.id


def test_update_to_taken_slug_fails(service: BlogService):
    make_blog(service, title="First")
    second = make_blog(service, title="Second")

    updated, errors = service.update(second.id, {"slug": "first"})

    assert updated is None
    assert errors[0].code == "slug_exists"


def test_update_missing_blog(service: BlogService):
    updated, errors = service.update("blog_missing", {"title": "x"})
    assert updated is None
    assert errors[0].code == "not_found"


def test_update_reindexes_tags(service: BlogService):
    blog = make_blog(service, tags=["old"])
    service.update(blog.id, {"tags": ["new"]})

    assert service.list_by_tag("old") == []
    assert [b.id for b in service.list_by_tag("NEW")] == [blog.id]


def test_update_content_recomputes_reading_time(service: BlogService):
    blog = make_blog(service)
    updated, _ = service.update(blog.id, {"content": "<p>" + "word " * 250 + "</p>"})
    assert updated.reading_time == "2 min read"


# --- Listing Tests ---


def test_list_published_filters_and_orders(service: BlogService):
    old = make_blog(service, title="Old", status="published", date="2024-01-01")
    new = make_blog(service, title="New", status="published", date="2024-06-01")
    make_blog(service, title="Draft", date="2024-07-01")
    make_blog(service, title="Private", status="published", visibility="private")

    assert [b.id for b in service.list_published()] == [new.id, old.id]


def test_pinned_blogs_come_first_by_priority(service: BlogService):
    a = make_blog(service, title="A", status="published", date="2024-06-01")
    b = make_blog(service, title="B", status="published", date="2024-01-01")
    c = make_blog(service, title="C", status="published", date="2023-01-01")
    service.pin(c.id, priority=5)
    service.pin(b.id, priority=10)

    assert [x.id for x in service.list_published()] == [b.id, c.id, a.id]


def test_expired_pin_is_ignored(service: BlogService, clock: FixedClock):
    a = make_blog(service, title="A", status="published", date="2024-06-01")
    b = make_blog(service, title="B", status="published", date="2024-01-01")
    pinned, errors = service.pin(b.id, deadline="2025-01-02T00:00:00Z")
    assert errors == []
    assert pinned.is_pinned is True

    assert service.list_published()[0].id == b.id
    clock.advance(days=2)
    assert [x.id for x in service.list_published()] == [a.id, b.id]


def test_search_and_tags(service: BlogService):
    make_blog(service, title="Graph Theory", tags=["math"])
    make_blog(service, title="Cooking", content="A recipe for graphs of flavour")

    assert len(service.search("graph")) == 2
    assert service.all_tags() == ["math"]


def test_stats(service: BlogService):
    make_blog(service, title="One", status="published")
    make_blog(service, title="Two", tags=["x", "y"])
    blog = make_blog(service, title="Three", status="archived")
    service.increment_views(blog.slug)

    stats = service.stats()
    assert (stats.total, stats.published, stats.drafts, stats.archived) == (3, 1, 1, 1)
    assert stats.total_tags == 2
    assert stats.total_views == 1


# --- Pinning Tests ---


def test_pin_rejects_past_deadline(service: BlogService):
    blog = make_blog(service)
    pinned, errors = service.pin(blog.id, deadline="2024-12-31")
    assert pinned is None
    assert errors[0].code == "deadline_in_past"


def test_pin_rejects_bad_deadline_and_priority(service: BlogService):
    blog = make_blog(service)
    assert service.pin(blog.id, deadline="next week")[1][0].code == "invalid_deadline"
    assert service.pin(blog.id, priority=101)[1][0].code == "invalid_priority"


def test_unpin(service: BlogService):
    blog = make_blog(service)
    service.pin(blog.id, priority=3)
    unpinned = service.unpin(blog.id)

    assert unpinned.is_pinned is False
    assert unpinned.pin_priority is None
    assert unpinned.to_store()["isPinned"] is False


# --- Views / Delete ---


def test_views_by_slug_or_id(service: BlogService):
    blog = make_blog(service)
    assert service.increment_views(blog.slug) == 1
    assert service.increment_views(blog.id) == 2
    assert service.get_views(blog.slug) == 2
    assert service.increment_views("missing") == 0
    assert service.get_views("missing") is None


def test_delete_removes_indexes(service: BlogService, store: InMemoryKVStore):
    blog = make_blog(service, tags=["ai"])
    assert service.delete(blog.id) is True

    assert service.get_by_slug(blog.slug) is None
    assert store.smembers("blogs:tags:ai") == set()
    assert service.delete(blog.id) is False


def test_reads_legacy_string_documents(service: BlogService, store: InMemoryKVStore):
    make_blog(service)
    raw = store.hgetall("blogs:all")
    blog_id, doc = next(iter(raw.items()))
    store.hset("blogs:all", {blog_id: json.dumps(doc)})
    assert service.get_by_id(blog_id).title == "Hello World"
