"""
BlogService - blog posts over the key-value store.

Storage layout:
- ``blogs:all``        hash of blog id -> blog document
- ``blogs:slugs``      hash of slug -> blog id
- ``blogs:tags:<tag>`` set of blog ids carrying a (lowercased) tag

Key behaviors:
- Public listing shows published + public blogs, valid pins first
- A pin is valid while pinned and its deadline is absent or in the future
- Slugs are unique; renaming a blog regenerates its slug unless one is given
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document, field_errors
from src.domain.entities import Blog, BlogStatus
from src.domain.text import generate_id, reading_time, slugify
from src.domain.timeutil import parse_datetime, sort_key_desc, to_iso
from src.rules.models import BlogRules

from .models import BlogStats, BlogValidationError

logger = logging.getLogger(__name__)

BLOGS_KEY = "blogs:all"
SLUGS_KEY = "blogs:slugs"
TAGS_PREFIX = "blogs:tags"


def _tag_key(tag: str) -> str:
    return f"{TAGS_PREFIX}:{tag.lower()}"


def _not_found(blog_id: str) -> BlogValidationError:
    return BlogValidationError(code="not_found", message=f"Blog {blog_id} not found")


def _slug_taken(slug: str) -> BlogValidationError:
    return BlogValidationError(
        code="slug_exists",
        message=f'Blog with slug "{slug}" already exists',
        field="slug",
    )


def validate_blog_input(
    title: Any = None,
    summary: Any = None,
    *,
    require: bool = False,
) -> list[BlogValidationError]:
    """Validate title/summary. With require=True both must be present."""
    errors: list[BlogValidationError] = []
    for name, value in (("title", title), ("summary", summary)):
        if value is None and not require:
            continue
        if not isinstance(value, str) or not value.strip():
            errors.append(
                BlogValidationError(
                    code=f"{name}_required",
                    message=f"{name.capitalize()} is required",
                    field=name,
                )
            )
    return errors


class BlogService:
    """Blog CRUD, pinning, views and discovery."""

    def __init__(
        self,
        store: KVStorePort,
        clock: TimePort,
        rules: BlogRules | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._rules = rules or BlogRules()

    # --- Reads ---

    def _parse(self, raw: Any) -> Blog | None:
        doc = as_document(raw)
        if doc is None:
            return None
        try:
            return Blog.model_validate(doc)
        except ValidationError:
            logger.warning("Skipping malformed blog document %s", doc.get("id"))
            return None

    def _save(self, blog: Blog) -> None:
        self._store.hset(BLOGS_KEY, {blog.id: blog.to_store()})

    def list_all(self) -> list[Blog]:
        """All blogs, newest first by date."""
        blogs = [b for b in map(self._parse, self._store.hgetall(BLOGS_KEY).values()) if b]
        return sorted(blogs, key=lambda b: sort_key_desc(b.date))

    def is_pin_valid(self, blog: Blog) -> bool:
        if not blog.is_pinned:
            return False
        if not blog.pin_deadline:
            return True
        deadline = parse_datetime(blog.pin_deadline)
        return deadline is not None and deadline > self._clock.now_utc()

    def list_published(self) -> list[Blog]:
        """Published public blogs: valid pins by priority, then newest first."""
        published = [
            b for b in self.list_all() if b.status == "published" and b.visibility == "public"
        ]
        pinned = sorted(
            (b for b in published if self.is_pin_valid(b)),
            key=lambda b: b.pin_priority or 0,
            reverse=True,
        )
        rest = [b for b in published if not self.is_pin_valid(b)]
        return pinned + rest

    def get_by_id(self, blog_id: str) -> Blog | None:
        return self._parse(self._store.hget(BLOGS_KEY, blog_id))

    def get_by_slug(self, slug: str) -> Blog | None:
        blog_id = self._store.hget(SLUGS_KEY, slug)
        if blog_id:
            blog = self.get_by_id(str(blog_id))
            if blog:
                return blog
        return next((b for b in self.list_all() if b.slug == slug), None)

    def resolve(self, slug_or_id: str) -> Blog | None:
        """Find a blog by slug, falling back to id."""
        return self.get_by_slug(slug_or_id) or self.get_by_id(slug_or_id)

    def list_by_status(self, status: BlogStatus) -> list[Blog]:
        return [b for b in self.list_all() if b.status == status]

    def list_by_tag(self, tag: str) -> list[Blog]:
        ids = self._store.smembers(_tag_key(tag))
        blogs = [self.get_by_id(blog_id) for blog_id in sorted(ids)]
        return [b for b in blogs if b is not None]

    def all_tags(self) -> list[str]:
        return sorted({tag for b in self.list_all() for tag in b.tags})

    def search(self, query: str) -> list[Blog]:
        q = query.lower()
        return [
            b
            for b in self.list_all()
            if q in b.title.lower()
            or q in b.summary.lower()
            or q in (b.content or "").lower()
            or any(q in tag.lower() for tag in b.tags)
        ]

    def stats(self) -> BlogStats:
        blogs = self.list_all()
        return BlogStats(
            total=len(blogs),
            published=sum(1 for b in blogs if b.status == "published"),
            drafts=sum(1 for b in blogs if b.status == "draft"),
            archived=sum(1 for b in blogs if b.status == "archived"),
            total_tags=len(self.all_tags()),
            total_views=sum(b.views for b in blogs),
        )

    # --- Writes ---

    def create(self, data: dict[str, Any]) -> tuple[Blog | None, list[BlogValidationError]]:
        """
        Create a new blog.

        Returns:
            Tuple of (blog, errors). Blog is None if validation fails.
        """
        errors = validate_blog_input(data.get("title"), data.get("summary"), require=True)
        if errors:
            return None, errors

        title = data["title"].strip()
        now = to_iso(self._clock.now_utc())
        slug = data.get("slug") or slugify(title)
        if self.get_by_slug(slug):
            return None, [_slug_taken(slug)]

        content = data.get("content") or ""
        fields = {k: v for k, v in data.items() if v is not None}
        fields.update(
            id=generate_id("blog", self._clock.now_utc()),
            title=title,
            summary=data["summary"].strip(),
            slug=slug,
            date=data.get("date") or now,
            content=content,
            tags=data.get("tags") or [],
            last_updated=None,
            created_at=now,
            updated_at=now,
            reading_time=reading_time(content, self._rules.words_per_minute),
            views=0,
        )
        try:
            blog = Blog.model_validate(fields)
        except ValidationError as e:
            return None, field_errors(e, BlogValidationError)

        self._save(blog)
        self._store.hset(SLUGS_KEY, {slug: blog.id})
        for tag in blog.tags:
            self._store.sadd(_tag_key(tag), blog.id)

        logger.info("Created blog %s (%s)", blog.id, blog.slug)
        return blog, []

    def update(
        self, blog_id: str, updates: dict[str, Any]
    ) -> tuple[Blog | None, list[BlogValidationError]]:
        """
        Update an existing blog.

        Returns:
            Tuple of (blog, errors). Blog is None if not found or invalid.
        """
        existing = self.get_by_id(blog_id)
        if existing is None:
            return None, [_not_found(blog_id)]

        errors = validate_blog_input(updates.get("title"), updates.get("summary"))
        if errors:
            return None, errors

        new_slug = existing.slug
        new_title = updates.get("title")
        requested_slug = updates.get("slug")
        if new_title and new_title != existing.title:
            new_slug = requested_slug or slugify(new_title)
        elif requested_slug and requested_slug != existing.slug:
            new_slug = requested_slug

        if new_slug != existing.slug:
            holder = self.get_by_slug(new_slug)
            if holder and holder.id != blog_id:
                return None, [_slug_taken(new_slug)]

        now = to_iso(self._clock.now_utc())
        merged = existing.model_dump()
        merged.update(updates)
        merged.update(slug=new_slug, updated_at=now, last_updated=now)
        if updates.get("content") is not None:
            merged["reading_time"] = reading_time(updates["content"], self._rules.words_per_minute)
        try:
            updated = Blog.model_validate(merged)
        except ValidationError as e:
            return None, field_errors(e, BlogValidationError)

        self._save(updated)
        if existing.slug != new_slug:
            self._store.hdel(SLUGS_KEY, existing.slug)
            self._store.hset(SLUGS_KEY, {new_slug: blog_id})
        if "tags" in updates and updates["tags"] is not None:
            for tag in existing.tags:
                self._store.srem(_tag_key(tag), blog_id)
            for tag in updated.tags:
                self._store.sadd(_tag_key(tag), blog_id)

        return updated, []

    def change_status(
        self, blog_id: str, status: BlogStatus
    ) -> tuple[Blog | None, list[BlogValidationError]]:
        return self.update(blog_id, {"status": status})

    def delete(self, blog_id: str) -> bool:
        blog = self.get_by_id(blog_id)
        if blog is None:
            return False
        self._store.hdel(BLOGS_KEY, blog_id)
        self._store.hdel(SLUGS_KEY, blog.slug)
        for tag in blog.tags:
            self._store.srem(_tag_key(tag), blog_id)
        logger.info("Deleted blog %s", blog_id)
        return True

    # --- Pinning ---

    def pin(
        self,
        blog_id: str,
        deadline: str | None = None,
        priority: int | None = None,
    ) -> tuple[Blog | None, list[BlogValidationError]]:
        blog = self.get_by_id(blog_id)
        if blog is None:
            return None, [_not_found(blog_id)]

        if deadline:
            parsed = parse_datetime(deadline)
            if parsed is None:
                return None, [
                    BlogValidationError(
                        code="invalid_deadline",
                        message="Invalid deadline date format",
                        field="deadline",
                    )
                ]
            if parsed <= self._clock.now_utc():
                return None, [
                    BlogValidationError(
                        code="deadline_in_past",
                        message="Deadline must be in the future",
                        field="deadline",
                    )
                ]

        low, high = self._rules.pin_priority_min, self._rules.pin_priority_max
        if priority is not None and not low <= priority <= high:
            return None, [
                BlogValidationError(
                    code="invalid_priority",
                    message=f"Priority must be a number between {low} and {high}",
                    field="priority",
                )
            ]

        pinned = blog.model_copy(
            update={
                "is_pinned": True,
                "pin_deadline": deadline or None,
                "pin_priority": priority or self._rules.default_pin_priority,
                "updated_at": to_iso(self._clock.now_utc()),
            }
        )
        self._save(pinned)
        return pinned, []

    def unpin(self, blog_id: str) -> Blog | None:
        blog = self.get_by_id(blog_id)
        if blog is None:
            return None
        unpinned = blog.model_copy(
            update={
                "is_pinned": False,
                "pin_deadline": None,
                "pin_priority": None,
                "updated_at": to_iso(self._clock.now_utc()),
            }
        )
        self._save(unpinned)
        return unpinned

    # --- Views ---

    def increment_views(self, slug_or_id: str) -> int:
        """Increment and return the view count; 0 for unknown blogs."""
        blog = self.resolve(slug_or_id)
        if blog is None:
            return 0
        views = blog.views + 1
        self._save(blog.model_copy(update={"views": views}))
        return views

    def get_views(self, slug_or_id: str) -> int | None:
        blog = self.resolve(slug_or_id)
        return blog.views if blog else None
