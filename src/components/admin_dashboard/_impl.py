"""
Admin dashboard services.

AdminSectionService - dashboard shortcut cards plus their usage log.
AdminCategoryService - grouping categories, seeded with defaults on first read.

Storage layout:
- ``admin:sections``      hash of section id -> AdminSection
- ``admin:section:usage`` hash of usage id -> AdminSectionUsage
- ``admin:categories``    hash of category id -> AdminCategory
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, get_args

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document, field_errors
from src.domain.entities import (
    AdminCategory,
    AdminSection,
    AdminSectionUsage,
    SectionCategory,
)
from src.domain.text import generate_id
from src.domain.timeutil import parse_datetime, to_iso

from .defaults import DEFAULT_CATEGORIES, DEFAULT_SECTIONS
from .models import DashboardValidationError, DefaultsReport, SectionAnalytics

logger = logging.getLogger(__name__)

SECTIONS_KEY = "admin:sections"
USAGE_KEY = "admin:section:usage"
CATEGORIES_KEY = "admin:categories"

SECTION_CATEGORIES: tuple[str, ...] = get_args(SectionCategory)
_PROTECTED = ("id", "createdAt", "usageCount")


def validate_section_data(
    data: dict[str, Any], *, partial: bool = False
) -> list[DashboardValidationError]:
    errors: list[DashboardValidationError] = []

    for name, label in (("title", "Title"), ("linkHref", "Link")):
        if partial and name not in data:
            continue
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            errors.append(
                DashboardValidationError(
                    code=f"{name}_required", message=f"{label} is required", field=name
                )
            )

    if "category" in data and data["category"] not in SECTION_CATEGORIES:
        errors.append(
            DashboardValidationError(
                code="invalid_category",
                message=f"Category must be one of: {', '.join(SECTION_CATEGORIES)}",
                field="category",
            )
        )

    return errors


class AdminSectionService:
    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    def _parse(self, raw: Any) -> AdminSection | None:
        doc = as_document(raw)
        if doc is None:
            return None
        try:
            return AdminSection.model_validate(doc)
        except ValidationError:
            logger.warning("Skipping malformed admin section %s", doc.get("id"))
            return None

    def _save(self, section: AdminSection) -> None:
        self._store.hset(SECTIONS_KEY, {section.id: section.to_store()})

    def _all(self) -> list[AdminSection]:
        return [s for s in map(self._parse, self._store.hgetall(SECTIONS_KEY).values()) if s]

    def list_active(self) -> list[AdminSection]:
        """Active sections, lowest priority number first."""
        return sorted((s for s in self._all() if s.is_active), key=lambda s: s.priority)

    def get(self, section_id: str) -> AdminSection | None:
        return self._parse(self._store.hget(SECTIONS_KEY, section_id))

    def create(
        self, data: dict[str, Any]
    ) -> tuple[AdminSection | None, list[DashboardValidationError]]:
        errors = validate_section_data(data)
        if errors:
            return None, errors

        now = self._clock.now_utc()
        fields = {k: v for k, v in data.items() if k not in _PROTECTED}
        fields.update(
            id=generate_id("section", now),
            usageCount=0,
            createdAt=to_iso(now),
            updatedAt=to_iso(now),
        )
        try:
            section = AdminSection.model_validate(fields)
        except ValidationError as e:
            return None, field_errors(e, DashboardValidationError)
        self._save(section)
        return section, []

    def update(
        self, section_id: str, updates: dict[str, Any]
    ) -> tuple[AdminSection | None, list[DashboardValidationError]]:
        existing = self.get(section_id)
        if existing is None:
            return None, [DashboardValidationError(code="not_found", message="Section not found")]

        errors = validate_section_data(updates, partial=True)
        if errors:
            return None, errors

        merged = existing.to_store()
        merged.update({k: v for k, v in updates.items() if k not in ("id", "createdAt")})
        merged["updatedAt"] = to_iso(self._clock.now_utc())
        try:
            updated = AdminSection.model_validate(merged)
        except ValidationError as e:
            return None, field_errors(e, DashboardValidationError)
        self._save(updated)
        return updated, []

    def delete(self, section_id: str) -> bool:
        return self._store.hdel(SECTIONS_KEY, section_id) > 0

    def record_usage(self, section_id: str, user_id: str | None = None) -> AdminSectionUsage | None:
        """
        Log one visit to a section.

        Returns None if the section does not exist.
        """
        section = self.get(section_id)
        if section is None:
            return None

        now = self._clock.now_utc()
        usage = AdminSectionUsage(
            id=generate_id("usage", now),
            section_id=section_id,
            accessed_at=to_iso(now),
            user_id=user_id,
        )
        self._store.hset(USAGE_KEY, {usage.id: usage.to_store()})
        self._save(
            section.model_copy(
                update={"usage_count": section.usage_count + 1, "last_used": usage.accessed_at}
            )
        )
        return usage

    def analytics(self) -> list[SectionAnalytics]:
        """Per active section usage totals, busiest first."""
        now = self._clock.now_utc()
        day_ago = now - timedelta(days=1)
        week_ago = now - timedelta(days=7)
        month_ago = now - timedelta(days=30)

        usage_by_section: dict[str, list[Any]] = {}
        for raw in self._store.hgetall(USAGE_KEY).values():
            doc = as_document(raw)
            if doc is None:
                continue
            accessed = parse_datetime(doc.get("accessedAt"))
            if accessed is not None:
                usage_by_section.setdefault(str(doc.get("sectionId")), []).append(accessed)

        results = []
        for section in self.list_active():
            stamps = usage_by_section.get(section.id, [])
            results.append(
                SectionAnalytics(
                    section_id=section.id,
                    title=section.title,
                    total_usage=section.usage_count,
                    daily_usage=sum(1 for t in stamps if t >= day_ago),
                    weekly_usage=sum(1 for t in stamps if t >= week_ago),
                    monthly_usage=sum(1 for t in stamps if t >= month_ago),
                    last_used=section.last_used or "",
                )
            )
        return sorted(results, key=lambda a: a.total_usage, reverse=True)

    def initialize_defaults(self) -> DefaultsReport:
        """
        Bring the section set in line with the defaults.

        Missing defaults are created (matched by link), existing ones get
        the default category and priority back, and duplicates sharing a
        link are removed keeping the first.
        """
        created = realigned = 0
        existing_by_href: dict[str, AdminSection] = {}
        for section in sorted(self._all(), key=lambda s: s.created_at):
            existing_by_href.setdefault(section.link_href, section)

        for default in DEFAULT_SECTIONS:
            existing = existing_by_href.get(default["linkHref"])
            if existing is None:
                self.create({**default, "isActive": True})
                created += 1
            elif (
                existing.category != default["category"]
                or existing.priority != default["priority"]
            ):
                self.update(
                    existing.id,
                    {
                        key: default[key]
                        for key in ("title", "description", "icon", "category", "priority")
                    },
                )
                realigned += 1

        seen: set[str] = set()
        duplicates: list[str] = []
        for section in sorted(self._all(), key=lambda s: s.created_at):
            if section.link_href in seen:
                duplicates.append(section.id)
            else:
                seen.add(section.link_href)
        if duplicates:
            self._store.hdel(SECTIONS_KEY, *duplicates)

        logger.info(
            "Admin sections initialized: %d created, %d realigned, %d duplicates removed",
            created,
            realigned,
            len(duplicates),
        )
        return DefaultsReport(
            created=created, realigned=realigned, duplicates_removed=len(duplicates)
        )


class AdminCategoryService:
    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    def _save(self, category: AdminCategory) -> None:
        self._store.hset(CATEGORIES_KEY, {category.id: category.to_store()})

    def initialize_defaults(self) -> int:
        """Seed the default categories when none exist. Returns the count added."""
        if self._store.hgetall(CATEGORIES_KEY):
            return 0
        for default in DEFAULT_CATEGORIES:
            self.add({**default, "isActive": True})
        return len(DEFAULT_CATEGORIES)

    def list_active(self) -> list[AdminCategory]:
        """
        Active categories by order.

        Seeds defaults when empty. Entries that cannot be parsed are
        deleted; if nothing valid remains the defaults are restored.
        """
        raw_entries = self._store.hgetall(CATEGORIES_KEY)
        if not raw_entries:
            self.initialize_defaults()
            raw_entries = self._store.hgetall(CATEGORIES_KEY)

        categories: list[AdminCategory] = []
        corrupted: list[str] = []
        for key, raw in raw_entries.items():
            doc = as_document(raw)
            if doc is None:
                corrupted.append(key)
                continue
            try:
                categories.append(AdminCategory.model_validate(doc))
            except ValidationError:
                corrupted.append(key)

        if corrupted:
            logger.warning("Dropping %d corrupted admin categories", len(corrupted))
            self._store.hdel(CATEGORIES_KEY, *corrupted)

        if not categories:
            self._store.delete(CATEGORIES_KEY)
            self.initialize_defaults()
            return self.list_active()

        return sorted((c for c in categories if c.is_active), key=lambda c: c.order)

    def get(self, category_id: str) -> AdminCategory | None:
        doc = as_document(self._store.hget(CATEGORIES_KEY, category_id))
        if doc is None:
            return None
        try:
            return AdminCategory.model_validate(doc)
        except ValidationError:
            return None

    def add(
        self, data: dict[str, Any]
    ) -> tuple[AdminCategory | None, list[DashboardValidationError]]:
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            return None, [
                DashboardValidationError(
                    code="name_required", message="Name is required", field="name"
                )
            ]

        now = self._clock.now_utc()
        fields = {k: v for k, v in data.items() if k not in ("id", "createdAt", "updatedAt")}
        fields.update(
            id=generate_id("cat", now),
            createdAt=to_iso(now),
            updatedAt=to_iso(now),
        )
        try:
            category = AdminCategory.model_validate(fields)
        except ValidationError as e:
            return None, field_errors(e, DashboardValidationError)
        self._save(category)
        return category, []

    def update(self, category_id: str, updates: dict[str, Any]) -> AdminCategory | None:
        """Merge ``updates`` into a category; raises pydantic ValidationError if invalid."""
        existing = self.get(category_id)
        if existing is None:
            return None
        merged = existing.to_store()
        merged.update({k: v for k, v in updates.items() if k not in ("id", "createdAt")})
        merged["updatedAt"] = to_iso(self._clock.now_utc())
        updated = AdminCategory.model_validate(merged)
        self._save(updated)
        return updated

    def delete(self, category_id: str) -> bool:
        return self._store.hdel(CATEGORIES_KEY, category_id) > 0

    def reorder(self, category_ids: list[str]) -> int:
        moved = 0
        for position, category_id in enumerate(category_ids):
            if self.update(category_id, {"order": position}) is not None:
                moved += 1
        return moved


def reset_dashboard(store: KVStorePort) -> None:
    """Delete every section and category so defaults are rebuilt on next use."""
    store.delete(SECTIONS_KEY, CATEGORIES_KEY)
    logger.info("Admin dashboard data reset")
