"""
ReadingService - books and courses on the expertise page.

Storage layout:
- ``readings:all``          hash of reading id -> document
- ``readings:slugs``        hash of slug -> reading id
- ``readings:types:<type>`` set of reading ids per type (book, course)

Slugs carry a random suffix so two books with the same title can coexist.
"""

from __future__ import annotations

import logging
from typing import Any, get_args

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document, field_errors
from src.domain.entities import ReadingItem, ReadingType
from src.domain.text import generate_id, suffixed_slug
from src.domain.timeutil import to_iso

from .models import MigrationResult, ReadingCounts, ReadingValidationError

logger = logging.getLogger(__name__)

READINGS_KEY = "readings:all"
SLUGS_KEY = "readings:slugs"
TYPES_PREFIX = "readings:types"
LEGACY_BOOKS_KEY = "expertise:books:all"

READING_TYPES: tuple[str, ...] = get_args(ReadingType)


def _type_key(reading_type: str) -> str:
    return f"{TYPES_PREFIX}:{reading_type}"


def validate_reading_input(data: dict[str, Any]) -> list[ReadingValidationError]:
    """Validate a new reading's required fields."""
    errors: list[ReadingValidationError] = []

    for name, label in (
        ("title", "Title"),
        ("author", "Author"),
        ("impactOnThinking", "Impact on thinking"),
    ):
        value = data.get(name)
        if not isinstance(value, str) or not value.strip():
            errors.append(
                ReadingValidationError(
                    code=f"{name}_required", message=f"{label} is required", field=name
                )
            )

    if data.get("type") not in READING_TYPES:
        errors.append(
            ReadingValidationError(
                code="invalid_type",
                message='Type must be either "book" or "course"',
                field="type",
            )
        )

    return errors


class ReadingService:
    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    def _parse(self, raw: Any) -> ReadingItem | None:
        doc = as_document(raw)
        if doc is None:
            return None
        try:
            return ReadingItem.model_validate(doc)
        except ValidationError:
            logger.warning("Skipping malformed reading %s", doc.get("id"))
            return None

    def _save(self, reading: ReadingItem) -> None:
        self._store.hset(READINGS_KEY, {reading.id: reading.to_store()})

    # --- Reads ---

    def list_all(self) -> list[ReadingItem]:
        readings = [
            r for r in map(self._parse, self._store.hgetall(READINGS_KEY).values()) if r
        ]
        return sorted(readings, key=lambda r: r.order)

    def list_by_type(self, reading_type: str) -> list[ReadingItem]:
        return [r for r in self.list_all() if r.type == reading_type]

    def get_by_id(self, reading_id: str) -> ReadingItem | None:
        return self._parse(self._store.hget(READINGS_KEY, reading_id))

    def get_by_slug(self, slug: str) -> ReadingItem | None:
        reading_id = self._store.hget(SLUGS_KEY, slug)
        if reading_id:
            return self.get_by_id(str(reading_id))
        return next((r for r in self.list_all() if r.slug == slug), None)

    def resolve(self, slug_or_id: str) -> ReadingItem | None:
        return self.get_by_slug(slug_or_id) or self.get_by_id(slug_or_id)

    def counts(self) -> ReadingCounts:
        readings = self.list_all()
        return ReadingCounts(
            total=len(readings),
            books=sum(1 for r in readings if r.type == "book"),
            courses=sum(1 for r in readings if r.type == "course"),
        )

    # --- Writes ---

    def create(
        self, data: dict[str, Any]
    ) -> tuple[ReadingItem | None, list[ReadingValidationError]]:
        """
        Create a reading.

        ``order`` defaults to one past the current maximum.

        Returns:
            Tuple of (reading, errors). Reading is None if validation fails.
        """
        errors = validate_reading_input(data)
        if errors:
            return None, errors

        slug = data.get("slug") or suffixed_slug(data["title"])
        if self.get_by_slug(slug):
            return None, [
                ReadingValidationError(
                    code="slug_exists",
                    message=f'Reading with slug "{slug}" already exists',
                    field="slug",
                )
            ]

        existing = self.list_all()
        max_order = max((r.order for r in existing), default=0)
        order = data.get("order")

        now = self._clock.now_utc()
        try:
            reading = ReadingItem(
                id=generate_id("reading", now),
                slug=slug,
                title=data["title"],
                author=data["author"],
                type=data["type"],
                image_url=data.get("imageUrl") or None,
                impact_on_thinking=data["impactOnThinking"],
                notes=data.get("notes") or "",
                platform=data.get("platform") or None,
                duration=data.get("duration") or None,
                completion_date=data.get("completionDate") or None,
                order=order if order is not None else max_order + 1,
                created_at=to_iso(now),
                updated_at=to_iso(now),
            )
        except ValidationError as e:
            return None, field_errors(e, ReadingValidationError)

        self._save(reading)
        self._store.hset(SLUGS_KEY, {slug: reading.id})
        self._store.sadd(_type_key(reading.type), reading.id)
        logger.info("Created reading %s (%s)", reading.id, slug)
        return reading, []

    def update(
        self, reading_id: str, updates: dict[str, Any]
    ) -> tuple[ReadingItem | None, list[ReadingValidationError]]:
        """
        Update a reading.

        An explicit slug that belongs to another reading is rejected. A title
        change regenerates the slug, keeping the old one if the new slug is
        taken.
        """
        existing = self.get_by_id(reading_id)
        if existing is None:
            return None, [
                ReadingValidationError(code="not_found", message="Reading not found")
            ]

        new_type = updates.get("type")
        if new_type is not None and new_type not in READING_TYPES:
            return None, [
                ReadingValidationError(
                    code="invalid_type",
                    message='Type must be either "book" or "course"',
                    field="type",
                )
            ]

        new_slug = existing.slug
        requested_slug = updates.get("slug")
        new_title = updates.get("title")
        if requested_slug and requested_slug != existing.slug:
            holder = self.get_by_slug(requested_slug)
            if holder and holder.id != reading_id:
                return None, [
                    ReadingValidationError(
                        code="slug_exists",
                        message=f'Reading with slug "{requested_slug}" already exists',
                        field="slug",
                    )
                ]
            new_slug = requested_slug
        elif new_title and new_title != existing.title and not requested_slug:
            candidate = suffixed_slug(new_title)
            holder = self.get_by_slug(candidate)
            if holder is None or holder.id == reading_id:
                new_slug = candidate

        merged = existing.to_store()
        merged.update({k: v for k, v in updates.items() if k not in ("id", "createdAt")})
        merged["slug"] = new_slug
        merged["updatedAt"] = to_iso(self._clock.now_utc())
        try:
            updated = ReadingItem.model_validate(merged)
        except ValidationError as e:
            return None, field_errors(e, ReadingValidationError)

        self._save(updated)
        if new_slug != existing.slug:
            self._store.hdel(SLUGS_KEY, existing.slug)
            self._store.hset(SLUGS_KEY, {new_slug: reading_id})
        if updated.type != existing.type:
            self._store.srem(_type_key(existing.type), reading_id)
            self._store.sadd(_type_key(updated.type), reading_id)

        return updated, []

    def delete(self, reading_id: str) -> bool:
        reading = self.get_by_id(reading_id)
        if reading is None:
            return False
        self._store.hdel(READINGS_KEY, reading_id)
        self._store.hdel(SLUGS_KEY, reading.slug)
        self._store.srem(_type_key(reading.type), reading_id)
        return True

    def reorder(self, ordered_ids: list[str]) -> int:
        """Assign 1-based positions in list order. Unknown ids are skipped."""
        now = to_iso(self._clock.now_utc())
        moved = 0
        for position, reading_id in enumerate(ordered_ids, start=1):
            reading = self.get_by_id(reading_id)
            if reading is None:
                continue
            self._save(reading.model_copy(update={"order": position, "updated_at": now}))
            moved += 1
        return moved

    # --- Legacy import ---

    def migrate_books(self, books: list[dict[str, Any]] | None = None) -> MigrationResult:
        """
        Import legacy book entries as readings of type "book".

        When no books are given, entries are read from the old expertise
        books hash. Titles already present (case-insensitive) are skipped.
        """
        if books is None:
            books = [
                doc
                for doc in map(as_document, self._store.hgetall(LEGACY_BOOKS_KEY).values())
                if doc is not None
            ]

        result = MigrationResult()
        existing_titles = {r.title.lower() for r in self.list_all()}

        for book in books:
            title = str(book.get("title") or "")
            if title.lower() in existing_titles:
                result.skipped += 1
                result.details.append(
                    {"title": title, "status": "skipped", "error": "Already exists"}
                )
                continue

            commentary = book.get("commentary") or ""
            reading, errors = self.create(
                {
                    "title": title,
                    "author": book.get("author") or "",
                    "type": "book",
                    "imageUrl": book.get("imageUrl"),
                    "impactOnThinking": book.get("impactOnThinking")
                    or commentary
                    or "No impact description provided.",
                    "notes": f"<p>{commentary}</p>" if commentary else "",
                    "order": book.get("order") or result.migrated + 1,
                }
            )
            if reading is None:
                message = "; ".join(e.message for e in errors)
                result.failed += 1
                result.errors.append(f'Failed to migrate "{title}": {message}')
                result.details.append({"title": title, "status": "failed", "error": message})
                continue

            existing_titles.add(title.lower())
            result.migrated += 1
            result.details.append({"title": title, "status": "success", "newSlug": reading.slug})

        logger.info(
            "Book migration: %d migrated, %d skipped, %d failed",
            result.migrated,
            result.skipped,
            result.failed,
        )
        return result
