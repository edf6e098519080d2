"""
Ordered expertise collections: certifications, competitions and areas.

Each collection lives in a hash ``expertise:<name>:all`` (id -> document)
with a companion id set ``expertise:<name>:ids``. Items carry an ``order``
field and are always listed ascending by it.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.documents import as_document
from src.domain.entities import Certification, Competition, ExpertiseArea, StoredModel
from src.domain.text import generate_id
from src.domain.timeutil import to_iso

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=StoredModel)

IMMUTABLE_FIELDS = ("id", "createdAt", "created_at")


class OrderedCollectionService(Generic[ItemT]):
    """CRUD plus reordering over one expertise collection."""

    def __init__(
        self,
        store: KVStorePort,
        clock: TimePort,
        *,
        name: str,
        id_prefix: str,
        model: type[ItemT],
    ) -> None:
        self._store = store
        self._clock = clock
        self.name = name
        self.id_prefix = id_prefix
        self._model = model

    @property
    def hash_key(self) -> str:
        return f"expertise:{self.name}:all"

    @property
    def ids_key(self) -> str:
        return f"expertise:{self.name}:ids"

    def _parse(self, raw: Any) -> ItemT | None:
        doc = as_document(raw)
        if doc is None:
            return None
        try:
            return self._model.model_validate(doc)
        except ValidationError:
            logger.warning("Skipping malformed %s entry %s", self.name, doc.get("id"))
            return None

    def _save(self, item: Any) -> None:
        self._store.hset(self.hash_key, {item.id: item.to_store()})

    def list_all(self) -> list[ItemT]:
        items = [i for i in map(self._parse, self._store.hgetall(self.hash_key).values()) if i]
        return sorted(items, key=lambda i: i.order)  # type: ignore[attr-defined]

    def get(self, item_id: str) -> ItemT | None:
        return self._parse(self._store.hget(self.hash_key, item_id))

    def create(self, data: dict[str, Any], preserve_id: str | None = None) -> ItemT:
        """
        Create an item.

        Raises:
            pydantic.ValidationError: if required fields are missing.
        """
        now = self._clock.now_utc()
        fields = {k: v for k, v in data.items() if k not in IMMUTABLE_FIELDS}
        fields["id"] = preserve_id or generate_id(self.id_prefix, now)
        fields["createdAt"] = to_iso(now)
        item = self._model.model_validate(fields)

        self._save(item)
        self._store.sadd(self.ids_key, item.id)  # type: ignore[attr-defined]
        logger.info("Created %s item %s", self.name, item.id)  # type: ignore[attr-defined]
        return item

    def update(self, item_id: str, updates: dict[str, Any]) -> ItemT | None:
        """Merge updates into an item. id and createdAt never change."""
        existing = self.get(item_id)
        if existing is None:
            return None
        merged = existing.to_store()
        merged.update({k: v for k, v in updates.items() if k not in IMMUTABLE_FIELDS})
        updated = self._model.model_validate(merged)
        self._save(updated)
        return updated

    def delete(self, item_id: str) -> bool:
        removed = self._store.hdel(self.hash_key, item_id)
        self._store.srem(self.ids_key, item_id)
        return removed > 0

    def reorder(self, ordered_ids: list[str]) -> int:
        """Assign each listed item its 0-based position. Unknown ids are skipped."""
        current = {i.id: i for i in self.list_all()}  # type: ignore[attr-defined]
        updates: dict[str, Any] = {}
        for position, item_id in enumerate(ordered_ids):
            item = current.get(item_id)
            if item is None:
                continue
            updates[item_id] = item.model_copy(update={"order": position}).to_store()
        if updates:
            self._store.hset(self.hash_key, updates)
        return len(updates)

    def import_items(self, items: list[dict[str, Any]]) -> tuple[int, int, list[str]]:
        """
        Bulk-create items keeping their ids.

        Returns (migrated, skipped, errors); items whose id already exists
        are skipped.
        """
        existing = set(self._store.hgetall(self.hash_key))
        migrated, skipped, errors = 0, 0, []
        for data in items:
            item_id = data.get("id")
            if item_id in existing:
                skipped += 1
                continue
            try:
                self.create(data, preserve_id=item_id)
            except ValidationError as e:
                errors.append(f"{self.name} {item_id or '?'}: {e.error_count()} invalid field(s)")
                continue
            migrated += 1
        return migrated, skipped, errors

    def clear(self) -> None:
        self._store.delete(self.hash_key, self.ids_key)


class ExpertiseService:
    """The three expertise collections behind one handle."""

    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self.certifications = OrderedCollectionService(
            store, clock, name="certifications", id_prefix="cert", model=Certification
        )
        self.competitions = OrderedCollectionService(
            store, clock, name="competitions", id_prefix="comp", model=Competition
        )
        self.areas = OrderedCollectionService(
            store, clock, name="areas", id_prefix="area", model=ExpertiseArea
        )

    def collection(self, name: str) -> OrderedCollectionService[Any] | None:
        return {
            "certifications": self.certifications,
            "competitions": self.competitions,
            "areas": self.areas,
        }.get(name)

    def clear_all(self) -> None:
        """Remove every expertise collection."""
        for collection in (self.certifications, self.competitions, self.areas):
            collection.clear()
        logger.info("Cleared all expertise data")
