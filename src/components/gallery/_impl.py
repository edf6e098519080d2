"""
GalleryService - private photo/video gallery.

Folders and media are each stored as one list document
(``gallery:folders`` and ``gallery:media``). The "all-photos" folder is
synthetic: it is never stored and always holds every media item.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import ValidationError

from src.core.ports.kv import KVStorePort
from src.core.ports.time import TimePort
from src.domain.entities import GalleryFolder, MediaItem
from src.domain.timeutil import to_iso

logger = logging.getLogger(__name__)

FOLDERS_KEY = "gallery:folders"
MEDIA_KEY = "gallery:media"
ALL_PHOTOS_ID = "all-photos"

_M = TypeVar("_M", GalleryFolder, MediaItem)


@dataclass(frozen=True)
class GalleryValidationError:
    code: str
    message: str
    field: str | None = None


_ALL_PHOTOS_LOCKED = GalleryValidationError(
    code="all_photos_locked", message="Cannot modify the All Photos folder"
)


class GalleryService:
    def __init__(self, store: KVStorePort, clock: TimePort) -> None:
        self._store = store
        self._clock = clock

    def _raw(self, key: str) -> list[Any]:
        """Stored entries as-is, including any this version cannot parse."""
        stored = self._store.get(key)
        return stored if isinstance(stored, list) else []

    def _parsed(self, key: str, model: type[_M]) -> list[_M]:
        parsed = []
        for doc in self._raw(key):
            if not isinstance(doc, dict):
                continue
            try:
                parsed.append(model.model_validate(doc))
            except ValidationError:
                logger.warning("Skipping malformed %s entry %s", key, doc.get("id"))
        return parsed

    def _folders(self) -> list[GalleryFolder]:
        return self._parsed(FOLDERS_KEY, GalleryFolder)

    def _media(self) -> list[MediaItem]:
        return self._parsed(MEDIA_KEY, MediaItem)

    def _replace(
        self, key: str, model: type[_M], item_id: str, updates: dict[str, Any]
    ) -> _M | None:
        """
        Merge ``updates`` into the stored entry with ``item_id``.

        Raises pydantic ValidationError when the result is invalid; other
        entries are written back untouched.
        """
        docs = self._raw(key)
        index = _index_of(docs, item_id)
        if index is None:
            return None
        changes = {k: v for k, v in updates.items() if k != "id"}
        item = model.model_validate({**docs[index], **changes})
        docs[index] = item.to_store()
        self._store.set(key, docs)
        return item

    def _remove(self, key: str, item_id: str) -> bool:
        docs = self._raw(key)
        index = _index_of(docs, item_id)
        if index is None:
            return False
        del docs[index]
        self._store.set(key, docs)
        return True

    def _all_photos(self, count: int) -> dict[str, Any]:
        return {
            "id": ALL_PHOTOS_ID,
            "name": "All",
            "itemCount": count,
            "createdAt": to_iso(self._clock.now_utc()),
            "isDefault": True,
        }

    # --- Folders ---

    def list_folders(self) -> list[dict[str, Any]]:
        """Folders with item counts, led by the synthetic "All" folder."""
        media = self._media()
        listing = [self._all_photos(len(media))]
        for folder in self._folders():
            if folder.id == ALL_PHOTOS_ID:
                continue
            count = sum(1 for m in media if m.folder_id == folder.id)
            listing.append({**folder.to_store(), "itemCount": count})
        return listing

    def get_folder(self, folder_id: str) -> dict[str, Any] | None:
        media = self._media()
        if folder_id == ALL_PHOTOS_ID:
            return self._all_photos(len(media))
        folder = next((f for f in self._folders() if f.id == folder_id), None)
        if folder is None:
            return None
        count = sum(1 for m in media if m.folder_id == folder_id)
        return {**folder.to_store(), "itemCount": count}

    def create_folder(
        self, name: Any
    ) -> tuple[GalleryFolder | None, list[GalleryValidationError]]:
        if not isinstance(name, str) or not name.strip():
            return None, [
                GalleryValidationError(
                    code="name_required", message="Folder name is required", field="name"
                )
            ]
        folder = GalleryFolder(
            id=str(uuid.uuid4()),
            name=name.strip(),
            created_at=to_iso(self._clock.now_utc()),
        )
        self._store.set(FOLDERS_KEY, [*self._raw(FOLDERS_KEY), folder.to_store()])
        return folder, []

    def update_folder(
        self, folder_id: str, updates: dict[str, Any]
    ) -> tuple[GalleryFolder | None, list[GalleryValidationError]]:
        if folder_id == ALL_PHOTOS_ID:
            return None, [_ALL_PHOTOS_LOCKED]
        return self._replace(FOLDERS_KEY, GalleryFolder, folder_id, updates), []

    def delete_folder(self, folder_id: str) -> tuple[bool, list[GalleryValidationError]]:
        """Remove a folder; its media stay in the gallery without a folder."""
        if folder_id == ALL_PHOTOS_ID:
            return False, [_ALL_PHOTOS_LOCKED]
        if not self._remove(FOLDERS_KEY, folder_id):
            return False, []
        media = self._raw(MEDIA_KEY)
        for doc in media:
            if isinstance(doc, dict) and doc.get("folderId") == folder_id:
                doc["folderId"] = None
        self._store.set(MEDIA_KEY, media)
        return True, []

    # --- Media ---

    def list_media(self, folder_id: str | None = None) -> list[MediaItem]:
        media = self._media()
        if not folder_id or folder_id == ALL_PHOTOS_ID:
            return media
        return [m for m in media if m.folder_id == folder_id]

    def get_media(self, media_id: str) -> MediaItem | None:
        return next((m for m in self._media() if m.id == media_id), None)

    def add_media(
        self, data: dict[str, Any]
    ) -> tuple[MediaItem | None, list[GalleryValidationError]]:
        """Add a media item at the front of the gallery. url, name and type are required."""
        missing = [name for name in ("url", "name", "type") if not data.get(name)]
        if missing:
            return None, [
                GalleryValidationError(
                    code="missing_field", message=f"{name} is required", field=name
                )
                for name in missing
            ]
        fields = dict(data)
        fields["id"] = data.get("id") or str(uuid.uuid4())
        fields["uploadDate"] = data.get("uploadDate") or to_iso(self._clock.now_utc())
        item = MediaItem.model_validate(fields)
        self._store.set(MEDIA_KEY, [item.to_store(), *self._raw(MEDIA_KEY)])
        return item, []

    def update_media(self, media_id: str, updates: dict[str, Any]) -> MediaItem | None:
        return self._replace(MEDIA_KEY, MediaItem, media_id, updates)

    def delete_media(self, media_id: str) -> bool:
        return self._remove(MEDIA_KEY, media_id)


def _index_of(docs: list[Any], item_id: str) -> int | None:
    return next(
        (i for i, d in enumerate(docs) if isinstance(d, dict) and d.get("id") == item_id),
        None,
    )
