"""
Gallery component - private folders and media.
"""

from ._impl import ALL_PHOTOS_ID, GalleryService, GalleryValidationError

__all__ = ["ALL_PHOTOS_ID", "GalleryService", "GalleryValidationError"]
