"""
Image registry.

Owns image metadata; the bytes belong to the active ``Storage``. The two are
kept in step: a record is written only after its bytes are stored, and removed
only after its bytes are gone.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gallery.core.errors import (
    InvalidInput,
    NotFound,
    PayloadTooLarge,
    StorageFailure,
    UnsupportedMediaType,
)
from gallery.models.image import Image
from gallery.services.storage import Storage

ALLOWED_CONTENT_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
})


def parse_category_id(value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput("Valid categoryId required")


class ImageRegistry:
    def __init__(self, db: Session, storage: Storage, max_size: int):
        self.db = db
        self.storage = storage
        self.max_size = max_size

    def create(
        self,
        content: bytes,
        filename: str,
        content_type: str,
        category_id,
        uploaded_by: str,
    ) -> Image:
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise UnsupportedMediaType()
        if not content:
            raise InvalidInput("No image uploaded")
        if len(content) > self.max_size:
            raise PayloadTooLarge()
        category_id = parse_category_id(category_id)

        stored = self.storage.save(content, filename, content_type)

        image = Image(
            file_name=stored.file_name,
            original_name=filename or stored.file_name,
            storage_ref=stored.ref,
            storage_public_id=stored.public_id,
            content_type=content_type,
            size=len(content),
            category_id=category_id,
            uploaded_by=uploaded_by,
        )
        self.db.add(image)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Saving metadata for {} failed: {}", stored.ref, e)
            self._discard(stored.ref, stored.public_id)
            raise StorageFailure("Failed to upload image")

        self.db.refresh(image)
        logger.info(
            "Stored image {} ({} bytes) in category {} via {}",
            image.id,
            image.size,
            image.category_id,
            self.storage.name,
        )
        return image

    def _discard(self, ref: str, public_id: Optional[str]) -> None:
        try:
            self.storage.delete(ref, public_id)
        except StorageFailure:
            logger.error("Orphaned binary left at {}", ref)

    def list(self, category_id: Optional[int] = None) -> List[Image]:
        query = self.db.query(Image)
        if category_id is not None:
            query = query.filter(Image.category_id == category_id)
        return query.order_by(Image.id.asc()).all()

    def get(self, image_id: int) -> Image:
        image = self.db.get(Image, image_id)
        if image is None:
            raise NotFound("Image not found")
        return image

    def delete(self, image_id: int) -> None:
        image = self.get(image_id)

        # Raises StorageFailure and leaves the record untouched
        self.storage.delete(image.storage_ref, image.storage_public_id)

        self.db.delete(image)
        self.db.commit()
        logger.info("Deleted image {}", image_id)

    def download(self, image_id: int):
        return self.storage.download_response(self.get(image_id))
