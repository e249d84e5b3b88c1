# gallery/models/image.py
from sqlalchemy import Column, DateTime, Integer, String

from gallery.models.database import Base, utcnow


class Image(Base):
    __tablename__ = "images"
    # ids are never handed out twice, even after deletes
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    file_name = Column(String, nullable=False)          # Name we store under
    original_name = Column(String, nullable=False)      # Name user uploaded
    storage_ref = Column(String, nullable=False)        # Path under uploads dir, or object URL
    storage_public_id = Column(String, nullable=True)   # Remote deletion handle
    content_type = Column(String, nullable=False)
    size = Column(Integer, nullable=False)              # Size in bytes

    # Plain integer, no foreign key: images may point at unknown categories
    category_id = Column(Integer, nullable=False, index=True)

    uploaded_by = Column(String(50), nullable=False)
    uploaded_at = Column(DateTime, default=utcnow)
