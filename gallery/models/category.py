# gallery/models/category.py
from sqlalchemy import Column, DateTime, Integer, String

from gallery.models.database import Base, utcnow


class Category(Base):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=utcnow)
