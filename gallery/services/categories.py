# gallery/services/categories.py
from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from gallery.core.errors import InvalidInput
from gallery.models.category import Category


class CategoryRegistry:
    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str) -> Category:
        name = (name or "").strip()
        if not name:
            raise InvalidInput("Category name required")

        category = Category(name=name)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        logger.info("Created category {} ({})", category.id, category.name)
        return category

    def get(self, category_id: int) -> Optional[Category]:
        return self.db.get(Category, category_id)

    def list_all(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.id.asc()).all()
