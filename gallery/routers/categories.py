# gallery/routers/categories.py
from typing import List

from fastapi import APIRouter, Depends

from gallery.routers.deps import get_category_registry, require_admin
from gallery.schemas import CategoryCreate, CategoryOut
from gallery.services.categories import CategoryRegistry
from gallery.services.sessions import AuthenticatedIdentity

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.post("", response_model=CategoryOut)
def create_category(
    payload: CategoryCreate,
    identity: AuthenticatedIdentity = Depends(require_admin),
    categories: CategoryRegistry = Depends(get_category_registry),
):
    return categories.create(payload.name)


@router.get("", response_model=List[CategoryOut])
def list_categories(categories: CategoryRegistry = Depends(get_category_registry)):
    return categories.list_all()
