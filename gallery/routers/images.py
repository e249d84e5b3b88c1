# gallery/routers/images.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from gallery.core.errors import InvalidInput
from gallery.routers.deps import get_image_registry, require_admin
from gallery.schemas import ImageOut
from gallery.services.images import ImageRegistry
from gallery.services.sessions import AuthenticatedIdentity

router = APIRouter(prefix="/api", tags=["images"])


# --- upload a new image ---
@router.post("/upload", response_model=ImageOut)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    category_id: Optional[str] = Form(None, alias="categoryId"),
    identity: AuthenticatedIdentity = Depends(require_admin),
    images: ImageRegistry = Depends(get_image_registry),
):
    if image is None:
        raise InvalidInput("No image uploaded")

    content = await image.read()

    # Storage and DB calls block
    return await run_in_threadpool(
        images.create,
        content=content,
        filename=image.filename,
        content_type=image.content_type,
        category_id=category_id,
        uploaded_by=identity.username,
    )


# --- list images, optionally for one category ---
@router.get("/images", response_model=List[ImageOut])
def list_images(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    images: ImageRegistry = Depends(get_image_registry),
):
    # Empty value means "all categories"
    if not category_id:
        return images.list()
    try:
        return images.list(int(category_id))
    except ValueError:
        # No image can belong to a non-numeric category
        return []


# --- download an image ---
@router.get("/download/{image_id}")
def download_image(
    image_id: int,
    identity: AuthenticatedIdentity = Depends(require_admin),
    images: ImageRegistry = Depends(get_image_registry),
):
    return images.download(image_id)


# --- delete an image ---
@router.delete("/images/{image_id}")
def delete_image(
    image_id: int,
    identity: AuthenticatedIdentity = Depends(require_admin),
    images: ImageRegistry = Depends(get_image_registry),
):
    images.delete(image_id)
    return {"message": "Image deleted successfully"}
