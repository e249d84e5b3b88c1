# gallery/schemas.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    # Missing fields fall through to the store's own "required" check
    username: str = ""
    password: str = ""


class CategoryCreate(BaseModel):
    name: str = ""


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime = Field(serialization_alias="createdAt")


class ImageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    file_name: str = Field(serialization_alias="fileName")
    original_name: str = Field(serialization_alias="originalName")
    storage_ref: str = Field(serialization_alias="storageRef")
    storage_public_id: Optional[str] = Field(None, serialization_alias="storagePublicId")
    content_type: str = Field(serialization_alias="contentType")
    size: int
    category_id: int = Field(serialization_alias="categoryId")
    uploaded_by: str = Field(serialization_alias="uploadedBy")
    uploaded_at: datetime = Field(serialization_alias="uploadedAt")
