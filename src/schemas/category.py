"""Category schema definitions."""

from typing import Optional

from pydantic import BaseModel, Field


class Category(BaseModel):
    id: str = Field(description="Category identifier, equal to the slug.")
    name: str
    slug: str
    description: str = ""


class CreateCategoryRequest(BaseModel):
    name: str = ""
    description: Optional[str] = None
