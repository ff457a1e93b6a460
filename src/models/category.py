from sqlalchemy import Column, String

from .base import Base


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(String, primary_key=True, index=True)  # same value as slug
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    description = Column(String, nullable=False, default="")
