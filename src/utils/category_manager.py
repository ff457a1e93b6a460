"""Category management utilities."""

import logging
import re
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import MAX_CATEGORY_DESC_LEN, MAX_CATEGORY_NAME_LEN
from core.database import storage_guard, transaction
from core.exceptions import ConflictError, NotFoundError, ValidationError
from models.category import CategoryModel
from models.quiz import QuizModel
from schemas.category import Category
from utils.converters import model_to_category
from utils.validators import optional_text, require_text

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lower-case, collapse non-alphanumeric runs to '-', trim '-'."""
    return _NON_ALNUM.sub("-", value.lower()).strip("-")


class CategoryManager:
    """Manages quiz categories."""

    def __init__(self, db: Session):
        self.db = db

    @storage_guard
    def get_categories(self) -> List[Category]:
        models = self.db.query(CategoryModel).order_by(CategoryModel.name).all()
        return [model_to_category(m) for m in models]

    @storage_guard
    def get_category_by_id(self, category_id: str) -> Optional[Category]:
        model = (
            self.db.query(CategoryModel)
            .filter(CategoryModel.id == category_id)
            .first()
        )
        if model:
            return model_to_category(model)
        return None

    def create_category(self, name: str, description: Optional[str] = None) -> Category:
        """Create a category whose id is the slug of its name.

        Args:
            name: Display name, at most 40 characters.
            description: Optional description, at most 160 characters.

        Returns:
            The created Category.

        Raises:
            ValidationError: If the name is blank, too long or has no
                alphanumeric characters.
            ConflictError: If a category with the same slug exists.
        """
        name = require_text(name, "Category name", MAX_CATEGORY_NAME_LEN)
        description = (
            optional_text(description, "Category description", MAX_CATEGORY_DESC_LEN)
            or ""
        )
        slug = slugify(name)
        if not slug:
            raise ValidationError("Category name is invalid.")

        if self.get_category_by_id(slug) is not None:
            raise ConflictError("Category already exists.")

        model = CategoryModel(id=slug, name=name, slug=slug, description=description)
        try:
            with transaction(self.db):
                self.db.add(model)
        except IntegrityError as e:
            raise ConflictError("Category already exists.") from e

        logger.info("Created category: %s", slug)
        return model_to_category(model)

    def delete_category(self, category_id: str) -> None:
        """Delete an unused category.

        Raises:
            ConflictError: If any quiz still references the category.
            NotFoundError: If the category does not exist.
        """
        category_id = require_text(category_id, "Category", MAX_CATEGORY_NAME_LEN)

        try:
            with transaction(self.db):
                in_use = (
                    self.db.query(QuizModel.quiz_id)
                    .filter(QuizModel.category_id == category_id)
                    .first()
                )
                if in_use:
                    raise ConflictError("Category is in use.")

                deleted = (
                    self.db.query(CategoryModel)
                    .filter(CategoryModel.id == category_id)
                    .delete(synchronize_session=False)
                )
                if deleted == 0:
                    raise NotFoundError("Category not found.")
        except IntegrityError as e:
            # a quiz referencing the category was committed concurrently
            raise ConflictError("Category is in use.") from e

        logger.info("Deleted category: %s", category_id)
