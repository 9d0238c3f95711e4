"""Category domain service."""

from typing import Optional
from txintel.database.base import Database
from txintel.domain.entities import Category
from txintel.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_name_not_found,
)


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str, parent_name: Optional[str] = None) -> int:
        """Create a category.

        Args:
            name: Category name, unique across the tree
            parent_name: Optional parent category name

        Returns:
            Category ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a category with this name exists
            NotFoundError: If the parent category doesn't exist
        """
        if not name or not name.strip():
            raise ValidationError("Category name is required")
        name = name.strip()
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")

        parent_id = None
        if parent_name is not None:
            parent_id = self.require_category_by_name(parent_name).id

        return self.db.create_category(name=name, parent_id=parent_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name, or None."""
        return self.db.get_category_by_name(name)

    def require_category_by_name(self, name: str) -> Category:
        """Get category by exact name.

        Raises:
            NotFoundError: If no category has this name
        """
        category = self.db.get_category_by_name(name)
        if category is None:
            raise NotFoundError(category_name_not_found(name))
        return category

    def list_categories(self, active_only: bool = False) -> list[Category]:
        """List categories ordered by name."""
        return self.db.list_categories(active_only=active_only)

    def category_names(self) -> dict[int, str]:
        """Map category IDs to names, for display."""
        return {cat.id: cat.name for cat in self.db.list_categories()}
