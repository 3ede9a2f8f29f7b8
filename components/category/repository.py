"""Repository for category lookups."""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.category.models import Category, CATEGORY_KINDS
from components.core import exceptions


class CategoryRepository:
    """Owner-scoped category reads used by the ledger core."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_owned(self, owner_id: str, category_id: int) -> Category:
        """Get a category owned by the caller or raise NotFoundError."""
        result = await self.session.execute(
            select(Category).where(Category.id == category_id, Category.owner_id == owner_id)
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise exceptions.NotFoundError("Category not found for current user")
        return category

    async def find_by_name(self, owner_id: str, name: str) -> Optional[Category]:
        """Get the first category of the owner with an exact name."""
        result = await self.session.execute(
            select(Category)
            .where(Category.owner_id == owner_id, Category.name == name)
            .order_by(Category.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list(self, owner_id: str) -> List[Category]:
        result = await self.session.execute(
            select(Category).where(Category.owner_id == owner_id).order_by(Category.name)
        )
        return list(result.scalars().all())

    async def add(
        self,
        owner_id: str,
        name: str,
        kind: str,
        parent_id: Optional[int] = None,
    ) -> Category:
        """Stage a new category in the session. Used by seeding."""
        if kind not in CATEGORY_KINDS:
            raise exceptions.ValidationError(f"Unknown category kind: {kind}")
        category = Category(owner_id=owner_id, name=name, kind=kind, parent_id=parent_id)
        self.session.add(category)
        await self.session.flush()
        return category
