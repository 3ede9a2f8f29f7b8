"""Category model for the database."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey

from components.core.database import Base, utcnow


CATEGORY_KINDS = ("expense", "income", "transfer", "savings", "debt")


class Category(Base):
    """Category tagging ledger entries, rules and allocations."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    kind = Column(String(20), nullable=False)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
