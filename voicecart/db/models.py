"""
Database Models
Shopping list entries for the SQLAlchemy list store
"""

from sqlalchemy import Column, String, Integer, DateTime, Boolean, Index, CheckConstraint
from datetime import datetime
import uuid

from voicecart.db.database import Base


class ShoppingItem(Base):
    """One line on the shopping list"""
    __tablename__ = "shopping_items"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    category = Column(String(50), nullable=False, default="Other")
    priority = Column(Integer, nullable=False, default=3)
    completed = Column(Boolean, nullable=False, default=False)

    # Timestamps
    added_at = Column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('quantity >= 1', name='positive_quantity'),
        CheckConstraint('priority BETWEEN 1 AND 5', name='priority_range'),
        Index('idx_shopping_items_added', 'added_at'),
    )

    def __repr__(self):
        return f"<ShoppingItem {self.name} x{self.quantity}>"
