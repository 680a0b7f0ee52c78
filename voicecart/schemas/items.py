"""
Shopping List Item Schemas
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from voicecart.config.constants import Category


class ListItem(BaseModel):
    """A stored shopping list entry, identified by an opaque store id"""
    id: str
    name: str
    quantity: int = Field(default=1, ge=1)
    category: str = Category.OTHER
    priority: int = Field(default=3, ge=1, le=5)
    completed: bool = False
    added_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None


class Suggestion(BaseModel):
    """A candidate item offered by a suggestion provider"""
    name: str
    reason: str = ""
    type: str = "search"  # "ai", "complementary", "seasonal", "frequent", "essential", "search"
    priority: int = Field(default=3, ge=1, le=5)
    category: str = Category.OTHER
