"""
List Store Adapters
The shopping list lives behind an async key-value style store
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from datetime import datetime
from uuid import uuid4
import asyncio

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError

from voicecart.config.constants import Category
from voicecart.schemas.items import ListItem
import logging

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base list store exception"""
    pass


class StoreUnavailableError(StoreError):
    """Raised when the backing store cannot be reached"""
    pass


UPDATABLE_FIELDS = ("name", "quantity", "category", "priority", "completed")


class BaseListStore(ABC):
    """
    Base interface for shopping list persistence
    Every call is treated as a remote, possibly failing, request
    """

    @abstractmethod
    async def add(self, entry: dict) -> ListItem:
        """
        Store a new entry

        Args:
            entry: Dict with name, quantity and category; priority and completed are optional

        Returns:
            The stored item, including its store-assigned id

        Raises:
            StoreError: If the store rejected the write
        """
        pass

    @abstractmethod
    async def list_items(self) -> List[ListItem]:
        """Return all stored items in insertion order"""
        pass

    @abstractmethod
    async def update(self, item_id: str, patch: dict) -> bool:
        """
        Apply a partial update

        Returns:
            True if the item existed and was updated
        """
        pass

    @abstractmethod
    async def remove(self, item_id: str) -> bool:
        """
        Delete an item

        Returns:
            True if the item existed and was deleted
        """
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """Delete every item"""
        pass


class InMemoryListStore(BaseListStore):
    """
    Process-local store, used when no database is configured
    Optional latency simulates a remote store for demos and tests
    """

    def __init__(self, latency: float = 0.0, items: Optional[List[ListItem]] = None):
        self.latency = latency
        self.items: Dict[str, ListItem] = {}
        for item in items or []:
            self.items[item.id] = item

    async def _simulate_latency(self):
        if self.latency > 0:
            await asyncio.sleep(self.latency)

    async def add(self, entry: dict) -> ListItem:
        await self._simulate_latency()

        item = ListItem(
            id=uuid4().hex,
            name=entry["name"],
            quantity=entry.get("quantity", 1),
            category=entry.get("category", Category.OTHER),
            priority=entry.get("priority", 3),
            completed=entry.get("completed", False),
        )
        self.items[item.id] = item
        return item

    async def list_items(self) -> List[ListItem]:
        await self._simulate_latency()
        return list(self.items.values())

    async def update(self, item_id: str, patch: dict) -> bool:
        await self._simulate_latency()

        item = self.items.get(item_id)
        if item is None:
            return False

        changes = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
        try:
            self.items[item_id] = ListItem.model_validate({
                **item.model_dump(),
                **changes,
                "updated_at": datetime.utcnow()
            })
        except ValidationError as e:
            raise StoreError(f"Invalid update for item {item_id}: {e}") from e
        return True

    async def remove(self, item_id: str) -> bool:
        await self._simulate_latency()
        return self.items.pop(item_id, None) is not None

    async def clear(self) -> bool:
        await self._simulate_latency()
        self.items.clear()
        return True


class SQLAlchemyListStore(BaseListStore):
    """Shopping list persisted in the shopping_items table"""

    def __init__(self, session_maker=None):
        if session_maker is None:
            from voicecart.db.database import async_session_maker
            session_maker = async_session_maker
        self.session_maker = session_maker

    @staticmethod
    def _to_item(row) -> ListItem:
        return ListItem(
            id=row.id,
            name=row.name,
            quantity=row.quantity,
            category=row.category,
            priority=row.priority,
            completed=row.completed,
            added_at=row.added_at,
            updated_at=row.updated_at
        )

    async def add(self, entry: dict) -> ListItem:
        from voicecart.db.models import ShoppingItem

        row = ShoppingItem(
            id=uuid4().hex,
            name=entry["name"],
            quantity=entry.get("quantity", 1),
            category=entry.get("category", Category.OTHER),
            priority=entry.get("priority", 3),
            completed=entry.get("completed", False),
            added_at=datetime.utcnow()
        )
        try:
            async with self.session_maker() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to add '{entry.get('name')}': {e}")
            raise StoreError(f"Failed to add item: {e}") from e

        return self._to_item(row)

    async def list_items(self) -> List[ListItem]:
        from voicecart.db.models import ShoppingItem

        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    select(ShoppingItem).order_by(ShoppingItem.added_at)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load shopping list: {e}")
            raise StoreUnavailableError(f"Failed to load items: {e}") from e

        return [self._to_item(row) for row in rows]

    async def update(self, item_id: str, patch: dict) -> bool:
        from voicecart.db.models import ShoppingItem

        values = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}
        values["updated_at"] = datetime.utcnow()
        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    update(ShoppingItem)
                    .where(ShoppingItem.id == item_id)
                    .values(**values)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update item {item_id}: {e}")
            raise StoreError(f"Failed to update item: {e}") from e

        return result.rowcount > 0

    async def remove(self, item_id: str) -> bool:
        from voicecart.db.models import ShoppingItem

        try:
            async with self.session_maker() as session:
                result = await session.execute(
                    delete(ShoppingItem).where(ShoppingItem.id == item_id)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to remove item {item_id}: {e}")
            raise StoreError(f"Failed to remove item: {e}") from e

        return result.rowcount > 0

    async def clear(self) -> bool:
        from voicecart.db.models import ShoppingItem

        try:
            async with self.session_maker() as session:
                await session.execute(delete(ShoppingItem))
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to clear shopping list: {e}")
            raise StoreError(f"Failed to clear items: {e}") from e

        return True
