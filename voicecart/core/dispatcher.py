"""
Command Dispatcher
Executes parsed intents against the shopping list store
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
import asyncio

from voicecart.adapters.list_store import BaseListStore, StoreError
from voicecart.adapters.suggestions import BaseSuggestionProvider
from voicecart.config.constants import (
    ActionType, Category, LogEventType, OutcomeError, VoiceResponses
)
from voicecart.config.settings import settings
from voicecart.core.intent_engine import AddIntent, Intent, RemoveIntent, SearchIntent
from voicecart.schemas.items import ListItem, Suggestion
from voicecart.schemas.logs import CommandLogPacket
import logging

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Result of executing one intent"""
    action: str
    success: bool
    message: str
    item: Optional[ListItem] = None
    matches: List[ListItem] = field(default_factory=list)
    suggestions: List[Suggestion] = field(default_factory=list)
    error: Optional[str] = None


class CommandDispatcher:
    """
    Owns the in-memory copy of the shopping list and applies intents to it.

    The list is mirrored from the store on first use. Every mutation goes to
    the store first and only touches the mirror once the store confirmed it,
    so a failed store call leaves the list exactly as it was. All mutating
    calls share one lock; two concurrent adds of the same name therefore
    produce one entry with the summed quantity.
    """

    def __init__(
        self,
        list_store: BaseListStore,
        suggestion_provider: Optional[BaseSuggestionProvider] = None,
        suggestion_timeout: Optional[float] = None
    ):
        self.store = list_store
        self.suggestions = suggestion_provider
        self.suggestion_timeout = (
            suggestion_timeout if suggestion_timeout is not None
            else settings.SUGGESTION_TIMEOUT_SECONDS
        )

        self._items: List[ListItem] = []
        self._loaded = False
        self._lock = asyncio.Lock()
        self._background = set()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def refresh(self) -> List[ListItem]:
        """Reload the list from the store"""
        async with self._lock:
            await self._load()
            return list(self._items)

    async def _load(self):
        self._items = list(await self.store.list_items())
        self._loaded = True
        logger.info(f"Loaded {len(self._items)} items from store")

    async def _ensure_loaded(self):
        if not self._loaded:
            await self._load()

    @property
    def items(self) -> List[ListItem]:
        return list(self._items)

    # ------------------------------------------------------------------
    # Intent execution
    # ------------------------------------------------------------------

    async def execute(
        self,
        intent: Intent,
        command_log: Optional[CommandLogPacket] = None
    ) -> Outcome:
        """Apply one intent. Never raises for store or provider failures."""
        async with self._lock:
            try:
                await self._ensure_loaded()
            except StoreError as e:
                logger.error(f"Cannot execute {intent.action}, list unavailable: {e}")
                self._log(command_log, LogEventType.STORE_FAILED, {"operation": "list", "error": str(e)})
                return Outcome(
                    action=intent.action,
                    success=False,
                    message=VoiceResponses.LIST_LOAD_FAILED,
                    error=OutcomeError.STORE_FAILURE
                )

            if isinstance(intent, AddIntent):
                return await self._handle_add(intent, command_log)
            elif isinstance(intent, RemoveIntent):
                return await self._handle_remove(intent, command_log)
            elif isinstance(intent, SearchIntent):
                return await self._handle_search(intent, command_log)

        raise TypeError(f"Unsupported intent: {intent!r}")

    async def _handle_add(self, intent: AddIntent, command_log) -> Outcome:
        existing = self._find_exact(intent.name)

        if existing is not None:
            new_quantity = existing.quantity + intent.quantity
            try:
                updated = await self.store.update(existing.id, {"quantity": new_quantity})
            except StoreError as e:
                logger.error(f"Failed to update '{existing.name}': {e}")
                updated = False

            if not updated:
                self._log(command_log, LogEventType.STORE_FAILED, {"operation": "update", "item_id": existing.id})
                return Outcome(
                    action=ActionType.ADD,
                    success=False,
                    message=VoiceResponses.ADD_FAILED.format(name=intent.name),
                    error=OutcomeError.STORE_FAILURE
                )

            item = existing.model_copy(update={
                "quantity": new_quantity,
                "updated_at": datetime.utcnow()
            })
            self._replace(item)
            self._log(command_log, LogEventType.ITEM_UPDATED, {
                "item_id": item.id,
                "name": item.name,
                "quantity": new_quantity
            })
            self._record_history(item)
            return Outcome(
                action=ActionType.ADD,
                success=True,
                message=VoiceResponses.QUANTITY_UPDATED.format(name=item.name, quantity=new_quantity),
                item=item
            )

        try:
            item = await self.store.add({
                "name": intent.name,
                "quantity": intent.quantity,
                "category": intent.category,
                "completed": False
            })
        except StoreError as e:
            logger.error(f"Failed to add '{intent.name}': {e}")
            self._log(command_log, LogEventType.STORE_FAILED, {"operation": "add", "error": str(e)})
            return Outcome(
                action=ActionType.ADD,
                success=False,
                message=VoiceResponses.ADD_FAILED.format(name=intent.name),
                error=OutcomeError.STORE_FAILURE
            )

        self._items.append(item)
        self._log(command_log, LogEventType.ITEM_ADDED, {
            "item_id": item.id,
            "name": item.name,
            "quantity": item.quantity,
            "category": item.category
        })
        self._record_history(item)
        return Outcome(
            action=ActionType.ADD,
            success=True,
            message=VoiceResponses.ITEM_ADDED.format(
                quantity=item.quantity, name=item.name, category=item.category
            ),
            item=item
        )

    async def _handle_remove(self, intent: RemoveIntent, command_log) -> Outcome:
        target = self._find_containing(intent.name)
        if target is None:
            self._log(command_log, LogEventType.ITEM_NOT_FOUND, {"name": intent.name})
            return Outcome(
                action=ActionType.REMOVE,
                success=False,
                message=VoiceResponses.ITEM_NOT_FOUND.format(name=intent.name),
                error=OutcomeError.NOT_FOUND
            )

        outcome = await self._remove_item(target, command_log)
        if outcome is not None:
            return outcome
        return Outcome(
            action=ActionType.REMOVE,
            success=True,
            message=VoiceResponses.ITEM_REMOVED.format(name=target.name),
            item=target
        )

    async def _remove_item(self, target: ListItem, command_log) -> Optional[Outcome]:
        """Delete through the store; returns a failed Outcome or None on success"""
        try:
            removed = await self.store.remove(target.id)
        except StoreError as e:
            logger.error(f"Failed to remove '{target.name}': {e}")
            removed = False

        if not removed:
            self._log(command_log, LogEventType.STORE_FAILED, {"operation": "remove", "item_id": target.id})
            return Outcome(
                action=ActionType.REMOVE,
                success=False,
                message=VoiceResponses.REMOVE_FAILED.format(name=target.name),
                item=target,
                error=OutcomeError.STORE_FAILURE
            )

        self._items = [i for i in self._items if i.id != target.id]
        self._log(command_log, LogEventType.ITEM_REMOVED, {"item_id": target.id, "name": target.name})
        return None

    async def _handle_search(self, intent: SearchIntent, command_log) -> Outcome:
        if self.suggestions is not None:
            try:
                results = await asyncio.wait_for(
                    self.suggestions.search(intent.query),
                    timeout=self.suggestion_timeout
                )
            except Exception as e:
                logger.warning(f"Suggestion search failed for '{intent.query}', using local list: {e}")
                results = []

            if results:
                self._log(command_log, LogEventType.SEARCH_COMPLETED, {
                    "query": intent.query,
                    "source": "suggestions",
                    "count": len(results)
                })
                return Outcome(
                    action=ActionType.SEARCH,
                    success=True,
                    message=VoiceResponses.SUGGESTIONS_FOUND.format(count=len(results), query=intent.query),
                    suggestions=list(results)
                )

        matches = self.search_local(intent.query)
        self._log(command_log, LogEventType.SEARCH_FALLBACK, {
            "query": intent.query,
            "count": len(matches)
        })
        if not matches:
            return Outcome(
                action=ActionType.SEARCH,
                success=False,
                message=VoiceResponses.NO_MATCHES.format(query=intent.query),
                error=OutcomeError.SEARCH_FAILURE
            )
        return Outcome(
            action=ActionType.SEARCH,
            success=True,
            message=VoiceResponses.LIST_MATCHES_FOUND.format(count=len(matches)),
            matches=matches
        )

    def search_local(self, query: str) -> List[ListItem]:
        """Items whose name contains the query"""
        q = query.strip().lower()
        if not q:
            return []
        return [
            item for item in self._items
            if q in item.name.lower()
        ]

    # ------------------------------------------------------------------
    # List management
    # ------------------------------------------------------------------

    async def _lookup_for_update(self, item_id: str):
        """Returns (item, None) or (None, failed Outcome)"""
        try:
            await self._ensure_loaded()
        except StoreError as e:
            logger.error(f"Cannot update item {item_id}, list unavailable: {e}")
            return None, Outcome(
                action=ActionType.UPDATE,
                success=False,
                message=VoiceResponses.LIST_LOAD_FAILED,
                error=OutcomeError.STORE_FAILURE
            )

        item = self._find_by_id(item_id)
        if item is None:
            return None, Outcome(
                action=ActionType.UPDATE,
                success=False,
                message=VoiceResponses.UPDATE_FAILED,
                error=OutcomeError.NOT_FOUND
            )
        return item, None

    async def set_quantity(self, item_id: str, quantity: int) -> Outcome:
        """Set an absolute quantity; zero or less removes the item"""
        async with self._lock:
            item, failed = await self._lookup_for_update(item_id)
            if failed is not None:
                return failed

            if quantity <= 0:
                failed = await self._remove_item(item, None)
                if failed is not None:
                    return failed
                return Outcome(
                    action=ActionType.REMOVE,
                    success=True,
                    message=VoiceResponses.ITEM_REMOVED.format(name=item.name),
                    item=item
                )

            patched = await self._patch(item, {"quantity": quantity})
            if patched.success:
                patched.message = VoiceResponses.QUANTITY_UPDATED.format(
                    name=item.name, quantity=quantity
                )
            return patched

    async def set_priority(self, item_id: str, priority: int) -> Outcome:
        async with self._lock:
            item, failed = await self._lookup_for_update(item_id)
            if failed is not None:
                return failed
            return await self._patch(item, {"priority": min(max(priority, 1), 5)})

    async def toggle_completed(self, item_id: str) -> Outcome:
        async with self._lock:
            item, failed = await self._lookup_for_update(item_id)
            if failed is not None:
                return failed
            return await self._patch(item, {"completed": not item.completed})

    async def _patch(self, item: ListItem, changes: dict) -> Outcome:
        try:
            updated = await self.store.update(item.id, changes)
        except StoreError as e:
            logger.error(f"Failed to update item {item.id}: {e}")
            updated = False

        if not updated:
            return Outcome(
                action=ActionType.UPDATE,
                success=False,
                message=VoiceResponses.UPDATE_FAILED,
                item=item,
                error=OutcomeError.STORE_FAILURE
            )

        patched = item.model_copy(update={**changes, "updated_at": datetime.utcnow()})
        self._replace(patched)
        return Outcome(
            action=ActionType.UPDATE,
            success=True,
            message=VoiceResponses.ITEM_UPDATED.format(name=patched.name),
            item=patched
        )

    async def clear(self) -> Outcome:
        async with self._lock:
            try:
                cleared = await self.store.clear()
            except StoreError as e:
                logger.error(f"Failed to clear shopping list: {e}")
                cleared = False

            if not cleared:
                return Outcome(
                    action=ActionType.CLEAR,
                    success=False,
                    message=VoiceResponses.CLEAR_FAILED,
                    error=OutcomeError.STORE_FAILURE
                )

            self._items = []
            self._loaded = True
            return Outcome(action=ActionType.CLEAR, success=True, message=VoiceResponses.LIST_CLEARED)

    def statistics(self) -> dict:
        total = len(self._items)
        completed = sum(1 for item in self._items if item.completed)

        by_category: Dict[str, int] = {}
        for item in self._items:
            category = item.category or Category.OTHER
            by_category[category] = by_category.get(category, 0) + 1

        return {
            "total": total,
            "completed": completed,
            "pending": total - completed,
            "by_category": by_category,
            "completion_rate": round(completed / total * 100) if total else 0
        }

    def export(self) -> dict:
        """Snapshot of the list for download, with its category grouping"""
        stats = self.statistics()
        return {
            "items": [item.model_dump(mode="json") for item in self._items],
            "categories": {
                category: [item.model_dump(mode="json") for item in items]
                for category, items in self.grouped().items()
            },
            "exported_at": datetime.utcnow().isoformat(),
            "total_items": stats["total"],
            "completed_items": stats["completed"],
        }

    def grouped(self) -> Dict[str, List[ListItem]]:
        """Items keyed by category, in first-seen order"""
        groups: Dict[str, List[ListItem]] = OrderedDict()
        for item in self._items:
            groups.setdefault(item.category or Category.OTHER, []).append(item)
        return dict(groups)

    # ------------------------------------------------------------------
    # Background work
    # ------------------------------------------------------------------

    def _record_history(self, item: ListItem):
        if self.suggestions is None:
            return
        task = asyncio.create_task(self.suggestions.record_history(item))
        self._background.add(task)
        task.add_done_callback(self._background_done)

    def _background_done(self, task: asyncio.Task):
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Background history update failed: {error}")

    async def drain_background(self):
        """Wait for outstanding history updates"""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _find_exact(self, name: str) -> Optional[ListItem]:
        key = name.lower()
        return next((item for item in self._items if item.name.lower() == key), None)

    def _find_containing(self, name: str) -> Optional[ListItem]:
        key = name.lower()
        return next((item for item in self._items if key in item.name.lower()), None)

    def _find_by_id(self, item_id: str) -> Optional[ListItem]:
        return next((item for item in self._items if item.id == item_id), None)

    def _replace(self, item: ListItem):
        self._items = [item if i.id == item.id else i for i in self._items]

    @staticmethod
    def _log(command_log: Optional[CommandLogPacket], event_type: str, data: dict):
        if command_log is not None:
            command_log.add_event(event_type, data)
