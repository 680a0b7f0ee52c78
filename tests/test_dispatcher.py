"""
Tests for Command Dispatcher
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from voicecart.adapters.list_store import InMemoryListStore, StoreError, StoreUnavailableError
from voicecart.config.constants import ActionType, Category, LogEventType, OutcomeError
from voicecart.core.dispatcher import CommandDispatcher
from voicecart.core.intent_engine import AddIntent, RemoveIntent, SearchIntent
from voicecart.schemas.items import ListItem, Suggestion
from voicecart.schemas.logs import CommandLogPacket


class TestAdd:

    @pytest.mark.asyncio
    async def test_add_new_item(self, dispatcher, memory_store):
        outcome = await dispatcher.execute(AddIntent(name="milk", quantity=2, category=Category.DAIRY))

        assert outcome.success is True
        assert outcome.action == ActionType.ADD
        assert outcome.message == "Added 2 milk to your list (Dairy)."

        stored = await memory_store.list_items()
        assert len(stored) == 1
        assert stored[0].name == "milk"
        assert stored[0].quantity == 2
        assert stored[0].completed is False
        assert dispatcher.items == stored

    @pytest.mark.asyncio
    async def test_repeated_add_increments_existing_entry(self, milk_item):
        store = InMemoryListStore(items=[milk_item])
        dispatcher = CommandDispatcher(store)
        intent = AddIntent(name="milk", quantity=1, category=Category.DAIRY)

        await dispatcher.execute(intent)
        outcome = await dispatcher.execute(intent)

        stored = await store.list_items()
        assert len(stored) == 1
        assert stored[0].quantity == 3
        assert outcome.message == "Updated milk quantity to 3."

    @pytest.mark.asyncio
    async def test_exact_match_is_case_insensitive(self, milk_item):
        store = InMemoryListStore(items=[milk_item])
        dispatcher = CommandDispatcher(store)

        outcome = await dispatcher.execute(AddIntent(name="MILK", quantity=4))

        assert outcome.item.id == milk_item.id
        assert outcome.item.quantity == 5

    @pytest.mark.asyncio
    async def test_partial_name_is_a_new_entry(self, milk_item):
        store = InMemoryListStore(items=[milk_item])
        dispatcher = CommandDispatcher(store)

        await dispatcher.execute(AddIntent(name="oat milk"))

        assert [item.name for item in await store.list_items()] == ["milk", "oat milk"]

    @pytest.mark.asyncio
    async def test_store_add_failure_leaves_list_unchanged(self, mock_store):
        mock_store.add.side_effect = StoreError("write rejected")
        dispatcher = CommandDispatcher(mock_store)
        command_log = CommandLogPacket(command_id="cmd_test")

        outcome = await dispatcher.execute(AddIntent(name="milk"), command_log)

        assert outcome.success is False
        assert outcome.error == OutcomeError.STORE_FAILURE
        assert outcome.message == "Failed to add milk. Please try again."
        assert dispatcher.items == []
        assert command_log.events[-1].event_type == LogEventType.STORE_FAILED

    @pytest.mark.asyncio
    async def test_store_update_rejected_leaves_quantity_unchanged(self, mock_store, milk_item):
        mock_store.list_items.return_value = [milk_item]
        mock_store.update.return_value = False
        dispatcher = CommandDispatcher(mock_store)

        outcome = await dispatcher.execute(AddIntent(name="milk", quantity=2))

        assert outcome.success is False
        assert dispatcher.items[0].quantity == 1

    @pytest.mark.asyncio
    async def test_store_update_error_leaves_quantity_unchanged(self, mock_store, milk_item):
        mock_store.list_items.return_value = [milk_item]
        mock_store.update.side_effect = StoreError("timeout")
        dispatcher = CommandDispatcher(mock_store)

        outcome = await dispatcher.execute(AddIntent(name="milk"))

        assert outcome.error == OutcomeError.STORE_FAILURE
        assert dispatcher.items[0].quantity == 1

    @pytest.mark.asyncio
    async def test_add_is_not_idempotent(self, dispatcher):
        intent = AddIntent(name="eggs", quantity=6)
        await dispatcher.execute(intent)
        await dispatcher.execute(intent)
        assert dispatcher.items[0].quantity == 12

    @pytest.mark.asyncio
    async def test_concurrent_adds_do_not_duplicate(self):
        store = InMemoryListStore(latency=0.01)
        dispatcher = CommandDispatcher(store)
        intent = AddIntent(name="bread", category=Category.BAKERY)

        outcomes = await asyncio.gather(*[dispatcher.execute(intent) for _ in range(5)])

        assert all(outcome.success for outcome in outcomes)
        stored = await store.list_items()
        assert len(stored) == 1
        assert stored[0].quantity == 5


class TestHistory:

    @pytest.mark.asyncio
    async def test_added_items_forwarded_to_history(self, memory_store, mock_provider):
        dispatcher = CommandDispatcher(memory_store, mock_provider)

        await dispatcher.execute(AddIntent(name="milk"))
        await dispatcher.execute(AddIntent(name="milk"))
        await dispatcher.drain_background()

        assert mock_provider.record_history.await_count == 2
        recorded = mock_provider.record_history.await_args_list[-1].args[0]
        assert recorded.name == "milk"
        assert recorded.quantity == 2

    @pytest.mark.asyncio
    async def test_history_failure_does_not_fail_add(self, memory_store, mock_provider):
        mock_provider.record_history.side_effect = RuntimeError("recommender down")
        dispatcher = CommandDispatcher(memory_store, mock_provider)

        outcome = await dispatcher.execute(AddIntent(name="milk"))
        await dispatcher.drain_background()

        assert outcome.success is True
        assert len(await memory_store.list_items()) == 1

    @pytest.mark.asyncio
    async def test_failed_add_is_not_forwarded(self, mock_store, mock_provider):
        mock_store.add.side_effect = StoreError("write rejected")
        dispatcher = CommandDispatcher(mock_store, mock_provider)

        await dispatcher.execute(AddIntent(name="milk"))
        await dispatcher.drain_background()

        mock_provider.record_history.assert_not_awaited()


class TestRemove:

    @pytest.mark.asyncio
    async def test_remove_missing_item_on_empty_list(self, dispatcher, memory_store):
        command_log = CommandLogPacket(command_id="cmd_test")

        outcome = await dispatcher.execute(RemoveIntent(name="xyz"), command_log)

        assert outcome.success is False
        assert outcome.error == OutcomeError.NOT_FOUND
        assert outcome.message == "Item \"xyz\" not found in your list."
        assert await memory_store.list_items() == []
        assert command_log.events[-1].event_type == LogEventType.ITEM_NOT_FOUND

    @pytest.mark.asyncio
    async def test_remove_by_substring(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        outcome = await dispatcher.execute(RemoveIntent(name="Bread"))

        assert outcome.success is True
        assert outcome.item.name == "whole wheat bread"
        names = [item.name for item in await stocked_store.list_items()]
        assert names == ["milk", "apples"]

    @pytest.mark.asyncio
    async def test_remove_takes_first_match_only(self, sample_items):
        store = InMemoryListStore(items=sample_items + [
            ListItem(id="item_choc", name="chocolate milk", category=Category.DAIRY)
        ])
        dispatcher = CommandDispatcher(store)

        await dispatcher.execute(RemoveIntent(name="milk"))

        names = [item.name for item in await store.list_items()]
        assert "milk" not in names
        assert "chocolate milk" in names

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        first = await dispatcher.execute(RemoveIntent(name="apples"))
        second = await dispatcher.execute(RemoveIntent(name="apples"))

        assert first.success is True
        assert second.error == OutcomeError.NOT_FOUND
        assert len(await stocked_store.list_items()) == 2

    @pytest.mark.asyncio
    async def test_store_remove_failure_keeps_item(self, mock_store, milk_item):
        mock_store.list_items.return_value = [milk_item]
        mock_store.remove.side_effect = StoreError("timeout")
        dispatcher = CommandDispatcher(mock_store)

        outcome = await dispatcher.execute(RemoveIntent(name="milk"))

        assert outcome.success is False
        assert outcome.error == OutcomeError.STORE_FAILURE
        assert dispatcher.items == [milk_item]


class TestSearch:

    @pytest.mark.asyncio
    async def test_delegates_to_provider(self, stocked_store, mock_provider):
        mock_provider.search.return_value = [
            Suggestion(name="chicken breast", category=Category.MEAT),
            Suggestion(name="chicken thighs", category=Category.MEAT),
        ]
        dispatcher = CommandDispatcher(stocked_store, mock_provider)

        outcome = await dispatcher.execute(SearchIntent(query="chicken"))

        mock_provider.search.assert_awaited_once_with("chicken")
        assert outcome.success is True
        assert len(outcome.suggestions) == 2
        assert outcome.message == "Found 2 suggestions for \"chicken\"."

    @pytest.mark.asyncio
    async def test_provider_failure_falls_back_to_list(self, stocked_store, mock_provider):
        mock_provider.search.side_effect = RuntimeError("service unavailable")
        dispatcher = CommandDispatcher(stocked_store, mock_provider)
        command_log = CommandLogPacket(command_id="cmd_test")

        outcome = await dispatcher.execute(SearchIntent(query="bread"), command_log)

        assert outcome.success is True
        assert [item.name for item in outcome.matches] == ["whole wheat bread"]
        assert outcome.message == "Found 1 matching items in your list."
        assert command_log.events[-1].event_type == LogEventType.SEARCH_FALLBACK

    @pytest.mark.asyncio
    async def test_provider_timeout_falls_back_to_list(self, stocked_store):
        provider = AsyncMock()

        async def slow_search(query):
            await asyncio.sleep(1)
            return [Suggestion(name="late")]

        provider.search.side_effect = slow_search
        dispatcher = CommandDispatcher(stocked_store, provider, suggestion_timeout=0.01)

        outcome = await dispatcher.execute(SearchIntent(query="milk"))

        assert outcome.success is True
        assert outcome.suggestions == []
        assert [item.name for item in outcome.matches] == ["milk"]

    @pytest.mark.asyncio
    async def test_local_search_without_provider(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        outcome = await dispatcher.execute(SearchIntent(query="apple"))

        assert outcome.success is True
        assert [item.name for item in outcome.matches] == ["apples"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("query", ["produce", "her"])
    async def test_local_search_ignores_category(self, query):
        store = InMemoryListStore(items=[
            ListItem(id="item_widget", name="widget", category=Category.OTHER),
            ListItem(id="item_apples", name="apples", category=Category.PRODUCE),
        ])
        dispatcher = CommandDispatcher(store)

        outcome = await dispatcher.execute(SearchIntent(query=query))

        assert outcome.success is False
        assert outcome.matches == []
        assert outcome.error == OutcomeError.SEARCH_FAILURE

    @pytest.mark.asyncio
    async def test_no_matches_is_a_failure(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        outcome = await dispatcher.execute(SearchIntent(query="caviar"))

        assert outcome.success is False
        assert outcome.error == OutcomeError.SEARCH_FAILURE
        assert outcome.message == "No items found matching \"caviar\"."


class TestListManagement:

    @pytest.mark.asyncio
    async def test_list_load_failure(self, mock_store):
        mock_store.list_items.side_effect = StoreUnavailableError("offline")
        dispatcher = CommandDispatcher(mock_store)

        outcome = await dispatcher.execute(AddIntent(name="milk"))

        assert outcome.success is False
        assert outcome.error == OutcomeError.STORE_FAILURE
        mock_store.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_refresh_reloads_from_store(self, memory_store, milk_item):
        dispatcher = CommandDispatcher(memory_store)
        assert await dispatcher.refresh() == []

        memory_store.items[milk_item.id] = milk_item

        assert await dispatcher.refresh() == [milk_item]

    @pytest.mark.asyncio
    async def test_set_quantity(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        outcome = await dispatcher.set_quantity("item_milk", 7)

        assert outcome.success is True
        assert outcome.message == "Updated milk quantity to 7."
        assert stocked_store.items["item_milk"].quantity == 7

    @pytest.mark.asyncio
    async def test_set_quantity_zero_removes(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        outcome = await dispatcher.set_quantity("item_milk", 0)

        assert outcome.success is True
        assert outcome.action == ActionType.REMOVE
        assert "item_milk" not in stocked_store.items

    @pytest.mark.asyncio
    async def test_set_quantity_unknown_item(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        outcome = await dispatcher.set_quantity("nope", 2)

        assert outcome.success is False
        assert outcome.error == OutcomeError.NOT_FOUND

    @pytest.mark.asyncio
    async def test_set_priority_is_clamped(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        outcome = await dispatcher.set_priority("item_milk", 8)

        assert outcome.success is True
        assert outcome.item.priority == 5
        assert stocked_store.items["item_milk"].priority == 5

    @pytest.mark.asyncio
    async def test_toggle_completed(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)

        first = await dispatcher.toggle_completed("item_apples")
        assert first.item.completed is False

        second = await dispatcher.toggle_completed("item_apples")
        assert second.item.completed is True
        assert stocked_store.items["item_apples"].completed is True

    @pytest.mark.asyncio
    async def test_clear(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)
        await dispatcher.refresh()

        outcome = await dispatcher.clear()

        assert outcome.success is True
        assert dispatcher.items == []
        assert stocked_store.items == {}

    @pytest.mark.asyncio
    async def test_clear_failure_keeps_items(self, mock_store, milk_item):
        mock_store.list_items.return_value = [milk_item]
        mock_store.clear.side_effect = StoreError("offline")
        dispatcher = CommandDispatcher(mock_store)
        await dispatcher.refresh()

        outcome = await dispatcher.clear()

        assert outcome.success is False
        assert dispatcher.items == [milk_item]

    @pytest.mark.asyncio
    async def test_clear_rejected_by_store_keeps_items(self, mock_store, milk_item):
        mock_store.list_items.return_value = [milk_item]
        mock_store.clear.return_value = False
        dispatcher = CommandDispatcher(mock_store)
        await dispatcher.refresh()

        outcome = await dispatcher.clear()

        assert outcome.success is False
        assert outcome.error == OutcomeError.STORE_FAILURE
        assert dispatcher.items == [milk_item]

    @pytest.mark.asyncio
    async def test_export(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)
        await dispatcher.refresh()

        snapshot = dispatcher.export()

        assert [item["name"] for item in snapshot["items"]] == ["milk", "whole wheat bread", "apples"]
        assert [item["id"] for item in snapshot["categories"]["Produce"]] == ["item_apples"]
        assert snapshot["total_items"] == 3
        assert snapshot["completed_items"] == 1
        assert snapshot["items"][0]["priority"] == 3

    @pytest.mark.asyncio
    async def test_statistics(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)
        await dispatcher.refresh()

        stats = dispatcher.statistics()

        assert stats == {
            "total": 3,
            "completed": 1,
            "pending": 2,
            "by_category": {"Dairy": 1, "Bakery": 1, "Produce": 1},
            "completion_rate": 33
        }

    def test_statistics_empty(self, dispatcher):
        assert dispatcher.statistics()["completion_rate"] == 0

    @pytest.mark.asyncio
    async def test_grouped(self, stocked_store):
        dispatcher = CommandDispatcher(stocked_store)
        await dispatcher.execute(AddIntent(name="cheddar cheese", category=Category.DAIRY))

        groups = dispatcher.grouped()

        assert list(groups) == ["Dairy", "Bakery", "Produce"]
        assert [item.name for item in groups["Dairy"]] == ["milk", "cheddar cheese"]
