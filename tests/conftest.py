"""
Pytest Configuration and Fixtures
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock

from voicecart.adapters.list_store import BaseListStore, InMemoryListStore
from voicecart.adapters.suggestions import BaseSuggestionProvider, RuleBasedSuggestionProvider
from voicecart.core.dispatcher import CommandDispatcher
from voicecart.core.intent_engine import CommandParser
from voicecart.schemas.items import ListItem


@pytest.fixture
def parser():
    return CommandParser()


@pytest.fixture
def milk_item():
    return ListItem(id="item_milk", name="milk", quantity=1, category="Dairy")


@pytest.fixture
def sample_items(milk_item):
    return [
        milk_item,
        ListItem(id="item_bread", name="whole wheat bread", quantity=1, category="Bakery"),
        ListItem(id="item_apples", name="apples", quantity=3, category="Produce", completed=True),
    ]


@pytest.fixture
def memory_store():
    return InMemoryListStore()


@pytest.fixture
def stocked_store(sample_items):
    return InMemoryListStore(items=sample_items)


@pytest.fixture
def mock_store():
    """Store that starts empty and accepts every write"""
    store = AsyncMock(spec=BaseListStore)
    store.list_items.return_value = []
    store.update.return_value = True
    store.remove.return_value = True
    store.clear.return_value = True
    return store


@pytest.fixture
def mock_provider():
    provider = AsyncMock(spec=BaseSuggestionProvider)
    provider.search.return_value = []
    provider.generate.return_value = []
    return provider


@pytest.fixture
def rule_provider():
    # Fixed date keeps the seasonal suggestions stable (summer)
    return RuleBasedSuggestionProvider(history_limit=50, today=lambda: date(2024, 7, 15))


@pytest.fixture
def dispatcher(memory_store):
    return CommandDispatcher(memory_store)
