"""
Suggestion Providers
Best-effort recommendations: rule-based locally, OpenAI when configured
"""

from abc import ABC, abstractmethod
from collections import Counter, deque
from datetime import date
from typing import Callable, Iterable, List, Optional
import json
import re

from openai import AsyncOpenAI

from voicecart.config.settings import settings
from voicecart.core.categorizer import CATEGORY_TAXONOMY, categorize
from voicecart.schemas.items import ListItem, Suggestion
import logging

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 6
MAX_SEARCH_RESULTS = 10


class SuggestionError(Exception):
    """Raised when a suggestion provider cannot produce results"""
    pass


class BaseSuggestionProvider(ABC):
    """
    Base interface for recommenders
    Callers must treat every method as optional and failure-prone
    """

    @abstractmethod
    async def search(self, query: str) -> List[Suggestion]:
        """Candidate items for a spoken search query"""
        pass

    @abstractmethod
    async def record_history(self, item: ListItem) -> None:
        """Remember an item that was added to the list"""
        pass

    @abstractmethod
    async def generate(self, current_items: List[ListItem]) -> List[Suggestion]:
        """Suggestions for the current list"""
        pass


def _season_for(month: int) -> str:
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "fall"
    return "winter"


class RuleBasedSuggestionProvider(BaseSuggestionProvider):
    """
    Heuristic recommender

    Combines complementary items, seasonal produce, frequently bought items
    and household essentials. Works fully offline.
    """

    COMPLEMENTARY = {
        "milk": ["cereal", "cookies", "coffee"],
        "bread": ["butter", "jam", "lunch meat"],
        "pasta": ["pasta sauce", "parmesan cheese", "garlic"],
        "chicken": ["vegetables", "rice", "seasoning"],
    }

    SEASONAL = {
        "spring": ["asparagus", "strawberries", "peas"],
        "summer": ["tomatoes", "corn", "watermelon"],
        "fall": ["pumpkins", "apples", "squash"],
        "winter": ["citrus fruits", "root vegetables", "cabbage"],
    }

    ESSENTIALS = ["toilet paper", "paper towels", "dish soap", "laundry detergent"]

    def __init__(
        self,
        history_limit: Optional[int] = None,
        today: Callable[[], date] = date.today
    ):
        self.history = deque(maxlen=history_limit or settings.SUGGESTION_HISTORY_LIMIT)
        self.today = today

    async def record_history(self, item: ListItem) -> None:
        self.history.append(item.name.lower())

    async def search(self, query: str) -> List[Suggestion]:
        q = query.strip().lower()
        if not q:
            return []

        counts = Counter(self.history)
        catalog = [name for name, _ in counts.most_common()]
        for _, stems in CATEGORY_TAXONOMY:
            catalog.extend(stem for stem in stems if stem not in counts)

        results = []
        for name in catalog:
            if q in name or name in q:
                reason = (
                    f"Bought {counts[name]} times before" if name in counts
                    else f"Matches \"{query.strip()}\""
                )
                results.append(Suggestion(
                    name=name,
                    reason=reason,
                    type="search",
                    priority=2 if name in counts else 3,
                    category=categorize(name)
                ))
        return results[:MAX_SEARCH_RESULTS]

    async def generate(self, current_items: List[ListItem]) -> List[Suggestion]:
        current_names = [item.name.lower() for item in current_items]

        suggestions = []
        suggestions.extend(self._complementary(current_names))
        suggestions.extend(self._seasonal())
        suggestions.extend(self._frequent(current_names))
        suggestions.extend(self._essentials(current_names))

        return _dedupe(suggestions)[:MAX_SUGGESTIONS]

    def _complementary(self, current_names: List[str]) -> List[Suggestion]:
        suggestions = []
        for current in current_names:
            for key, complements in self.COMPLEMENTARY.items():
                if key not in current:
                    continue
                for complement in complements:
                    if complement not in current_names:
                        suggestions.append(Suggestion(
                            name=complement,
                            reason=f"Goes well with {key}",
                            type="complementary",
                            priority=2,
                            category=categorize(complement)
                        ))
        return suggestions[:3]

    def _seasonal(self) -> List[Suggestion]:
        season = _season_for(self.today().month)
        return [
            Suggestion(
                name=item,
                reason=f"{season} seasonal item",
                type="seasonal",
                priority=3,
                category=categorize(item)
            )
            for item in self.SEASONAL[season][:2]
        ]

    def _frequent(self, current_names: List[str]) -> List[Suggestion]:
        counts = Counter(self.history)
        frequent = [
            (name, count) for name, count in counts.most_common()
            if count >= 2 and name not in current_names
        ]
        return [
            Suggestion(
                name=name,
                reason=f"Frequently purchased ({count} times)",
                type="frequent",
                priority=2,
                category=categorize(name)
            )
            for name, count in frequent[:2]
        ]

    def _essentials(self, current_names: List[str]) -> List[Suggestion]:
        missing = [item for item in self.ESSENTIALS if item not in current_names]
        return [
            Suggestion(
                name=item,
                reason="Household essential",
                type="essential",
                priority=4,
                category=categorize(item)
            )
            for item in missing[:2]
        ]


def _dedupe(suggestions: Iterable[Suggestion]) -> List[Suggestion]:
    seen = set()
    unique = []
    for suggestion in suggestions:
        key = suggestion.name.lower()
        if key not in seen:
            seen.add(key)
            unique.append(suggestion)
    return unique


class OpenAISuggestionProvider(BaseSuggestionProvider):
    """
    Chat-completion recommender

    Any API error, missing key or unusable reply falls back to the
    rule-based provider, which also owns the purchase history.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        fallback: Optional[RuleBasedSuggestionProvider] = None,
        client: Optional[AsyncOpenAI] = None
    ):
        self.model = model or settings.OPENAI_MODEL
        self.fallback = fallback or RuleBasedSuggestionProvider()
        self.client = client

        api_key = api_key or settings.OPENAI_API_KEY
        if self.client is None and api_key:
            self.client = AsyncOpenAI(api_key=api_key)
        if self.client is None:
            logger.warning("OpenAI API key not configured, using rule-based suggestions")

    async def record_history(self, item: ListItem) -> None:
        await self.fallback.record_history(item)

    async def search(self, query: str) -> List[Suggestion]:
        try:
            suggestions = await self._complete(self._build_search_prompt(query))
        except SuggestionError as e:
            logger.error(f"AI search failed, using rules: {e}")
            suggestions = []
        if suggestions:
            return suggestions
        return await self.fallback.search(query)

    async def generate(self, current_items: List[ListItem]) -> List[Suggestion]:
        try:
            suggestions = await self._complete(self._build_list_prompt(current_items))
        except SuggestionError as e:
            logger.error(f"AI suggestions failed, using rules: {e}")
            suggestions = []
        if suggestions:
            return suggestions[:MAX_SUGGESTIONS]
        return await self.fallback.generate(current_items)

    async def _complete(self, prompt: str) -> List[Suggestion]:
        if self.client is None:
            return []

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=200,
                temperature=0.7
            )
            content = response.choices[0].message.content or ""
        except Exception as e:
            raise SuggestionError(f"OpenAI request failed: {e}") from e

        return self.parse_suggestions(content)

    @staticmethod
    def parse_suggestions(reply: str) -> List[Suggestion]:
        """Pull the first JSON array out of a model reply"""
        match = re.search(r"\[[\s\S]*\]", reply or "")
        if not match:
            return []

        try:
            raw_items = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing AI suggestions: {e}")
            return []

        suggestions = []
        for raw in raw_items:
            if not isinstance(raw, dict) or not raw.get("name"):
                continue
            try:
                priority = min(max(int(raw.get("priority", 3)), 1), 5)
            except (TypeError, ValueError):
                priority = 3
            name = str(raw["name"]).strip()
            suggestions.append(Suggestion(
                name=name,
                reason=raw.get("reason") or "AI recommendation",
                type="ai",
                priority=priority,
                category=categorize(name)
            ))
        return _dedupe(suggestions)

    def _recent_history(self) -> str:
        return ", ".join(list(self.fallback.history)[-20:]) or "none"

    def _build_search_prompt(self, query: str) -> str:
        return f"""You are a smart shopping assistant. The user asked to find: "{query}".
Suggest up to 5 specific grocery products that match the request.

Recent purchase history: {self._recent_history()}

Respond with ONLY a JSON array:
[{{"name": "item name", "reason": "brief reason", "priority": 1-5}}]"""

    def _build_list_prompt(self, current_items: List[ListItem]) -> str:
        current_list = ", ".join(item.name for item in current_items) or "empty"
        return f"""You are a smart shopping assistant. Based on the current shopping list and purchase history, suggest 5-7 complementary items.

Current shopping list: {current_list}
Recent purchase history: {self._recent_history()}
Current date: {date.today().isoformat()}

Respond with ONLY a JSON array:
[{{"name": "item name", "reason": "brief reason", "priority": 1-5}}]"""
