"""
Command Parsing Engine
Rule-based conversion of a transcript into a structured shopping intent
"""

import re
from dataclasses import dataclass
from typing import Annotated, Callable, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from voicecart.config.constants import ActionType, Category
from voicecart.core.categorizer import Categorizer
from voicecart.core.extractor import ExtractionError, ItemExtractor
import logging

logger = logging.getLogger(__name__)


def _required_text(value: str) -> str:
    value = " ".join((value or "").split())
    if not value:
        raise ValueError("must not be empty")
    return value


class AddIntent(BaseModel):
    """Add `quantity` of `name` to the list, filed under `category`"""
    model_config = ConfigDict(frozen=True)

    action: Literal["add"] = ActionType.ADD
    name: str
    quantity: int = Field(default=1, ge=1)
    category: str = Category.OTHER

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return _required_text(value)

    @property
    def key(self) -> str:
        return self.name.lower()


class RemoveIntent(BaseModel):
    """Remove the first list entry whose name contains `name`"""
    model_config = ConfigDict(frozen=True)

    action: Literal["remove"] = ActionType.REMOVE
    name: str

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return _required_text(value)

    @property
    def key(self) -> str:
        return self.name.lower()


class SearchIntent(BaseModel):
    """Look up `query` with the suggestion provider or in the list"""
    model_config = ConfigDict(frozen=True)

    action: Literal["search"] = ActionType.SEARCH
    query: str

    @field_validator("query")
    @classmethod
    def clean_query(cls, value: str) -> str:
        return _required_text(value)

    @property
    def key(self) -> str:
        return self.query.lower()


Intent = Annotated[Union[AddIntent, RemoveIntent, SearchIntent], Field(discriminator="action")]


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

_LIST = r"(?:my|the|our)\s+(?:(?:shopping|grocery)\s+)?(?:list|cart)"
_LIST_OR_SHOPPING = r"(?:" + _LIST + r"|(?:my|the|our)\s+shopping)"
_ADD_SUFFIX = r"(?:\s+(?:to|on|onto|in|into)\s+" + _LIST_OR_SHOPPING + r")?"
_REMOVE_SUFFIX = r"(?:\s+(?:from|off|off\s+of)\s+" + _LIST + r")?"
_SEARCH_SUFFIX = r"(?:\s+(?:on|in)\s+" + _LIST + r")?"

# A captured phrase that is only a list target or verb complement has no item
_EMPTY_PHRASE = re.compile(
    r"(?:(?:to|on|onto|in|into|from|off(?:\s+of)?)\s+" + _LIST_OR_SHOPPING + r"|to\s+(?:buy|get))",
    re.IGNORECASE
)


def _rule(pattern: str) -> "re.Pattern":
    return re.compile(pattern, re.IGNORECASE)


ADD_RULES: List[Tuple[str, "re.Pattern"]] = [
    ("add_put", _rule(r"(?:add|put)\s+(?P<item>.+?)" + _ADD_SUFFIX)),
    ("need_want", _rule(r"i\s+(?:need|want)\s+(?:to\s+(?:buy|get)\s+)?(?P<item>.+?)" + _ADD_SUFFIX)),
    ("get_buy", _rule(r"(?:get\s+me|buy|purchase)\s+(?P<item>.+?)" + _ADD_SUFFIX)),
    ("item_to_list", _rule(r"(?P<item>.+?)\s+to\s+" + _LIST_OR_SHOPPING)),
]

REMOVE_RULES: List[Tuple[str, "re.Pattern"]] = [
    ("remove_delete", _rule(r"(?:remove|delete)\s+(?P<item>.+?)" + _REMOVE_SUFFIX)),
    ("take_cross_off", _rule(r"(?:take|cross)\s+off\s+(?P<item>.+?)" + _REMOVE_SUFFIX)),
    ("take_cross_item_off", _rule(r"(?:take|cross)\s+(?P<item>.+?)\s+off(?:\s+(?:of\s+)?" + _LIST + r")?")),
    ("item_off_list", _rule(r"(?P<item>.+?)\s+off\s+(?:of\s+)?" + _LIST)),
]

SEARCH_RULES: List[Tuple[str, "re.Pattern"]] = [
    ("find", _rule(r"find\s+(?P<item>.+?)" + _SEARCH_SUFFIX)),
    ("search_for", _rule(r"search\s+for\s+(?P<item>.+?)" + _SEARCH_SUFFIX)),
    ("look_for", _rule(r"look\s+for\s+(?P<item>.+?)" + _SEARCH_SUFFIX)),
    ("show_me", _rule(r"show\s+me\s+(?P<item>.+?)" + _SEARCH_SUFFIX)),
]


@dataclass(frozen=True)
class ParseRule:
    """A named matcher and the builder that turns its item phrase into an intent"""
    name: str
    pattern: "re.Pattern"
    build: Callable[[str], Optional[BaseModel]]


class CommandParser:
    """
    Ordered-rule command parser.

    Families are tried add -> remove -> search and rules inside a family in
    list order; the first rule whose pattern matches the whole normalized
    command is authoritative, even if a later rule would also match.
    """

    def __init__(
        self,
        extractor: Optional[ItemExtractor] = None,
        categorizer: Optional[Categorizer] = None
    ):
        self.extractor = extractor or ItemExtractor()
        self.categorizer = categorizer or Categorizer()
        self.rules: List[ParseRule] = (
            [ParseRule(name, pattern, self._build_add) for name, pattern in ADD_RULES]
            + [ParseRule(name, pattern, self._build_remove) for name, pattern in REMOVE_RULES]
            + [ParseRule(name, pattern, self._build_search) for name, pattern in SEARCH_RULES]
        )

    @staticmethod
    def normalize(transcript: str) -> str:
        """Trim, collapse whitespace and drop trailing sentence punctuation"""
        text = " ".join((transcript or "").split())
        return text.rstrip(".!?,").strip()

    def parse(self, transcript: str) -> Optional[Intent]:
        _, intent = self.parse_with_rule(transcript)
        return intent

    def parse_with_rule(self, transcript: str) -> Tuple[Optional[str], Optional[Intent]]:
        """Parse and also report which rule produced the intent"""
        command = self.normalize(transcript)
        if not command:
            return None, None

        for rule in self.rules:
            match = rule.pattern.fullmatch(command)
            if match is None:
                continue

            intent = rule.build(self._item_phrase(match.group("item")))
            if intent is None:
                logger.info(f"Rule '{rule.name}' matched '{command}' but produced no item")
                return rule.name, None

            logger.info(f"Parsed intent: {intent.action} via '{rule.name}' from '{command}'")
            return rule.name, intent

        logger.info(f"No rule matched '{command}'")
        return None, None

    @staticmethod
    def _item_phrase(captured: str) -> str:
        phrase = captured.strip()
        if _EMPTY_PHRASE.fullmatch(phrase):
            return ""
        return phrase

    def _build_add(self, phrase: str) -> Optional[AddIntent]:
        try:
            item = self.extractor.extract(phrase)
        except ExtractionError as e:
            logger.warning(f"Item extraction failed: {e}")
            return None

        return AddIntent(
            name=item.name,
            quantity=item.quantity,
            category=self.categorizer.categorize(item.name)
        )

    def _build_remove(self, phrase: str) -> Optional[RemoveIntent]:
        name = phrase.strip()
        if not name:
            return None
        return RemoveIntent(name=name)

    def _build_search(self, phrase: str) -> Optional[SearchIntent]:
        query = phrase.strip()
        if not query:
            return None
        return SearchIntent(query=query)
