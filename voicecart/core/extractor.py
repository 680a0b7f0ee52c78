"""
Item Extraction
Splits an item phrase into a display name and a quantity
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from voicecart.core.quantity import QuantityResolver
import logging

logger = logging.getLogger(__name__)


class ExtractionError(ValueError):
    """Raised when a phrase resolves to an empty item name"""
    pass


@dataclass(frozen=True)
class ExtractedItem:
    name: str
    quantity: int = 1


_QTY = r"(?P<qty>\d+|" + "|".join(QuantityResolver.known_words()) + r")"

# Tried in order, first match wins
_PHRASE_PATTERNS: List[Tuple[str, "re.Pattern"]] = [
    # "two bottles of milk", "a loaf of bread", "3 cans of beans"
    ("quantity_unit_of", re.compile(_QTY + r"\s+(?P<unit>[a-z]+)\s+of\s+(?P<item>.+)", re.IGNORECASE)),
    # "3 apples", "two lemons", "a banana"
    ("leading_quantity", re.compile(_QTY + r"\s+(?P<item>.+)", re.IGNORECASE)),
]


class ItemExtractor:
    """Detects quantity/unit phrasing and resolves the quantity token"""

    def __init__(self, quantity_resolver: Optional[QuantityResolver] = None):
        self.quantity_resolver = quantity_resolver or QuantityResolver()

    def extract(self, phrase: str) -> ExtractedItem:
        text = " ".join((phrase or "").split())

        for pattern_name, pattern in _PHRASE_PATTERNS:
            match = pattern.fullmatch(text)
            if match is None:
                continue

            name = match.group("item").strip()
            quantity = self.quantity_resolver.resolve(match.group("qty"))
            logger.debug(f"Extracted '{name}' x{quantity} via {pattern_name}")
            return ExtractedItem(name=name, quantity=quantity)

        name = text.strip()
        if not name:
            raise ExtractionError(f"No item name in phrase {phrase!r}")

        return ExtractedItem(name=name, quantity=1)
