"""
Quantity Resolution
Maps spoken quantity tokens ("two", "a", "3") to item counts
"""

import logging

logger = logging.getLogger(__name__)


NUMBER_WORDS = {
    "a": 1,
    "an": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}

DEFAULT_QUANTITY = 1


class QuantityResolver:
    """
    Resolve a quantity token to a positive integer.

    Never fails: anything that is not a known number-word or a positive
    base-10 integer is treated as "no quantity specified" and resolves to 1.
    """

    def resolve(self, token: str) -> int:
        if token is None:
            return DEFAULT_QUANTITY

        cleaned = token.strip().lower()
        if cleaned in NUMBER_WORDS:
            return NUMBER_WORDS[cleaned]

        try:
            value = int(cleaned, 10)
        except ValueError:
            logger.debug(f"Unrecognized quantity token '{token}', defaulting to {DEFAULT_QUANTITY}")
            return DEFAULT_QUANTITY

        if value < 1:
            return DEFAULT_QUANTITY
        return value

    @staticmethod
    def known_words() -> list:
        """Number-words the resolver recognizes, longest first (for regex alternation)"""
        return sorted(NUMBER_WORDS, key=len, reverse=True)
