"""
Keyword Categorizer
Assigns every item name to exactly one category of a fixed taxonomy
"""

from typing import List, Sequence, Tuple

from voicecart.config.constants import Category


# Declaration order is the tie-breaker: the first category with a matching
# stem wins. Plural stems keep "apple juice" out of Produce while still
# matching a bare "apple" (the stem contains the name).
CATEGORY_TAXONOMY: List[Tuple[str, Tuple[str, ...]]] = [
    (Category.DAIRY, (
        "milk", "cheese", "yogurt", "yoghurt", "butter", "cream", "eggs",
    )),
    (Category.PRODUCE, (
        "apples", "bananas", "oranges", "lemons", "limes", "grapes", "berries",
        "melon", "tomatoes", "potatoes", "onions", "carrots", "avocados",
        "mushrooms", "lettuce", "spinach", "broccoli", "cucumber", "garlic",
        "celery", "cabbage", "fruit", "vegetables",
    )),
    (Category.MEAT, (
        "chicken", "beef", "pork", "turkey", "bacon", "sausage", "steak",
        "lamb", "fish", "salmon", "tuna", "shrimp", "mince",
    )),
    (Category.BAKERY, (
        "bread", "bagel", "muffin", "croissant", "baguette", "tortilla",
        "cake", "donut", "buns",
    )),
    (Category.PANTRY, (
        "rice", "pasta", "flour", "sugar", "salt", "cereal", "oats", "beans",
        "sauce", "olive oil", "cooking oil", "vinegar", "honey", "spices",
        "soup", "noodles", "lentils", "baking",
    )),
    (Category.BEVERAGES, (
        "juice", "water", "soda", "coffee", "tea", "beer", "wine",
        "lemonade", "kombucha",
    )),
    (Category.SNACKS, (
        "chips", "cookies", "crackers", "chocolate", "candy", "popcorn",
        "pretzels", "nuts", "granola",
    )),
    (Category.HOUSEHOLD, (
        "toilet paper", "paper towels", "detergent", "soap", "shampoo",
        "toothpaste", "trash bags", "sponges", "bleach", "tissues",
        "batteries", "laundry",
    )),
    (Category.FROZEN, (
        "frozen", "ice cream", "pizza", "popsicle", "ice cubes",
    )),
]


class Categorizer:
    """
    Bidirectional substring categorizer.

    A stem matches when the item name contains it ("whole milk" / "milk") or
    when it contains the item name ("apple" / "apples"). The second direction
    means very short names (a single letter) land in the first category that
    has any stem containing them; that precision limitation is accepted.
    """

    def __init__(self, taxonomy: Sequence[Tuple[str, Sequence[str]]] = None):
        self.taxonomy = list(taxonomy) if taxonomy is not None else CATEGORY_TAXONOMY

    def categorize(self, name: str) -> str:
        item = (name or "").strip().lower()
        if not item:
            return Category.OTHER

        for label, stems in self.taxonomy:
            for stem in stems:
                if stem in item or item in stem:
                    return label

        return Category.OTHER

    @property
    def labels(self) -> List[str]:
        return [label for label, _ in self.taxonomy] + [Category.OTHER]


_default_categorizer = Categorizer()


def categorize(name: str) -> str:
    """Categorize with the default taxonomy"""
    return _default_categorizer.categorize(name)
