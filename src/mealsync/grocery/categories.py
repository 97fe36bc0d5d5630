"""Keyword-based grocery categorization.

Categories are consulted top-to-bottom and the first one whose keyword appears
in an item name wins, so the order of ``GROCERY_CATEGORIES`` decides every
overlap (``pepper`` is Produce, ``soy sauce`` is Pantry, ``ginger-garlic paste``
is Produce).
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from mealsync.models.grocery import CategorizedBucket, GroceryCategory, GroceryItem

OTHER_CATEGORY_NAME = "Other"

GROCERY_CATEGORIES: tuple[GroceryCategory, ...] = (
    GroceryCategory(
        name="Produce",
        keywords=(
            "tomato",
            "onion",
            "potato",
            "garlic",
            "lemon",
            "chilli",
            "spinach",
            "cucumber",
            "pepper",
            "carrot",
            "lettuce",
            "cabbage",
            "ginger",
            "coriander",
            "mint",
            "basil",
            "parsley",
            "avocado",
        ),
        color="green",
        icon="🥬",
    ),
    GroceryCategory(
        name="Dairy",
        keywords=("milk", "yogurt", "cheese", "butter", "cream", "curd", "ghee", "dairy"),
        color="blue",
        icon="🥛",
    ),
    GroceryCategory(
        name="Pantry",
        keywords=(
            "rice",
            "flour",
            "pasta",
            "salt",
            "sugar",
            "oil",
            "spices",
            "masala",
            "cumin",
            "turmeric",
            "chili",
            "pepper",
            "oregano",
            "basil",
            "ginger-garlic",
            "tamarind",
            "vinegar",
            "soy",
            "sauce",
        ),
        color="amber",
        icon="🫙",
    ),
    GroceryCategory(
        name="Protein",
        keywords=(
            "chicken",
            "beef",
            "mutton",
            "egg",
            "fish",
            "lentil",
            "chickpea",
            "dal",
            "moong",
            "chana",
            "rajma",
            "soy",
            "tofu",
            "meat",
            "poultry",
            "seafood",
        ),
        color="red",
        icon="🥩",
    ),
    GroceryCategory(
        name="Bakery",
        keywords=("bread", "bun", "wrap", "naan", "roti", "tortilla", "bagel", "croissant", "muffin"),
        color="orange",
        icon="🥖",
    ),
    GroceryCategory(
        name="Beverages",
        keywords=("tea", "coffee", "juice", "water", "soda", "drink", "beverage"),
        color="purple",
        icon="☕",
    ),
)

OTHER_CATEGORY = GroceryCategory(name=OTHER_CATEGORY_NAME, keywords=(), color="gray", icon="📦")


def match_category(
    name: str,
    categories: Sequence[GroceryCategory] = GROCERY_CATEGORIES,
) -> Optional[GroceryCategory]:
    """Return the first category with a keyword contained in ``name``."""

    lowered = name.lower()
    for category in categories:
        if any(keyword.lower() in lowered for keyword in category.keywords):
            return category
    return None


def _sorted_by_name(items: Iterable[GroceryItem]) -> List[GroceryItem]:
    return sorted(items, key=lambda item: item.name.lower())


def categorize(
    items: Iterable[GroceryItem],
    categories: Sequence[GroceryCategory] = GROCERY_CATEGORIES,
) -> Dict[str, CategorizedBucket]:
    """Bucket items by category.

    Every declared category is present in list order, even when empty. The
    ``Other`` bucket is appended only when at least one item matched nothing.
    """

    assigned: Dict[str, List[GroceryItem]] = {category.name: [] for category in categories}
    unmatched: List[GroceryItem] = []

    for item in items:
        category = match_category(item.name, categories)
        if category is None:
            unmatched.append(item)
        else:
            assigned[category.name].append(item)

    categorized: Dict[str, CategorizedBucket] = {
        category.name: CategorizedBucket(
            category=category,
            items=_sorted_by_name(assigned[category.name]),
        )
        for category in categories
    }
    if unmatched:
        categorized[OTHER_CATEGORY_NAME] = CategorizedBucket(
            category=OTHER_CATEGORY,
            items=_sorted_by_name(unmatched),
        )
    return categorized


def non_empty_buckets(categorized: Dict[str, CategorizedBucket]) -> List[CategorizedBucket]:
    return [bucket for bucket in categorized.values() if bucket.items]


__all__ = [
    "GROCERY_CATEGORIES",
    "OTHER_CATEGORY",
    "OTHER_CATEGORY_NAME",
    "categorize",
    "match_category",
    "non_empty_buckets",
]
