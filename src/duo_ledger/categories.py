"""Known expense categories."""

from .exceptions import InvalidCategoryError

DEFAULT_CATEGORY = "other"

CATEGORIES = (
    "wine",
    "groceries",
    "delivery",
    "dining",
    "home",
    "travel",
    "transport",
    "taxi",
    DEFAULT_CATEGORY,
)


def normalize_category(category: str) -> str:
    """Normalize a category name for comparison (lowercase, stripped)."""
    return category.lower().strip()


def validate_category(category: str | None) -> str:
    """
    Resolve a category override to a known category name.

    None falls back to the default category.

    Raises:
        InvalidCategoryError: If the category is not in CATEGORIES
    """
    if category is None:
        return DEFAULT_CATEGORY
    normalized = normalize_category(category)
    if normalized not in CATEGORIES:
        raise InvalidCategoryError(category)
    return normalized
