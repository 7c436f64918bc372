"""Pure item selection and price formatting helpers.

These functions avoid side effects and are designed for unit testing.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List

from slideshow_generator.models import CatalogItem, VideoConfig


def filter_items(items: Iterable[CatalogItem], config: VideoConfig) -> List[CatalogItem]:
    """Apply the configured selection mode and cap the result at ``max_products``.

    - ``all``: active items only
    - ``by-category``: items of the configured category (every item when no
      category is set)
    - ``discounted``: items with a discount greater than zero
    """
    items = list(items)
    if config.selection == 'by-category':
        selected = [i for i in items if i.category == config.category] if config.category else items
    elif config.selection == 'discounted':
        selected = [i for i in items if i.has_discount]
    else:
        selected = [i for i in items if i.active]
    return selected[: config.max_products]


def list_categories(items: Iterable[CatalogItem]) -> List[str]:
    """Distinct non-empty categories in first-seen order."""
    seen: List[str] = []
    for item in items:
        if item.category and item.category not in seen:
            seen.append(item.category)
    return seen


def format_price(value, symbol: str = "$") -> str:
    """Format a currency amount with two decimals, e.g. ``$160.00``."""
    return f"{symbol}{Decimal(str(value)):.2f}"


def format_discount(discount: float) -> str:
    """Badge label for a discount percentage, e.g. ``-20%``."""
    if float(discount).is_integer():
        return f"-{int(discount)}%"
    return f"-{discount:g}%"
