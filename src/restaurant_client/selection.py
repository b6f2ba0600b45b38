"""Parse the customer's comma-separated dish selection."""

from __future__ import annotations

from .exceptions import OrderSelectionError
from .models import MenuItem


def parse_dish_selection(raw: str, menu: list[MenuItem]) -> list[int]:
    """Return the valid dish numbers from `raw`, in the order given.

    Non-numeric entries and numbers outside the menu are dropped. Raises
    OrderSelectionError when nothing orderable remains.
    """
    valid_ids = {item.item_id for item in menu}
    dish_ids: list[int] = []
    for chunk in raw.split(","):
        text = chunk.strip()
        try:
            dish_id = int(text)
        except ValueError:
            continue
        if dish_id in valid_ids:
            dish_ids.append(dish_id)
    if not dish_ids:
        raise OrderSelectionError("Please select at least one valid dish number.")
    return dish_ids
