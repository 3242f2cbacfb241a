from collections.abc import Iterable, Mapping
from typing import Any

from anamnesis.domain.errors import InvalidInput
from anamnesis.domain.models import ProgressItem


def ensure_items(items: Any, name: str = "items") -> list[ProgressItem]:
    """Materialize `items`, rejecting anything that is not a sequence of items."""
    if (
        items is None
        or isinstance(items, (str, bytes, Mapping))
        or not isinstance(items, Iterable)
    ):
        raise InvalidInput(
            f"{name} must be a sequence of progress items, got {type(items).__name__}"
        )
    items = list(items)
    for index, item in enumerate(items):
        if not isinstance(item, ProgressItem):
            raise InvalidInput(
                f"{name}[{index}] must be a progress item, got {type(item).__name__}"
            )
    return items
