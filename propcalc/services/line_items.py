"""
Refurbishment item and funding source list management.

Both lists always keep at least one entry. New ids are one above the
highest id present or ever issued, so a removed id is never reused.
"""

import enum
from typing import Iterable, Tuple

from pydantic import ValidationError

from propcalc.calculations.snapshot import (
    CalculatorSnapshot,
    FundingSourceData,
    RefurbItemData,
)


class LineItemError(ValueError):
    """A line-item change would break a list invariant."""


class LineItemKind(str, enum.Enum):
    refurb_items = "refurb-items"
    funding_sources = "funding-sources"


ITEM_MODELS = {
    LineItemKind.refurb_items: RefurbItemData,
    LineItemKind.funding_sources: FundingSourceData,
}

EDITABLE_FIELDS = {
    LineItemKind.refurb_items: ("description", "amount"),
    LineItemKind.funding_sources: ("name", "amount", "interest_rate", "duration"),
}


def _attr(kind: LineItemKind) -> str:
    return kind.name


def next_item_id(existing_ids: Iterable[int], high_water: int = 0) -> int:
    return max([high_water, 0, *existing_ids]) + 1


def highest_id(snapshot: CalculatorSnapshot, kind: LineItemKind) -> int:
    return max((item.id for item in getattr(snapshot, _attr(kind))), default=0)


def add_item(
    snapshot: CalculatorSnapshot,
    kind: LineItemKind,
    high_water: int = 0,
    **fields,
) -> Tuple[CalculatorSnapshot, int]:
    """
    Append a blank (or partly filled) item.

    Returns:
        The new snapshot and the id given to the item
    """
    items = getattr(snapshot, _attr(kind))
    new_id = next_item_id((item.id for item in items), high_water)
    try:
        item = ITEM_MODELS[kind](id=new_id, **fields)
    except ValidationError as e:
        raise LineItemError(f"Invalid {kind.value} item: {e.error_count()} bad field(s)") from e
    return snapshot.model_copy(update={_attr(kind): [*items, item]}), new_id


def update_item(
    snapshot: CalculatorSnapshot,
    kind: LineItemKind,
    item_id: int,
    field: str,
    value,
) -> CalculatorSnapshot:
    if field not in EDITABLE_FIELDS[kind]:
        raise LineItemError(f"Field '{field}' cannot be edited on {kind.value}")

    items = getattr(snapshot, _attr(kind))
    if not any(item.id == item_id for item in items):
        raise LineItemError(f"No item {item_id} in {kind.value}")

    model = ITEM_MODELS[kind]
    updated = []
    for item in items:
        if item.id == item_id:
            # Revalidate so numbers become text
            data = item.model_dump()
            data[field] = value
            try:
                item = model.model_validate(data)
            except ValidationError as e:
                raise LineItemError(f"Invalid value for '{field}'") from e
        updated.append(item)
    return snapshot.model_copy(update={_attr(kind): updated})


def remove_item(
    snapshot: CalculatorSnapshot, kind: LineItemKind, item_id: int
) -> CalculatorSnapshot:
    items = getattr(snapshot, _attr(kind))
    if not any(item.id == item_id for item in items):
        raise LineItemError(f"No item {item_id} in {kind.value}")
    if len(items) <= 1:
        raise LineItemError(f"Cannot remove the last entry from {kind.value}")
    return snapshot.model_copy(
        update={_attr(kind): [item for item in items if item.id != item_id]}
    )
