"""
Stored calculator API endpoints.

One snapshot per property UPRN. Every response carries the stored
snapshot and freshly derived values.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel
from pydantic.alias_generators import to_camel, to_snake
from sqlalchemy.orm import Session

from propcalc.api.calculations import resolve_policy
from propcalc.calculations.engine import DerivedSnapshot, recompute
from propcalc.calculations.inputs import PurchaseType
from propcalc.calculations.snapshot import CalculatorSnapshot
from propcalc.db.database import get_db
from propcalc.db.models import CalculatorRecord
from propcalc.services.calculator_store import CalculatorStore
from propcalc.services.exit_rules import change_purchase_type
from propcalc.services.line_items import (
    EDITABLE_FIELDS,
    LineItemError,
    LineItemKind,
    add_item,
    remove_item,
    update_item,
)

router = APIRouter()


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class StoredCalculatorResponse(CamelModel):
    """Stored snapshot with its derived values."""

    uprn: str
    data: dict
    last_updated: Optional[str] = None
    derived: DerivedSnapshot


class ResetInput(CamelModel):
    purchase_price: Optional[float] = None


class PurchaseTypeInput(CamelModel):
    purchase_type: PurchaseType


class LineItemUpdate(CamelModel):
    field: str
    value: Any = None


class LineItemCreatedResponse(StoredCalculatorResponse):
    item_id: int


class BackfillInput(CamelModel):
    uprns: List[str]
    purchase_prices: Dict[str, float] = {}


class BackfillResponse(CamelModel):
    processed: int
    created: List[str]


def record_to_response(record: CalculatorRecord) -> StoredCalculatorResponse:
    """Convert a stored record to a response, recomputing on the way."""
    snapshot = CalculatorSnapshot.model_validate(record.data)
    result = recompute(snapshot, policy=resolve_policy())
    return StoredCalculatorResponse(
        uprn=record.uprn,
        data=record.data,
        last_updated=record.last_updated.isoformat() if record.last_updated else None,
        derived=result.derived_snapshot(),
    )


def load_or_404(store: CalculatorStore, uprn: str) -> CalculatorSnapshot:
    snapshot = store.load(uprn)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Calculator data not found")
    return snapshot


def save_recomputed(
    store: CalculatorStore, uprn: str, snapshot: CalculatorSnapshot
) -> CalculatorRecord:
    """Persist the snapshot with its derived amounts filled in."""
    result = recompute(snapshot, policy=resolve_policy())
    return store.save(uprn, result.snapshot)


@router.post("/backfill", response_model=BackfillResponse)
async def backfill_calculators(inputs: BackfillInput, db: Session = Depends(get_db)):
    """Create default calculators for properties that have none."""
    created = CalculatorStore(db).backfill(inputs.uprns, inputs.purchase_prices)
    return BackfillResponse(processed=len(inputs.uprns), created=created)


@router.get("/{uprn}", response_model=StoredCalculatorResponse)
async def get_calculator(uprn: str, db: Session = Depends(get_db)):
    """Get the stored calculator for a property."""
    record = CalculatorStore(db).get_record(uprn)
    if record is None:
        raise HTTPException(status_code=404, detail="Calculator data not found")
    return record_to_response(record)


@router.put("/{uprn}", response_model=StoredCalculatorResponse)
async def save_calculator(
    uprn: str, snapshot: CalculatorSnapshot, db: Session = Depends(get_db)
):
    """Create or replace the stored calculator for a property."""
    record = save_recomputed(CalculatorStore(db), uprn, snapshot)
    return record_to_response(record)


@router.delete("/{uprn}")
async def delete_calculator(uprn: str, db: Session = Depends(get_db)):
    """Delete the stored calculator for a property."""
    deleted = CalculatorStore(db).delete(uprn)
    return {"deleted": deleted}


@router.post("/{uprn}/reset", response_model=StoredCalculatorResponse)
async def reset_calculator(
    uprn: str,
    inputs: Optional[ResetInput] = Body(None),
    db: Session = Depends(get_db),
):
    """Reset to a blank calculator, optionally seeded with a purchase price."""
    purchase_price = inputs.purchase_price if inputs else None
    record = CalculatorStore(db).reset(uprn, purchase_price)
    return record_to_response(record)


@router.put("/{uprn}/purchase-type", response_model=StoredCalculatorResponse)
async def set_purchase_type(
    uprn: str, inputs: PurchaseTypeInput, db: Session = Depends(get_db)
):
    """Change the purchase type, moving to an exit strategy it permits."""
    store = CalculatorStore(db)
    snapshot = change_purchase_type(load_or_404(store, uprn), inputs.purchase_type)
    return record_to_response(save_recomputed(store, uprn, snapshot))


@router.post(
    "/{uprn}/{kind}", response_model=LineItemCreatedResponse, status_code=201
)
async def create_line_item(
    uprn: str,
    kind: LineItemKind,
    fields: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
):
    """Add a refurbishment item or funding source."""
    store = CalculatorStore(db)
    snapshot = load_or_404(store, uprn)

    values = {to_snake(name): value for name, value in (fields or {}).items()}
    unknown = set(values) - set(EDITABLE_FIELDS[kind])
    if unknown:
        raise HTTPException(
            status_code=400, detail=f"Unknown fields: {', '.join(sorted(unknown))}"
        )

    try:
        snapshot, item_id = add_item(snapshot, kind, store.high_water(uprn, kind), **values)
    except LineItemError as e:
        raise HTTPException(status_code=400, detail=str(e))
    response = record_to_response(save_recomputed(store, uprn, snapshot))
    return LineItemCreatedResponse(**response.model_dump(), item_id=item_id)


@router.patch("/{uprn}/{kind}/{item_id}", response_model=StoredCalculatorResponse)
async def edit_line_item(
    uprn: str,
    kind: LineItemKind,
    item_id: int,
    inputs: LineItemUpdate,
    db: Session = Depends(get_db),
):
    """Change one field of a refurbishment item or funding source."""
    store = CalculatorStore(db)
    snapshot = load_or_404(store, uprn)
    try:
        snapshot = update_item(snapshot, kind, item_id, to_snake(inputs.field), inputs.value)
    except LineItemError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return record_to_response(save_recomputed(store, uprn, snapshot))


@router.delete("/{uprn}/{kind}/{item_id}", response_model=StoredCalculatorResponse)
async def delete_line_item(
    uprn: str, kind: LineItemKind, item_id: int, db: Session = Depends(get_db)
):
    """Remove a refurbishment item or funding source. The last one stays."""
    store = CalculatorStore(db)
    snapshot = load_or_404(store, uprn)
    try:
        snapshot = remove_item(snapshot, kind, item_id)
    except LineItemError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return record_to_response(save_recomputed(store, uprn, snapshot))
