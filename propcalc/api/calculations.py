"""
Calculation API endpoints.

Stateless: the caller posts a snapshot and gets back the normalised
snapshot plus every derived value. Used for live recalculation while a
deal is being edited.
"""

from dataclasses import replace
from typing import List, Optional, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

from propcalc.calculations.engine import (
    DerivedSnapshot,
    EnginePolicy,
    FieldEdit,
    LinkedPair,
    recompute,
)
from propcalc.calculations.exit_strategy import SaleProfitPolicy
from propcalc.calculations.inputs import ExitStrategy, PurchaseType
from propcalc.calculations.kpi import RefinanceRocePolicy
from propcalc.calculations.parsing import finite_or_zero, parse_amount
from propcalc.calculations.percent_link import AmountEdit, PercentEdit, resolve
from propcalc.calculations.snapshot import CalculatorSnapshot
from propcalc.config import get_settings
from propcalc.services.exit_rules import allowed_exit_strategies

router = APIRouter()


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class EditInput(CamelModel):
    """The linked field just edited. Exactly one of percent/amount."""

    pair: LinkedPair
    percent: Optional[Union[str, float]] = None
    amount: Optional[Union[str, float]] = None


class PolicyInput(CamelModel):
    """Per-request overrides of the configured engine policy."""

    refinance_roce: Optional[RefinanceRocePolicy] = None
    sale_profit: Optional[SaleProfitPolicy] = None
    funding_tolerance: Optional[float] = None


class RecomputeInput(CamelModel):
    snapshot: CalculatorSnapshot
    edit: Optional[EditInput] = None
    policy: Optional[PolicyInput] = None


class RecomputeResponse(CamelModel):
    snapshot: dict
    derived: DerivedSnapshot


class PercentLinkInput(CamelModel):
    base: float
    percent: Optional[float] = None
    amount: Optional[float] = None


class PercentLinkResponse(CamelModel):
    percent: float
    amount: float

    @field_validator("percent", "amount", mode="before")
    @classmethod
    def finite_numbers(cls, value):
        return finite_or_zero(value)


class ExitStrategiesResponse(CamelModel):
    purchase_type: PurchaseType
    exit_strategies: List[ExitStrategy]


def resolve_policy(overrides: Optional[PolicyInput] = None) -> EnginePolicy:
    """Configured policy with any request overrides applied."""
    policy = EnginePolicy.from_settings(get_settings())
    if overrides is None:
        return policy
    changes = {
        "refinance_roce": overrides.refinance_roce,
        "sale_profit": overrides.sale_profit,
        "funding_tolerance": overrides.funding_tolerance,
    }
    return replace(policy, **{k: v for k, v in changes.items() if v is not None})


def to_field_edit(edit: EditInput) -> FieldEdit:
    if (edit.percent is None) == (edit.amount is None):
        raise HTTPException(
            status_code=400, detail="Edit must carry exactly one of percent or amount"
        )
    if edit.percent is not None:
        return FieldEdit(pair=edit.pair, edited=PercentEdit(parse_amount(edit.percent)))
    return FieldEdit(pair=edit.pair, edited=AmountEdit(parse_amount(edit.amount)))


@router.post("/recompute", response_model=RecomputeResponse)
async def recompute_snapshot(inputs: RecomputeInput):
    """Recalculate every derived value for a snapshot."""
    edit = to_field_edit(inputs.edit) if inputs.edit else None
    result = recompute(inputs.snapshot, edit=edit, policy=resolve_policy(inputs.policy))

    return RecomputeResponse(
        snapshot=result.snapshot.to_storage(),
        derived=result.derived_snapshot(),
    )


@router.post("/percent-link", response_model=PercentLinkResponse)
async def percent_link(inputs: PercentLinkInput):
    """Derive an amount from a percentage of base, or the reverse."""
    if (inputs.percent is None) == (inputs.amount is None):
        raise HTTPException(
            status_code=400, detail="Provide exactly one of percent or amount"
        )
    if inputs.percent is not None:
        linked = resolve(PercentEdit(inputs.percent), inputs.base)
    else:
        linked = resolve(AmountEdit(inputs.amount), inputs.base)
    return PercentLinkResponse(percent=linked.percent, amount=linked.amount)


@router.get("/exit-strategies", response_model=ExitStrategiesResponse)
async def exit_strategies(purchase_type: PurchaseType):
    """Exit strategies offered for a purchase type."""
    return ExitStrategiesResponse(
        purchase_type=purchase_type,
        exit_strategies=list(allowed_exit_strategies(purchase_type)),
    )
