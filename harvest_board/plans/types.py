"""Harvest plan models and the enriched card projection."""

from collections.abc import Iterable, Mapping
from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from harvest_board.dates import coerce_datetime, to_day_key
from harvest_board.reference.models import Contractor, NormalizedModel


class Plan(NormalizedModel):
    """A scheduled harvest work unit.

    Plans are owned by the persistence layer. The board only reads them and
    requests date changes; a moved plan is a new copy with its date replaced.
    """

    key_aliases: ClassVar[dict[str, tuple[str, ...]]] = {
        "grower_block_source_database": ("source_database",),
        "grower_block_id": ("GABLOCKIDX",),
        "commodity_idx": ("cmtyidx", "CMTYIDX", "commodityIdx", "commodityIDx"),
        "pool_id": ("poolId", "poolIDx", "poolIdx"),
    }

    id: int | str = Field(description="Plan id assigned by the persistence layer")
    date: datetime = Field(description="Harvest day; naive values are local wall time")

    planned_bins: int | None = None
    bins: int | None = Field(default=None, description="Actual bins harvested")

    grower_block_source_database: str | None = None
    grower_block_id: int | str | None = None

    contractor_id: int | None = Field(default=None, description="Labor (picking) contractor")
    harvesting_rate: Decimal | None = None
    forklift_contractor_id: int | None = None
    forklift_rate: Decimal | None = None
    hauler_id: int | None = None
    hauling_rate: Decimal | None = None

    pool_id: int | str | None = None
    commodity_idx: str | None = Field(default=None, description="Used when the block has no commodity")
    field_representative_id: str | None = None

    notes_general: str | None = None
    deliver_to: str | None = None
    packed_by: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime:
        return coerce_datetime(value)

    @field_validator("commodity_idx", "field_representative_id", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        return None if value is None else str(value)

    @property
    def day_key(self) -> str:
        return to_day_key(self.date)

    def with_date(self, new_date: datetime) -> "Plan":
        """Copy of this plan with its date replaced."""
        return self.model_copy(update={"date": new_date})


def parse_plans(raw_plans: Iterable[Plan | Mapping[str, Any]] | None) -> list[Plan]:
    """Build Plan models from raw records, skipping records without an id or date."""
    plans: list[Plan] = []
    for raw in raw_plans or ():
        if isinstance(raw, Plan):
            plans.append(raw)
            continue
        try:
            plans.append(Plan.model_validate(raw))
        except ValidationError as e:
            logger.debug(
                "Skipping unparseable plan record",
                plan_id=raw.get("id") if isinstance(raw, Mapping) else None,
                error_count=e.error_count(),
            )
    return plans


class PlanCard(BaseModel):
    """Display-ready facts joined onto a plan."""

    model_config = ConfigDict(frozen=True)

    block_name: str = ""
    block_id: str | None = None
    grower_name: str = ""
    commodity_name: str = ""
    commodity_idx: str | None = None
    labor_contractor: Contractor | None = None
    forklift_contractor: Contractor | None = None
    hauler: Contractor | None = None
    labor_contractor_name: str = ""
    forklift_contractor_name: str = ""
    hauler_name: str = ""
    pool_name: str = ""
    estimated_bins: float | None = Field(default=None, description="Received bins for the day, else block acres")
    is_placeholder: bool = False


class EnrichedPlan(BaseModel):
    """A plan together with its card projection. The wrapped plan is never modified."""

    model_config = ConfigDict(frozen=True)

    plan: Plan
    card: PlanCard

    @property
    def id(self) -> int | str:
        return self.plan.id

    @property
    def date(self) -> datetime:
        return self.plan.date

    @property
    def day(self) -> date_type:
        return date_type.fromisoformat(self.plan.day_key)

    @property
    def planned_bins(self) -> int | None:
        return self.plan.planned_bins

    @property
    def commodity_name(self) -> str:
        return self.card.commodity_name

    def with_date(self, new_date: datetime) -> "EnrichedPlan":
        return self.model_copy(update={"plan": self.plan.with_date(new_date)})
