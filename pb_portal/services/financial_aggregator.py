"""
Financial Aggregator - budget, spend and remaining funds per area and priority.

Spend is derived from Funded applications (amountRequested). Per-area budgets
come from the round's stored financial record, falling back to the configured
defaults. Every function here is a pure calculation over its arguments; the
caller loads the documents and persists any FinancialRecord built here.

Deficits are allowed: remaining can go negative, and is logged as a warning
rather than raised.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pb_portal.constants import STAGE2_STATUSES
from pb_portal.models.application import Application

logger = logging.getLogger(__name__)


class AreaFinancials(BaseModel):
    """Budget position of one area."""

    model_config = ConfigDict(populate_by_name=True)

    area: str
    allocated: float
    spent: float
    remaining: float
    project_count: int = Field(default=0, alias="projectCount")
    pending_requests: float = Field(default=0.0, alias="pendingRequests")

    @property
    def percent_spent(self) -> int:
        if self.allocated <= 0:
            return 0
        return round(self.spent / self.allocated * 100)


class PriorityImpact(BaseModel):
    """How funding an application would move its priority category's spend."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    category: str
    current_spend: float = Field(alias="currentSpend")
    new_spend: float = Field(alias="newSpend")


class FundingSimulation(BaseModel):
    """Projected effect of approving one application. Nothing is mutated."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    application_id: str = Field(alias="applicationId")
    amount_requested: float = Field(alias="amountRequested")
    remaining_after_approval: float = Field(alias="remainingAfterApproval")
    exceeds_budget: bool = Field(alias="exceedsBudget")
    priority_impact: PriorityImpact = Field(alias="priorityImpact")

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class FinancialRecord(BaseModel):
    """Stored financial position of a funding round."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    round_id: str = Field(alias="roundId")
    total_funding: float = Field(default=0.0, alias="totalFunding")
    total_spent: float = Field(default=0.0, alias="totalSpent")
    remaining_pot: float = Field(default=0.0, alias="remainingPot")
    budget_by_area: Optional[dict[str, float]] = Field(default=None, alias="budgetByArea")
    spend_by_area: Optional[dict[str, float]] = Field(default=None, alias="spendByArea")
    spend_by_priority: Optional[dict[str, float]] = Field(default=None, alias="spendByPriority")
    updated_at: Optional[int] = Field(default=None, alias="updatedAt", description="Epoch milliseconds")
    updated_by: str = Field(default="", alias="updatedBy")

    def to_document(self) -> dict:
        doc = self.model_dump(by_alias=True)
        doc["id"] = self.round_id
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "FinancialRecord":
        if "roundId" not in doc and "round_id" not in doc and doc.get("id"):
            doc = {**doc, "roundId": doc["id"]}
        return cls.model_validate(doc)


def _funded(applications: list[Application]) -> list[Application]:
    return [app for app in applications if app.is_funded]


def calculate_spend_by_area(applications: list[Application], areas: list[str]) -> dict[str, float]:
    """
    Total amountRequested of Funded applications per area.

    Every area in ``areas`` is present (0 when nothing is funded there).
    Funded applications in other areas (e.g. Cross-Area) get their own key.
    """
    spend = {area: 0.0 for area in areas}
    for app in _funded(applications):
        spend[app.area] = spend.get(app.area, 0.0) + app.amount_requested
    return spend


def calculate_spend_by_priority(applications: list[Application], categories: list[str]) -> dict[str, float]:
    """Total amountRequested of Funded applications per priority ('Other' when unset)."""
    spend = {category: 0.0 for category in categories}
    for app in _funded(applications):
        category = app.priority_category
        spend[category] = spend.get(category, 0.0) + app.amount_requested
    return spend


def calculate_remaining(budget_by_area: dict[str, float], spend_by_area: dict[str, float]) -> dict[str, float]:
    """budget - spend per area. Missing entries count as 0; negative values are kept."""
    remaining = {}
    for area in {**budget_by_area, **spend_by_area}:
        remaining[area] = budget_by_area.get(area, 0.0) - spend_by_area.get(area, 0.0)
        if remaining[area] < 0:
            logger.warning(f"Area {area} is over budget by {-remaining[area]:.2f}")
    return remaining


def simulate_funding(
    application: Application,
    remaining_by_area: dict[str, float],
    spend_by_priority: dict[str, float],
) -> FundingSimulation:
    """
    Project the effect of approving one application.

    Args:
        application: Application under consideration
        remaining_by_area: Current remaining budget per area
        spend_by_priority: Current spend per priority category

    Returns:
        FundingSimulation; exceedsBudget is set when the amount is more than
        the area has left
    """
    remaining = remaining_by_area.get(application.area, 0.0)
    amount = application.amount_requested
    category = application.priority_category
    current_spend = spend_by_priority.get(category, 0.0)

    simulation = FundingSimulation(
        application_id=application.id,
        amount_requested=amount,
        remaining_after_approval=remaining - amount,
        exceeds_budget=amount > remaining,
        priority_impact=PriorityImpact(
            category=category,
            current_spend=current_spend,
            new_spend=current_spend + amount,
        ),
    )
    if simulation.exceeds_budget:
        logger.warning(
            f"Funding {application.ref or application.id} would overspend {application.area} "
            f"by {-simulation.remaining_after_approval:.2f}"
        )
    return simulation


def calculate_area_financials(
    applications: list[Application],
    budget_by_area: dict[str, float],
    spend_by_area: dict[str, float],
    area: Optional[str] = None,
) -> list[AreaFinancials]:
    """
    Budget position of each area in ``budget_by_area``.

    projectCount counts Funded applications; pendingRequests sums the amounts
    of Stage 2 applications still awaiting a decision. Pass ``area`` to limit
    the result to one area (a committee member's view).
    """
    rows: dict[str, AreaFinancials] = {}
    for name, allocated in budget_by_area.items():
        spent = spend_by_area.get(name, 0.0)
        rows[name] = AreaFinancials(area=name, allocated=allocated, spent=spent, remaining=allocated - spent)

    for app in applications:
        row = rows.get(app.area)
        if row is None:
            continue
        if app.is_funded:
            row.project_count += 1
        elif app.status in STAGE2_STATUSES:
            row.pending_requests += app.amount_requested

    result = list(rows.values())
    if area is not None:
        result = [row for row in result if row.area == area]
    return result


def resolve_totals(
    record: Optional[FinancialRecord],
    applications: list[Application],
    default_budgets: Optional[dict[str, float]] = None,
) -> tuple[float, float, float]:
    """
    Headline (totalFunding, totalSpent, remaining) for a round.

    Totals are summed from the record's per-area maps when present; the stored
    scalars are only used when a map is missing. Without a stored spend map,
    spend is derived from Funded applications.
    """
    has_stored_budgets = record is not None and record.budget_by_area is not None
    budgets = record.budget_by_area if has_stored_budgets else (default_budgets or {})
    derived_budget = sum(budgets.values())

    stored_spend = record.spend_by_area if record else None
    if stored_spend:
        spend_map = stored_spend
    else:
        spend_map = calculate_spend_by_area(applications, list(budgets))
    derived_spent = sum(spend_map.values())

    if has_stored_budgets:
        total_funding = derived_budget
    else:
        total_funding = (record.total_funding if record else 0.0) or derived_budget

    if stored_spend:
        total_spent = derived_spent
    else:
        total_spent = (record.total_spent if record else 0.0) or derived_spent

    remaining = total_funding - total_spent
    if remaining < 0:
        logger.warning(f"Round is over budget: funding {total_funding:.2f}, spent {total_spent:.2f}")
    return total_funding, total_spent, remaining


def build_financial_record(
    round_id: str,
    budget_by_area: dict[str, float],
    spend_by_area: dict[str, float],
    spend_by_priority: dict[str, float],
    updated_by: str = "admin",
    now: Optional[datetime] = None,
) -> FinancialRecord:
    """FinancialRecord with totals and remainingPot recomputed from the maps."""
    total_funding = sum(budget_by_area.values())
    total_spent = sum(spend_by_area.values())
    timestamp = now or datetime.now(timezone.utc)

    record = FinancialRecord(
        round_id=round_id,
        total_funding=total_funding,
        total_spent=total_spent,
        remaining_pot=total_funding - total_spent,
        budget_by_area=dict(budget_by_area),
        spend_by_area=dict(spend_by_area),
        spend_by_priority=dict(spend_by_priority),
        updated_at=int(timestamp.timestamp() * 1000),
        updated_by=updated_by,
    )
    if record.remaining_pot < 0:
        logger.warning(f"Round {round_id} saved with a deficit of {-record.remaining_pot:.2f}")
    logger.info(f"Built financial record for {round_id} [funding={total_funding} spent={total_spent}]")
    return record
