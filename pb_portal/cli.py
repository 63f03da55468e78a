#!/usr/bin/env python3
"""
pb-portal: command-line previews of the portal calculations.

Subcommands:
    score     Weighted total for a criterion breakdown
    tier      Reach tier, factor and adjusted votes
    finance   Area and priority spend for a set of applications
    postcode  Postcode eligibility lookup

Usage:
    pb-portal score '{"overview_objectives": 3, "local_priorities": 2}'
    pb-portal score breakdown.json --scale slider
    pb-portal tier 120 --votes 40
    pb-portal finance applications.json --financials round.json --simulate app_PBBLN001
    pb-portal postcode "NP4 9AA"
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pb_portal.config import PortalSettings, get_log_dir
from pb_portal.errors import PortalInputError
from pb_portal.models.application import load_applications
from pb_portal.scorers.coefficient_engine import (
    CoefficientSettings,
    calculate_adjusted_votes,
    calculate_coefficient_tier,
    format_coefficient_factor,
    get_coefficient_factor,
    get_default_coefficient_settings,
    get_tier_label,
)
from pb_portal.scorers.criteria_registry import get_scoring_criteria
from pb_portal.scorers.weighted_scoring import (
    ScoreScale,
    calculate_raw_total,
    calculate_weighted_total,
    max_raw_total,
    normalize_raw_score,
)
from pb_portal.services.area_registry import (
    find_area_for_postcode,
    get_area_budgets,
    get_priority_categories,
    list_areas,
    normalize_postcode,
)
from pb_portal.services.financial_aggregator import (
    FinancialRecord,
    calculate_area_financials,
    calculate_remaining,
    calculate_spend_by_area,
    calculate_spend_by_priority,
    resolve_totals,
    simulate_funding,
)
from pb_portal.utils.logger import configure_global_logging, setup_logger

console = Console()


def _load_json_arg(value: str):
    """Parse a JSON string, or read it from a file path."""
    if value.lstrip().startswith(("{", "[")):
        return json.loads(value)
    return json.loads(Path(value).read_text())


def _money(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}£{abs(value):,.2f}"


# =============================================================================
# score
# =============================================================================


def cmd_score(args) -> int:
    breakdown = _load_json_arg(args.breakdown)
    if not isinstance(breakdown, dict):
        console.print("[red]Breakdown must be a JSON object of criterion id -> score[/red]")
        return 2

    max_raw = ScoreScale.SLIDER if args.scale == "slider" else ScoreScale.MATRIX
    criteria = get_scoring_criteria()

    table = Table(title="Criterion Scores")
    table.add_column("Criterion", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Score", justify="right")
    for criterion in criteria:
        raw = normalize_raw_score(criterion.id, breakdown.get(criterion.id), max_raw, args.strict)
        table.add_row(criterion.name, f"{criterion.weight:g}%", f"{raw:g}/{int(max_raw)}")
    console.print(table)

    weighted = calculate_weighted_total(breakdown, criteria, max_raw, args.strict)
    raw_total = calculate_raw_total(breakdown, criteria, max_raw, args.strict)
    threshold = PortalSettings.from_env().scoring_threshold
    verdict = "[green]meets threshold[/green]" if weighted >= threshold else "[red]below threshold[/red]"

    summary = (
        f"Raw total: {raw_total:g}/{max_raw_total(criteria, max_raw):g}\n"
        f"Weighted total: {weighted}%\n"
        f"Threshold: {threshold}% ({verdict})"
    )
    console.print(Panel(summary, title="Score Summary", border_style="blue"))
    return 0


# =============================================================================
# tier
# =============================================================================


def _load_coefficient_settings(path: Optional[Path]) -> CoefficientSettings:
    if path is None:
        return get_default_coefficient_settings()
    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    return CoefficientSettings.from_document(raw)


def cmd_tier(args) -> int:
    settings = _load_coefficient_settings(args.settings)
    if args.disabled:
        settings = CoefficientSettings(
            small=settings.small,
            medium=settings.medium,
            large=settings.large,
            enabled=False,
            apply_to_in_person=settings.apply_to_in_person,
        )

    tier = calculate_coefficient_tier(args.reach, settings)
    factor = get_coefficient_factor(tier, settings)

    lines = [
        f"Reach: {args.reach:g}",
        f"Tier: {get_tier_label(tier, settings)}",
        f"Factor: {format_coefficient_factor(factor)}" + ("" if settings.enabled else " (coefficients disabled)"),
    ]
    if args.votes is not None:
        lines.append(f"Votes: {args.votes} -> {calculate_adjusted_votes(args.votes, tier, settings):g}")
    console.print(Panel("\n".join(lines), title="Reach Coefficient", border_style="blue"))
    return 0


# =============================================================================
# finance
# =============================================================================


def display_financials(area_rows, priority_spend: dict[str, float], totals: tuple[float, float, float]) -> None:
    total_funding, total_spent, remaining = totals
    colour = "red" if remaining < 0 else "green"
    summary = (
        f"Total funding: {_money(total_funding)}\n"
        f"Total spent: {_money(total_spent)}\n"
        f"Remaining: [{colour}]{_money(remaining)}[/{colour}]"
    )
    console.print(Panel(summary, title="Round Summary", border_style="blue"))

    table = Table(title="Spend by Area")
    table.add_column("Area", style="cyan")
    table.add_column("Allocated", justify="right")
    table.add_column("Spent", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("Funded", justify="right")
    table.add_column("Pending", justify="right")
    for row in area_rows:
        remaining_text = _money(row.remaining)
        if row.remaining < 0:
            remaining_text = f"[red]{remaining_text}[/red]"
        table.add_row(
            row.area,
            _money(row.allocated),
            _money(row.spent),
            remaining_text,
            str(row.project_count),
            _money(row.pending_requests),
        )
    console.print(table)

    table = Table(title="Spend by Priority")
    table.add_column("Priority", style="cyan")
    table.add_column("Spent", justify="right")
    for category, spent in priority_spend.items():
        table.add_row(category, _money(spent))
    console.print(table)


def cmd_finance(args) -> int:
    docs = _load_json_arg(str(args.applications))
    applications = load_applications(docs)
    record = None
    if args.financials:
        record = FinancialRecord.from_document(_load_json_arg(str(args.financials)))

    if record is not None and record.budget_by_area is not None:
        budgets = record.budget_by_area
    else:
        budgets = get_area_budgets()
    if record and record.spend_by_area:
        spend_by_area = record.spend_by_area
    else:
        spend_by_area = calculate_spend_by_area(applications, list_areas())
    spend_by_priority = calculate_spend_by_priority(applications, get_priority_categories())

    area_rows = calculate_area_financials(applications, budgets, spend_by_area, area=args.area)
    totals = resolve_totals(record, applications, default_budgets=get_area_budgets())
    display_financials(area_rows, spend_by_priority, totals)

    if args.simulate:
        app = next((a for a in applications if a.id == args.simulate), None)
        if app is None:
            console.print(f"[red]Application not found: {args.simulate}[/red]")
            return 1
        simulation = simulate_funding(app, calculate_remaining(budgets, spend_by_area), spend_by_priority)
        impact = simulation.priority_impact
        colour = "red" if simulation.exceeds_budget else "green"
        summary = (
            f"{app.project_title or app.id} ({app.area})\n"
            f"Amount requested: {_money(simulation.amount_requested)}\n"
            f"Remaining after approval: [{colour}]{_money(simulation.remaining_after_approval)}[/{colour}]\n"
            f"{impact.category}: {_money(impact.current_spend)} -> {_money(impact.new_spend)}"
        )
        if simulation.exceeds_budget:
            summary += "\n[bold red]Over budget![/bold red]"
        console.print(Panel(summary, title="Funding Simulation", border_style=colour))

    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        report = {
            "areas": [row.model_dump(by_alias=True) for row in area_rows],
            "spendByPriority": spend_by_priority,
            "totalFunding": totals[0],
            "totalSpent": totals[1],
            "remaining": totals[2],
        }
        args.output.write_text(json.dumps(report, indent=2))
        console.print(f"\nReport saved to: {args.output}")
    return 0


# =============================================================================
# postcode
# =============================================================================


def cmd_postcode(args) -> int:
    normalized = normalize_postcode(args.postcode)
    area = find_area_for_postcode(normalized)
    if area is None:
        console.print(f"[yellow]{normalized or args.postcode!r} is not in a participating area[/yellow]")
        return 1
    console.print(f"[green]{normalized}[/green] is in [bold]{area}[/bold]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pb-portal", description="Participatory budgeting calculation previews")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", help="Also write logs to this file under the data directory's logs/ folder")
    subparsers = parser.add_subparsers(dest="command", required=True)

    score = subparsers.add_parser("score", help="Weighted total for a criterion breakdown")
    score.add_argument("breakdown", help="JSON object (or path to a JSON file) of criterion id -> raw score")
    score.add_argument(
        "--scale",
        choices=["matrix", "slider"],
        default="matrix",
        help="Raw score scale: matrix 0-3 or slider 0-100 (default: matrix)",
    )
    score.add_argument("--strict", action="store_true", help="Reject out-of-range scores instead of clamping")
    score.set_defaults(func=cmd_score)

    tier = subparsers.add_parser("tier", help="Reach tier, factor and adjusted votes")
    tier.add_argument("reach", type=float, help="Organisation reach figure")
    tier.add_argument("--votes", type=int, help="Raw vote count to adjust")
    tier.add_argument("--settings", type=Path, help="Coefficient settings YAML/JSON (default: packaged coefficients.yaml)")
    tier.add_argument("--disabled", action="store_true", help="Preview with coefficients disabled")
    tier.set_defaults(func=cmd_tier)

    finance = subparsers.add_parser("finance", help="Area and priority spend for a set of applications")
    finance.add_argument("applications", type=Path, help="JSON file with a list of application documents")
    finance.add_argument("--financials", type=Path, help="JSON file with the round's stored financial record")
    finance.add_argument("--area", help="Only show one area (committee view)")
    finance.add_argument("--simulate", metavar="APP_ID", help="Simulate funding this application")
    finance.add_argument("--output", type=Path, help="Save report to JSON file")
    finance.set_defaults(func=cmd_finance)

    postcode = subparsers.add_parser("postcode", help="Check which area a postcode belongs to")
    postcode.add_argument("postcode", help="Postcode, any case or spacing")
    postcode.set_defaults(func=cmd_postcode)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_global_logging(args.log_level)
    log = setup_logger(
        name="pb_portal.cli",
        log_level=args.log_level,
        log_file=args.log_file,
        log_dir=get_log_dir() if args.log_file else None,
    )

    try:
        with log.time_operation(args.command):
            return args.func(args)
    except (PortalInputError, json.JSONDecodeError) as e:
        console.print(f"[red]Error: {e}[/red]")
        return 2


if __name__ == "__main__":
    sys.exit(main())
