"""
Scoring progress for Stage 2 applications.

For each application awaiting committee scoring, reports how many of the
relevant committee members have scored it and whether its average weighted
total clears the pass threshold. Committee members score applications in
their own area; Cross-Area applications are scored by the whole committee.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pb_portal.constants import DEFAULT_SCORING_THRESHOLD
from pb_portal.models.application import Application
from pb_portal.models.user import PortalUser
from pb_portal.scorers.weighted_scoring import Score
from pb_portal.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class ScoringProgress:
    """Scoring status of one application."""

    application_id: str
    ref: str
    area: str
    scores_received: int
    committee_size: int
    percent_complete: int
    average_score: int
    meets_threshold: bool

    @property
    def is_complete(self) -> bool:
        return self.committee_size > 0 and self.scores_received >= self.committee_size

    def to_dict(self) -> dict:
        return {
            "applicationId": self.application_id,
            "ref": self.ref,
            "area": self.area,
            "scoresReceived": self.scores_received,
            "committeeSize": self.committee_size,
            "percentComplete": self.percent_complete,
            "averageScore": self.average_score,
            "meetsThreshold": self.meets_threshold,
        }


def relevant_committee(application: Application, committee: list[PortalUser]) -> list[PortalUser]:
    """Committee members expected to score the application."""
    members = [m for m in committee if m.is_committee]
    if application.is_cross_area:
        return members
    return [m for m in members if m.area == application.area]


def calculate_progress(
    application: Application,
    scores: list[Score],
    committee: list[PortalUser],
    scoring_threshold: int = DEFAULT_SCORING_THRESHOLD,
) -> ScoringProgress:
    """
    Scoring progress for a single application.

    Args:
        application: The application being scored
        scores: Scores to consider (those for other applications are ignored)
        committee: All users; only committee members are counted
        scoring_threshold: Average weighted total needed to pass

    Returns:
        ScoringProgress with percentages and average rounded half-up
    """
    app_scores = [s for s in scores if s.app_id == application.id]
    committee_size = len(relevant_committee(application, committee))
    received = len(app_scores)

    percent_complete = int(round_half_up(received / committee_size * 100)) if committee_size else 0
    average = int(round_half_up(sum(s.weighted_total for s in app_scores) / received)) if received else 0

    if received > committee_size:
        logger.warning(
            f"{application.ref or application.id} has {received} scores but only {committee_size} committee members"
        )

    return ScoringProgress(
        application_id=application.id,
        ref=application.ref,
        area=application.area,
        scores_received=received,
        committee_size=committee_size,
        percent_complete=percent_complete,
        average_score=average,
        meets_threshold=average >= scoring_threshold,
    )


def build_scoring_report(
    applications: list[Application],
    scores: list[Score],
    committee: list[PortalUser],
    scoring_threshold: int = DEFAULT_SCORING_THRESHOLD,
    area: Optional[str] = None,
) -> list[ScoringProgress]:
    """Progress for every Stage 2 application, optionally limited to one area."""
    report = []
    for app in applications:
        if not app.is_stage2:
            continue
        if area is not None and app.area != area:
            continue
        report.append(calculate_progress(app, scores, committee, scoring_threshold))
    logger.debug(f"Scoring report built for {len(report)} Stage 2 applications")
    return report
