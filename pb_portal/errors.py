"""
Exception types raised by the calculation core.

All of them subclass ValueError so callers that only guard against bad input
with ``except ValueError`` keep working.
"""


class PortalInputError(ValueError):
    """Base class for invalid input handed to a calculation."""


class ScoreOutOfRangeError(PortalInputError):
    """A raw criterion score fell outside [0, max_raw] in strict mode."""

    def __init__(self, criterion_id: str, value: float, max_raw: int):
        self.criterion_id = criterion_id
        self.value = value
        self.max_raw = max_raw
        super().__init__(f"Score for '{criterion_id}' is {value}, expected 0-{max_raw}")


class InvalidReachError(PortalInputError):
    """Reach figure or reach submission is unusable."""


class CoefficientConfigError(PortalInputError):
    """Coefficient tier settings break the tier partition or factor bounds."""


class CriteriaConfigError(PortalInputError):
    """Scoring criteria configuration is malformed."""
