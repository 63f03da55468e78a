"""
Global constants for the portal calculation core.

Centralizes magic numbers used by the scoring, coefficient and financial
modules for easier maintenance and tuning.
"""

# Scoring scales
MATRIX_MAX_RAW = 3  # Committee scoring matrix: 0-3 per criterion
SLIDER_MAX_RAW = 100  # Slider form: 0-100 per criterion
DEFAULT_SCORING_THRESHOLD = 50  # Average weighted total needed to pass scoring

# Coefficient factor bounds (inclusive)
MIN_COEFFICIENT_FACTOR = 1.0
MAX_COEFFICIENT_FACTOR = 2.0

# Application statuses
STATUS_DRAFT = "Draft"
STATUS_SUBMITTED_STAGE1 = "Submitted-Stage1"
STATUS_INVITED_STAGE2 = "Invited-Stage2"
STATUS_SUBMITTED_STAGE2 = "Submitted-Stage2"
STATUS_FUNDED = "Funded"
STATUS_REJECTED = "Rejected"
STATUS_WITHDRAWN = "Withdrawn"

APPLICATION_STATUSES = (
    STATUS_DRAFT,
    STATUS_SUBMITTED_STAGE1,
    STATUS_INVITED_STAGE2,
    STATUS_SUBMITTED_STAGE2,
    STATUS_FUNDED,
    STATUS_REJECTED,
    STATUS_WITHDRAWN,
)

# Stage 2 applications are the ones committees score and budgets earmark
STAGE2_STATUSES = frozenset({STATUS_INVITED_STAGE2, STATUS_SUBMITTED_STAGE2})

# Financial defaults
DEFAULT_PRIORITY = "Other"  # Funded apps with no priority are bucketed here
CROSS_AREA = "Cross-Area"  # Application spanning every area
