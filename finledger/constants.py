"""
Global constants for finledger.

This module centralizes default categories, limits, provenance notes and
file locations so the engines and the CLI agree on them.
"""

from decimal import Decimal

# ============================================================================
# File Paths and Environment
# ============================================================================

DEFAULT_STATE_FILENAME = "finledger.yaml"
DEFAULT_STATE_DIR = ".finledger"
STATE_FILE_VERSION = "1.0"

# Environment variable for state file discovery
ENV_STATE_FILE = "FINLEDGER_FILE"

# ============================================================================
# Categories
# ============================================================================

FALLBACK_CATEGORY = "Other"
EMPTY_CATEGORY_KEY = "other"
EMPTY_DISPLAY_NAME = "Category"

# Display name -> allocation percent for a fresh account
DEFAULT_ALLOCATIONS = (
    ("Emergency", Decimal("20")),
    ("Entertainment", Decimal("10")),
    ("Saving", Decimal("20")),
    ("Other", Decimal("50")),
)

# ============================================================================
# Provenance Notes
# ============================================================================

SCHEDULED_NOTE_PREFIX = "Scheduled: "
AUTO_ALLOC_SUFFIX = " (auto alloc)"
AUTO_ALLOC_FALLBACK_SUFFIX = " (auto alloc fallback)"
INTEREST_NOTE_MONTHLY = "Interest (monthly)"
INTEREST_NOTE_ANNUAL = "Interest (annual/converted to monthly)"

# ============================================================================
# Engine Limits and Tolerances
# ============================================================================

MAX_SCHEDULE_ITERATIONS = 10_000  # Per schedule, per run
ALLOCATION_EPSILON = Decimal("0.000001")  # Totals at or below this fall back
BALANCE_DRIFT_TOLERANCE = Decimal("0.01")  # Saved vs recomputed balance

# ============================================================================
# Validation Constraints
# ============================================================================

MIN_DAY_OF_MONTH = 1
MAX_DAY_OF_MONTH = 31
MIN_INTERVAL_DAYS = 1

# ============================================================================
# Financial/Decimal Constants
# ============================================================================

CENTS_PRECISION = Decimal("0.01")
MONTHS_PER_YEAR = 12
PERCENT = Decimal("100")
ZERO = Decimal("0")

# ============================================================================
# Display/Formatting Constants
# ============================================================================

DEFAULT_RECENT_TRANSACTIONS = 10
MAX_TABLE_COLUMN_WIDTH = 30
