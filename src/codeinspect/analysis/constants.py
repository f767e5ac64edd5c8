"""Named thresholds for clustering, impact, duplication and feature scoring.

Bucket tables are ``((threshold, penalty), ...)`` ordered from the highest
threshold down; the first bucket whose threshold the value strictly exceeds
applies.  Changing any value changes scoring results.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Clustering
# ---------------------------------------------------------------------------

FALLBACK_CLUSTER_ID = "cross-cutting"
FALLBACK_CLUSTER_NAME = "Cross-Cutting / Shared"

FOLDER_WEIGHT = 0.35
ROUTE_WEIGHT = 0.30
IMPORT_CLUSTER_WEIGHT = 0.20
COCHANGE_WEIGHT = 0.15

SIGNAL_DIVERSITY_BONUS = 0.1
LOW_CONFIDENCE_THRESHOLD = 0.3

# ---------------------------------------------------------------------------
# Impact (blast radius)
# ---------------------------------------------------------------------------

FAN_IN_CAP = 30
FAN_IN_POINTS = 35
FEATURE_CAP = 5
FEATURE_POINTS = 25
CHURN_CAP = 100
CHURN_POINTS = 20
NO_TEST_POINTS = 10
COMPLEXITY_CAP = 50
COMPLEXITY_POINTS = 10

MIN_IMPACT_SCORE = 15
CRITICAL_SCORE = 70
HIGH_SCORE = 50
MEDIUM_SCORE = 30

# ---------------------------------------------------------------------------
# Duplication
# ---------------------------------------------------------------------------

MIN_CHUNK_LINES = 6
MAX_CHUNK_LINES = 30
CHUNK_SIZE_STEP = 4
WINDOW_STRIDE = 3
MIN_CHUNK_CHARS = 100
HASH_PREFIX_LEN = 16
MAX_DUPLICATES = 200
SNIPPET_LINES = 3

# ---------------------------------------------------------------------------
# Feature scoring
# ---------------------------------------------------------------------------

MAX_SUB_SCORE = 10.0

Buckets = tuple[tuple[float, int], ...]

# architecture
AVG_FAN_OUT_BUCKETS: Buckets = ((15, 3), (10, 2), (5, 1))
AVG_LOC_BUCKETS: Buckets = ((500, 3), (300, 2), (150, 1))
MAX_LOC_BUCKETS: Buckets = ((1000, 2), (500, 1))
FILE_COUNT_BUCKETS: Buckets = ((50, 2), (30, 1))

# code quality
AVG_CYCLOMATIC_BUCKETS: Buckets = ((30, 3), (20, 2), (10, 1))
AVG_COGNITIVE_BUCKETS: Buckets = ((40, 3), (25, 2), (15, 1))
AVG_MAX_FUNCTION_BUCKETS: Buckets = ((100, 2), (50, 1))

# bug risk
AVG_FAN_IN_BUCKETS: Buckets = ((20, 3), (10, 2), (5, 1))
MAX_FAN_IN_BUCKETS: Buckets = ((30, 2), (15, 1))
AVG_CHURN_BUCKETS: Buckets = ((50, 3), (20, 2), (10, 1))
RISK_CYCLOMATIC_BUCKETS: Buckets = ((25, 2), (15, 1))

ARCHITECTURE_WEIGHT = 0.30
CODE_QUALITY_WEIGHT = 0.25
BUG_RISK_WEIGHT = 0.20
TEST_COVERAGE_WEIGHT = 0.20
TEST_COVERAGE_WEIGHT_WITH_MIGRATION = 0.15
MIGRATION_WEIGHT = 0.10
NEUTRAL_MIGRATION_SCORE = 5.0

GRADE_CUTOFFS: tuple[tuple[float, str], ...] = (
    (8.0, "A"),
    (6.0, "B"),
    (4.0, "C"),
    (2.0, "D"),
)
