# ==============================================
# TOPIC 2: CLASSIFICATION, AGGREGATION & RANKING
# ==============================================
#
# This package decides which requests share a query shape,
# groups them into cohorts and orders the cohorts worst-first.
#
# Three-step process:
#   Step 1 (Classification): NormalizedRequest → ShapeKey or ignore
#   Step 2 (Aggregation):    ShapeKey → Cohort with statistics
#   Step 3 (Ranking):        Cohorts → ordered, problems-only list
#
# Modules:
# --------
# - decision.py    → ShapeDecision and AnalyzableMode
# - classifier.py  → Eligibility rules and shape keys
# - cohort.py      → Per-shape statistics
# - aggregator.py  → ShapeKey → Cohort mapping
# - ranker.py      → Ordering and problem filtering
#
# ==============================================

from .decision import AnalyzableMode, ShapeDecision
from .classifier import ShapeClassifier
from .cohort import Cohort
from .aggregator import CohortAggregator
from .ranker import CohortRanker

__all__ = [
    "AnalyzableMode",
    "ShapeDecision",
    "ShapeClassifier",
    "Cohort",
    "CohortAggregator",
    "CohortRanker",
]
