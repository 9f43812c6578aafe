# ==============================================
# TOPIC 4: REPORTING
# ==============================================
#
# This package turns ranked cohorts into something an operator
# can read. It knows nothing about how cohorts were built.
#
# Modules:
# --------
# - summary.py  → CohortSummary, console table, JSON
# - listing.py  → One entry per flagged record (no grouping)
#
# ==============================================

from .summary import CohortSummary, ScanCategory, render_json, render_table, summarize
from .listing import list_inefficient

__all__ = [
    "CohortSummary",
    "ScanCategory",
    "render_json",
    "render_table",
    "summarize",
    "list_inefficient",
]
