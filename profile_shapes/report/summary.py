# ==============================================
# Cohort Summaries
# ==============================================
#
# PURPOSE:
#   Flatten ranked Cohorts into plain summaries and render them
#   for the terminal (fixed-width table) or as JSON.
#
# ENUMS:
# ------
# - ScanCategory(Enum): ALL, SOME, NONE
#
# CLASSES:
# --------
# - CohortSummary (dataclass)
#     shape_key, collection, operation, filter_fields, average/median/
#     min/max score, first/last occurrence, size, scan, is_anomaly
#
#     Methods:
#     --------
#     - from_cohort(cohort) -> CohortSummary  (classmethod)
#     - to_dict() -> dict
#
# FUNCTIONS:
# ----------
# - summarize(cohorts) -> list[CohortSummary]
# - render_table(summaries) -> str
# - render_json(summaries, run_stats=None) -> str
#
# ==============================================

import json
from enum import Enum
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from profile_shapes.analysis.cohort import Cohort

EMPTY_REPORT_MESSAGE = "No inefficient query shapes found."


class ScanCategory(Enum):
    """How many members of a cohort ran a full collection scan."""
    ALL = "all"
    SOME = "some"
    NONE = "none"

    @classmethod
    def of(cls, cohort: Cohort) -> "ScanCategory":
        if cohort.all_collection_scan:
            return cls.ALL
        if cohort.some_collection_scan:
            return cls.SOME
        return cls.NONE


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


@dataclass
class CohortSummary:
    """What the reporting side gets to see of one cohort."""

    shape_key: str
    collection: str
    operation: str
    filter_fields: str
    average_score: int
    median_score: int
    min_score: int
    max_score: int
    first_occurrence: Any
    last_occurrence: Any
    size: int
    scan: ScanCategory
    is_anomaly: bool = False

    @classmethod
    def from_cohort(cls, cohort: Cohort) -> "CohortSummary":
        kind = cohort.operation_kind
        return cls(
            shape_key=cohort.shape_key,
            collection=cohort.collection,
            operation=kind.value if kind else "",
            filter_fields=cohort.filter_display,
            average_score=cohort.average_score,
            median_score=cohort.median_score,
            min_score=cohort.min_score,
            max_score=cohort.max_score,
            first_occurrence=cohort.first_occurrence,
            last_occurrence=cohort.last_occurrence,
            size=cohort.size,
            scan=ScanCategory.of(cohort),
            is_anomaly=cohort.is_anomaly,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape_key": self.shape_key,
            "collection": self.collection,
            "operation": self.operation,
            "filter_fields": self.filter_fields,
            "average_score": self.average_score,
            "median_score": self.median_score,
            "min_score": self.min_score,
            "max_score": self.max_score,
            "first_occurrence": _as_text(self.first_occurrence),
            "last_occurrence": _as_text(self.last_occurrence),
            "size": self.size,
            "scan": self.scan.value,
            "is_anomaly": self.is_anomaly,
        }


def summarize(cohorts: Iterable[Cohort]) -> List[CohortSummary]:
    return [CohortSummary.from_cohort(cohort) for cohort in cohorts]


_COLUMNS = (
    ("AVG", 8), ("MEDIAN", 8), ("MIN", 8), ("MAX", 8), ("COUNT", 6),
    ("SCAN", 5), ("COLLECTION", 24), ("FILTER", 0),
)


def render_table(summaries: List[CohortSummary]) -> str:
    """Fixed-width table, one line per cohort; the last column is unpadded."""
    if not summaries:
        return EMPTY_REPORT_MESSAGE

    def line(values: List[str]) -> str:
        cells = [value.ljust(width) if width else value
                 for value, (_, width) in zip(values, _COLUMNS)]
        return " ".join(cells).rstrip()

    lines = [line([name for name, _ in _COLUMNS])]
    for summary in summaries:
        filter_text = summary.filter_fields or "-"
        if summary.is_anomaly:
            filter_text = f"[{summary.shape_key}] {filter_text}"
        lines.append(line([
            str(summary.average_score),
            str(summary.median_score),
            str(summary.min_score),
            str(summary.max_score),
            str(summary.size),
            summary.scan.value,
            summary.collection or "-",
            filter_text,
        ]))
    return "\n".join(lines)


def render_json(summaries: List[CohortSummary], run_stats: Optional[Dict[str, Any]] = None) -> str:
    payload: Dict[str, Any] = {"cohorts": [summary.to_dict() for summary in summaries]}
    if run_stats is not None:
        payload["run"] = run_stats
    return json.dumps(payload, indent=2, default=str)
