# ==============================================
# Cohort
# ==============================================
#
# PURPOSE:
#   Holds every NormalizedRequest that shares one ShapeKey and
#   derives the statistics the ranking and report are built on.
#
# CLASS: Cohort (dataclass)
# -------------------------
#   Attributes:
#   -----------
#   - shape_key: str                    → The shared ShapeKey
#   - is_anomaly: bool                  → True for fallback-key cohorts
#   - requests: list[NormalizedRequest] → Members, in arrival order
#
#   Computed Properties:
#   --------------------
#   - size, scores
#   - average_score   → mean of scores, rounded half up
#   - median_score    → sorted(scores)[size // 2] (upper median)
#   - min_score / max_score
#   - first_occurrence / last_occurrence → min / max timestamp
#   - all_collection_scan   → every member's plan had a COLLSCAN
#   - some_collection_scan  → at least one, but not all, did
#   - collection / operation_kind / filter_fields / filter_display
#
#   Methods:
#   --------
#   - add(request) -> None
#
# ==============================================

import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from profile_shapes.normalization.raw_record import OperationKind
from profile_shapes.normalization.record_normalizer import NormalizedRequest


@dataclass
class Cohort:
    """
    All requests sharing one query shape (a.k.a. RequestGroup).

    Appended to while the run streams records, read-only afterwards.
    """

    shape_key: str
    is_anomaly: bool = False
    requests: List[NormalizedRequest] = field(default_factory=list)

    def add(self, request: NormalizedRequest) -> None:
        self.requests.append(request)

    # ======================================
    # Identity (taken from the first member)
    # ======================================
    @property
    def size(self) -> int:
        return len(self.requests)

    @property
    def collection(self) -> str:
        return self.requests[0].collection if self.requests else ""

    @property
    def operation_kind(self) -> Optional[OperationKind]:
        return self.requests[0].operation_kind if self.requests else None

    @property
    def filter_fields(self) -> Tuple[str, ...]:
        return self.requests[0].filter_fields if self.requests else ()

    @property
    def filter_display(self) -> str:
        return ", ".join(self.filter_fields)

    # ======================================
    # Score statistics
    # ======================================
    @property
    def scores(self) -> List[int]:
        return [request.selectivity_score for request in self.requests]

    @property
    def average_score(self) -> int:
        """
        Mean selectivity score, rounded half up.

        Returns:
            0 for an empty cohort.
        """
        if not self.requests:
            return 0
        mean = sum(self.scores) / self.size
        return math.floor(mean + 0.5)

    @property
    def median_score(self) -> int:
        """Upper median: for even sizes the element at index size // 2."""
        if not self.requests:
            return 0
        return sorted(self.scores)[self.size // 2]

    @property
    def min_score(self) -> int:
        return min(self.scores) if self.requests else 0

    @property
    def max_score(self) -> int:
        return max(self.scores) if self.requests else 0

    # ======================================
    # Time window
    # ======================================
    @property
    def first_occurrence(self) -> Any:
        timestamps = self._timestamps()
        return min(timestamps) if timestamps else None

    @property
    def last_occurrence(self) -> Any:
        timestamps = self._timestamps()
        return max(timestamps) if timestamps else None

    def _timestamps(self) -> list:
        return [request.timestamp for request in self.requests if request.timestamp is not None]

    # ======================================
    # Collection scans
    # ======================================
    @property
    def scan_count(self) -> int:
        return sum(1 for request in self.requests if request.contains_collection_scan)

    @property
    def all_collection_scan(self) -> bool:
        return bool(self.requests) and self.scan_count == self.size

    @property
    def some_collection_scan(self) -> bool:
        return 0 < self.scan_count < self.size
