# ==============================================
# CohortAggregator
# ==============================================
#
# PURPOSE:
#   Consume (ShapeKey, NormalizedRequest) pairs one at a time and
#   group them into Cohorts. This is the "observation engine": it
#   only collects; eligibility was decided upstream by the classifier.
#
# CLASS: CohortAggregator
# -----------------------
#   Stateful: owns the ShapeKey → Cohort mapping for one run.
#
#   Methods:
#   --------
#   - add(shape_key, request, is_anomaly=False) -> Cohort
#       Create the Cohort on first sight of the key, then append.
#
#   - aggregate(pairs) -> dict[str, Cohort]
#       Feed an iterable of pairs and return the mapping.
#
#   - cohorts() -> dict[str, Cohort]
#       Mapping in first-seen order.
#
#   - total_requests (property) -> int
#       Members across all cohorts.
#
#   - reset() -> None
#
# ==============================================

from typing import Dict, Iterable, Tuple

from profile_shapes.normalization.record_normalizer import NormalizedRequest
from .cohort import Cohort


class CohortAggregator:
    """Groups classified requests by shape key, preserving arrival order."""

    def __init__(self):
        self._cohorts: Dict[str, Cohort] = {}

    def add(self, shape_key: str, request: NormalizedRequest, is_anomaly: bool = False) -> Cohort:
        """
        Append one request to the cohort for its key.

        Args:
            shape_key: Key produced by the ShapeClassifier
            request: The normalized request
            is_anomaly: Marks a cohort created for a fallback key

        Returns:
            The cohort the request was appended to
        """
        cohort = self._cohorts.get(shape_key)
        if cohort is None:
            cohort = Cohort(shape_key=shape_key, is_anomaly=is_anomaly)
            self._cohorts[shape_key] = cohort
        cohort.add(request)
        return cohort

    def aggregate(self, pairs: Iterable[Tuple[str, NormalizedRequest]]) -> Dict[str, Cohort]:
        for shape_key, request in pairs:
            self.add(shape_key, request)
        return self.cohorts()

    def cohorts(self) -> Dict[str, Cohort]:
        return dict(self._cohorts)

    @property
    def total_requests(self) -> int:
        return sum(cohort.size for cohort in self._cohorts.values())

    def reset(self) -> None:
        self._cohorts.clear()
