from typing import Iterable, List

from .cohort import Cohort


class CohortRanker:
    """
    Orders cohorts worst-first for the report.

    Cohorts are sorted ascending by average score, so the heaviest
    over-examination comes first. The sort is stable: equal averages
    keep the order the cohorts were first seen in, which keeps repeated
    runs over the same input identical.
    """

    def __init__(self, problems_only: bool = True, limit: int = 0):
        """
        Args:
            problems_only: Drop cohorts whose average score is exactly 0
                (anomaly cohorts are always kept)
            limit: Keep at most this many cohorts (0 keeps all)
        """
        self.problems_only = problems_only
        self.limit = limit

    def rank(self, cohorts: Iterable[Cohort]) -> List[Cohort]:
        candidates = list(cohorts)
        if self.problems_only:
            candidates = [cohort for cohort in candidates
                          if cohort.is_anomaly or cohort.average_score != 0]

        ranked = sorted(candidates, key=lambda cohort: cohort.average_score)
        if self.limit > 0:
            ranked = ranked[:self.limit]
        return ranked
