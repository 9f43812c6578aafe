# ==============================================
# ShapeReport — Run Orchestrator
# ==============================================
#
# PURPOSE:
#   Ties Topics 1 and 2 together into one stateless batch pass over
#   a stream of raw profiler records.
#
# HOW IT CONNECTS THE TOPICS:
#
#   raw record ──► RecordNormalizer ──► NormalizedRequest
#                                            │
#                                            ▼
#                                     ShapeClassifier ──► ignore (counted)
#                                            │ shape key
#                                            ▼
#                                     CohortAggregator
#                                            │ end of stream
#                                            ▼
#                                      CohortRanker ──► ReportResult
#
# CLASS: ShapeReport
# ------------------
#
#   Constructor:
#   ------------
#   - __init__(database=None, problems_only=True, limit=0)
#
#   Public Methods:
#   ---------------
#   - run(records: Iterable) -> ReportResult
#       Pull records one at a time in delivery order. Each call builds
#       its own classifier and aggregator, so runs never share state.
#       If the record source raises, the run aborts with
#       ProfileStreamError and nothing is returned.
#
# CLASS: ReportResult (dataclass)
# -------------------------------
#   - cohorts: list[Cohort]          → ranked, filtered
#   - all_cohorts: dict[str, Cohort] → every cohort, first-seen order
#   - records_seen / records_ignored / anomalies
#   - ignore_reasons: dict[str, int]
#   - elapsed_seconds: float
#
# FUNCTION: pull_records(records) -> Iterator
#   Guards only the fetch of each record; shared with the per-record listing.
#
# ==============================================

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

from profile_shapes.analysis.aggregator import CohortAggregator
from profile_shapes.analysis.classifier import ShapeClassifier
from profile_shapes.analysis.cohort import Cohort
from profile_shapes.analysis.ranker import CohortRanker
from profile_shapes.errors import ProfileStreamError
from profile_shapes.normalization.record_normalizer import RecordNormalizer


@dataclass
class ReportResult:
    """Outcome of one completed run."""

    cohorts: List[Cohort] = field(default_factory=list)
    all_cohorts: Dict[str, Cohort] = field(default_factory=dict)
    records_seen: int = 0
    records_ignored: int = 0
    anomalies: int = 0
    ignore_reasons: Dict[str, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0

    @property
    def eligible_records(self) -> int:
        return sum(cohort.size for cohort in self.all_cohorts.values())

    @property
    def is_empty(self) -> bool:
        return not self.cohorts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records_seen": self.records_seen,
            "records_ignored": self.records_ignored,
            "eligible_records": self.eligible_records,
            "anomalies": self.anomalies,
            "cohorts_total": len(self.all_cohorts),
            "cohorts_reported": len(self.cohorts),
            "ignore_reasons": dict(self.ignore_reasons),
            "elapsed_seconds": self.elapsed_seconds,
        }


class ShapeReport:
    """
    One batch pass: normalize → classify → aggregate → rank.
    """

    def __init__(
        self,
        database: Optional[str] = None,
        problems_only: bool = True,
        limit: int = 0
    ):
        """
        Args:
            database: Database name stripped from namespaces
            problems_only: Drop perfectly selective cohorts from the ranking
            limit: Report at most this many cohorts (0 = all)
        """
        self.database = database
        self._normalizer = RecordNormalizer(database)
        self._ranker = CohortRanker(problems_only=problems_only, limit=limit)

    def run(self, records: Iterable[Any]) -> ReportResult:
        start_time = time.time()
        classifier = ShapeClassifier()
        aggregator = CohortAggregator()
        result = ReportResult()

        for raw_record in pull_records(records):
            result.records_seen += 1
            request = self._normalizer.normalize(raw_record)
            decision = classifier.classify(request)

            if decision.ignored:
                result.records_ignored += 1
                result.ignore_reasons[decision.reason] = result.ignore_reasons.get(decision.reason, 0) + 1
                continue

            aggregator.add(decision.shape_key, request, is_anomaly=decision.is_anomaly)

        result.all_cohorts = aggregator.cohorts()
        result.cohorts = self._ranker.rank(result.all_cohorts.values())
        result.anomalies = classifier.anomaly_count
        result.elapsed_seconds = round(time.time() - start_time, 3)
        return result


def pull_records(records: Iterable[Any]) -> Iterator[Any]:
    """
    Iterate the source one record at a time.

    Only a failure while fetching the next record becomes
    ProfileStreamError; errors raised by the consumer between pulls
    propagate unchanged.
    """
    iterator = iter(records)
    while True:
        try:
            raw_record = next(iterator)
        except StopIteration:
            return
        except ProfileStreamError:
            raise
        except Exception as e:
            raise ProfileStreamError(f"Profiler record stream failed: {e}") from e
        yield raw_record
