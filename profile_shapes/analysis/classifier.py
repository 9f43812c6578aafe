# ==============================================
# ShapeClassifier
# ==============================================
#
# PURPOSE:
#   Takes one NormalizedRequest and decides whether it belongs in a
#   shape cohort at all, and if so under which ShapeKey.
#   This is the "brain": it decides what gets grouped with what.
#
# CLASS: ShapeClassifier
# ----------------------
#   Stateful only through the anomaly counter; create one per run.
#
#   Constructor:
#   ------------
#   - __init__(mode: AnalyzableMode = OVER_EXAMINED)
#
#   Methods:
#   --------
#   - classify(request) -> ShapeDecision
#       Applies rules in order, first match wins:
#
#       RULE 1: insert / remove / getmore        → ignore
#       RULE 2: command without a query, or count → ignore
#       RULE 3: query with an empty filter         → ignore
#       RULE 4: unrecognized kind or structure     → anomaly, fallback key
#       RULE 5: everything else                    → shape key
#
#   - shape_key(request) -> str
#       "<op>|<collection>|<sort field:direction,...>|<filter fields,...>"
#       Filter field NAMES only, sorted; literal values never take part.
#
#   - is_analyzable(request, mode=None) -> bool
#       Compare examined vs returned according to AnalyzableMode.
#
# ==============================================

from typing import Any, Mapping, Optional

from profile_shapes.logging_utils import get_logger
from profile_shapes.normalization.raw_record import CommandRecord, OperationKind
from profile_shapes.normalization.record_normalizer import NormalizedRequest
from .decision import AnalyzableMode, ShapeDecision

logger = get_logger("classifier")


class ShapeClassifier:
    """
    Applies eligibility rules to NormalizedRequests and computes shape keys.

    Records whose inefficiency cannot be pinned on a reproducible query
    shape (writes, cursor paging, meta commands, predicate-less scans)
    are ignored so they do not dilute the ranking. Unrecognized records
    each get their own fallback key so they surface individually.
    """

    # Operation kinds that never carry a selectivity-relevant shape
    IGNORED_KINDS = {OperationKind.INSERT, OperationKind.REMOVE, OperationKind.GETMORE}

    ANOMALY_PREFIX = "anomaly-"

    def __init__(self, mode: AnalyzableMode = AnalyzableMode.OVER_EXAMINED):
        self.mode = mode
        self._anomaly_count = 0

    @property
    def anomaly_count(self) -> int:
        return self._anomaly_count

    def classify(self, request: NormalizedRequest) -> ShapeDecision:
        kind = request.operation_kind

        # RULE 1: writes and cursor continuations
        if kind in self.IGNORED_KINDS:
            return ShapeDecision.ignore(f"'{kind.value}' operations are not query-shaped")

        # RULE 2: administrative / meta commands
        if kind is OperationKind.COMMAND:
            command = self._command_document(request)
            if not isinstance(command.get("query"), Mapping):
                return ShapeDecision.ignore("command without a query")
            if "count" in command:
                return ShapeDecision.ignore("count command")

        # RULE 3: dashboard / introspection queries with no predicate
        if kind is OperationKind.QUERY and not request.filter_fields:
            return ShapeDecision.ignore("query without filter fields")

        # RULE 4: anything the parser could not place
        if kind is OperationKind.UNKNOWN:
            return self._anomaly(request)

        # RULE 5: a reproducible shape
        return ShapeDecision.shaped(self.shape_key(request))

    def shape_key(self, request: NormalizedRequest) -> str:
        sort_signature = ",".join(f"{name}:{direction}" for name, direction in request.sort_fields)
        filter_signature = ",".join(request.filter_fields)
        return "|".join((
            request.operation_kind.value,
            request.collection,
            sort_signature,
            filter_signature,
        ))

    def is_analyzable(self, request: NormalizedRequest, mode: Optional[AnalyzableMode] = None) -> bool:
        mode = mode or self.mode
        if mode is AnalyzableMode.EXACT_MATCH:
            return request.examined == request.returned
        if mode is AnalyzableMode.MISMATCH:
            return request.examined != request.returned
        return request.examined > request.returned

    def _anomaly(self, request: NormalizedRequest) -> ShapeDecision:
        self._anomaly_count += 1
        key = f"{self.ANOMALY_PREFIX}{self._anomaly_count}"
        reason = getattr(request.record, "reason", "") or f"unrecognized operation kind {request.op!r}"
        logger.warning("Anomalous profiler record on %r reported as %s: %s",
                       request.namespace, key, reason)
        return ShapeDecision.anomaly(key, reason)

    @staticmethod
    def _command_document(request: NormalizedRequest) -> Mapping[str, Any]:
        if isinstance(request.record, CommandRecord):
            return request.record.command
        return {}
