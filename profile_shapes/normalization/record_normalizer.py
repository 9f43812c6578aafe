import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union

from profile_shapes.logging_utils import get_logger
from .raw_record import (
    CommandRecord,
    OperationKind,
    QueryRecord,
    RawRecord,
    UpdateRecord,
    parse_raw_record,
)

logger = get_logger("normalization")

# Query plans are never meaningfully deeper than this
MAX_PLAN_DEPTH = 256

COLLECTION_SCAN_STAGE = "COLLSCAN"


@dataclass(frozen=True)
class NormalizedRequest:
    """
    Read-only view over one profiler record.

    Every derived value is computed once by RecordNormalizer.normalize()
    and stored here; nothing is recomputed on access.
    """

    operation_kind: OperationKind
    op: str
    namespace: str
    collection: str
    returned: int
    examined: int
    selectivity_score: int
    filter_fields: Tuple[str, ...]
    sort_fields: Tuple[Tuple[str, Any], ...]
    contains_collection_scan: bool
    timestamp: Any = None
    record: Optional[RawRecord] = field(default=None, repr=False, compare=False)

    @property
    def filter_display(self) -> str:
        return ", ".join(self.filter_fields)


class RecordNormalizer:
    def __init__(self, database: Optional[str] = None):
        self.database = database or ""

    def normalize(self, raw_record: Union[RawRecord, Mapping[str, Any]]) -> NormalizedRequest:
        record = raw_record if isinstance(raw_record, RawRecord) else parse_raw_record(raw_record)

        returned = self._returned(record)
        examined = record.docs_examined or 0

        return NormalizedRequest(
            operation_kind=record.kind,
            op=record.op,
            namespace=record.ns,
            collection=self.collection_name(record.ns),
            returned=returned,
            examined=examined,
            selectivity_score=returned - examined,
            filter_fields=self._filter_fields(record),
            sort_fields=self._sort_fields(record),
            contains_collection_scan=self.contains_collection_scan(record.exec_stats),
            timestamp=record.ts,
            record=record,
        )

    def normalize_batch(self, records: list) -> list[NormalizedRequest]:
        return [self.normalize(record) for record in records]

    def collection_name(self, namespace: str) -> str:
        prefix = f"{self.database}."
        if self.database and namespace.startswith(prefix):
            return namespace[len(prefix):]
        _, dot, rest = namespace.partition(".")
        return rest if dot else namespace

    def contains_collection_scan(self, exec_stats: Optional[Mapping[str, Any]]) -> bool:
        stage = exec_stats
        depth = 0
        while isinstance(stage, Mapping):
            if depth >= MAX_PLAN_DEPTH:
                logger.warning(
                    "Plan stage chain exceeds %d stages; stopping the walk", MAX_PLAN_DEPTH
                )
                return False
            if stage.get("stage") == COLLECTION_SCAN_STAGE:
                return True
            stage = stage.get("inputStage")
            depth += 1
        return False

    def _returned(self, record: RawRecord) -> int:
        if record.nreturned is not None:
            return record.nreturned
        if record.n_matched is not None:
            return record.n_matched
        return 0

    def _filter_document(self, record: RawRecord) -> Optional[Mapping[str, Any]]:
        if isinstance(record, QueryRecord):
            candidate = record.query.get("filter")
        elif isinstance(record, CommandRecord):
            candidate = record.command.get("query")
        elif isinstance(record, UpdateRecord):
            candidate = record.query
        else:
            return None
        return candidate if isinstance(candidate, Mapping) else None

    def _filter_fields(self, record: RawRecord) -> Tuple[str, ...]:
        document = self._filter_document(record)
        if not document:
            return ()
        return tuple(sorted({str(name) for name in document.keys()}))

    def _sort_fields(self, record: RawRecord) -> Tuple[Tuple[str, Any], ...]:
        if isinstance(record, QueryRecord):
            sort = record.query.get("sort")
        elif isinstance(record, CommandRecord):
            sort = record.command.get("sort")
        else:
            return ()
        if not isinstance(sort, Mapping):
            return ()
        return tuple((str(name), self._direction(value)) for name, value in sort.items())

    @staticmethod
    def _direction(value: Any) -> Any:
        if isinstance(value, bool):
            return str(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        # e.g. {"$meta": "textScore"}, nan
        return str(value)
