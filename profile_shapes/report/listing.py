"""Per-record listing of profiler entries flagged by the analyzable check.

Unlike the cohort report this prints every flagged record on its own:

    mydb.users   --   1 / 5023
    {"filter": {"email": "a@b.c"}}
"""

from typing import Any, Iterable, Iterator, Mapping, Optional

from bson import json_util

from profile_shapes.analysis.classifier import ShapeClassifier
from profile_shapes.analysis.decision import AnalyzableMode
from profile_shapes.normalization.record_normalizer import NormalizedRequest, RecordNormalizer
from profile_shapes.shape_report import pull_records


def format_request(request: NormalizedRequest) -> str:
    lines = [f"{request.namespace}   --   {request.returned} / {request.examined}"]
    raw = request.record.raw if request.record is not None else None
    query = raw.get("query") if isinstance(raw, Mapping) else None
    if query is None and isinstance(raw, Mapping):
        query = raw.get("command")
    lines.append(json_util.dumps(query) if query is not None else "-")
    return "\n".join(lines)


def iter_flagged(
    records: Iterable[Any],
    database: Optional[str] = None,
    mode: AnalyzableMode = AnalyzableMode.OVER_EXAMINED
) -> Iterator[NormalizedRequest]:
    normalizer = RecordNormalizer(database)
    classifier = ShapeClassifier(mode)
    for raw_record in pull_records(records):
        request = normalizer.normalize(raw_record)
        if classifier.is_analyzable(request):
            yield request


def list_inefficient(
    records: Iterable[Any],
    database: Optional[str] = None,
    mode: AnalyzableMode = AnalyzableMode.OVER_EXAMINED
) -> Iterator[str]:
    for request in iter_flagged(records, database, mode):
        yield format_request(request)
