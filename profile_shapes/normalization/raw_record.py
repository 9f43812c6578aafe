# ==============================================
# Raw Profiler Records (Tagged Variants)
# ==============================================
#
# PURPOSE:
#   Turn one untyped system.profile document into a typed variant
#   so the rest of the engine never branches on the "op" string.
#
# ENUMS:
# ------
# - OperationKind(Enum): QUERY, COMMAND, UPDATE, INSERT, REMOVE,
#                        GETMORE, UNKNOWN
#
# CLASSES (frozen dataclasses):
# -----------------------------
# - RawRecord          → shared envelope: op, ns, counts, ts, execStats, raw
# - QueryRecord        → + query   (the {filter, sort, ...} document)
# - CommandRecord      → + command (the {count|findAndModify|..., query} doc)
# - UpdateRecord       → + query   (the update selector itself)
# - InsertRecord / RemoveRecord / GetMoreRecord → envelope only
# - UnrecognizedRecord → + reason; keeps the raw payload for reporting
#
# FUNCTION:
# ---------
# - parse_raw_record(document) -> RawRecord
#     Never raises. Anything it cannot place becomes UnrecognizedRecord.
#
# ==============================================

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional


class OperationKind(Enum):
    """Operation kinds written by the MongoDB profiler."""
    QUERY = "query"
    COMMAND = "command"
    UPDATE = "update"
    INSERT = "insert"
    REMOVE = "remove"
    GETMORE = "getmore"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawRecord:
    """Fields every profiler document carries, whatever its kind."""

    kind: ClassVar[OperationKind] = OperationKind.UNKNOWN

    op: str = ""
    ns: str = ""
    nreturned: Optional[int] = None
    n_matched: Optional[int] = None
    docs_examined: Optional[int] = None
    ts: Optional[datetime] = None
    exec_stats: Optional[Mapping[str, Any]] = None
    raw: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class QueryRecord(RawRecord):
    kind: ClassVar[OperationKind] = OperationKind.QUERY

    query: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CommandRecord(RawRecord):
    kind: ClassVar[OperationKind] = OperationKind.COMMAND

    command: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateRecord(RawRecord):
    kind: ClassVar[OperationKind] = OperationKind.UPDATE

    query: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InsertRecord(RawRecord):
    kind: ClassVar[OperationKind] = OperationKind.INSERT


@dataclass(frozen=True)
class RemoveRecord(RawRecord):
    kind: ClassVar[OperationKind] = OperationKind.REMOVE


@dataclass(frozen=True)
class GetMoreRecord(RawRecord):
    kind: ClassVar[OperationKind] = OperationKind.GETMORE


@dataclass(frozen=True)
class UnrecognizedRecord(RawRecord):
    """A document whose kind or structure could not be placed."""
    kind: ClassVar[OperationKind] = OperationKind.UNKNOWN

    reason: str = ""


_ENVELOPE_ONLY = {
    OperationKind.INSERT: InsertRecord,
    OperationKind.REMOVE: RemoveRecord,
    OperationKind.GETMORE: GetMoreRecord,
}


def _as_count(value: Any) -> Optional[int]:
    # bool is an int subclass; a flag is not a document count
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    return None


def _as_timestamp(value: Any) -> Optional[datetime]:
    # Held as naive UTC so naive and tz-aware values in one cohort compare
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    return value if isinstance(value, Mapping) else None


def _envelope(document: Mapping[str, Any]) -> Dict[str, Any]:
    ns = document.get("ns")
    op = document.get("op")
    return {
        "op": op if isinstance(op, str) else "",
        "ns": ns if isinstance(ns, str) else "",
        "nreturned": _as_count(document.get("nreturned")),
        "n_matched": _as_count(document.get("nMatched")),
        "docs_examined": _as_count(document.get("docsExamined")),
        "ts": _as_timestamp(document.get("ts")),
        "exec_stats": _as_mapping(document.get("execStats")),
        "raw": document,
    }


def _parse_kind(op: Any) -> Optional[OperationKind]:
    if not isinstance(op, str):
        return None
    try:
        kind = OperationKind(op)
    except ValueError:
        return None
    return None if kind is OperationKind.UNKNOWN else kind


def parse_raw_record(document: Any) -> RawRecord:
    """
    Build the typed variant for one profiler document.

    Args:
        document: A system.profile document (any mapping).

    Returns:
        The matching RawRecord subclass. Unknown kinds, and known kinds
        that lack the sub-document their shape is read from, come back
        as UnrecognizedRecord with the original payload attached.
    """
    if not isinstance(document, Mapping):
        return UnrecognizedRecord(raw=document, reason="record is not a document")

    envelope = _envelope(document)
    kind = _parse_kind(document.get("op"))

    if kind is None:
        return UnrecognizedRecord(
            reason=f"unrecognized operation kind {document.get('op')!r}",
            **envelope
        )

    if kind is OperationKind.QUERY:
        # Newer profilers log find() under "command" instead of "query"
        query = _as_mapping(document.get("query")) or _as_mapping(document.get("command"))
        if query is None:
            return UnrecognizedRecord(reason="query record without a query document", **envelope)
        return QueryRecord(query=query, **envelope)

    if kind is OperationKind.COMMAND:
        command = _as_mapping(document.get("command"))
        if command is None:
            return UnrecognizedRecord(reason="command record without a command document", **envelope)
        return CommandRecord(command=command, **envelope)

    if kind is OperationKind.UPDATE:
        query = _as_mapping(document.get("query"))
        if query is None:
            return UnrecognizedRecord(reason="update record without a query document", **envelope)
        return UpdateRecord(query=query, **envelope)

    return _ENVELOPE_ONLY[kind](**envelope)
