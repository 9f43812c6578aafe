# ==============================================
# TOPIC 1: NORMALIZATION
# ==============================================
#
# This package turns raw system.profile documents into typed,
# read-only requests BEFORE they enter the analysis pipeline.
#
# Modules:
# --------
# - raw_record.py        → Tagged variants per profiler operation kind
# - record_normalizer.py → Derived fields: collection, counts, filter/sort
#                          shape, collection-scan flag
#
# ==============================================

from .raw_record import OperationKind, RawRecord, UnrecognizedRecord, parse_raw_record
from .record_normalizer import NormalizedRequest, RecordNormalizer

__all__ = [
    "OperationKind",
    "RawRecord",
    "UnrecognizedRecord",
    "parse_raw_record",
    "NormalizedRequest",
    "RecordNormalizer",
]
