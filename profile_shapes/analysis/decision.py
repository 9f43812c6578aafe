# ==============================================
# Decision (Data Classes)
# ==============================================
#
# PURPOSE:
#   Data classes that represent the OUTPUT of shape classification
#   and the switch that controls the "analyzable" predicate.
#
# ENUMS:
# ------
# - AnalyzableMode(Enum): OVER_EXAMINED, MISMATCH, EXACT_MATCH
#     Which examined/returned relationship counts as worth flagging.
#
# CLASSES:
# --------
# - ShapeDecision (dataclass)
#     The decision for a single request.
#
#     Attributes:
#     -----------
#     - shape_key: str | None   → Cohort key, None when the request is ignored
#     - reason: str             → Human-readable explanation
#     - is_anomaly: bool        → True for unrecognized records (fallback key)
#
#     Methods:
#     --------
#     - ignored (property)      → shape_key is None
#     - ignore(reason) / shaped(key, reason) / anomaly(key, reason) (classmethods)
#     - to_dict() -> dict
#
# ==============================================

from enum import Enum
from dataclasses import dataclass
from typing import Optional, Dict, Any


class AnalyzableMode(Enum):
    """
    How ShapeClassifier.is_analyzable() reads examined vs returned.

    - OVER_EXAMINED: flag when more documents were examined than returned
    - MISMATCH: flag whenever the two counts differ
    - EXACT_MATCH: flag only perfectly selective requests (diagnostics)
    """
    OVER_EXAMINED = "over-examined"
    MISMATCH = "mismatch"
    EXACT_MATCH = "exact-match"


@dataclass(frozen=True)
class ShapeDecision:
    """Classification outcome for one NormalizedRequest."""

    shape_key: Optional[str]
    reason: str = ""
    is_anomaly: bool = False

    @property
    def ignored(self) -> bool:
        return self.shape_key is None

    @classmethod
    def ignore(cls, reason: str) -> "ShapeDecision":
        return cls(shape_key=None, reason=reason)

    @classmethod
    def shaped(cls, shape_key: str, reason: str = "") -> "ShapeDecision":
        return cls(shape_key=shape_key, reason=reason)

    @classmethod
    def anomaly(cls, shape_key: str, reason: str) -> "ShapeDecision":
        return cls(shape_key=shape_key, reason=reason, is_anomaly=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape_key": self.shape_key,
            "reason": self.reason,
            "is_anomaly": self.is_anomaly,
        }
