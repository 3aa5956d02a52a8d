from __future__ import annotations

from enum import Enum

MMOLL_TO_MGDL = 18.0


class GlucoseUnit(Enum):
    MGDL = "mg/dl"
    MMOL = "mmol"

    @property
    def as_text(self) -> str:
        return self.value

    @classmethod
    def from_text(cls, text: str) -> "GlucoseUnit":
        normalized = (text or "").strip().lower()
        if normalized in ("mmol", "mmol/l", "mmoll"):
            return cls.MMOL
        if normalized in ("mg/dl", "mgdl"):
            return cls.MGDL
        raise ValueError(f"Unknown glucose unit '{text}'")


def to_mgdl(value: float, units: GlucoseUnit) -> float:
    """Convert a glucose value expressed in ``units`` to mg/dL."""
    if units == GlucoseUnit.MGDL:
        return value
    return value * MMOLL_TO_MGDL


def round_to(value: float, step: float) -> float:
    if step == 0.0:
        return value
    return round(value / step) * step
