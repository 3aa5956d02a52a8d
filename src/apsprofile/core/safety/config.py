from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass
class HardLimits:
    """
    Absolute physiological limits a profile must respect before activation.

    These are not device limits: pump capabilities are described separately
    by :class:`~apsprofile.core.devices.models.PumpDescription`. Target and
    ISF bounds are expressed in mg/dL whatever the profile's display unit.
    """
    # Basal (U/h)
    min_basal: float = 0.01
    max_basal: float = 10.0

    # Duration of insulin action (hours)
    min_dia: float = 5.0
    max_dia: float = 9.0

    # Insulin-to-carb ratio (g/U)
    min_ic: float = 2.0
    max_ic: float = 100.0

    # Insulin sensitivity (mg/dL per U)
    min_isf: float = 2.0
    max_isf: float = 1000.0

    # Target bounds (mg/dL)
    min_low_target: float = 80.0
    max_low_target: float = 180.0
    min_high_target: float = 90.0
    max_high_target: float = 270.0

    @staticmethod
    def is_in_range(value: float, lowest: float, highest: float) -> bool:
        return lowest <= value <= highest

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HardLimits":
        return cls(**data)
