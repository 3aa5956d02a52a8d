from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class PumpDescription:
    """
    Basal capabilities of the target pump.

    Only the parts the profile engine needs: whether basal segments may be
    shorter than one hour, and the deliverable basal range (U/h).
    """
    supports_sub_hour_basal: bool = False
    basal_minimum_rate: float = 0.05
    basal_maximum_rate: float = 25.0
    name: str = "generic"

    def __post_init__(self):
        if self.basal_minimum_rate < 0:
            raise ValueError(f"basal_minimum_rate must be >= 0, got {self.basal_minimum_rate}")
        if self.basal_maximum_rate < self.basal_minimum_rate:
            raise ValueError(
                f"basal_maximum_rate {self.basal_maximum_rate} is below "
                f"basal_minimum_rate {self.basal_minimum_rate}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "supports_sub_hour_basal": self.supports_sub_hour_basal,
            "basal_minimum_rate": self.basal_minimum_rate,
            "basal_maximum_rate": self.basal_maximum_rate,
        }
