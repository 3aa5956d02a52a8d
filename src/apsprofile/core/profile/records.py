"""
Source records a profile can be built from.

These mirror what the persistence layer stores for a user-authored
profile switch, for the "effective" switch the loop actually ran, and
for an externally supplied profile document.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apsprofile.core.clock import MS_PER_HOUR
from apsprofile.core.schedule.blocks import Block, TargetBlock
from apsprofile.core.units import GlucoseUnit


@dataclass
class InsulinConfiguration:
    insulin_label: str
    insulin_end_time: int  # [milliseconds], DIA
    peak: int = 0  # [milliseconds]

    @property
    def dia_hours(self) -> float:
        return self.insulin_end_time / 1000.0 / 60.0 / 60.0

    @classmethod
    def from_dia_hours(cls, dia: float, insulin_label: str = "", peak: int = 0) -> "InsulinConfiguration":
        return cls(insulin_label=insulin_label, insulin_end_time=int(dia * MS_PER_HOUR), peak=peak)


@dataclass
class ProfileSwitch:
    """User-authored profile activation, possibly scaled and shifted."""
    timestamp: int
    basal_blocks: List[Block]
    isf_blocks: List[Block]
    ic_blocks: List[Block]
    target_blocks: List[TargetBlock]
    glucose_unit: GlucoseUnit
    profile_name: str
    insulin_configuration: InsulinConfiguration
    timeshift: int = 0  # [milliseconds]
    percentage: int = 100
    duration: Optional[int] = None  # [milliseconds], None = indefinite
    utc_offset: int = 0  # [milliseconds]
    id: int = 0
    version: int = 0
    date_created: int = -1
    is_valid: bool = True
    reference_id: Optional[int] = None


@dataclass
class EffectiveProfileSwitch:
    """A profile switch with percentage and timeshift already applied to its blocks."""
    timestamp: int
    basal_blocks: List[Block]
    isf_blocks: List[Block]
    ic_blocks: List[Block]
    target_blocks: List[TargetBlock]
    glucose_unit: GlucoseUnit
    original_profile_name: str
    insulin_configuration: InsulinConfiguration
    original_custom_profile_name: str = ""
    original_timeshift: int = 0  # [milliseconds]
    original_percentage: int = 100
    original_duration: int = 0  # [milliseconds]
    original_end: int = 0
    utc_offset: int = 0  # [milliseconds]
    id: int = 0
    version: int = 0
    date_created: int = -1
    is_valid: bool = True
    reference_id: Optional[int] = None


@dataclass
class PureProfile:
    """Profile supplied from outside (document import), with DIA in hours."""
    basal_blocks: List[Block]
    isf_blocks: List[Block]
    ic_blocks: List[Block]
    target_blocks: List[TargetBlock]
    glucose_unit: GlucoseUnit
    dia: float  # [hours]
    timezone: str = "UTC"
    json_object: Dict[str, Any] = field(default_factory=dict)
