"""
Temporary basal overrides.

A temporary basal is a time-bounded exception to the scheduled basal
rate: either an absolute rate or a percentage of the profile. Records are
never deleted; a record that replaces another points at it through
``reference_id``.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from apsprofile.core.clock import MS_PER_HOUR, local_utc_offset_millis, now_millis

if TYPE_CHECKING:
    from apsprofile.core.profile.sealed import SealedProfile

logger = logging.getLogger("apsprofile.temporary_basal")


class TemporaryBasalType(Enum):
    NORMAL = "NORMAL"
    EMULATED_PUMP_SUSPEND = "EMULATED_PUMP_SUSPEND"
    PUMP_SUSPEND = "PUMP_SUSPEND"
    SUPERBOLUS = "SUPERBOLUS"
    FAKE_EXTENDED = "FAKE_EXTENDED"  # in memory only

    @classmethod
    def from_string(cls, name: Optional[str]) -> "TemporaryBasalType":
        for member in cls:
            if member.name == name:
                return member
        return cls.NORMAL

    @property
    def is_persistable(self) -> bool:
        return self is not TemporaryBasalType.FAKE_EXTENDED


@dataclass
class TemporaryBasal:
    timestamp: int
    type: TemporaryBasalType
    is_absolute: bool
    rate: float
    duration: int  # [milliseconds]
    id: int = 0
    version: int = 0
    date_created: int = -1
    is_valid: bool = True
    reference_id: Optional[int] = None
    utc_offset: Optional[int] = None  # [milliseconds]

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError(f"Temporary basal duration must be > 0 ms, got {self.duration}")
        if self.utc_offset is None:
            self.utc_offset = local_utc_offset_millis(self.timestamp)

    @property
    def end(self) -> int:
        return self.timestamp + self.duration

    def is_in_progress(self, now: Optional[int] = None) -> bool:
        if now is None:
            now = now_millis()
        return self.timestamp <= now <= self.end

    def planned_remaining_minutes(self, now: Optional[int] = None) -> int:
        if now is None:
            now = now_millis()
        remaining = max(0, self.end - now)
        return int(round(remaining / 1000.0 / 60.0))

    def converted_to_absolute(self, time: int, profile: "SealedProfile") -> float:
        """Rate in U/h, resolving a percentage rate against the profile basal at ``time``."""
        if self.is_absolute:
            return self.rate
        return profile.get_basal(time) * self.rate / 100.0

    def converted_to_percent(self, time: int, profile: "SealedProfile") -> int:
        if not self.is_absolute:
            return int(round(self.rate))
        basal = profile.get_basal(time)
        if basal <= 0:
            return 0
        return int(round(self.rate / basal * 100.0))

    def to_record(self) -> Dict[str, Any]:
        """Serializable form for storage. Derived in-memory records cannot be stored."""
        if not self.type.is_persistable:
            raise ValueError(f"{self.type.name} temporary basals exist in memory only")
        record = asdict(self)
        record["type"] = self.type.name
        return record

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TemporaryBasal":
        data = dict(record)
        data["type"] = TemporaryBasalType.from_string(data.get("type"))
        return cls(**data)


@dataclass
class ExtendedBolus:
    """Extended bolus; the loop treats it as an absolute temporary basal on top of the profile."""
    timestamp: int
    amount: float  # [U]
    duration: int  # [milliseconds]
    id: int = 0
    is_valid: bool = True
    is_emulating_temp_basal: bool = False
    utc_offset: Optional[int] = None

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError(f"Extended bolus duration must be > 0 ms, got {self.duration}")

    @property
    def rate(self) -> float:
        """Delivery rate in U/h."""
        return self.amount / (self.duration / MS_PER_HOUR)

    @property
    def end(self) -> int:
        return self.timestamp + self.duration

    def is_in_progress(self, now: Optional[int] = None) -> bool:
        if now is None:
            now = now_millis()
        return self.timestamp <= now <= self.end

    def to_temporary_basal(self, profile: "SealedProfile") -> TemporaryBasal:
        return TemporaryBasal(
            timestamp=self.timestamp,
            type=TemporaryBasalType.FAKE_EXTENDED,
            is_absolute=True,
            rate=profile.get_basal(self.timestamp) + self.rate,
            duration=self.duration,
            id=self.id,
            is_valid=self.is_valid,
            utc_offset=self.utc_offset,
        )


def active_temporary_basal(records: Iterable[TemporaryBasal], now: Optional[int] = None) -> Optional[TemporaryBasal]:
    """
    The override in force at ``now``.

    Invalid records and records superseded by another record (via
    ``reference_id``) are ignored. If several remain in progress, the one
    that started last wins.
    """
    if now is None:
        now = now_millis()
    candidates = [record for record in records if record.is_valid]
    superseded = {record.reference_id for record in candidates if record.reference_id is not None}
    running = [
        record for record in candidates
        if record.id not in superseded and record.is_in_progress(now)
    ]
    if not running:
        return None
    if len(running) > 1:
        logger.debug("%d temporary basals overlap at %d, using the latest", len(running), now)
    return max(running, key=lambda record: record.timestamp)
