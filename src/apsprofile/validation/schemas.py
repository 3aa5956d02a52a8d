from __future__ import annotations

import re
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from apsprofile.core.units import GlucoseUnit

SECONDS_PER_DAY = 86400
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class ScheduleEntryModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    time: Optional[str] = None
    timeAsSeconds: Optional[int] = Field(default=None, ge=0, lt=SECONDS_PER_DAY)
    value: float

    @model_validator(mode="after")
    def _resolve_seconds(self) -> "ScheduleEntryModel":
        if self.timeAsSeconds is not None:
            return self
        if self.time is None:
            raise ValueError("entry requires either 'time' or 'timeAsSeconds'")
        match = _TIME_PATTERN.match(self.time.strip())
        if match is None:
            raise ValueError(f"time '{self.time}' is not HH:MM")
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise ValueError(f"time '{self.time}' is out of range")
        self.timeAsSeconds = hours * 3600 + minutes * 60
        return self


def _check_schedule(name: str, entries: List[ScheduleEntryModel]) -> None:
    seconds = [entry.timeAsSeconds for entry in entries]
    if seconds[0] != 0:
        raise ValueError(f"{name}: first entry must start at 00:00")
    if len(set(seconds)) != len(seconds):
        raise ValueError(f"{name}: duplicate entry times")


class PureProfileModel(BaseModel):
    """Externally supplied profile document (Nightscout profile store layout)."""
    model_config = ConfigDict(extra="ignore")

    units: str
    dia: float = Field(gt=0)
    timezone: str = Field(default="UTC", min_length=1)
    sens: List[ScheduleEntryModel] = Field(min_length=1)
    carbratio: List[ScheduleEntryModel] = Field(min_length=1)
    basal: List[ScheduleEntryModel] = Field(min_length=1)
    target_low: List[ScheduleEntryModel] = Field(min_length=1)
    target_high: List[ScheduleEntryModel] = Field(min_length=1)

    @field_validator("units", mode="before")
    @classmethod
    def _normalize_units(cls, value: Any) -> str:
        if value is None:
            raise ValueError("units is required")
        return GlucoseUnit.from_text(str(value)).as_text

    @field_validator("timezone", mode="before")
    @classmethod
    def _default_timezone(cls, value: Any) -> str:
        if value is None or value == "":
            return "UTC"
        return str(value)

    @field_validator("sens", "carbratio", "basal", "target_low", "target_high", mode="after")
    @classmethod
    def _sort_entries(cls, value: List[ScheduleEntryModel]) -> List[ScheduleEntryModel]:
        return sorted(value, key=lambda entry: entry.timeAsSeconds)

    @model_validator(mode="after")
    def _check_schedules(self) -> "PureProfileModel":
        for name in ("sens", "carbratio", "basal", "target_low", "target_high"):
            _check_schedule(name, getattr(self, name))
        low_times = [entry.timeAsSeconds for entry in self.target_low]
        high_times = [entry.timeAsSeconds for entry in self.target_high]
        if low_times != high_times:
            raise ValueError("target_low and target_high must use the same entry times")
        return self


class HardLimitsModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min_basal: float = Field(default=0.01, ge=0.0)
    max_basal: float = Field(default=10.0, gt=0.0)
    min_dia: float = Field(default=5.0, gt=0.0)
    max_dia: float = Field(default=9.0, gt=0.0)
    min_ic: float = Field(default=2.0, gt=0.0)
    max_ic: float = Field(default=100.0, gt=0.0)
    min_isf: float = Field(default=2.0, gt=0.0)
    max_isf: float = Field(default=1000.0, gt=0.0)
    min_low_target: float = Field(default=80.0, gt=0.0)
    max_low_target: float = Field(default=180.0, gt=0.0)
    min_high_target: float = Field(default=90.0, gt=0.0)
    max_high_target: float = Field(default=270.0, gt=0.0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "HardLimitsModel":
        for name in ("basal", "dia", "ic", "isf", "low_target", "high_target"):
            lowest = getattr(self, f"min_{name}")
            highest = getattr(self, f"max_{name}")
            if lowest > highest:
                raise ValueError(f"min_{name} ({lowest}) must not exceed max_{name} ({highest})")
        return self


class PumpDescriptionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = "generic"
    supports_sub_hour_basal: bool = False
    basal_minimum_rate: float = Field(default=0.05, ge=0.0)
    basal_maximum_rate: float = Field(default=25.0, gt=0.0)

    @model_validator(mode="after")
    def _check_range(self) -> "PumpDescriptionModel":
        if self.basal_maximum_rate < self.basal_minimum_rate:
            raise ValueError("basal_maximum_rate must be >= basal_minimum_rate")
        return self
