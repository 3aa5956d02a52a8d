from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from apsprofile.core.clock import MS_PER_SECOND
from apsprofile.core.devices.models import PumpDescription
from apsprofile.core.profile.records import PureProfile
from apsprofile.core.safety.config import HardLimits
from apsprofile.core.schedule.blocks import Block, TargetBlock
from apsprofile.core.units import GlucoseUnit
from apsprofile.validation.schemas import (
    SECONDS_PER_DAY,
    HardLimitsModel,
    PumpDescriptionModel,
    PureProfileModel,
    ScheduleEntryModel,
)

logger = logging.getLogger("apsprofile.validation")


def _entry_durations(entries: List[ScheduleEntryModel]) -> List[int]:
    starts = [entry.timeAsSeconds for entry in entries]
    ends = starts[1:] + [SECONDS_PER_DAY]
    return [(end - start) * MS_PER_SECOND for start, end in zip(starts, ends)]


def _to_blocks(entries: List[ScheduleEntryModel]) -> List[Block]:
    return [
        Block(duration=duration, amount=entry.value)
        for entry, duration in zip(entries, _entry_durations(entries))
    ]


def _to_target_blocks(low: List[ScheduleEntryModel], high: List[ScheduleEntryModel]) -> List[TargetBlock]:
    return [
        TargetBlock(duration=duration, low_target=low_entry.value, high_target=high_entry.value)
        for low_entry, high_entry, duration in zip(low, high, _entry_durations(low))
    ]


def validate_profile_document(data: Dict[str, Any]) -> PureProfileModel:
    return PureProfileModel.model_validate(data)


def pure_profile_from_model(model: PureProfileModel, source: Dict[str, Any]) -> PureProfile:
    return PureProfile(
        basal_blocks=_to_blocks(model.basal),
        isf_blocks=_to_blocks(model.sens),
        ic_blocks=_to_blocks(model.carbratio),
        target_blocks=_to_target_blocks(model.target_low, model.target_high),
        glucose_unit=GlucoseUnit.from_text(model.units),
        dia=model.dia,
        timezone=model.timezone,
        json_object=source,
    )


def pure_profile_from_dict(data: Dict[str, Any]) -> PureProfile:
    """
    Build a :class:`PureProfile` from a raw profile document.

    Raises:
        pydantic.ValidationError: If the document is malformed.
    """
    model = validate_profile_document(data)
    return pure_profile_from_model(model, data)


def load_profile_json(path: Union[str, Path]) -> PureProfile:
    profile_path = Path(path)
    data = json.loads(profile_path.read_text())
    logger.debug("Loaded profile document %s", profile_path)
    return pure_profile_from_dict(data)


def profile_document_warnings(model: PureProfileModel) -> List[str]:
    warnings: List[str] = []
    for name in ("sens", "carbratio", "basal", "target_low"):
        entries = getattr(model, name)
        if any(entry.timeAsSeconds % 3600 != 0 for entry in entries):
            warnings.append(f"{name}: entries off the hour are only sampled hourly in the canonical export")
    for low, high in zip(model.target_low, model.target_high):
        if low.value > high.value:
            warnings.append(f"target at {low.time or low.timeAsSeconds}: low {low.value} is above high {high.value}")
    return warnings


def validate_hard_limits_dict(data: Dict[str, Any]) -> HardLimits:
    return HardLimits(**HardLimitsModel.model_validate(data).model_dump())


def load_hard_limits(path: Union[str, Path]) -> HardLimits:
    config_path = Path(path)
    data = yaml.safe_load(config_path.read_text()) or {}
    return validate_hard_limits_dict(data)


def validate_pump_description_dict(data: Dict[str, Any]) -> PumpDescription:
    return PumpDescription(**PumpDescriptionModel.model_validate(data).model_dump())


def load_pump_description(path: Union[str, Path]) -> PumpDescription:
    config_path = Path(path)
    data = yaml.safe_load(config_path.read_text()) or {}
    return validate_pump_description_dict(data)


def format_validation_error(error: ValidationError) -> List[str]:
    lines: List[str] = []
    for entry in error.errors():
        loc = ".".join(str(item) for item in entry.get("loc", []))
        msg = entry.get("msg", "Invalid value")
        lines.append(f"{loc}: {msg}" if loc else msg)
    return lines


__all__ = [
    "load_hard_limits",
    "load_profile_json",
    "load_pump_description",
    "profile_document_warnings",
    "pure_profile_from_dict",
    "pure_profile_from_model",
    "validate_hard_limits_dict",
    "validate_profile_document",
    "validate_pump_description_dict",
    "format_validation_error",
]
