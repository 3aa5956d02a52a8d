"""Built-in hard-limit presets by patient age group."""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any, Dict, List

from apsprofile.core.safety.config import HardLimits


class PresetError(KeyError):
    pass


def load_presets() -> List[Dict[str, Any]]:
    content = files("apsprofile.presets").joinpath("hard_limits.json").read_text()
    return json.loads(content)


def get_preset(name: str) -> Dict[str, Any]:
    presets = load_presets()
    for preset in presets:
        if preset.get("name") == name:
            return preset
    raise PresetError(name)


def hard_limits_for(name: str) -> HardLimits:
    """:class:`HardLimits` of the named age-group preset (e.g. ``"adult"``)."""
    return HardLimits.from_dict(get_preset(name)["limits"])


__all__ = ["PresetError", "load_presets", "get_preset", "hard_limits_for"]
