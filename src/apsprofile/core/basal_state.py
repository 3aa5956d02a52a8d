from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from apsprofile.core.clock import now_millis
from apsprofile.core.profile.sealed import SealedProfile
from apsprofile.core.temporary_basal import TemporaryBasal, active_temporary_basal


@dataclass(frozen=True)
class BasalSnapshot:
    """Scheduled basal and the override decision, both computed at ``time``."""
    time: int
    profile_basal: float
    temporary_basal: Optional[TemporaryBasal]
    effective_rate: float

    @property
    def is_overridden(self) -> bool:
        return self.temporary_basal is not None


def take_basal_snapshot(
    profile: SealedProfile,
    temporary_basals: Iterable[TemporaryBasal],
    now: Optional[int] = None,
) -> BasalSnapshot:
    """Read the profile basal and the active override at one consistent instant."""
    if now is None:
        now = now_millis()
    profile_basal = profile.get_basal(now)
    active = active_temporary_basal(temporary_basals, now)
    effective = active.converted_to_absolute(now, profile) if active is not None else profile_basal
    return BasalSnapshot(time=now, profile_basal=profile_basal, temporary_basal=active, effective_rate=effective)
