"""
Point-in-time lookup over piecewise-constant daily schedules.

All functions here are pure: they never mutate the blocks they are given
and may be called from any number of readers at once.
"""
from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

from apsprofile.core.clock import MS_PER_SECOND, SECONDS_PER_DAY, SECONDS_PER_HOUR
from apsprofile.core.schedule.blocks import Block, TargetBlock


def shifted_seconds(seconds_from_midnight: int, timeshift_hours: int) -> int:
    """Rotate a time-of-day by ``timeshift_hours`` (positive moves the schedule later)."""
    return (seconds_from_midnight - timeshift_hours * SECONDS_PER_HOUR) % SECONDS_PER_DAY


def _active_index(blocks: Sequence, seconds_from_midnight: int, timeshift_hours: int) -> int:
    """Index of the block active at the rotated time; the last block covers any overrun."""
    target_ms = shifted_seconds(seconds_from_midnight, timeshift_hours) * MS_PER_SECOND
    elapsed = 0
    for index, block in enumerate(blocks):
        if elapsed <= target_ms < elapsed + block.duration:
            return index
        elapsed += block.duration
    return len(blocks) - 1


def block_value_by_seconds(
    blocks: Sequence[Block],
    seconds_from_midnight: int,
    multiplier: float = 1.0,
    timeshift_hours: int = 0,
) -> float:
    """
    Value of a scalar schedule at a time-of-day.

    Args:
        blocks: Schedule starting at midnight.
        seconds_from_midnight: Query time in ``[0, 86400)``.
        multiplier: Scale applied to the block amount.
        timeshift_hours: Rotation of the schedule in whole hours.

    Returns:
        float: ``amount * multiplier`` of the active block, ``0.0`` for an empty schedule.
    """
    if not blocks:
        return 0.0
    return blocks[_active_index(blocks, seconds_from_midnight, timeshift_hours)].amount * multiplier


def low_target_block_value_by_seconds(
    blocks: Sequence[TargetBlock], seconds_from_midnight: int, timeshift_hours: int = 0
) -> float:
    if not blocks:
        return 0.0
    return blocks[_active_index(blocks, seconds_from_midnight, timeshift_hours)].low_target


def high_target_block_value_by_seconds(
    blocks: Sequence[TargetBlock], seconds_from_midnight: int, timeshift_hours: int = 0
) -> float:
    if not blocks:
        return 0.0
    return blocks[_active_index(blocks, seconds_from_midnight, timeshift_hours)].high_target


def target_block_value_by_seconds(
    blocks: Sequence[TargetBlock], seconds_from_midnight: int, timeshift_hours: int = 0
) -> float:
    """Midpoint of the active target range."""
    if not blocks:
        return 0.0
    return blocks[_active_index(blocks, seconds_from_midnight, timeshift_hours)].midpoint


def target_range_by_seconds(
    blocks: Sequence[TargetBlock], seconds_from_midnight: int, timeshift_hours: int = 0
) -> Tuple[float, float]:
    if not blocks:
        return 0.0, 0.0
    block = blocks[_active_index(blocks, seconds_from_midnight, timeshift_hours)]
    return block.low_target, block.high_target


def block_values_by_seconds_array(
    blocks: Sequence[Block],
    seconds_from_midnight: Union[Sequence[int], np.ndarray],
    multiplier: float = 1.0,
    timeshift_hours: int = 0,
) -> np.ndarray:
    """Vectorized :func:`block_value_by_seconds` for a batch of query times."""
    seconds = np.asarray(seconds_from_midnight, dtype=np.int64)
    if not blocks:
        return np.zeros(seconds.shape, dtype=float)

    durations = np.array([block.duration for block in blocks], dtype=np.int64)
    amounts = np.array([block.amount for block in blocks], dtype=float)
    ends = np.cumsum(durations)

    target_ms = ((seconds - timeshift_hours * SECONDS_PER_HOUR) % SECONDS_PER_DAY) * MS_PER_SECOND
    # First block whose end lies strictly after the query; zero-length blocks are skipped naturally.
    indices = np.searchsorted(ends, target_ms, side="right")
    indices = np.minimum(indices, len(blocks) - 1)
    return amounts[indices] * multiplier
