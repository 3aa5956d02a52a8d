"""
Canonicalisation of rotated schedules.

A schedule with a timeshift is rewritten as an unrotated schedule that
starts at midnight, so that evaluating the result with no timeshift gives
the same value as evaluating the source with its timeshift, at every
second of the day.
"""
from __future__ import annotations

from typing import Callable, List, Sequence, Tuple, TypeVar

from apsprofile.core.clock import MS_PER_DAY, MS_PER_HOUR
from apsprofile.core.schedule.blocks import Block, TargetBlock

_V = TypeVar("_V")
_Piece = Tuple[int, int, _V]  # (start_ms, end_ms, value)


def _complete_day(durations_values: Sequence[Tuple[int, _V]]) -> List[_Piece]:
    """
    Lay blocks out on ``[0, 24h)``.

    A short schedule repeats its last block until midnight and a long one
    is cut at midnight; zero-length blocks are dropped.
    """
    pieces: List[_Piece] = []
    elapsed = 0
    for duration, value in durations_values:
        if elapsed >= MS_PER_DAY:
            break
        end = min(elapsed + duration, MS_PER_DAY)
        if end > elapsed:
            pieces.append((elapsed, end, value))
        elapsed = end
    if durations_values and elapsed < MS_PER_DAY:
        # lookups past the end fall through to the last block
        pieces.append((elapsed, MS_PER_DAY, durations_values[-1][1]))
    return pieces


def _rotate(pieces: Sequence[_Piece], timeshift_hours: int) -> List[_Piece]:
    offset = (timeshift_hours * MS_PER_HOUR) % MS_PER_DAY
    rotated: List[_Piece] = []
    for start, end, value in pieces:
        new_start, new_end = start + offset, end + offset
        if new_start >= MS_PER_DAY:
            rotated.append((new_start - MS_PER_DAY, new_end - MS_PER_DAY, value))
        elif new_end > MS_PER_DAY:
            # straddles midnight
            rotated.append((new_start, MS_PER_DAY, value))
            rotated.append((0, new_end - MS_PER_DAY, value))
        else:
            rotated.append((new_start, new_end, value))
    rotated.sort(key=lambda piece: piece[0])
    return rotated


def _merge(pieces: Sequence[_Piece], same: Callable[[_V, _V], bool]) -> List[Tuple[int, _V]]:
    merged: List[Tuple[int, _V]] = []
    for start, end, value in pieces:
        if merged and same(merged[-1][1], value):
            merged[-1] = (merged[-1][0] + end - start, merged[-1][1])
        else:
            merged.append((end - start, value))
    return merged


def shift_block(blocks: Sequence[Block], multiplier: float = 1.0, timeshift_hours: int = 0) -> List[Block]:
    """
    Rotate and scale a scalar schedule into a midnight-aligned one.

    The input is never mutated. Adjacent blocks that end up with the same
    value are merged, so ``shift_block(shift_block(s, k, h))`` equals
    ``shift_block(s, k, h)``.
    """
    pieces = _complete_day([(block.duration, block.amount * multiplier) for block in blocks])
    merged = _merge(_rotate(pieces, timeshift_hours), lambda a, b: a == b)
    return [Block(duration=duration, amount=amount) for duration, amount in merged]


def shift_target_block(blocks: Sequence[TargetBlock], timeshift_hours: int = 0) -> List[TargetBlock]:
    """Target-range counterpart of :func:`shift_block` (targets are never scaled)."""
    pieces = _complete_day([(block.duration, (block.low_target, block.high_target)) for block in blocks])
    merged = _merge(_rotate(pieces, timeshift_hours), lambda a, b: a == b)
    return [TargetBlock(duration=duration, low_target=low, high_target=high) for duration, (low, high) in merged]


normalize = shift_block
normalize_targets = shift_target_block
