"""
Charge transport along forwarding pointers.

Every valid, charged, non-ground cell tries to push one unit of charge to its
forward neighbor per frame. The capacity check looks at the destination's
charge as it was before the frame, so several cells can pass the check for
the same destination and overfill it in the staging buffer. The commit step
settles that overshoot according to the configured clamp policy instead of
rejecting individual transfers.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum

from .fields import CHARGE_DTYPE, FieldStore
from .grid import Grid

UNIT = 1


class AbsorbPolicy(str, Enum):
    """How a ground cell consumes the charge it holds."""

    DECREMENT = "decrement"  # lose at most ``absorb_rate`` units per frame
    CLEAR = "clear"          # lose all pre-frame charge at once


class ClampPolicy(str, Enum):
    """What the commit does with staged charge above the capacity."""

    CLAMP = "clamp"  # cap at max_charge, excess units are discarded
    NONE = "none"    # commit the staged value unchanged


@dataclass
class TransportResult:
    """Outcome of one transport sweep."""
    transfers: int
    blocked: int
    absorbed: int


@dataclass
class CommitResult:
    """Outcome of committing the staging buffer."""
    overshoot_cells: int
    clamped_units: int


def discharge(
    grid: Grid,
    fields: FieldStore,
    max_charge: int,
    absorb_policy: AbsorbPolicy = AbsorbPolicy.DECREMENT,
    absorb_rate: int = 1,
) -> TransportResult:
    """
    Move charge one hop toward the sources, writing into ``fields.staging``.

    The staging buffer is reset from the committed charge first. Reads come
    only from the committed charge and from this frame's propagation output;
    writes go only to staging, through unbuffered scatter-add so that
    concurrent transfers into one destination are all counted.

    Args:
        grid: Grid geometry
        fields: Field store; only ``staging`` is modified
        max_charge: Capacity a destination must be below to accept a unit
        absorb_policy: Sink behaviour for ground cells
        absorb_rate: Units a ground cell absorbs per frame under DECREMENT

    Returns:
        TransportResult with transfer, blocked and absorbed counts
    """
    charge = fields.charge.astype(np.int64)
    staging = fields.staging
    np.copyto(staging, charge)

    active = (charge > 0) & fields.valid

    sinks = np.flatnonzero(active & fields.ground)
    if absorb_policy == AbsorbPolicy.CLEAR:
        drained = charge[sinks]
    else:
        drained = np.minimum(charge[sinks], absorb_rate)
    staging[sinks] -= drained

    movers = np.flatnonzero(active & ~fields.ground)
    targets = fields.forward[movers]
    pointing_away = targets != movers
    has_room = charge[targets] < max_charge
    moving = pointing_away & has_room

    sources = movers[moving]
    destinations = targets[moving]
    np.add.at(staging, destinations, UNIT)
    np.subtract.at(staging, sources, UNIT)

    return TransportResult(
        transfers=int(sources.size),
        blocked=int(np.count_nonzero(pointing_away & ~has_room)),
        absorbed=int(drained.sum()),
    )


def commit(fields: FieldStore, max_charge: int, clamp_policy: ClampPolicy = ClampPolicy.CLAMP) -> CommitResult:
    """
    Replace the committed charge with the staged charge.

    Args:
        fields: Field store
        max_charge: Capacity used by the clamp policy
        clamp_policy: How staged values above ``max_charge`` are settled

    Returns:
        CommitResult describing the overshoot that was present
    """
    staged = fields.staging
    over = staged > max_charge
    overshoot_cells = int(np.count_nonzero(over))
    clamped_units = 0

    if clamp_policy == ClampPolicy.CLAMP and overshoot_cells:
        clamped_units = int((staged[over] - max_charge).sum())
        np.minimum(staged, max_charge, out=staged)

    fields.charge = staged.astype(CHARGE_DTYPE)
    return CommitResult(overshoot_cells=overshoot_cells, clamped_units=clamped_units)
