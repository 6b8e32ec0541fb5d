"""
Nearest-source relaxation.

Each frame runs exactly one sweep: every cell looks at its own source flag
and at the previous frame's state of its 4 neighbors and keeps the cheapest
candidate. Repeated over frames the set of valid cells grows outward from
the sources one hop per frame, like a wavefront. This is a bounded per-frame
relaxation and never iterates to a fixpoint inside a frame.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum

from .fields import FieldStore
from .grid import Grid, NO_NEIGHBOR


class DistanceMode(str, Enum):
    """Edge cost used when a distance is inherited from a neighbor."""

    UNIFORM = "uniform"    # every hop costs 1
    WEIGHTED = "weighted"  # a hop into a cell costs that cell's cost weight


@dataclass
class PropagationResult:
    """Outcome of one relaxation sweep."""
    newly_valid: int
    improved: int
    valid_cells: int


def relax(grid: Grid, fields: FieldStore, mode: DistanceMode = DistanceMode.UNIFORM) -> PropagationResult:
    """
    Run one relaxation sweep and update distance, validity, forward and origin.

    All candidates are computed from the arrays as they were before the
    sweep and the results are assigned in one go afterwards, so no cell
    sees a value written by a sibling cell in the same sweep.

    Candidates, in tie-break order:
        1. the cell itself if it is ground (distance 0, forward self)
        2. each valid neighbor in N, S, E, W order
           (neighbor distance + edge cost, forward neighbor)

    A previously valid cell only moves to a strictly smaller distance, which
    keeps forward pointers stable among equal-cost alternatives.

    Args:
        grid: Grid geometry
        fields: Field store, updated in place
        mode: Uniform or cost-weighted edge costs

    Returns:
        PropagationResult with counts for this sweep
    """
    table = grid.neighbor_table
    cells = grid.indices

    prev_valid = fields.valid
    prev_distance = fields.distance

    present = table != NO_NEIGHBOR
    safe = np.where(present, table, 0)
    usable = present & prev_valid[safe]

    if mode == DistanceMode.WEIGHTED:
        step = fields.cost_weight
    else:
        step = 1.0

    candidates = np.where(usable, prev_distance[safe] + step, np.inf)

    # argmin returns the first minimum, i.e. the earliest neighbor on ties
    best_slot = np.argmin(candidates, axis=0)
    best = candidates[best_slot, cells]
    best_forward = table[best_slot, cells]
    best_origin = fields.origin[safe[best_slot, cells]]

    ground = fields.ground
    best = np.where(ground, 0.0, best)
    best_forward = np.where(ground, cells, best_forward)
    best_origin = np.where(ground, cells, best_origin)

    reachable = ground | np.isfinite(best)
    update = reachable & (~prev_valid | (best < prev_distance))

    newly_valid = int(np.count_nonzero(reachable & ~prev_valid))
    improved = int(np.count_nonzero(update & prev_valid))

    fields.distance = np.where(update, best, prev_distance)
    fields.forward = np.where(update, best_forward, fields.forward)
    fields.origin = np.where(update, best_origin, fields.origin)
    fields.valid = prev_valid | reachable

    return PropagationResult(
        newly_valid=newly_valid,
        improved=improved,
        valid_cells=int(np.count_nonzero(fields.valid)),
    )
