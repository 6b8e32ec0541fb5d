"""
Per-cell field storage.

All fields are flat arrays indexed by ``Grid`` flat index. ``charge`` is
double-buffered with ``staging``: the transport pass accumulates into
``staging`` and the commit copies it back into ``charge``.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from .grid import Grid

CHARGE_DTYPE = np.uint32
STAGING_DTYPE = np.int64


@dataclass
class FieldStore:
    """Authoritative and staging per-cell state of one simulation."""

    ground: np.ndarray       # bool, permanent source/sink flag
    cost_weight: np.ndarray  # float64, edge cost into the cell (weighted mode)
    charge: np.ndarray       # uint32, committed charge
    staging: np.ndarray      # int64, per-frame charge accumulation target
    valid: np.ndarray        # bool, a path to some source is known
    distance: np.ndarray     # float64, inf while invalid
    forward: np.ndarray      # int64, next hop toward a source (self for sources)
    origin: np.ndarray       # int64, index of the source the distance came from

    @classmethod
    def create(cls, grid: Grid, cost_weight: Optional[np.ndarray] = None) -> "FieldStore":
        """
        Allocate the fields of a fresh grid.

        Args:
            grid: Grid the fields belong to
            cost_weight: Optional (height, width) or flat array of non-negative
                finite weights; defaults to 1 everywhere

        Returns:
            FieldStore with no sources, no charge and nothing valid
        """
        n = grid.size

        if cost_weight is None:
            weights = np.ones(n, dtype=np.float64)
        else:
            weights = np.asarray(cost_weight, dtype=np.float64)
            if weights.shape not in ((grid.height, grid.width), (n,)):
                raise ValueError(
                    f"Cost weights of shape {weights.shape} do not match a "
                    f"{grid.width}x{grid.height} grid"
                )
            weights = weights.reshape(n).copy()
            if not np.all(np.isfinite(weights)) or np.any(weights < 0):
                raise ValueError("Cost weights must be finite and non-negative")

        return cls(
            ground=np.zeros(n, dtype=bool),
            cost_weight=weights,
            charge=np.zeros(n, dtype=CHARGE_DTYPE),
            staging=np.zeros(n, dtype=STAGING_DTYPE),
            valid=np.zeros(n, dtype=bool),
            distance=np.full(n, np.inf, dtype=np.float64),
            forward=grid.indices.copy(),
            origin=grid.indices.copy(),
        )

    def total_charge(self) -> int:
        return int(self.charge.sum(dtype=np.int64))
