"""
Frame pipeline for the discharge simulation.

A frame is: pending mutation writes (already applied by the mutation API),
one propagation sweep, one transport sweep into staging, and the commit.
After ``step`` returns, ``snapshot`` exposes the settled state to whatever
renders it.
"""

import numpy as np
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
import structlog

from .fields import FieldStore
from .grid import Cell, Grid
from .propagation import DistanceMode, PropagationResult, relax
from .transport import AbsorbPolicy, ClampPolicy, CommitResult, TransportResult, commit, discharge

logger = structlog.get_logger()


@dataclass
class SimulationConfig:
    """Engine parameters for one simulation."""

    width: int = 256
    height: int = 256
    max_charge: int = 16
    distance_mode: DistanceMode = DistanceMode.UNIFORM
    absorb_policy: AbsorbPolicy = AbsorbPolicy.DECREMENT
    absorb_rate: int = 1
    clamp_policy: ClampPolicy = ClampPolicy.CLAMP
    stats_interval: int = 0

    def __post_init__(self):
        self.distance_mode = DistanceMode(self.distance_mode)
        self.absorb_policy = AbsorbPolicy(self.absorb_policy)
        self.clamp_policy = ClampPolicy(self.clamp_policy)
        if self.max_charge < 1:
            raise ValueError(f"max_charge must be at least 1, got {self.max_charge}")
        if self.absorb_rate < 1:
            raise ValueError(f"absorb_rate must be at least 1, got {self.absorb_rate}")
        if self.stats_interval < 0:
            raise ValueError(f"stats_interval must not be negative, got {self.stats_interval}")

    @classmethod
    def from_settings(cls, settings, **overrides) -> "SimulationConfig":
        """Build a config from application settings, with keyword overrides."""
        values = dict(
            width=settings.grid_width,
            height=settings.grid_height,
            max_charge=settings.max_charge,
            distance_mode=settings.distance_mode,
            absorb_policy=settings.absorb_policy,
            absorb_rate=settings.absorb_rate,
            clamp_policy=settings.clamp_policy,
            stats_interval=settings.stats_interval,
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class FrameStats:
    """Counters for one completed frame."""
    frame: int
    propagation: PropagationResult
    transport: TransportResult
    commit: CommitResult
    total_charge: int

    def as_dict(self) -> dict:
        return {
            "frame": self.frame,
            "valid_cells": self.propagation.valid_cells,
            "newly_valid": self.propagation.newly_valid,
            "improved": self.propagation.improved,
            "transfers": self.transport.transfers,
            "blocked": self.transport.blocked,
            "absorbed": self.transport.absorbed,
            "overshoot_cells": self.commit.overshoot_cells,
            "clamped_units": self.commit.clamped_units,
            "total_charge": self.total_charge,
        }


@dataclass(frozen=True)
class CellState:
    """Read-only view of a single cell."""
    cell: Cell
    is_ground: bool
    charge: int
    is_valid: bool
    distance: float
    forward: Optional[Cell]
    origin: Optional[Cell]


@dataclass(frozen=True)
class FrameSnapshot:
    """
    Read-only (height, width) copies of the committed fields.

    ``distance`` is ``inf`` wherever ``is_valid`` is False. ``forward`` and
    ``origin`` hold flat cell indices.
    """
    frame: int
    is_ground: np.ndarray
    charge: np.ndarray
    is_valid: np.ndarray
    distance: np.ndarray
    forward: np.ndarray
    origin: np.ndarray


def _frozen(values: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
    out = values.reshape(shape).copy()
    out.setflags(write=False)
    return out


class Simulation:
    """
    Owns the grid and fields and runs the per-frame pipeline.

    Mutations (``paint_source``, ``inject_charge``) write straight into the
    fields and therefore take effect at the next propagation sweep.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        cost_weights: Optional[np.ndarray] = None,
        sources: Optional[Iterable[Cell]] = None,
    ):
        """
        Initialize the simulation.

        Args:
            config: Engine parameters, defaults to ``SimulationConfig()``
            cost_weights: Optional (height, width) non-negative weights, read in
                weighted distance mode
            sources: Optional cells to mark as ground before the first frame
        """
        self.config = config or SimulationConfig()
        self.grid = Grid(self.config.width, self.config.height)
        self.fields = FieldStore.create(self.grid, cost_weights)
        self.frame = 0

        logger.info(
            "Simulation initialized",
            width=self.grid.width,
            height=self.grid.height,
            max_charge=self.config.max_charge,
            distance_mode=self.config.distance_mode.value,
            absorb_policy=self.config.absorb_policy.value,
            clamp_policy=self.config.clamp_policy.value,
        )

        for cell in sources or ():
            self.paint_source(cell)

    @property
    def max_charge(self) -> int:
        return self.config.max_charge

    # Mutation API

    def paint_source(self, cell: Cell) -> None:
        """Mark a cell as a permanent source. Idempotent."""
        i = self.grid.index(cell)
        if not self.fields.ground[i]:
            logger.debug("Source painted", cell=tuple(cell), frame=self.frame)
        self.fields.ground[i] = True

    def inject_charge(self, cell: Cell, amount: int) -> None:
        """
        Overwrite the charge of a cell, bypassing transport.

        Both the committed and the staging value are set, so the write holds
        whatever point of the frame it lands in.
        """
        if not 0 <= amount <= self.max_charge:
            raise ValueError(
                f"Charge amount {amount} is outside [0, {self.max_charge}]"
            )
        i = self.grid.index(cell)
        self.fields.charge[i] = amount
        self.fields.staging[i] = amount
        logger.debug("Charge injected", cell=tuple(cell), amount=amount, frame=self.frame)

    # Passes

    def propagate(self) -> PropagationResult:
        return relax(self.grid, self.fields, self.config.distance_mode)

    def transport(self) -> TransportResult:
        return discharge(
            self.grid,
            self.fields,
            self.max_charge,
            absorb_policy=self.config.absorb_policy,
            absorb_rate=self.config.absorb_rate,
        )

    def commit(self) -> CommitResult:
        return commit(self.fields, self.max_charge, self.config.clamp_policy)

    def step(self) -> FrameStats:
        """Run propagation, transport and commit for the current frame."""
        propagation = self.propagate()
        transport = self.transport()
        settled = self.commit()

        stats = FrameStats(
            frame=self.frame,
            propagation=propagation,
            transport=transport,
            commit=settled,
            total_charge=self.fields.total_charge(),
        )

        interval = self.config.stats_interval
        if interval and self.frame % interval == 0:
            logger.info("Frame stats", **stats.as_dict())
        else:
            logger.debug("Frame stats", **stats.as_dict())

        self.frame += 1
        return stats

    def run(self, frames: int) -> List[FrameStats]:
        return [self.step() for _ in range(frames)]

    # Render boundary

    def snapshot(self) -> FrameSnapshot:
        shape = (self.grid.height, self.grid.width)
        fields = self.fields
        return FrameSnapshot(
            frame=self.frame,
            is_ground=_frozen(fields.ground, shape),
            charge=_frozen(fields.charge, shape),
            is_valid=_frozen(fields.valid, shape),
            distance=_frozen(np.where(fields.valid, fields.distance, np.inf), shape),
            forward=_frozen(fields.forward, shape),
            origin=_frozen(fields.origin, shape),
        )

    def cell(self, cell: Cell) -> CellState:
        i = self.grid.index(cell)
        fields = self.fields
        valid = bool(fields.valid[i])
        return CellState(
            cell=(int(cell[0]), int(cell[1])),
            is_ground=bool(fields.ground[i]),
            charge=int(fields.charge[i]),
            is_valid=valid,
            distance=float(fields.distance[i]) if valid else float("inf"),
            forward=self.grid.coords(int(fields.forward[i])) if valid else None,
            origin=self.grid.coords(int(fields.origin[i])) if valid else None,
        )

    def source_count(self) -> int:
        return int(np.count_nonzero(self.fields.ground))
