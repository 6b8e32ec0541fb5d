"""
Pointer gestures to mutation calls.

Holding the primary button paints sources under the pointer; holding the
secondary button fills the cell under the pointer with charge. Gestures are
re-applied on every pointer move, button change and frame, so a held button
keeps writing even while the pointer rests.
"""

from enum import Enum
from typing import List, Optional, Set
import structlog

from .grid import Cell
from .simulation import Simulation

logger = structlog.get_logger()


class Button(str, Enum):
    PRIMARY = "primary"      # paint source
    SECONDARY = "secondary"  # inject charge


class PointerInput:
    """Tracks pointer position and buttons and forwards them to a simulation."""

    def __init__(
        self,
        simulation: Simulation,
        scaling: int,
        interpolate: bool = True,
        inject_amount: Optional[int] = None,
    ):
        """
        Args:
            simulation: Simulation receiving the mutations
            scaling: Pixels per grid cell
            interpolate: Apply gestures to every cell crossed by a move
            inject_amount: Charge written by the secondary button,
                defaults to the simulation's max charge
        """
        if scaling < 1:
            raise ValueError(f"scaling must be at least 1, got {scaling}")
        self.simulation = simulation
        self.scaling = scaling
        self.interpolate = interpolate
        self.inject_amount = simulation.max_charge if inject_amount is None else inject_amount
        self.pressed: Set[Button] = set()
        self.cell: Optional[Cell] = None

    def move(self, px: float, py: float) -> None:
        previous = self.cell
        self.cell = self.simulation.grid.cell_from_pointer(px, py, self.scaling)
        if self.cell is None and previous is not None:
            logger.debug("Pointer left grid", px=px, py=py)

        if self.interpolate and self.pressed and previous is not None and self.cell is not None:
            self._apply_to(self.simulation.grid.line(previous, self.cell))
        else:
            self.apply()

    def press(self, button: Button) -> None:
        self.pressed.add(Button(button))
        self.apply()

    def release(self, button: Button) -> None:
        self.pressed.discard(Button(button))
        self.apply()

    def apply(self) -> None:
        """Apply the held gestures to the cell under the pointer."""
        if self.cell is None:
            return
        self._apply_to([self.cell])

    def _apply_to(self, cells: List[Cell]) -> None:
        if not self.pressed:
            return
        for cell in cells:
            if Button.PRIMARY in self.pressed:
                self.simulation.paint_source(cell)
            if Button.SECONDARY in self.pressed:
                self.simulation.inject_charge(cell, self.inject_amount)
