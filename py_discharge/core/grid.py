"""Fixed-size grid geometry for the discharge simulation."""

import numpy as np
from typing import Iterator, List, Optional, Tuple

Cell = Tuple[int, int]

# Fixed enumeration order: north, south, east, west. y grows downward.
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = ((0, -1), (0, 1), (1, 0), (-1, 0))
NO_NEIGHBOR = -1


class Grid:
    """
    W×H bounded integer coordinate space with 4-connected adjacency.

    Cells are addressed either as ``(x, y)`` tuples or as flat indices
    ``y * width + x``. The flat neighbor table is what the whole-grid passes
    work on; the tuple helpers serve the mutation and input layers.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

        self.width = int(width)
        self.height = int(height)
        self.size = self.width * self.height

        self.indices = np.arange(self.size, dtype=np.int64)
        self.neighbor_table = self._build_neighbor_table()

    def _build_neighbor_table(self) -> np.ndarray:
        """
        Build the (4, size) table of neighbor indices.

        Row k holds the neighbor in direction ``NEIGHBOR_OFFSETS[k]`` for
        every cell, or ``NO_NEIGHBOR`` where that neighbor falls off the grid.
        """
        xs = self.indices % self.width
        ys = self.indices // self.width

        table = np.full((len(NEIGHBOR_OFFSETS), self.size), NO_NEIGHBOR, dtype=np.int64)
        for k, (dx, dy) in enumerate(NEIGHBOR_OFFSETS):
            nx = xs + dx
            ny = ys + dy
            inside = (nx >= 0) & (nx < self.width) & (ny >= 0) & (ny < self.height)
            table[k, inside] = ny[inside] * self.width + nx[inside]
        return table

    def contains(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.width and 0 <= y < self.height

    def index(self, cell: Cell) -> int:
        """Flat index of an in-bounds cell."""
        if not self.contains(cell):
            raise ValueError(
                f"Cell {tuple(cell)} is outside the {self.width}x{self.height} grid"
            )
        x, y = cell
        return int(y) * self.width + int(x)

    def coords(self, index: int) -> Cell:
        if not 0 <= index < self.size:
            raise ValueError(f"Index {index} is outside a grid of {self.size} cells")
        return int(index % self.width), int(index // self.width)

    def neighbors(self, cell: Cell) -> Iterator[Cell]:
        """Yield the in-bounds 4-neighbors of a cell in N, S, E, W order."""
        x, y = cell
        for dx, dy in NEIGHBOR_OFFSETS:
            neighbor = (x + dx, y + dy)
            if self.contains(neighbor):
                yield neighbor

    def cell_from_pointer(self, px: float, py: float, scaling: int) -> Optional[Cell]:
        """
        Map a pointer position in pixels to a grid cell.

        Args:
            px: Pointer x position in pixels
            py: Pointer y position in pixels
            scaling: Pixels per cell along each axis

        Returns:
            The cell under the pointer, or None if the pointer is off the grid
        """
        if px < 0 or py < 0:
            return None
        cell = (int(px) // scaling, int(py) // scaling)
        return cell if self.contains(cell) else None

    def line(self, start: Cell, end: Cell) -> List[Cell]:
        """
        4-connected cells from ``start`` to ``end``, both included.

        Every step moves along exactly one axis so consecutive cells always
        share an edge; a stroke painted along the line has no diagonal gaps
        that 4-connected propagation could leak through.
        """
        x0, y0 = start
        x1, y1 = end
        nx, ny = abs(x1 - x0), abs(y1 - y0)
        sx = 1 if x1 > x0 else -1
        sy = 1 if y1 > y0 else -1

        cells = [(x0, y0)]
        ix = iy = 0
        x, y = x0, y0
        while ix < nx or iy < ny:
            # Integer form of (0.5 + ix) / nx < (0.5 + iy) / ny
            if (1 + 2 * ix) * ny < (1 + 2 * iy) * nx:
                x += sx
                ix += 1
            else:
                y += sy
                iy += 1
            cells.append((x, y))
        return cells
