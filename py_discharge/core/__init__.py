"""
Core simulation functionality.
"""

from .grid import Grid, NEIGHBOR_OFFSETS
from .fields import FieldStore
from .propagation import DistanceMode, relax
from .transport import AbsorbPolicy, ClampPolicy, discharge, commit
from .simulation import Simulation, SimulationConfig, FrameSnapshot, FrameStats, CellState
from .pointer import Button, PointerInput

__all__ = ['Grid', 'NEIGHBOR_OFFSETS', 'FieldStore',
           'DistanceMode', 'relax', 'AbsorbPolicy', 'ClampPolicy', 'discharge', 'commit',
           'Simulation', 'SimulationConfig', 'FrameSnapshot', 'FrameStats', 'CellState',
           'Button', 'PointerInput']
