"""Tests for pointer gesture handling."""

import pytest
from py_discharge.core.pointer import Button, PointerInput
from py_discharge.core.simulation import Simulation, SimulationConfig

SCALING = 8


@pytest.fixture
def sim():
    return Simulation(SimulationConfig(width=10, height=10, max_charge=16))


def px(cell):
    """Pixel position in the middle of a cell."""
    return cell[0] * SCALING + SCALING // 2, cell[1] * SCALING + SCALING // 2


class TestPointerInput:
    """Test button and movement handling."""

    def test_no_writes_without_buttons(self, sim):
        pointer = PointerInput(sim, SCALING)
        pointer.move(*px((3, 3)))
        pointer.apply()
        assert sim.source_count() == 0
        assert sim.fields.total_charge() == 0

    def test_primary_paints_source(self, sim):
        pointer = PointerInput(sim, SCALING)
        pointer.move(*px((3, 4)))
        pointer.press(Button.PRIMARY)
        assert sim.cell((3, 4)).is_ground

    def test_secondary_injects_max_charge(self, sim):
        pointer = PointerInput(sim, SCALING)
        pointer.move(*px((5, 5)))
        pointer.press(Button.SECONDARY)
        assert sim.cell((5, 5)).charge == 16

    def test_custom_inject_amount(self, sim):
        pointer = PointerInput(sim, SCALING, inject_amount=4)
        pointer.move(*px((5, 5)))
        pointer.press("secondary")
        assert sim.cell((5, 5)).charge == 4

    def test_held_button_reapplies_each_frame(self, sim):
        pointer = PointerInput(sim, SCALING)
        pointer.move(*px((2, 2)))
        pointer.press(Button.SECONDARY)
        sim.inject_charge((2, 2), 0)
        pointer.apply()
        assert sim.cell((2, 2)).charge == 16

    def test_release_stops_writing(self, sim):
        pointer = PointerInput(sim, SCALING)
        pointer.move(*px((2, 2)))
        pointer.press(Button.PRIMARY)
        pointer.release(Button.PRIMARY)
        pointer.move(*px((6, 6)))
        assert sim.source_count() == 1

    def test_interpolated_stroke_has_no_gaps(self, sim):
        pointer = PointerInput(sim, SCALING, interpolate=True)
        pointer.move(*px((0, 0)))
        pointer.press(Button.PRIMARY)
        pointer.move(*px((6, 3)))

        # Manhattan length 9 plus the starting cell
        assert sim.source_count() == 10
        assert sim.cell((0, 0)).is_ground
        assert sim.cell((6, 3)).is_ground

    def test_stroke_without_interpolation_skips_cells(self, sim):
        pointer = PointerInput(sim, SCALING, interpolate=False)
        pointer.move(*px((0, 0)))
        pointer.press(Button.PRIMARY)
        pointer.move(*px((6, 3)))
        assert sim.source_count() == 2

    def test_pointer_off_grid_is_ignored(self, sim):
        pointer = PointerInput(sim, SCALING)
        pointer.press(Button.PRIMARY)
        pointer.move(10 * SCALING + 1, 5)
        pointer.apply()
        assert pointer.cell is None
        assert sim.source_count() == 0

    def test_invalid_scaling(self, sim):
        with pytest.raises(ValueError):
            PointerInput(sim, 0)
