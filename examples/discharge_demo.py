#!/usr/bin/env python3
"""
Simple demo script showing the wavefront and charge draining into a source.
"""

import numpy as np
from py_discharge.core import Simulation, SimulationConfig, PointerInput, Button


def main():
    """Paint a wall of sources, drop some charge and watch it drain."""
    print("Py-Discharge Demo")
    print("=" * 40)

    width, height, scaling = 32, 16, 8
    sim = Simulation(SimulationConfig(width=width, height=height, max_charge=16))

    # Drag a diagonal stroke along the bottom-left with the primary button
    pointer = PointerInput(sim, scaling)
    pointer.move(1 * scaling, 14 * scaling)
    pointer.press(Button.PRIMARY)
    pointer.move(10 * scaling, 10 * scaling)
    pointer.release(Button.PRIMARY)
    print(f"\nPainted {sim.source_count()} source cells")

    for cell in [(30, 1), (28, 3), (25, 2)]:
        sim.inject_charge(cell, sim.max_charge)

    print("\nFrame  valid  charge  transfers  absorbed")
    print("-" * 42)
    for stats in sim.run(80):
        if stats.frame % 10 == 0:
            print(f"{stats.frame:5d}  {stats.propagation.valid_cells:5d}  "
                  f"{stats.total_charge:6d}  {stats.transport.transfers:9d}  "
                  f"{stats.transport.absorbed:8d}")

    snapshot = sim.snapshot()
    finite = snapshot.distance[snapshot.is_valid]
    print(f"\nValid cells: {int(np.count_nonzero(snapshot.is_valid))} of {width * height}")
    print(f"Farthest cell from a source: {int(finite.max())} hops")
    print(f"Charge left on the grid: {int(snapshot.charge.sum())}")

    # Distance field as rows of digits, '.' for cells not reached yet
    print("\nDistance field (mod 10):")
    for y in range(height):
        row = ""
        for x in range(width):
            if snapshot.is_ground[y, x]:
                row += "#"
            elif snapshot.is_valid[y, x]:
                row += str(int(snapshot.distance[y, x]) % 10)
            else:
                row += "."
        print("  " + row)


if __name__ == "__main__":
    main()
