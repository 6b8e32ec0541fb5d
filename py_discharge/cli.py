"""Headless command line runner for scripted simulations."""

import argparse
import json
import sys
from typing import Optional, Sequence, Tuple

import numpy as np
import structlog

from .config import settings
from .core.grid import Cell
from .core.pointer import Button, PointerInput
from .core.propagation import DistanceMode
from .core.simulation import Simulation, SimulationConfig
from .core.transport import AbsorbPolicy, ClampPolicy
from .utils.logging import configure_logging

logger = structlog.get_logger()


def parse_cell(text: str) -> Cell:
    """Parse ``"X,Y"`` into a cell."""
    try:
        x, y = (int(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected X,Y but got {text!r}")
    return x, y


def parse_injection(text: str) -> Tuple[Cell, Optional[int]]:
    """Parse ``"X,Y"`` or ``"X,Y,AMOUNT"``."""
    parts = text.split(",")
    if len(parts) not in (2, 3):
        raise argparse.ArgumentTypeError(f"expected X,Y[,AMOUNT] but got {text!r}")
    try:
        values = [int(part) for part in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected integers in {text!r}")
    amount = values[2] if len(values) == 3 else None
    return (values[0], values[1]), amount


def parse_stroke(text: str) -> Tuple[Cell, Cell]:
    """Parse ``"X0,Y0:X1,Y1"``."""
    try:
        start, end = text.split(":")
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected X0,Y0:X1,Y1 but got {text!r}")
    return parse_cell(start), parse_cell(end)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-discharge",
        description="Run a headless discharge simulation and print a JSON summary",
    )
    parser.add_argument("--width", type=int, default=settings.grid_width, help="Grid width in cells")
    parser.add_argument("--height", type=int, default=settings.grid_height, help="Grid height in cells")
    parser.add_argument("--frames", type=int, default=100, help="Number of frames to run")
    parser.add_argument(
        "--source", type=parse_cell, action="append", default=[], metavar="X,Y",
        help="Paint a source before the first frame (repeatable)",
    )
    parser.add_argument(
        "--inject", type=parse_injection, action="append", default=[], metavar="X,Y[,AMOUNT]",
        help="Inject charge before the first frame, default amount is max charge (repeatable)",
    )
    parser.add_argument(
        "--stroke", type=parse_stroke, action="append", default=[], metavar="X0,Y0:X1,Y1",
        help="Drag the primary button from one cell to another (repeatable)",
    )
    parser.add_argument("--cost-map", help="Path to a .npy array of cost weights (height x width)")
    parser.add_argument("--max-charge", type=int, help="Charge capacity of a cell")
    parser.add_argument("--distance-mode", choices=[m.value for m in DistanceMode])
    parser.add_argument("--absorb-policy", choices=[p.value for p in AbsorbPolicy])
    parser.add_argument("--absorb-rate", type=int)
    parser.add_argument("--clamp-policy", choices=[p.value for p in ClampPolicy])
    parser.add_argument("--stats-interval", type=int, help="Log frame stats every N frames")
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-format", choices=["json", "plain"], default=settings.log_format)
    return parser


def run(args: argparse.Namespace) -> dict:
    """Build the simulation described by ``args``, run it and summarize."""
    config = SimulationConfig.from_settings(
        settings,
        width=args.width,
        height=args.height,
        max_charge=args.max_charge,
        distance_mode=args.distance_mode,
        absorb_policy=args.absorb_policy,
        absorb_rate=args.absorb_rate,
        clamp_policy=args.clamp_policy,
        stats_interval=args.stats_interval,
    )

    cost_weights = np.load(args.cost_map) if args.cost_map else None
    simulation = Simulation(config, cost_weights=cost_weights, sources=args.source)

    pointer = PointerInput(simulation, settings.scaling, interpolate=settings.interpolate_strokes)
    for start, end in args.stroke:
        _drag(pointer, start, end)

    for cell, amount in args.inject:
        simulation.inject_charge(cell, simulation.max_charge if amount is None else amount)

    totals = {"transfers": 0, "absorbed": 0, "clamped_units": 0}
    for stats in simulation.run(args.frames):
        totals["transfers"] += stats.transport.transfers
        totals["absorbed"] += stats.transport.absorbed
        totals["clamped_units"] += stats.commit.clamped_units

    snapshot = simulation.snapshot()
    summary = {
        "frames": simulation.frame,
        "width": simulation.grid.width,
        "height": simulation.grid.height,
        "sources": simulation.source_count(),
        "valid_cells": int(np.count_nonzero(snapshot.is_valid)),
        "total_charge": int(snapshot.charge.sum(dtype=np.int64)),
        **totals,
    }
    logger.info("Simulation finished", **summary)
    return summary


def _drag(pointer: PointerInput, start: Cell, end: Cell) -> None:
    """Replay a primary-button drag through the pointer layer, in pixels."""
    half = pointer.scaling // 2
    pointer.move(start[0] * pointer.scaling + half, start[1] * pointer.scaling + half)
    pointer.press(Button.PRIMARY)
    pointer.move(end[0] * pointer.scaling + half, end[1] * pointer.scaling + half)
    pointer.release(Button.PRIMARY)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.frames < 0:
        parser.error("--frames must not be negative")

    try:
        configure_logging(args.log_level, args.log_format)
        summary = run(args)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    print(json.dumps(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())
