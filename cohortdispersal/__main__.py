"""Entry point for ``python -m cohortdispersal``.

Loads the default YAML config, builds a simulation engine over a synthetic
world, and either opens a Pygame window to watch cohorts disperse or runs
a fixed number of steps headless.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from cohortdispersal.simulation.config import SimulationConfig
from cohortdispersal.simulation.engine import SimulationEngine

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)

logger = logging.getLogger("cohortdispersal")


def main() -> None:
    """Parse CLI args, create engine, run headless or launch renderer."""
    parser = argparse.ArgumentParser(
        prog="cohortdispersal",
        description="Cohort dispersal across a gridded world",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=12,
        help="Pixel size per grid cell (default: 12)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=2.0,
        help="Simulation steps per second (default: 2)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a window and print a summary",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=12,
        help="Steps to run in headless mode (default: 12)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    engine = SimulationEngine(config=config)

    if args.headless:
        engine.run(args.steps)
        logger.info(
            "%d steps complete: %d cohorts dispersed, %d cohorts on grid",
            engine.time_step,
            engine.dispersal_count,
            engine.grid.total_cohorts(),
        )
        return

    from cohortdispersal.ui.pygame_client import PygameRenderer

    renderer = PygameRenderer(
        engine=engine,
        cell_size=args.cell_size,
        steps_per_second=args.speed,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
