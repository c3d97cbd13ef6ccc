from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from orrery.core.clock import simulated_seconds_since_j2000
from orrery.core.constants import DEFAULT_SPEED_FACTOR
from orrery.data.solar_system import build_solar_system, solar_system_styles
from orrery.simulation.engine import Engine
from orrery.simulation.systems.state_recorder import StateRecorderSystem
from orrery.visualization.export_log import export_playback_bundle
from orrery.visualization.plotly_viewer import render_animated_scene, render_static_scene

logger = logging.getLogger(__name__)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Sample the preset solar system and write plotly/JSON playback files.")
    parser.add_argument(
        "--t-start",
        type=float,
        default=None,
        help="Start time in seconds since J2000. Defaults to the wall clock (see --now).",
    )
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="ISO timestamp used as the start time instead of the current time.",
    )
    parser.add_argument("--duration", type=float, default=6.3, help="Simulated seconds to cover.")
    parser.add_argument("--dt", type=float, default=0.05, help="Step between samples (s).")
    parser.add_argument("--speed", type=float, default=DEFAULT_SPEED_FACTOR, help="Simulation speed multiplier.")
    parser.add_argument("--out-dir", type=Path, default=Path("out"), help="Directory for the output files.")
    parser.add_argument("--no-html", action="store_true", help="Skip the plotly HTML scenes.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    t_start = args.t_start if args.t_start is not None else simulated_seconds_since_j2000(args.now)

    system = build_solar_system()
    styles = solar_system_styles()
    engine = Engine(dt_s=args.dt, speed_factor=args.speed, systems=[StateRecorderSystem()])
    log = engine.run(system, t_start_s=t_start, t_end_s=t_start + args.duration)

    if log.events:
        logger.warning("%d solver failures during the run", len(log.events))

    written = [export_playback_bundle(system, log, styles, out_path=str(args.out_dir / "playback_bundle.json"))]
    if not args.no_html:
        written.append(render_static_scene(log, styles, out_html=str(args.out_dir / "orrery_scene.html")))
        written.append(render_animated_scene(log, styles, out_html=str(args.out_dir / "orrery_animated.html")))

    for path in written:
        logger.info("Wrote %s", path)


if __name__ == "__main__":
    main()
