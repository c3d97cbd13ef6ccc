from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from orrery.objects.style import BodyStyle
from orrery.simulation.engine import SimulationLog
from orrery.simulation.registry import BodyRegistry


def export_log_to_json(log: SimulationLog, out_path: str = "out/orrery_log.json") -> str:
    """
    Export minimal playback data:
      {
        "body_positions": {
          "Earth": [{"t":0.0,"r":[x,y,z]}, ...],
          ...
        },
        "events": [...]
      }
    """
    data: Dict[str, Any] = {"body_positions": {}, "events": list(log.events)}

    for key, samples in log.body_positions.items():
        data["body_positions"][key] = [{"t": t, "r": [r[0], r[1], r[2]]} for (t, r) in samples]

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f)

    return out_path


def export_playback_bundle(
    registry: BodyRegistry,
    log: SimulationLog,
    styles: Optional[Dict[str, BodyStyle]] = None,
    out_path: str = "out/playback_bundle.json",
) -> str:
    """
    Export a bundle for a three.js viewer:
      - bodies: parent, elements and presentation per body
      - times_s: global time vector
      - positions: dense per-body arrays aligned to times_s

    JSON shape:
    {
      "times_s": [0,10,20,...],
      "bodies": { "Earth": {"parent": "Sun", "color": "blue", "display_radius": 5.0,
                            "elements": {...}}, ... },
      "positions": { "Earth": [[x,y,z], ...], ... }
    }
    """
    keys = [registry.key_of(i) for i in range(len(registry))]
    if not all(key in log.body_positions for key in keys):
        raise ValueError("Log does not contain positions for every registered body.")
    styles = styles or {}

    times_s: List[float] = [t for (t, _r) in log.body_positions[keys[0]]] if keys else []

    data: Dict[str, Any] = {
        "times_s": times_s,
        "bodies": {},
        "positions": {},
    }

    for i, key in enumerate(keys):
        body = registry[i]
        samples = log.body_positions[key]
        if len(samples) != len(times_s):
            raise ValueError(f"{key} samples length mismatch.")

        el = body.elements
        entry: Dict[str, Any] = {
            "parent": None if body.parent is None else registry.key_of(body.parent),
            "elements": {
                "semi_major_axis": el.semi_major_axis,
                "eccentricity": el.eccentricity,
                "inclination_rad": el.inclination_rad,
                "true_anomaly_offset_rad": el.true_anomaly_offset_rad,
                "mean_anomaly_rate_rad_s": el.mean_anomaly_rate_rad_s,
                "radius_offset": el.radius_offset,
            },
        }
        style = styles.get(key)
        if style is not None:
            entry["color"] = style.color
            entry["display_radius"] = style.display_radius

        data["bodies"][key] = entry
        data["positions"][key] = [[r[0], r[1], r[2]] for (_t, r) in samples]

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f)

    return out_path
