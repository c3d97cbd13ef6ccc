from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BodyStyle:
    """Presentation-only attributes; the physics never reads these."""
    color: str = "white"
    display_radius: float = 1.0

    def __post_init__(self):
        if self.display_radius <= 0:
            raise ValueError(f"Display radius must be positive. Got: {self.display_radius}")
        if not self.color.strip():
            raise ValueError("Color cannot be empty or whitespace.")
