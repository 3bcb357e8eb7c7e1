# frame.py
"""
Per-frame context and the rendering capability used by the core.

The core never draws directly. Anything that can draw ellipses, lines and
rings in HSB color (pygame, a test recorder, an off-screen exporter) can
stand in as a Renderer.
"""
from dataclasses import dataclass
from typing import Protocol

import numpy as np
from pygame.math import Vector2

from settings import Settings

# Interaction source rows: (x, y, repel_radius, repel_force, scale).
SOURCE_COLUMNS = 5


def empty_sources() -> np.ndarray:
    return np.empty((0, SOURCE_COLUMNS), dtype=np.float64)


class Renderer(Protocol):
    def draw_ellipse(self, x: float, y: float, diameter: float, hue: float,
                     saturation: float, brightness: float, alpha: float) -> None:
        ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float, hue: float,
                  saturation: float, brightness: float, alpha: float,
                  weight: float = 1) -> None:
        ...

    def draw_ring(self, x: float, y: float, diameter: float, hue: float,
                  saturation: float, brightness: float, alpha: float,
                  weight: float = 1) -> None:
        ...


@dataclass
class FrameContext:
    """Everything a particle needs to advance by one frame."""
    now: float
    frame_count: int
    center: Vector2
    settings: Settings
    live_count: int
    sources: np.ndarray

    @property
    def influence_radius(self) -> float:
        return self.settings.mouse.effective_influence_radius
