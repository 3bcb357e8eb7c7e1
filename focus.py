# focus.py
"""
Auto-focus points: autonomous repellers orbiting the ring center.

Each point pushes nearby particles away and makes them grow, exactly like
the mouse does, but with its own size influence and spring multiplier.
Points are addressed by a stable integer ID that is never reused, so a
control bound to a point stays valid when other points are removed.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np
from pygame.math import Vector2

from constants import (
    AUTO_FOCUS_COLORS, COMPANION_FOCUS_DEFAULTS, FOCUS_REPEL_RADIUS_RATIO,
    INDICATOR_DOT_ALPHA, INDICATOR_DOT_DIAMETER, INDICATOR_RING_ALPHA, TWO_PI
)
from frame import SOURCE_COLUMNS, Renderer, empty_sources
from settings import FocusPointSettings
from vector import polar

# --- Data Contracts ---
#
# class FocusPointRegistry:
#   - add(...) -> int: returns the new point's stable ID.
#   - remove(point_id: int) -> FocusPoint
#     - Raises: KeyError if the ID is unknown.
#   - update(center: Vector2, renderer: Optional[Renderer]) -> None:
#     - Side Effects: advances every enabled point along its orbit and
#       draws indicators for points that show them.
#   - sources(repel_radius: float, repel_force: float) -> np.ndarray
#     - Outputs: (M, 5) float64 rows (x, y, repel_radius, force, scale),
#       one per enabled point, for the particle interaction kernel.


@dataclass
class FocusPoint:
    id: int
    enabled: bool = True
    angle: float = 0.0
    orbit_radius: float = 250.0
    # Signed: positive turns clockwise on a y-down screen.
    angular_speed: float = 0.01
    size_influence: float = 5.0
    spring_multiplier: float = 0.7
    show_indicator: bool = False
    color: Tuple[float, float, float] = AUTO_FOCUS_COLORS[2]
    position: Vector2 = field(default_factory=lambda: Vector2(0, 0))

    @property
    def clockwise(self) -> bool:
        return self.angular_speed >= 0

    @property
    def speed(self) -> float:
        return abs(self.angular_speed)


class FocusPointRegistry:
    """Ordered collection of focus points with stable IDs."""

    def __init__(self):
        self._points: Dict[int, FocusPoint] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[FocusPoint]:
        return iter(list(self._points.values()))

    def __contains__(self, point_id: int) -> bool:
        return point_id in self._points

    @property
    def ids(self) -> List[int]:
        return list(self._points)

    def add(self, enabled: bool = True, angle: float = 0.0, orbit_radius: float = 250.0,
            speed: float = 0.01, clockwise: bool = True, size_influence: float = 5.0,
            spring_multiplier: float = 0.7, show_indicator: bool = False,
            color: Optional[Tuple[float, float, float]] = None,
            point_id: Optional[int] = None) -> int:
        if point_id is None:
            point_id = self.reserve_id()
        elif point_id in self._points:
            raise ValueError(f"Focus point id {point_id} is already in use.")
        if color is None:
            color = AUTO_FOCUS_COLORS[len(self._points) % len(AUTO_FOCUS_COLORS)]
        self._points[point_id] = FocusPoint(
            id=point_id,
            enabled=enabled,
            angle=angle,
            orbit_radius=orbit_radius,
            angular_speed=abs(speed) if clockwise else -abs(speed),
            size_influence=size_influence,
            spring_multiplier=spring_multiplier,
            show_indicator=show_indicator,
            color=color,
        )
        logging.info(
            f"Focus point {point_id} added (radius {orbit_radius:.0f}, speed {speed:.3f}, "
            f"{'clockwise' if clockwise else 'counter-clockwise'})."
        )
        return point_id

    def add_from_settings(self, settings: FocusPointSettings) -> int:
        return self.add(
            enabled=settings.enabled,
            angle=settings.angle,
            orbit_radius=settings.orbit_radius,
            speed=settings.speed,
            clockwise=settings.clockwise,
            size_influence=settings.size_influence,
            spring_multiplier=settings.spring_multiplier,
            show_indicator=settings.show_indicators,
            color=AUTO_FOCUS_COLORS[settings.color],
        )

    def reserve_id(self) -> int:
        """Hands out the next ID without adding a point."""
        point_id = self._next_id
        self._next_id += 1
        return point_id

    def add_companion(self, rng: np.random.Generator, point_id: Optional[int] = None) -> int:
        """
        Adds a point that complements the first one: a tighter, faster
        orbit turning the opposite way, starting at a random angle.
        """
        first = next(iter(self._points.values()), None)
        clockwise = not first.clockwise if first is not None else True
        return self.add(
            angle=float(rng.uniform(0, TWO_PI)),
            clockwise=clockwise,
            point_id=point_id,
            **COMPANION_FOCUS_DEFAULTS,
        )

    def get(self, point_id: int) -> FocusPoint:
        try:
            return self._points[point_id]
        except KeyError:
            raise KeyError(f"Unknown focus point id {point_id}.") from None

    def index_of(self, point_id: int) -> int:
        """Current display position of a point; changes when others are removed."""
        self.get(point_id)
        return self.ids.index(point_id)

    def remove(self, point_id: int) -> FocusPoint:
        point = self.get(point_id)
        del self._points[point_id]
        logging.info(f"Focus point {point_id} removed. {len(self._points)} remaining.")
        return point

    def set_clockwise(self, point_id: int, clockwise: bool) -> None:
        point = self.get(point_id)
        point.angular_speed = point.speed if clockwise else -point.speed

    def set_speed(self, point_id: int, speed: float) -> None:
        """Sets the orbit speed magnitude, keeping the direction."""
        point = self.get(point_id)
        point.angular_speed = abs(speed) if point.clockwise else -abs(speed)

    def update(self, center: Vector2, renderer: Optional[Renderer] = None) -> None:
        for point in list(self._points.values()):
            if not point.enabled:
                continue
            point.angle += point.angular_speed
            point.position = polar(center, point.orbit_radius, point.angle)
            if point.show_indicator and renderer is not None:
                self._draw_indicator(point, center, renderer)

    def reposition(self, center: Vector2) -> None:
        """Recomputes positions around a new center without advancing angles."""
        for point in self._points.values():
            point.position = polar(center, point.orbit_radius, point.angle)

    def _draw_indicator(self, point: FocusPoint, center: Vector2, renderer: Renderer) -> None:
        hue, saturation, brightness = point.color
        renderer.draw_ring(center.x, center.y, point.orbit_radius * 2,
                           hue, saturation, brightness / 2, INDICATOR_RING_ALPHA)
        renderer.draw_ellipse(point.position.x, point.position.y, INDICATOR_DOT_DIAMETER,
                              hue, saturation, brightness, INDICATOR_DOT_ALPHA)

    def sources(self, repel_radius: float, repel_force: float) -> np.ndarray:
        enabled = [p for p in self._points.values() if p.enabled]
        if not enabled:
            return empty_sources()
        table = np.empty((len(enabled), SOURCE_COLUMNS), dtype=np.float64)
        focus_radius = repel_radius * FOCUS_REPEL_RADIUS_RATIO
        for row, point in enumerate(enabled):
            table[row] = (
                point.position.x, point.position.y, focus_radius,
                repel_force * point.spring_multiplier, point.size_influence,
            )
        return table
