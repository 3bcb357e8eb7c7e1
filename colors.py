# colors.py
"""
Color schemes for the particle ring.

A scheme maps a particle's angle on the ring to a hue (0-360) and may
override saturation and brightness (0-100). Schemes without overrides let
the particle derive saturation from its distance to its ideal position.
"""
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from constants import TWO_PI
from vector import map_range


@dataclass(frozen=True)
class ColorScheme:
    name: str
    hue_for: Callable[[float], float]
    saturation: Optional[float] = None
    brightness: Optional[float] = None


COLOR_SCHEMES: List[ColorScheme] = [
    ColorScheme("Rainbow", lambda angle: map_range(angle, 0, TWO_PI, 0, 360)),
    ColorScheme("Monochrome", lambda angle: 0, saturation=0, brightness=30),
    ColorScheme("Ocean", lambda angle: map_range(angle, 0, TWO_PI, 180, 240)),
    ColorScheme("Sunset", lambda angle: map_range(angle, 0, TWO_PI, 0, 60)),
    ColorScheme("Neon", lambda angle: math.floor(angle / (math.pi / 3)) * 60),
]


def get_scheme(index: int) -> ColorScheme:
    """Looks up a scheme by index. Raises IndexError for unknown indices."""
    if not 0 <= index < len(COLOR_SCHEMES):
        raise IndexError(
            f"Color scheme index {index} out of range (0-{len(COLOR_SCHEMES) - 1})."
        )
    return COLOR_SCHEMES[index]
