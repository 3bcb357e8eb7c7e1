# vector.py
"""
2D vector and scalar interpolation helpers.

Vectors are `pygame.math.Vector2`. Binary operators and every helper in
this module return new vectors; only augmented assignment (`+=`, `*=`)
mutates a vector in place.
"""
import math
from typing import Union

from pygame.math import Vector2

Number = Union[int, float]

# --- Data Contracts ---
#
# normalized(v: Vector2) -> Vector2:
#   - Outputs: unit vector in the direction of v, or (0, 0) when v has
#     zero length. Never raises.
#
# lerp(a, b, t):
#   - Inputs: two numbers or two Vector2, and any float t.
#   - Outputs: a + (b - a) * t, unclamped. Vector2.lerp() is not used
#     because it rejects t outside [0, 1].


def add(a: Vector2, b: Vector2) -> Vector2:
    return a + b


def subtract(a: Vector2, b: Vector2) -> Vector2:
    return a - b


def scale(v: Vector2, factor: float) -> Vector2:
    return v * factor


def magnitude(v: Vector2) -> float:
    return v.length()


def normalized(v: Vector2) -> Vector2:
    """Returns the unit vector of v, or a zero vector if v has no length."""
    length = v.length()
    if length == 0:
        return Vector2(0, 0)
    return v / length


def distance(a: Vector2, b: Vector2) -> float:
    return a.distance_to(b)


def lerp(a, b, t: float):
    """Linear interpolation for numbers and vectors alike."""
    if isinstance(a, Vector2):
        return Vector2(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)
    return a + (b - a) * t


def clamp(value: Number, low: Number, high: Number) -> Number:
    return max(low, min(high, value))


def map_range(value: float, in_low: float, in_high: float,
              out_low: float, out_high: float) -> float:
    """Re-maps value from one range to another. The result is not clamped."""
    return out_low + (value - in_low) * (out_high - out_low) / (in_high - in_low)


def cosine_ease(progress: float) -> float:
    """Ease-in-out curve: 0 at progress 0, 1 at progress 1."""
    return 0.5 - 0.5 * math.cos(progress * math.pi)


def polar(center: Vector2, radius: float, angle: float) -> Vector2:
    """Point at `radius` from `center` along `angle` (radians)."""
    return Vector2(center.x + math.cos(angle) * radius,
                   center.y + math.sin(angle) * radius)
