# particle.py
"""
A single particle on the ring.

Each particle is pulled toward a moving home position by a spring, pushed
away by nearby interaction sources (the mouse and auto-focus points), and
grows when a source is close. On top of the physics it carries four
animation states: a position transition, a fade-in, a highlight pulse and a
terminal removal.

Animation precedence, highest first:
    REMOVING > HIGHLIGHTED > FADING_IN > TRANSITIONING > IDLE
Removal is terminal: marking a particle for removal cancels its highlight,
and no other path may start a transition or highlight on it afterwards.
A highlight's color wins over the entry brightening of a new particle;
scale factors from highlight and entry multiply.
"""
import enum
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numba import jit
from pygame.math import Vector2

from colors import ColorScheme
from constants import (
    DEFAULT_BRIGHTNESS, ENTRY_SCALE, FADE_IN_RADIUS_FRACTION,
    HIGHLIGHT_BLACK_UNTIL, HIGHLIGHT_FALLBACK_BRIGHTNESS,
    HIGHLIGHT_FALLBACK_SATURATION, HIGHLIGHT_SCALE_PEAK, IDEAL_DISTANCE_RANGE,
    IDEAL_SATURATION_RANGE, MIN_VISIBLE_OPACITY, PROXIMITY_SMOOTHING,
    PULSE_AMOUNT, PULSE_SPEED, REMOVAL_DAMPING_FACTOR, REMOVAL_POSITION_EASE,
    REMOVAL_PROXIMITY_SCALE, REMOVAL_SPRING_FALLOFF, TWO_PI
)
from frame import FrameContext, Renderer
from vector import clamp, cosine_ease, lerp, map_range, polar

HSB = Tuple[float, float, float]
BLACK: HSB = (0.0, 0.0, 0.0)

# --- Data Contracts ---
#
# class Particle:
#   - update(self, frame: FrameContext) -> None:
#     - Side Effects: advances home, forces, velocity, position and the
#       removal/transition/fade-in states by one frame.
#     - Invariants: a removing particle ignores its home formula and all
#       interaction sources.
#
#   - update_highlight(self, now: float) -> bool:
#     - Outputs: True once the highlight has finished (or none is active).
#
#   - display(self, renderer: Renderer, frame: FrameContext) -> None:
#     - Side Effects: one renderer.draw_ellipse call, unless the particle
#       is practically invisible (opacity < 0.01).


@jit(nopython=True)
def _source_interaction_numba(px, py, sources, influence_radius):
    """
    Numba-jitted repel force and proximity scale from every source.

    Each source row is (x, y, repel_radius, repel_force, scale). The repel
    force falls linearly from repel_force at the source to 0 at
    repel_radius and points away from the source. The proximity candidate
    falls linearly from scale to 0 at influence_radius; the largest
    candidate across all sources is returned.
    """
    fx = 0.0
    fy = 0.0
    target_scale = 0.0
    for k in range(sources.shape[0]):
        dx = px - sources[k, 0]
        dy = py - sources[k, 1]
        d = np.sqrt(dx * dx + dy * dy)

        repel_radius = sources[k, 2]
        if d < repel_radius:
            force = sources[k, 3] * (1.0 - d / repel_radius)
            # A particle sitting exactly on the source has no direction.
            if d > 0.0:
                fx += dx / d * force
                fy += dy / d * force

        if d < influence_radius:
            candidate = sources[k, 4] * (1.0 - d / influence_radius)
            if candidate > target_scale:
                target_scale = candidate
    return fx, fy, target_scale


class AnimationState(enum.Enum):
    IDLE = "idle"
    TRANSITIONING = "transitioning"
    FADING_IN = "fading_in"
    HIGHLIGHTED = "highlighted"
    REMOVING = "removing"


@dataclass
class Transition:
    old_home: Vector2
    target_home: Vector2
    start_time: float
    duration: float
    # Entrance of a newly added particle from the ring center.
    entry: bool = False

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return (now - self.start_time) / self.duration


@dataclass
class Highlight:
    start_time: float
    duration: float
    max_scale: float
    original_color: HSB
    scale: float = 1.0
    color: Optional[HSB] = None


@dataclass
class Removal:
    start_time: float
    duration: float
    target: Vector2

    def progress(self, now: float) -> float:
        if self.duration <= 0:
            return 1.0
        return clamp((now - self.start_time) / self.duration, 0.0, 1.0)


class Particle:
    """
    One ring particle. Identity is positional: `order_index` and
    `home_angle` are reassigned by the owning system on redistribution.
    """
    def __init__(self, position: Vector2, angle: float, index: int,
                 base_size: float, oscillation_phase: float, opacity: float):
        self.position = Vector2(position)
        self.velocity = Vector2(0, 0)
        self.acceleration = Vector2(0, 0)

        self.home = Vector2(position)
        self.home_angle = angle
        self.order_index = index

        self.oscillation_phase = oscillation_phase
        self.rotation_offset = 0.0

        self.base_size = base_size
        self.hue = 0.0
        self.saturation_override: Optional[float] = None
        self.brightness_override: Optional[float] = None
        self.opacity = opacity
        self.proximity_scale = 0.0

        self.transition: Optional[Transition] = None
        self.fading_in = False
        self.highlight: Optional[Highlight] = None
        self.removal: Optional[Removal] = None

    def __repr__(self) -> str:
        return (
            f"Particle(index={self.order_index}, angle={self.home_angle:.3f}, "
            f"pos=({self.position.x:.1f}, {self.position.y:.1f}), state={self.state.value})"
        )

    @property
    def state(self) -> AnimationState:
        if self.removal is not None:
            return AnimationState.REMOVING
        if self.highlight is not None:
            return AnimationState.HIGHLIGHTED
        if self.fading_in:
            return AnimationState.FADING_IN
        if self.transition is not None:
            return AnimationState.TRANSITIONING
        return AnimationState.IDLE

    @property
    def is_removing(self) -> bool:
        return self.removal is not None

    @property
    def highlight_scale(self) -> float:
        return self.highlight.scale if self.highlight is not None else 1.0

    def removal_complete(self, now: float) -> bool:
        return self.removal is not None and self.removal.progress(now) >= 1.0

    def apply_scheme(self, scheme: ColorScheme) -> None:
        """Recomputes hue and overrides from the scheme and current angle."""
        self.hue = scheme.hue_for(self.home_angle)
        self.saturation_override = scheme.saturation
        self.brightness_override = scheme.brightness

    # --- Physics ---

    def update(self, frame: FrameContext) -> None:
        particles = frame.settings.particles

        if self.removal is not None:
            self._update_removal(frame)
            return

        self._update_home(frame)

        self.acceleration = (self.home - self.position) * particles.spring.strength

        fx, fy, target_scale = _source_interaction_numba(
            self.position.x, self.position.y, frame.sources, frame.influence_radius
        )
        self.acceleration += Vector2(fx, fy)

        self.proximity_scale += PROXIMITY_SMOOTHING * (target_scale - self.proximity_scale)

        self.velocity += self.acceleration
        self.velocity *= particles.spring.damping
        self.position += self.velocity

        self._update_opacity(frame)

    def _update_removal(self, frame: FrameContext) -> None:
        particles = frame.settings.particles
        progress = self.removal.progress(frame.now)

        self.opacity = lerp(particles.opacity, 0.0, progress)
        self.proximity_scale = lerp(self.proximity_scale, REMOVAL_PROXIMITY_SCALE, progress * 0.5)
        self.position = lerp(self.position, self.removal.target, progress * REMOVAL_POSITION_EASE)

        strength = particles.spring.strength * (1 - progress * REMOVAL_SPRING_FALLOFF)
        self.acceleration = (self.home - self.position) * strength

        self.velocity += self.acceleration
        self.velocity *= particles.spring.damping * REMOVAL_DAMPING_FACTOR
        self.position += self.velocity

    def _update_home(self, frame: FrameContext) -> None:
        if self.transition is not None:
            transition = self.transition
            progress = transition.progress(frame.now)
            if progress < 1.0:
                self.home = lerp(transition.old_home, transition.target_home, cosine_ease(progress))
            else:
                self.home = Vector2(transition.target_home)
                self.transition = None
                if self.fading_in:
                    self.fading_in = False
                    self.opacity = frame.settings.particles.opacity
            return

        particles = frame.settings.particles
        motion = particles.motion
        self.rotation_offset += motion.rotation_speed

        # Neighbours are offset by half a slot so the ring undulates as a wave.
        phase_shift = self.order_index * (TWO_PI / max(frame.live_count, 1) / 2)
        oscillation = math.sin(
            frame.frame_count * motion.oscillation_speed
            + self.oscillation_phase + phase_shift
        ) * motion.oscillation_amount

        self.home = polar(frame.center, particles.radius + oscillation,
                          self.home_angle + self.rotation_offset)

    def _update_opacity(self, frame: FrameContext) -> None:
        particles = frame.settings.particles
        if self.transition is not None and (self.fading_in or self.opacity < particles.opacity):
            # Fade-in follows the distance travelled from the center, not time.
            distance_from_center = self.position.distance_to(frame.center)
            progress = clamp(
                distance_from_center / (particles.radius * FADE_IN_RADIUS_FRACTION), 0.0, 1.0
            )
            self.opacity = lerp(0.0, particles.opacity, progress)
        elif self.transition is None and not self.fading_in:
            self.opacity = particles.opacity

    # --- Animation states ---

    def begin_transition(self, now: float, old_home: Vector2, target_home: Vector2,
                         duration: float, entry: bool = False) -> bool:
        """Starts (or replaces) an eased move of the home position."""
        if self.removal is not None:
            return False
        self.transition = Transition(Vector2(old_home), Vector2(target_home), now, duration, entry)
        return True

    def mark_for_removal(self, now: float, target: Vector2, duration: float) -> bool:
        """Starts the removal animation. Repeated calls are ignored."""
        if self.removal is not None:
            return False
        self.highlight = None
        self.removal = Removal(now, duration, Vector2(target))
        return True

    def start_highlight(self, now: float, duration: float, max_scale: float) -> bool:
        if self.removal is not None:
            return False
        saturation = self.saturation_override
        brightness = self.brightness_override
        original = (
            self.hue,
            saturation if saturation is not None else HIGHLIGHT_FALLBACK_SATURATION,
            brightness if brightness is not None else HIGHLIGHT_FALLBACK_BRIGHTNESS,
        )
        self.highlight = Highlight(now, duration, max_scale, original)
        return True

    def update_highlight(self, now: float) -> bool:
        """
        Advances the highlight pulse.

        The scale shoots up to max_scale over the first 20% of the duration
        and eases back to 1 over the rest. The color is black for the first
        30% and then fades linearly back to the original color.
        """
        highlight = self.highlight
        if highlight is None:
            return True

        elapsed = now - highlight.start_time
        if elapsed >= highlight.duration:
            self.highlight = None
            return True

        progress = elapsed / highlight.duration
        if progress < HIGHLIGHT_SCALE_PEAK:
            highlight.scale = map_range(progress, 0, HIGHLIGHT_SCALE_PEAK, 1, highlight.max_scale)
        else:
            highlight.scale = map_range(progress, HIGHLIGHT_SCALE_PEAK, 1, highlight.max_scale, 1)

        if progress < HIGHLIGHT_BLACK_UNTIL:
            highlight.color = BLACK
        else:
            color_progress = map_range(progress, HIGHLIGHT_BLACK_UNTIL, 1, 0, 1)
            highlight.color = tuple(lerp(0.0, c, color_progress) for c in highlight.original_color)
        return False

    # --- Drawing ---

    def entry_progress(self, now: float) -> Optional[float]:
        """Progress of an in-flight entry transition, or None."""
        if self.transition is None or not self.transition.entry:
            return None
        progress = self.transition.progress(now)
        return progress if progress < 1.0 else None

    def resolve_color(self, frame: FrameContext) -> HSB:
        if self.highlight is not None and self.highlight.color is not None:
            return self.highlight.color

        particles = frame.settings.particles
        if self.saturation_override is not None:
            saturation = self.saturation_override
        else:
            ideal = polar(frame.center, particles.radius, self.home_angle + self.rotation_offset)
            distance_from_ideal = clamp(self.position.distance_to(ideal), *IDEAL_DISTANCE_RANGE)
            saturation = map_range(distance_from_ideal, *IDEAL_DISTANCE_RANGE, *IDEAL_SATURATION_RANGE)
        brightness = (self.brightness_override if self.brightness_override is not None
                      else DEFAULT_BRIGHTNESS)

        progress = self.entry_progress(frame.now)
        if progress is not None:
            brightness = lerp(100.0, brightness, progress)
            saturation = lerp(100.0, saturation, progress)
        return self.hue, saturation, brightness

    def display_size(self, frame: FrameContext) -> float:
        pulse = 1 + PULSE_AMOUNT * math.sin(frame.frame_count * PULSE_SPEED + self.oscillation_phase)
        progress = self.entry_progress(frame.now)
        entry_scale = lerp(ENTRY_SCALE, 1.0, progress) if progress is not None else 1.0
        return (self.base_size * pulse * (1 + self.proximity_scale)
                * self.highlight_scale * entry_scale)

    def display(self, renderer: Renderer, frame: FrameContext) -> None:
        if self.opacity < MIN_VISIBLE_OPACITY:
            return
        hue, saturation, brightness = self.resolve_color(frame)
        renderer.draw_ellipse(
            self.position.x, self.position.y, self.display_size(frame),
            hue, saturation, brightness, self.opacity
        )
