# simulation.py
"""
Handles one running instance of the particle ring.

This module defines the Simulation class, which owns every component
(scheduler, focus points, particle system, interval effects), advances
them once per frame in a fixed order, and is the single entry point for
outside changes: parameter tweaks, mouse input, focus-point management and
window resizes.
"""
import logging
from typing import Any, Callable, List, Optional

import numpy as np
from pygame.math import Vector2

from colors import COLOR_SCHEMES
from focus import FocusPointRegistry
from frame import Renderer
from intervals import EFFECTS, IntervalManager
from particle_system import ParticleSystem
from scheduler import Clock, Scheduler
from settings import FocusPointSettings, Settings, validate_field

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, settings: Settings, clock: Clock, width, height,
#              renderer: Optional[Renderer] = None):
#     - Side Effects: builds all components; randomness comes from a single
#       generator seeded with settings.seed.
#
#   - on_frame(self) -> None:
#     - Side Effects: applies changes queued during the previous frame, runs
#       due deferred tasks, interval effects, focus points and particles,
#       drawing through the renderer if one is attached.
#
#   - configure(self, path: str, value) -> None:
#     - Raises: KeyError (unknown path), ValueError (invalid value).
#     - Invariants: changes requested while a frame is running are applied
#       at the start of the next frame, never mid-frame.

# Per-point controls and the settings field that validates each one.
FOCUS_FIELDS = {
    "enabled": "enabled",
    "orbit_radius": "orbit_radius",
    "speed": "speed",
    "size_influence": "size_influence",
    "spring_multiplier": "spring_multiplier",
    "clockwise": "clockwise",
    "show_indicator": "show_indicators",
}


class Simulation:
    """
    Wires the components of one simulation together and steps them.
    """
    def __init__(self, settings: Settings, clock: Clock, width: float, height: float,
                 renderer: Optional[Renderer] = None):
        self.settings = settings
        self.clock = clock
        self.renderer = renderer
        # All randomness is controlled by a single master seed.
        self.rng = np.random.default_rng(settings.seed)

        self.scheduler = Scheduler(clock)
        self.focus = FocusPointRegistry()
        for point_settings in settings.auto_focus.points:
            self.focus.add_from_settings(point_settings)

        self.particles = ParticleSystem(settings, clock, self.scheduler, self.rng, width, height)
        self.focus.reposition(self.particles.center)
        self.intervals = IntervalManager(settings, self.particles, clock, self.rng)

        self.mouse: Optional[Vector2] = None
        self._in_frame = False
        self._pending: List[Callable[[], None]] = []

        logging.info(
            f"Simulation initialized: {len(self.particles)} particles, "
            f"{len(self.focus)} focus point(s), canvas {width}x{height}."
        )

    # --- Frame loop ---

    def on_frame(self) -> None:
        self._apply_pending()
        self._in_frame = True
        try:
            now = self.clock.now()
            self.scheduler.run_due(now)
            self.intervals.update(now)
            center = self.particles.center
            self.focus.update(center, self.renderer)
            frame = self.particles.frame_context(now, self.clock.frame_count, self.mouse, self.focus)
            self.particles.update(frame, self.renderer)
        finally:
            self._in_frame = False

    def _serialize(self, action: Callable[[], None]) -> None:
        if self._in_frame:
            self._pending.append(action)
        else:
            action()

    def _apply_pending(self) -> None:
        pending, self._pending = self._pending, []
        for action in pending:
            try:
                action()
            except (KeyError, ValueError) as e:
                # Queued changes can conflict with one applied before them.
                logging.warning(f"Dropped a queued change that is no longer valid: {e}")

    # --- Input ---

    def set_mouse(self, x: float, y: float) -> None:
        self.mouse = Vector2(x, y)

    def clear_mouse(self) -> None:
        self.mouse = None

    def on_resize(self, width: float, height: float) -> None:
        def resize():
            self.particles.resize(width, height)
            self.focus.reposition(self.particles.center)
        self._serialize(resize)

    # --- Configuration ---

    def configure(self, path: str, value: Any) -> None:
        """Changes one tunable, e.g. configure("particles.spring.strength", 0.1)."""
        parts = path.split(".")
        if path == "particles.count":
            count = self._check(path, value)
            self._serialize(lambda: self.particles.set_count(count))
        elif path == "color_scheme":
            index = self._check(path, value)
            self._serialize(lambda: self.particles.change_color_scheme(index))
        elif len(parts) == 3 and parts[0] == "intervals" and parts[1] in EFFECTS and parts[2] == "enabled":
            enabled = self._check(path, value)
            self._serialize(lambda: self.intervals.set_enabled(parts[1], enabled))
        elif path == "particles.radius":
            def set_radius():
                self.settings.set_value(path, value)
                self.particles.apply_radius(self.settings.particles.radius)
            self._check(path, value)
            self._serialize(set_radius)
        else:
            self._check(path, value)
            self._serialize(lambda: self.settings.set_value(path, value))
        logging.info(f"Configuration change requested: {path} = {value}")

    def apply_settings(self, new: Settings) -> None:
        """
        Switches to a complete new settings value.

        Particle count, radius, color scheme and newly enabled interval
        effects take effect the same way as through `configure`. Focus point
        presets and the seed only apply at construction and are left alone.
        """
        new = new.revalidated()

        def apply():
            current = self.settings
            old_radius = current.particles.radius
            old_scheme = current.color_scheme
            was_enabled = {name: getattr(current.intervals, name).enabled for name in EFFECTS}
            old_count = current.particles.count

            # Sections move into the shared instance, which every component
            # holds a reference to.
            current.particles = new.particles
            current.mouse = new.mouse
            current.intervals = new.intervals
            current.show_lines = new.show_lines

            current.particles.count = old_count
            if new.particles.count != old_count:
                self.particles.set_count(new.particles.count)
            if new.particles.radius != old_radius:
                self.particles.apply_radius(new.particles.radius)
            if new.color_scheme != old_scheme:
                self.particles.change_color_scheme(new.color_scheme)
            for name in EFFECTS:
                if getattr(new.intervals, name).enabled and not was_enabled[name]:
                    self.intervals.set_enabled(name, True)
            logging.info("Simulation settings replaced.")
        self._serialize(apply)

    def _check(self, path: str, value: Any) -> Any:
        """Validates a change against the whole tree so errors surface to the caller."""
        return self.settings.check_value(path, value)

    def configure_focus(self, point_id: int, field: str, value: Any) -> None:
        """Changes one control of a focus point addressed by its stable ID."""
        if field not in FOCUS_FIELDS:
            raise KeyError(f"Unknown focus point control '{field}'.")
        value = validate_field(FocusPointSettings, FOCUS_FIELDS[field], value)
        self.focus.get(point_id)

        def apply():
            if point_id not in self.focus:
                return
            if field == "clockwise":
                self.focus.set_clockwise(point_id, value)
            elif field == "speed":
                self.focus.set_speed(point_id, value)
            else:
                setattr(self.focus.get(point_id), field, value)
            logging.debug(f"Focus point {point_id}: {field} = {value}")
        self._serialize(apply)

    def add_focus_point(self) -> int:
        """Adds a companion focus point and returns its ID, reserved up front."""
        point_id = self.focus.reserve_id()

        def add():
            self.focus.add_companion(self.rng, point_id=point_id)
            self.focus.reposition(self.particles.center)
        self._serialize(add)
        return point_id

    def remove_focus_point(self, point_id: int) -> None:
        self.focus.get(point_id)

        def remove():
            if point_id in self.focus:
                self.focus.remove(point_id)
        self._serialize(remove)

    def next_color_scheme(self) -> None:
        self.configure("color_scheme", (self.particles.color_scheme_index + 1) % len(COLOR_SCHEMES))

    def toggle(self, path: str) -> None:
        """Flips a boolean setting such as "show_lines"."""
        owner: Any = self.settings
        for part in path.split(".")[:-1]:
            owner = getattr(owner, part)
        self.configure(path, not getattr(owner, path.split(".")[-1]))
