# intervals.py
"""
Periodic effects that reshape the ring over time.

Four effects run on independent timers: radius pulsing, particle
highlighting, particle-count ramping and wave-amplitude toggling. Each
checks its own period against the time since it last fired.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from particle_system import ParticleSystem
from scheduler import Clock
from settings import Settings

# --- Data Contracts ---
#
# class IntervalManager:
#   - update(self, now: Optional[float] = None) -> None:
#     - Side Effects: fires every due effect, then performs at most one
#       queued particle add/remove and advances active highlights.
#   - set_enabled(self, name: str, enabled: bool) -> None:
#     - Side Effects: enabling restarts the effect's timer from now.
#   - Raises: KeyError for effect names other than those in EFFECTS.

EFFECTS = ("radius", "highlight", "particle_count", "wave_amplitude")


@dataclass
class IntervalTimer:
    last_trigger: float = 0.0

    def due(self, now: float, period: float) -> bool:
        return now - self.last_trigger >= period


class IntervalManager:
    """Drives the timed effects and the particle system's gradual queue."""

    def __init__(self, settings: Settings, particle_system: ParticleSystem,
                 clock: Clock, rng: np.random.Generator):
        self.settings = settings
        self.particle_system = particle_system
        self.clock = clock
        self.rng = rng

        self.timers: Dict[str, IntervalTimer] = {name: IntervalTimer() for name in EFFECTS}
        self.radius_in_small_range = False
        self.count_increasing = True
        self.use_zero_amplitude = True

        enabled = [name for name in EFFECTS if self._effect_settings(name).enabled]
        logging.info(f"Interval manager initialized. Enabled effects: {enabled or 'none'}.")

    def _effect_settings(self, name: str):
        if name not in EFFECTS:
            raise KeyError(f"Unknown interval effect '{name}'.")
        return getattr(self.settings.intervals, name)

    def set_enabled(self, name: str, enabled: bool) -> None:
        self._effect_settings(name).enabled = enabled
        if enabled:
            self.timers[name].last_trigger = self.clock.now()
        logging.info(f"Interval effect '{name}' {'enabled' if enabled else 'disabled'}.")

    def set_period(self, name: str, seconds: float) -> None:
        self._effect_settings(name).time = seconds * 1000

    def update(self, now: Optional[float] = None) -> None:
        if now is None:
            now = self.clock.now()

        self._process_radius(now)
        self._process_highlight(now)
        self._process_particle_count(now)
        self._process_wave_amplitude(now)

        self.particle_system.process_queue(now)
        self.particle_system.update_highlight(now)

    def _fire(self, name: str, now: float) -> bool:
        params = self._effect_settings(name)
        if not params.enabled:
            return False
        timer = self.timers[name]
        if not timer.due(now, params.time):
            return False
        timer.last_trigger = now
        return True

    def _process_radius(self, now: float) -> None:
        if not self._fire("radius", now):
            return
        params = self.settings.intervals.radius
        self.radius_in_small_range = not self.radius_in_small_range
        value_range = params.small_range if self.radius_in_small_range else params.large_range
        radius = float(self.rng.uniform(value_range.min, value_range.max))

        self.settings.particles.radius = radius
        self.particle_system.apply_radius(radius)
        logging.debug(f"Radius pulse: {radius:.1f}.")

    def _process_highlight(self, now: float) -> None:
        if self._fire("highlight", now):
            self.particle_system.highlight_next()

    def _process_particle_count(self, now: float) -> None:
        if not self._fire("particle_count", now):
            return
        system = self.particle_system
        # A new step only starts once the previous one has fully played out.
        if system.queued_actions > 0:
            return

        params = self.settings.intervals.particle_count
        if self.count_increasing:
            new_count = min(system.count + params.step, params.max)
            to_add = new_count - system.count
            if to_add > 0:
                system.queue_count_change(to_add, True, params.time)
            if new_count >= params.max:
                self.count_increasing = False
        else:
            new_count = max(system.count - params.step, params.min)
            to_remove = system.count - new_count
            if to_remove > 0:
                system.queue_count_change(to_remove, False, params.time)
            if new_count <= params.min:
                self.count_increasing = True
        logging.debug(f"Particle count ramp toward {new_count}.")

    def _process_wave_amplitude(self, now: float) -> None:
        if not self._fire("wave_amplitude", now):
            return
        params = self.settings.intervals.wave_amplitude
        self.use_zero_amplitude = not self.use_zero_amplitude
        if self.use_zero_amplitude:
            amplitude = params.min_value
        else:
            amplitude = float(self.rng.uniform(params.max_range.min, params.max_range.max))
        self.settings.particles.motion.oscillation_amount = amplitude
        logging.debug(f"Wave amplitude set to {amplitude:.1f}.")
