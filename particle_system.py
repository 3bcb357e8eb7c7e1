# particle_system.py
"""
Manages the ordered collection of ring particles.

This module defines the ParticleSystem class, which creates the ring,
grows and shrinks it with animated entrances and exits, keeps the
particles evenly spaced after every count change, and assigns colors from
the active color scheme.
"""
import logging
from typing import List, Optional

import numpy as np
from pygame.math import Vector2

from colors import ColorScheme, get_scheme
from constants import (
    ENTRY_TRANSITION_DURATION_MS, LINE_HSBA, LINE_WEIGHT,
    REMOVAL_CLEANUP_DELAY_MS, REMOVAL_DURATION_MS, TRANSITION_DURATION_MS,
    TWO_PI
)
from focus import FocusPointRegistry
from frame import FrameContext, Renderer
from particle import Particle
from scheduler import Clock, DeferredTask, Scheduler
from settings import Settings
from vector import polar

# --- Data Contracts ---
#
# class ParticleSystem:
#   - __init__(self, settings, clock, scheduler, rng, width, height):
#     - Side Effects: creates settings.particles.count particles evenly
#       spaced on the ring.
#
#   - add_particles(self, n: int) -> None:
#     - Side Effects: inserts n invisible particles at the center at random
#       positions in the collection, then redistributes.
#
#   - remove_particles(self, n: int) -> int:
#     - Outputs: number of particles actually marked (never leaves fewer
#       than one live particle).
#     - Side Effects: marks random live particles for removal and schedules
#       their deletion REMOVAL_CLEANUP_DELAY_MS later.
#
#   - redistribute(self) -> None:
#     - Invariants: afterwards, live particles' home angles are
#       i / live_count * 2pi in collection order.
#
#   - process_queue(self, now: float) -> None:
#     - Side Effects: performs at most one queued add/remove per call.


class ParticleSystem:
    """
    The ring of particles and every operation that changes its size,
    order or colors.
    """
    def __init__(self, settings: Settings, clock: Clock, scheduler: Scheduler,
                 rng: np.random.Generator, width: float, height: float):
        self.settings = settings
        self.clock = clock
        self.scheduler = scheduler
        self.rng = rng
        self.width = width
        self.height = height

        self.particles: List[Particle] = []
        self.color_scheme_index = settings.color_scheme

        # Queue for gradual particle additions/removals
        self.queued_actions = 0
        self.queue_is_addition = True
        self.queue_interval = 0.0
        self.last_action_time = 0.0

        # Rotating highlight cursor and the particles still pulsing
        self.highlight_cursor = 0
        self.highlighted: List[Particle] = []

        self._cleanup_tasks: List[DeferredTask] = []

        self.create_ring(settings.particles.count)

    # --- Properties ---

    @property
    def count(self) -> int:
        """Target particle count, as shown on the count control."""
        return self.settings.particles.count

    @count.setter
    def count(self, value: int) -> None:
        self.settings.particles.count = max(1, int(value))

    @property
    def center(self) -> Vector2:
        return Vector2(self.width / 2, self.height / 2)

    @property
    def scheme(self) -> ColorScheme:
        return get_scheme(self.color_scheme_index)

    @property
    def live_particles(self) -> List[Particle]:
        return [p for p in self.particles if not p.is_removing]

    def __len__(self) -> int:
        return len(self.particles)

    # --- Creation and count changes ---

    def _new_particle(self, position: Vector2, angle: float, index: int) -> Particle:
        params = self.settings.particles
        particle = Particle(
            position, angle, index,
            base_size=float(self.rng.uniform(params.min_size, params.max_size)),
            oscillation_phase=float(self.rng.uniform(0, TWO_PI)),
            opacity=params.opacity,
        )
        particle.apply_scheme(self.scheme)
        return particle

    def create_ring(self, count: int) -> None:
        """Replaces the collection with `count` particles evenly spaced on the ring."""
        radius = self.settings.particles.radius
        center = self.center
        self.cancel_pending_cleanup()
        self.particles = []
        self.highlighted = []
        for i in range(count):
            angle = i / count * TWO_PI
            self.particles.append(self._new_particle(polar(center, radius, angle), angle, i))
        self.count = count
        logging.info(f"Particle ring created with {count} particles (radius {radius:.0f}).")

    def add_particles(self, n: int) -> None:
        if n <= 0:
            return
        live = self.live_particles
        # Entrants join the ring's current rotation instead of starting at zero.
        rotation = live[0].rotation_offset if live else 0.0
        center = self.center
        for _ in range(n):
            particle = self._new_particle(center, 0.0, len(self.particles))
            particle.fading_in = True
            particle.opacity = 0.0
            particle.rotation_offset = rotation
            insert_index = int(self.rng.integers(0, len(self.particles) + 1))
            self.particles.insert(insert_index, particle)

        logging.debug(f"Added {n} particle(s); {len(self.particles)} in collection.")
        self.redistribute()

    def remove_particles(self, n: int) -> int:
        live_indices = [i for i, p in enumerate(self.particles) if not p.is_removing]
        n = min(n, len(live_indices) - 1)
        if n <= 0:
            return 0

        now = self.clock.now()
        center = self.center
        chosen = self.rng.choice(live_indices, size=n, replace=False)
        for index in chosen:
            particle = self.particles[int(index)]
            particle.mark_for_removal(now, center, REMOVAL_DURATION_MS)
            if particle in self.highlighted:
                self.highlighted.remove(particle)

        task = self.scheduler.call_later(
            REMOVAL_CLEANUP_DELAY_MS, self._purge_removed, name="purge removed particles"
        )
        self._cleanup_tasks.append(task)
        logging.debug(f"Marked {n} particle(s) for removal.")
        return n

    def _purge_removed(self) -> None:
        now = self.clock.now()
        before = len(self.particles)
        self.particles = [p for p in self.particles if not p.removal_complete(now)]
        self._cleanup_tasks = [t for t in self._cleanup_tasks if t.due > now and not t.cancelled]
        logging.debug(f"Purged {before - len(self.particles)} removed particle(s).")
        self.redistribute()

    def cancel_pending_cleanup(self) -> None:
        for task in self._cleanup_tasks:
            task.cancel()
        self._cleanup_tasks = []

    def set_count(self, count: int) -> None:
        """Moves the ring to `count` particles, adding or removing the difference."""
        difference = count - self.count
        if difference > 0:
            self.add_particles(difference)
            self.count = count
        elif difference < 0:
            # Removal stops short of emptying the ring.
            self.count -= self.remove_particles(-difference)
        logging.info(f"Particle count set to {self.count}.")

    def redistribute(self) -> None:
        """Spaces the live particles evenly and eases each toward its new slot."""
        live = self.live_particles
        total = len(live)
        if total == 0:
            return

        now = self.clock.now()
        center = self.center
        radius = self.settings.particles.radius
        scheme = self.scheme
        for i, particle in enumerate(live):
            new_angle = i / total * TWO_PI
            particle.order_index = i
            particle.home_angle = new_angle
            particle.apply_scheme(scheme)

            target = polar(center, radius, new_angle + particle.rotation_offset)
            if particle.fading_in and particle.transition is None:
                particle.begin_transition(now, center, target, ENTRY_TRANSITION_DURATION_MS,
                                          entry=True)
            else:
                particle.begin_transition(now, particle.home, target, TRANSITION_DURATION_MS)

        logging.debug(f"Redistributed {total} particles around the ring.")

    def apply_radius(self, radius: float) -> None:
        """Moves every home to `radius` at once, without a transition."""
        center = self.center
        for particle in self.live_particles:
            particle.home = polar(center, radius, particle.home_angle + particle.rotation_offset)

    def resize(self, width: float, height: float) -> None:
        """Shifts homes, transitions and removal targets to the new center."""
        offset = Vector2(width / 2, height / 2) - self.center
        self.width = width
        self.height = height
        for particle in self.particles:
            particle.home += offset
            if particle.transition is not None:
                particle.transition.old_home += offset
                particle.transition.target_home += offset
            if particle.removal is not None:
                particle.removal.target += offset
        logging.info(f"Particle system resized to {width}x{height}.")

    # --- Colors ---

    def change_color_scheme(self, index: int) -> None:
        scheme = get_scheme(index)
        self.color_scheme_index = index
        self.settings.color_scheme = index
        for particle in self.live_particles:
            particle.apply_scheme(scheme)
        logging.info(f"Color scheme changed to '{scheme.name}'.")

    # --- Gradual count changes ---

    def queue_count_change(self, count: int, is_addition: bool, window: float) -> None:
        """Spreads `count` single-particle adds or removes evenly over `window` ms."""
        if count <= 0:
            return
        self.queued_actions = count
        self.queue_is_addition = is_addition
        self.queue_interval = window / count
        self.last_action_time = self.clock.now()
        logging.debug(
            f"Queued {count} particle {'additions' if is_addition else 'removals'} "
            f"every {self.queue_interval:.0f}ms."
        )

    def process_queue(self, now: float) -> None:
        if self.queued_actions <= 0:
            return
        if now - self.last_action_time < self.queue_interval:
            return

        if self.queue_is_addition:
            self.add_particles(1)
            self.count += 1
        else:
            self.count -= self.remove_particles(1)

        self.queued_actions -= 1
        self.last_action_time = now

    # --- Highlights ---

    def highlight_next(self) -> Optional[Particle]:
        """Advances the cursor to the next live particle and highlights it."""
        total = len(self.particles)
        for _ in range(total):
            self.highlight_cursor = (self.highlight_cursor + 1) % total
            particle = self.particles[self.highlight_cursor]
            if not particle.is_removing:
                break
        else:
            return None

        params = self.settings.intervals.highlight
        particle.start_highlight(self.clock.now(), params.duration, params.scale)
        if particle not in self.highlighted:
            self.highlighted.append(particle)
        return particle

    def update_highlight(self, now: float) -> None:
        self.highlighted = [p for p in self.highlighted if not p.update_highlight(now)]

    # --- Per-frame work ---

    def interaction_sources(self, mouse: Optional[Vector2],
                            focus: FocusPointRegistry) -> np.ndarray:
        """Source table for the mouse (when over the canvas) and enabled focus points."""
        params = self.settings.mouse
        table = focus.sources(params.repel_radius, params.repel_force)
        if mouse is not None and 0 < mouse.x < self.width and 0 < mouse.y < self.height:
            mouse_row = np.array(
                [[mouse.x, mouse.y, params.repel_radius, params.repel_force,
                  params.proximity_scale]],
                dtype=np.float64,
            )
            table = np.vstack([mouse_row, table])
        return table

    def frame_context(self, now: float, frame_count: int, mouse: Optional[Vector2],
                      focus: FocusPointRegistry) -> FrameContext:
        return FrameContext(
            now=now,
            frame_count=frame_count,
            center=self.center,
            settings=self.settings,
            live_count=len(self.live_particles),
            sources=self.interaction_sources(mouse, focus),
        )

    def update(self, frame: FrameContext, renderer: Optional[Renderer] = None) -> None:
        """Advances and draws every particle, then the connecting lines."""
        for particle in self.particles:
            particle.update(frame)
            if renderer is not None:
                particle.display(renderer, frame)

        if renderer is not None and self.settings.show_lines:
            self.draw_connecting_lines(renderer)

    def draw_connecting_lines(self, renderer: Renderer) -> None:
        if len(self.particles) < 2:
            return
        hue, saturation, brightness, alpha = LINE_HSBA
        for i, p1 in enumerate(self.particles):
            p2 = self.particles[(i + 1) % len(self.particles)]
            renderer.draw_line(p1.position.x, p1.position.y, p2.position.x, p2.position.y,
                               hue, saturation, brightness, alpha, LINE_WEIGHT)
