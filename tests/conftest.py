"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path

import numpy as np
import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from scheduler import Scheduler  # noqa: E402
from settings import Settings  # noqa: E402

WIDTH, HEIGHT = 800, 600


class FakeClock:
    """Manually advanced clock standing in for pygame's tick counter."""

    def __init__(self, start: float = 0.0):
        self.time = start
        self.frame_count = 0

    def now(self) -> float:
        return self.time

    def advance(self, ms: float, frames: int = 1) -> None:
        self.time += ms
        self.frame_count += frames


class FakeRenderer:
    """Records every draw call instead of drawing."""

    def __init__(self):
        self.ellipses = []
        self.lines = []
        self.rings = []

    def draw_ellipse(self, x, y, diameter, hue, saturation, brightness, alpha):
        self.ellipses.append((x, y, diameter, hue, saturation, brightness, alpha))

    def draw_line(self, x1, y1, x2, y2, hue, saturation, brightness, alpha, weight=1):
        self.lines.append((x1, y1, x2, y2, hue, saturation, brightness, alpha, weight))

    def draw_ring(self, x, y, diameter, hue, saturation, brightness, alpha, weight=1):
        self.rings.append((x, y, diameter, hue, saturation, brightness, alpha, weight))

    def clear(self):
        self.ellipses.clear()
        self.lines.clear()
        self.rings.clear()


def quiet_config(**particles):
    """A seeded config with every interval effect switched off."""
    return {
        "seed": 42,
        "particles": particles,
        "intervals": {
            "radius": {"enabled": False},
            "highlight": {"enabled": False},
            "particle_count": {"enabled": False},
            "wave_amplitude": {"enabled": False},
        },
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def make_settings():
    """Factory for quiet settings; keyword arguments override particle settings."""
    def factory(**particles):
        return Settings.from_dict(quiet_config(**particles))
    return factory


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


@pytest.fixture
def particle_system(settings, clock, scheduler, rng):
    from particle_system import ParticleSystem
    return ParticleSystem(settings, clock, scheduler, rng, WIDTH, HEIGHT)


@pytest.fixture
def simulation(settings, clock, renderer):
    from simulation import Simulation
    return Simulation(settings, clock, WIDTH, HEIGHT, renderer=renderer)
