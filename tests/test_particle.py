"""Tests for single-particle physics and animation states."""

import numpy as np
import pytest
from pygame.math import Vector2

from colors import get_scheme
from frame import FrameContext, empty_sources
from particle import BLACK, AnimationState, Particle, Removal, _source_interaction_numba
from settings import Settings

CENTER = Vector2(400, 300)


def make_frame(settings=None, now=0.0, frame_count=0, sources=None, live_count=1):
    return FrameContext(
        now=now,
        frame_count=frame_count,
        center=Vector2(CENTER),
        settings=settings or Settings(),
        live_count=live_count,
        sources=empty_sources() if sources is None else sources,
    )


def make_particle(angle=0.0, opacity=0.85):
    position = Vector2(CENTER.x + 240, CENTER.y)
    return Particle(position, angle, 0, base_size=6.0, oscillation_phase=0.0, opacity=opacity)


class TestInteractionKernel:

    def test_scale_is_zero_at_influence_boundary(self):
        sources = np.array([[0.0, 0.0, 100.0, 0.4, 8.0]])
        _, _, scale = _source_interaction_numba(100.0, 0.0, sources, 100.0)
        assert scale == 0.0

    def test_scale_and_force_falloff(self):
        sources = np.array([[0.0, 0.0, 100.0, 0.4, 8.0]])
        fx, fy, scale = _source_interaction_numba(50.0, 0.0, sources, 100.0)
        assert fx == pytest.approx(0.2)
        assert fy == pytest.approx(0.0)
        assert scale == pytest.approx(4.0)

    def test_particle_on_source_gets_full_scale_and_no_force(self):
        sources = np.array([[10.0, 10.0, 100.0, 0.4, 8.0]])
        fx, fy, scale = _source_interaction_numba(10.0, 10.0, sources, 100.0)
        assert (fx, fy) == (0.0, 0.0)
        assert scale == pytest.approx(8.0)

    def test_largest_candidate_wins(self):
        sources = np.array([
            [0.0, 0.0, 100.0, 0.4, 2.0],
            [40.0, 0.0, 100.0, 0.4, 10.0],
        ])
        _, _, scale = _source_interaction_numba(20.0, 0.0, sources, 100.0)
        assert scale == pytest.approx(8.0)

    def test_no_sources(self):
        assert _source_interaction_numba(1.0, 2.0, empty_sources(), 100.0) == (0.0, 0.0, 0.0)


class TestHighlight:

    @pytest.fixture
    def particle(self):
        p = make_particle()
        p.hue = 100.0
        p.start_highlight(now=1000, duration=1000, max_scale=5)
        return p

    def test_start(self, particle):
        assert particle.update_highlight(1000) is False
        assert particle.highlight.scale == pytest.approx(1.0)
        assert particle.highlight.color == BLACK

    def test_peak_at_twenty_percent(self, particle):
        particle.update_highlight(1200)
        assert particle.highlight.scale == pytest.approx(5.0)
        assert particle.highlight.color == BLACK

    def test_color_returns_after_black_phase(self, particle):
        particle.update_highlight(1650)
        # Fallback saturation/brightness when the scheme has no overrides.
        assert particle.highlight.color == pytest.approx((50.0, 40.0, 45.0))
        assert particle.highlight.scale == pytest.approx(5 - 4 * (0.45 / 0.8))

    def test_finishes_at_duration(self, particle):
        assert particle.update_highlight(2000) is True
        assert particle.highlight is None
        assert particle.highlight_scale == 1.0
        assert particle.state is AnimationState.IDLE

    def test_scheme_overrides_are_restored(self):
        p = make_particle()
        p.apply_scheme(get_scheme(1))
        p.start_highlight(0, 100, 5)
        assert p.highlight.original_color == (0, 0, 30)

    def test_highlight_color_wins_over_entry(self):
        p = make_particle()
        p.begin_transition(0, CENTER, Vector2(640, 300), 800, entry=True)
        p.start_highlight(0, 750, 5)
        p.update_highlight(100)
        assert p.resolve_color(make_frame(now=100)) == BLACK


class TestRemoval:

    def test_progress_is_clamped(self):
        removal = Removal(start_time=0, duration=600, target=Vector2(0, 0))
        assert removal.progress(300) == pytest.approx(0.5)
        assert removal.progress(1200) == 1.0
        assert removal.progress(-100) == 0.0

    def test_removal_cancels_highlight_and_is_terminal(self):
        p = make_particle()
        p.start_highlight(0, 750, 5)
        assert p.mark_for_removal(0, CENTER, 600) is True
        assert p.highlight is None
        assert p.state is AnimationState.REMOVING

        assert p.mark_for_removal(100, Vector2(0, 0), 600) is False
        assert p.removal.target == CENTER
        assert p.start_highlight(100, 750, 5) is False
        assert p.begin_transition(100, CENTER, CENTER, 500) is False

    def test_opacity_fades_with_progress(self):
        settings = Settings()
        p = make_particle()
        p.mark_for_removal(0, CENTER, 600)
        p.update(make_frame(settings, now=300))
        assert p.opacity == pytest.approx(0.425)
        assert not p.removal_complete(300)

        p.update(make_frame(settings, now=600))
        assert p.opacity == pytest.approx(0.0)
        assert p.removal_complete(600)

    def test_removing_particle_ignores_sources(self):
        sources = np.array([[CENTER.x + 240, CENTER.y, 150.0, 0.45, 8.7]])
        p = make_particle()
        p.mark_for_removal(0, CENTER, 600)
        p.update(make_frame(now=10, sources=sources))
        assert p.proximity_scale <= 0.0


class TestMotion:

    def test_idle_particle_stays_near_home(self):
        settings = Settings()
        settings.particles.motion.oscillation_amount = 0.0
        settings.particles.motion.rotation_speed = 0.0
        p = make_particle()
        for frame_count in range(30):
            p.update(make_frame(settings, frame_count=frame_count))
        assert p.position.distance_to(Vector2(640, 300)) < 1e-6
        assert p.opacity == pytest.approx(0.85)

    def test_source_pushes_and_grows_particle(self):
        settings = Settings()
        settings.particles.motion.oscillation_amount = 0.0
        settings.particles.motion.rotation_speed = 0.0
        p = make_particle()
        sources = np.array([[600.0, 300.0, 150.0, 0.45, 8.7]])
        p.update(make_frame(settings, sources=sources))
        assert p.position.x > 640
        assert p.proximity_scale > 0

    def test_transition_completes_and_ends_fade_in(self):
        settings = Settings()
        p = make_particle(opacity=0.0)
        p.fading_in = True
        p.begin_transition(0, CENTER, Vector2(640, 300), 800, entry=True)
        assert p.state is AnimationState.FADING_IN

        p.update(make_frame(settings, now=400))
        assert p.home.x == pytest.approx(520)

        p.update(make_frame(settings, now=800))
        assert p.transition is None
        assert p.fading_in is False
        assert p.home == Vector2(640, 300)
        assert p.opacity == pytest.approx(0.85)

    def test_state_precedence(self):
        p = make_particle()
        p.begin_transition(0, CENTER, CENTER, 500)
        assert p.state is AnimationState.TRANSITIONING
        p.fading_in = True
        assert p.state is AnimationState.FADING_IN
        p.start_highlight(0, 750, 5)
        assert p.state is AnimationState.HIGHLIGHTED


class TestDisplay:

    def test_invisible_particle_is_not_drawn(self, renderer):
        p = make_particle(opacity=0.005)
        p.display(renderer, make_frame())
        assert renderer.ellipses == []

    def test_draws_one_ellipse(self, renderer):
        p = make_particle()
        p.apply_scheme(get_scheme(0))
        p.display(renderer, make_frame())
        assert len(renderer.ellipses) == 1
        x, y, diameter, hue, saturation, brightness, alpha = renderer.ellipses[0]
        assert (x, y) == (640, 300)
        assert diameter == pytest.approx(6.0)
        assert alpha == pytest.approx(0.85)
        # Sitting exactly on the ideal ring position.
        assert saturation == pytest.approx(60)

    def test_entry_starts_bright_and_large(self):
        p = make_particle()
        p.begin_transition(0, CENTER, Vector2(640, 300), 800, entry=True)
        frame = make_frame(now=0)
        _, saturation, brightness = p.resolve_color(frame)
        assert (saturation, brightness) == (100, 100)
        assert p.display_size(frame) == pytest.approx(6.0 * 1.5)
