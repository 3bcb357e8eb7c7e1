"""Tests for typed configuration loading and validation."""

import json
import logging

import pytest

from settings import FocusPointSettings, Settings, validate_field
from utils import DEFAULT_CONFIG, load_config, merge_config


def test_defaults():
    settings = Settings.from_dict({})
    assert settings.particles.count == 100
    assert settings.particles.radius == 240
    assert settings.particles.spring.strength == pytest.approx(0.05)
    assert settings.mouse.repel_radius == 150
    assert settings.intervals.radius.enabled is True
    assert settings.intervals.highlight.enabled is False
    assert len(settings.auto_focus.points) == 1
    assert settings.auto_focus.points[0].orbit_radius == 250


def test_overrides_and_coercion():
    settings = Settings.from_dict({
        "particles": {"count": 40.0, "radius": 120, "spring": {"damping": 0.5}},
        "auto_focus": {"points": [{"speed": 0.05}, {"clockwise": False}]},
    })
    assert settings.particles.count == 40
    assert isinstance(settings.particles.count, int)
    assert isinstance(settings.particles.radius, float)
    assert settings.particles.spring.damping == 0.5
    assert settings.particles.spring.strength == pytest.approx(0.05)
    assert [p.clockwise for p in settings.auto_focus.points] == [True, False]


def test_unknown_keys_are_logged_and_ignored(caplog):
    with caplog.at_level(logging.WARNING):
        settings = Settings.from_dict({"particles": {"colour": 3}})
    assert settings.particles.count == 100
    assert "'colour' in ParticleSettings" in caplog.text


@pytest.mark.parametrize("data", [
    {"particles": {"count": 0}},
    {"particles": {"count": 10.5}},
    {"particles": {"opacity": 1.5}},
    {"particles": {"min_size": 10, "max_size": 5}},
    {"intervals": {"radius": {"small_range": {"min": 130, "max": 120}}}},
    {"intervals": {"particle_count": {"min": 200, "max": 100}}},
    {"show_lines": "yes"},
    {"mouse": {"repel_force": "strong"}},
    {"particles": []},
])
def test_invalid_values_raise(data):
    with pytest.raises(ValueError):
        Settings.from_dict(data)


def test_influence_radius_follows_repel_radius_by_default():
    settings = Settings.from_dict({"mouse": {"repel_radius": 90}})
    assert settings.mouse.effective_influence_radius == 90

    settings = Settings.from_dict({"mouse": {"influence_radius": 200}})
    assert settings.mouse.effective_influence_radius == 200


def test_set_value_returns_old_value():
    settings = Settings.from_dict({})
    old = settings.set_value("particles.spring.strength", 0.1)
    assert old == pytest.approx(0.05)
    assert settings.particles.spring.strength == pytest.approx(0.1)


def test_set_value_rolls_back_cross_field_violation():
    settings = Settings.from_dict({})
    with pytest.raises(ValueError):
        settings.set_value("particles.min_size", 20)
    assert settings.particles.min_size == 4


def test_set_value_rejects_out_of_range():
    settings = Settings.from_dict({})
    with pytest.raises(ValueError):
        settings.set_value("mouse.repel_force", 2.0)
    assert settings.mouse.repel_force == pytest.approx(0.45)


@pytest.mark.parametrize("path", ["particles.nope", "nope.count", "particles.spring", "particles.count.x"])
def test_set_value_rejects_unknown_or_section_paths(path):
    settings = Settings.from_dict({})
    with pytest.raises(KeyError):
        settings.set_value(path, 1)


def test_flatten():
    flat = Settings.from_dict({}).flatten()
    assert flat["particles.spring.strength"] == pytest.approx(0.05)
    assert flat["auto_focus.points[0].speed"] == pytest.approx(0.01)
    assert flat["intervals.radius.small_range.min"] == 50
    assert "particles.spring" not in flat


def test_load_config_merges_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"logging": {"level": "DEBUG"}, "simulation": {"seed": 7}}))

    config = load_config(str(path))
    assert config["logging"]["level"] == "DEBUG"
    assert config["logging"]["log_file"] == DEFAULT_CONFIG["logging"]["log_file"]
    assert config["simulation"]["seed"] == 7
    assert config["run_control"]["max_steps"] == 0


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.json"))


def test_merge_config_does_not_mutate_base():
    base = {"a": {"b": 1, "c": 2}}
    merged = merge_config(base, {"a": {"b": 5}})
    assert merged == {"a": {"b": 5, "c": 2}}
    assert base == {"a": {"b": 1, "c": 2}}


def test_shipped_config_is_valid():
    from pathlib import Path
    config = load_config(str(Path(__file__).parent.parent / "config.json"))
    settings = Settings.from_dict(config["simulation"])
    assert settings.particles.count == 100


def test_setup_logging_creates_log_file(tmp_path):
    from utils import setup_logging
    log_file = tmp_path / "logs" / "run.log"
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    try:
        setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
        assert log_file.exists()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert logging.getLogger("numba").level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        root.setLevel(saved[0])
        for handler in saved[1]:
            root.addHandler(handler)


def test_check_value_validates_whole_tree_without_mutating():
    settings = Settings.from_dict({})
    assert settings.check_value("particles.count", 40.0) == 40
    assert settings.particles.count == 100

    with pytest.raises(ValueError, match="min_size"):
        settings.check_value("particles.min_size", 20)
    with pytest.raises(ValueError):
        settings.check_value("intervals.radius.small_range.min", 500)
    assert settings.particles.min_size == 4


def test_validate_field_checks_one_section_field():
    assert validate_field(FocusPointSettings, "speed", 0.05) == pytest.approx(0.05)
    with pytest.raises(ValueError):
        validate_field(FocusPointSettings, "speed", 0.5)
    with pytest.raises(ValueError):
        validate_field(FocusPointSettings, "clockwise", "yes")
    with pytest.raises(KeyError):
        validate_field(FocusPointSettings, "colour", 1)


def test_revalidated_catches_unchecked_assignment():
    settings = Settings.from_dict({})
    settings.particles.min_size = 20
    with pytest.raises(ValueError):
        settings.revalidated()

    settings.particles.min_size = 5
    copy = settings.revalidated()
    assert copy.particles.min_size == 5
    assert copy.particles is not settings.particles


def test_package_metadata_points_at_readme():
    from pathlib import Path
    root = Path(__file__).parent.parent
    pyproject = (root / "pyproject.toml").read_text()
    assert 'readme = "README.md"' in pyproject
    assert '"pydantic' in pyproject
    assert (root / "README.md").is_file()
