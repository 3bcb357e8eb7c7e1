# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They are fundamental to the application's framework, such as window
properties, animation timings, or physics factors that are not part of
the tunable configuration in `config.json`.
"""
import math

TWO_PI = 2 * math.pi

# Visualization settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a fixed-size window (1500x900 plus the panel).
FULLSCREEN = False
UI_PANEL_WIDTH = 300
WINDOW_SIZE = (1500, 900)
FPS = 60
# HSB background of the simulation area.
BACKGROUND_HSB = (0, 0, 100)
# Alpha value for the trail fade layer (0-255). Lower is a longer trail.
# Matches a 0.2 background alpha.
MOTION_BLUR_ALPHA = 51
# Alpha for the UI panel background
UI_BACKGROUND_ALPHA = 170

# --- Particle Lifecycle Timings (milliseconds) ---
REMOVAL_DURATION_MS = 600
# Cleanup runs a little after the removal animation has finished.
REMOVAL_CLEANUP_DELAY_MS = 650
TRANSITION_DURATION_MS = 500
ENTRY_TRANSITION_DURATION_MS = 800
# Newly added particles start this much larger and shrink to 1 on entry.
ENTRY_SCALE = 1.5

# --- Particle Motion ---
PROXIMITY_SMOOTHING = 0.2
# Removing particles shrink toward this proximity scale.
REMOVAL_PROXIMITY_SCALE = -0.5
REMOVAL_POSITION_EASE = 0.1
REMOVAL_SPRING_FALLOFF = 0.8
REMOVAL_DAMPING_FACTOR = 0.8
# Fade-in is complete once a particle has travelled this fraction of the radius.
FADE_IN_RADIUS_FRACTION = 0.8
# Auto-focus points repel within this fraction of the mouse repel radius.
FOCUS_REPEL_RADIUS_RATIO = 0.7

# --- Particle Appearance ---
PULSE_SPEED = 0.05
PULSE_AMOUNT = 0.2
MIN_VISIBLE_OPACITY = 0.01
DEFAULT_BRIGHTNESS = 90
# Saturation fallback maps distance-from-ideal (0..100px) to 60..100.
IDEAL_DISTANCE_RANGE = (0, 100)
IDEAL_SATURATION_RANGE = (60, 100)
# Colors snapshotted by a highlight when the scheme has no override.
HIGHLIGHT_FALLBACK_SATURATION = 80
HIGHLIGHT_FALLBACK_BRIGHTNESS = 90
HIGHLIGHT_SCALE_PEAK = 0.2
HIGHLIGHT_BLACK_UNTIL = 0.3

# --- Connecting Lines ---
LINE_HSBA = (0, 0, 50, 0.3)
LINE_WEIGHT = 1

# --- Focus Point Indicators ---
INDICATOR_RING_ALPHA = 0.3
INDICATOR_DOT_ALPHA = 0.5
INDICATOR_DOT_DIAMETER = 10

# Palette cycled through by auto-focus points (HSB).
AUTO_FOCUS_COLORS = [
    (0, 100, 100),    # Red
    (200, 100, 100),  # Cyan
    (280, 100, 100),  # Purple
    (50, 100, 100),   # Yellow
    (130, 100, 100),  # Green
    (330, 100, 100)   # Pink
]

# Settings for focus points added at runtime with the "add focus" control.
COMPANION_FOCUS_DEFAULTS = {
    "orbit_radius": 200.0,
    "speed": 0.025,
    "size_influence": 5.0,
    "spring_multiplier": 0.3,
}
