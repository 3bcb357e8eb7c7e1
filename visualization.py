# visualization.py
"""
Handles the display of the particle ring using Pygame.
"""
import logging
from typing import TYPE_CHECKING, List, Tuple

import pygame
import pygame.gfxdraw

from colors import COLOR_SCHEMES
from constants import (
    BACKGROUND_HSB, FPS, FULLSCREEN, MOTION_BLUR_ALPHA, UI_BACKGROUND_ALPHA,
    UI_PANEL_WIDTH, WINDOW_SIZE
)
from intervals import EFFECTS

if TYPE_CHECKING:
    from simulation import Simulation


# --- Data Contracts ---
#
# class PygameRenderer:
#   - Draws HSB(A) shapes onto a target surface. Hue 0-360, saturation and
#     brightness 0-100, alpha 0-1. Shapes are alpha-blended via gfxdraw.
#
# class PygameClock:
#   - now() -> float: milliseconds since pygame.init().
#   - tick() -> None: waits for the next frame and increments frame_count.
#
# class Visualizer:
#   - process_events(self, simulation: "Simulation") -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: forwards mouse, keyboard and resize input to the
#       simulation.
#   - draw(self, simulation: "Simulation") -> None:
#     - Side Effects: presents the frame drawn by simulation.on_frame(),
#       draws the side panel and fades the canvas for the next frame.

# Keys that flip an interval effect on or off.
INTERVAL_KEYS = {
    pygame.K_r: "radius",
    pygame.K_g: "highlight",
    pygame.K_p: "particle_count",
    pygame.K_w: "wave_amplitude",
}
COUNT_KEY_STEP = 10
COUNT_RANGE = (10, 300)
RADIUS_WHEEL_STEP = 10

KEY_HELP = [
    ("L", "Lines"), ("C", "Color scheme"), ("F / X", "Add / remove focus"),
    ("I", "Focus indicators"), ("Up / Down", "Particles +/-10"),
    ("Wheel", "Radius"), ("R G P W", "Interval effects"), ("Tab", "Panel"),
    ("Esc", "Quit"),
]


def hsb_color(hue: float, saturation: float, brightness: float, alpha: float = 1.0) -> pygame.Color:
    """Converts HSB(A) in p5 ranges to a pygame Color."""
    color = pygame.Color(0, 0, 0, 0)
    color.hsva = (
        hue % 360,
        max(0.0, min(100.0, saturation)),
        max(0.0, min(100.0, brightness)),
        max(0.0, min(100.0, alpha * 100)),
    )
    return color


class PygameRenderer:
    """Renderer capability backed by a pygame surface."""

    def __init__(self, surface: pygame.Surface):
        self.surface = surface

    def draw_ellipse(self, x, y, diameter, hue, saturation, brightness, alpha):
        radius = int(round(diameter / 2))
        if radius < 1:
            return
        color = hsb_color(hue, saturation, brightness, alpha)
        center = (int(round(x)), int(round(y)))
        pygame.gfxdraw.filled_circle(self.surface, center[0], center[1], radius, color)
        pygame.gfxdraw.aacircle(self.surface, center[0], center[1], radius, color)

    def draw_line(self, x1, y1, x2, y2, hue, saturation, brightness, alpha, weight=1):
        color = hsb_color(hue, saturation, brightness, alpha)
        pygame.gfxdraw.line(self.surface, int(x1), int(y1), int(x2), int(y2), color)

    def draw_ring(self, x, y, diameter, hue, saturation, brightness, alpha, weight=1):
        radius = int(round(diameter / 2))
        if radius < 1:
            return
        color = hsb_color(hue, saturation, brightness, alpha)
        pygame.gfxdraw.aacircle(self.surface, int(round(x)), int(round(y)), radius, color)


class PygameClock:
    """Clock capability backed by pygame's tick counter."""

    def __init__(self, fps: int = FPS):
        self.fps = fps
        self.frame_count = 0
        self._clock = pygame.time.Clock()

    def now(self) -> float:
        return float(pygame.time.get_ticks())

    def tick(self) -> None:
        self._clock.tick(self.fps)
        self.frame_count += 1

    def get_fps(self) -> float:
        return self._clock.get_fps()


class Visualizer:
    """
    Owns the window, turns input into simulation calls and presents frames.
    """
    def __init__(self):
        """
        Initializes Pygame and the display window.
        """
        pygame.init()

        if FULLSCREEN:
            info = pygame.display.Info()
            size, flags = (info.current_w, info.current_h), pygame.FULLSCREEN
        else:
            size, flags = (WINDOW_SIZE[0] + UI_PANEL_WIDTH, WINDOW_SIZE[1]), pygame.RESIZABLE
        self.screen = pygame.display.set_mode(size, flags)
        width, height = self.screen.get_size()

        pygame.display.set_caption("Particula")
        self.clock = PygameClock()
        self._create_surfaces(width, height)

        self.font_title = self._load_font(16, bold=True)
        self.font_main = self._load_font(14)
        self.font_main_bold = self._load_font(14, bold=True)

        self.show_panel = True
        self.text_color_title = (30, 30, 30)
        self.text_color_key = (80, 80, 80)
        self.text_color_value = (20, 20, 20)
        self.param_box_color = (255, 255, 255, 200)
        self.param_box_spacing = 4

        logging.info(f"Window opened at {width}x{height}, canvas {self.sim_width}x{self.sim_height}.")

    @staticmethod
    def _load_font(size: int, bold: bool = False) -> pygame.font.Font:
        """Segoe UI when installed, otherwise pygame's default font a little larger."""
        path = pygame.font.match_font("segoeui", bold=bold)
        if path is None:
            logging.debug("Segoe UI not found, using the default font.")
            font = pygame.font.Font(None, size + 4)
            font.set_bold(bold)
            return font
        return pygame.font.Font(path, size)

    def _create_surfaces(self, width: int, height: int) -> None:
        # The panel sits to the right of the canvas.
        self.sim_width, self.sim_height = width - UI_PANEL_WIDTH, height
        canvas_size = (self.sim_width, self.sim_height)
        background = hsb_color(*BACKGROUND_HSB)

        self.sim_surface = pygame.Surface(canvas_size)
        self.sim_surface.fill(background)
        # Blitted over the canvas every frame so earlier frames fade into trails.
        self.fade_layer = pygame.Surface(canvas_size, pygame.SRCALPHA)
        self.fade_layer.fill((background.r, background.g, background.b, MOTION_BLUR_ALPHA))

        self.panel_background = pygame.Surface((UI_PANEL_WIDTH, height), pygame.SRCALPHA)
        self.panel_background.fill((235, 235, 235, UI_BACKGROUND_ALPHA))

        self.renderer = PygameRenderer(self.sim_surface)

    # --- Input ---

    def process_events(self, simulation: "Simulation") -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    logging.info("ESC key pressed. Shutting down visualizer.")
                    return False
                self._handle_key(event.key, simulation)

            elif event.type == pygame.MOUSEMOTION:
                x, y = event.pos
                if x < self.sim_width:
                    simulation.set_mouse(x, y)
                else:
                    simulation.clear_mouse()

            elif event.type == pygame.WINDOWLEAVE:
                simulation.clear_mouse()

            elif event.type == pygame.MOUSEWHEEL:
                radius = simulation.settings.particles.radius + event.y * RADIUS_WHEEL_STEP
                self._try_configure(simulation, "particles.radius", max(50.0, min(400.0, radius)))

            elif event.type == pygame.VIDEORESIZE and not FULLSCREEN:
                width = max(event.w, UI_PANEL_WIDTH + 100)
                self.screen = pygame.display.set_mode((width, event.h), pygame.RESIZABLE)
                self._create_surfaces(width, event.h)
                simulation.renderer = self.renderer
                simulation.on_resize(self.sim_width, self.sim_height)
        return True

    def _handle_key(self, key: int, simulation: "Simulation") -> None:
        if key == pygame.K_l:
            simulation.toggle("show_lines")
        elif key == pygame.K_c:
            simulation.next_color_scheme()
        elif key == pygame.K_f:
            simulation.add_focus_point()
        elif key == pygame.K_x:
            # The first focus point is permanent.
            ids = simulation.focus.ids
            if len(ids) > 1:
                simulation.remove_focus_point(ids[-1])
        elif key == pygame.K_i:
            show = not any(p.show_indicator for p in simulation.focus)
            for point_id in simulation.focus.ids:
                simulation.configure_focus(point_id, "show_indicator", show)
        elif key in (pygame.K_UP, pygame.K_DOWN):
            step = COUNT_KEY_STEP if key == pygame.K_UP else -COUNT_KEY_STEP
            count = max(COUNT_RANGE[0], min(COUNT_RANGE[1], simulation.particles.count + step))
            self._try_configure(simulation, "particles.count", count)
        elif key in INTERVAL_KEYS:
            simulation.toggle(f"intervals.{INTERVAL_KEYS[key]}.enabled")
        elif key == pygame.K_TAB:
            self.show_panel = not self.show_panel

    def _try_configure(self, simulation: "Simulation", path: str, value) -> None:
        try:
            simulation.configure(path, value)
        except ValueError as e:
            logging.warning(f"Ignoring invalid value for {path}: {e}")

    # --- Drawing ---

    def draw(self, simulation: "Simulation") -> None:
        self.screen.fill((235, 235, 235))
        self.screen.blit(self.sim_surface, (0, 0))

        if self.show_panel:
            self.screen.blit(self.panel_background, (self.sim_width, 0))
            self._draw_panel(simulation)

        pygame.display.flip()
        self.sim_surface.blit(self.fade_layer, (0, 0))
        self.clock.tick()

    def _panel_entries(self, simulation: "Simulation") -> List[Tuple[str, str]]:
        settings = simulation.settings
        particles = settings.particles
        entries = [
            ("Particles", f"{len(simulation.particles.live_particles)} / {particles.count}"),
            ("Radius", f"{particles.radius:.0f}"),
            ("Color Scheme", COLOR_SCHEMES[simulation.particles.color_scheme_index].name),
            ("Show Lines", "on" if settings.show_lines else "off"),
            ("Wave Amplitude", f"{particles.motion.oscillation_amount:.1f}"),
            ("Wave Speed", f"{particles.motion.oscillation_speed:.3f}"),
            ("Rotation", f"{particles.motion.rotation_speed:.4f}"),
            ("Spring", f"{particles.spring.strength:.2f}"),
            ("Mouse Force", f"{settings.mouse.repel_force:.2f}"),
            ("Mouse Size Effect", f"{settings.mouse.proximity_scale:.1f}"),
            ("Focus Points", str(len(simulation.focus))),
        ]
        for name in EFFECTS:
            effect = getattr(settings.intervals, name)
            label = name.replace('_', ' ').title()
            entries.append((f"{label} Interval",
                            f"{effect.time / 1000:.1f}s" if effect.enabled else "off"))
        entries.append(("FPS", f"{self.clock.get_fps():.0f}"))
        return entries

    def _draw_panel(self, simulation: "Simulation") -> None:
        """Renders live values and key bindings as rounded label/value rows."""
        padding = 6
        gap = 20
        line_height = self.font_main.get_linesize()
        left = self.sim_width + 15
        inner_width = UI_PANEL_WIDTH - 30
        column_width = (inner_width - gap) / 2 - padding
        label_right = left + padding + column_width
        value_left = label_right + gap

        y = 15
        title = self.font_title.render("Particula", True, self.text_color_title)
        self.screen.blit(title, (left, y))
        y += title.get_height() + 10

        rows = self._panel_entries(simulation) + [("", "")] + KEY_HELP
        for label, value in rows:
            if y > self.sim_height - line_height:
                break
            if not label:
                y += line_height
                continue
            label_lines = self._wrap(label, self.font_main_bold, column_width)
            value_lines = self._wrap(value, self.font_main, column_width)
            height = max(len(label_lines), len(value_lines)) * line_height + 2 * padding
            pygame.draw.rect(self.screen, self.param_box_color,
                             pygame.Rect(left, y, inner_width, height), border_radius=6)

            for i, line in enumerate(label_lines):
                surf = self.font_main_bold.render(line, True, self.text_color_key)
                self.screen.blit(surf, surf.get_rect(topright=(label_right, y + padding + i * line_height)))
            for i, line in enumerate(value_lines):
                surf = self.font_main.render(line, True, self.text_color_value)
                self.screen.blit(surf, (value_left, y + padding + i * line_height))
            y += height + self.param_box_spacing

    @staticmethod
    def _wrap(text: str, font: pygame.font.Font, max_width: float) -> List[str]:
        """Greedy word wrap; a single word wider than max_width gets its own line."""
        lines: List[str] = []
        for word in text.split():
            if lines and font.size(f"{lines[-1]} {word}")[0] <= max_width:
                lines[-1] = f"{lines[-1]} {word}"
            else:
                lines.append(word)
        return lines

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
