# visualization.py
"""
Handles the visualization of the particle field using Pygame.

Renderer rasterizes the current particle state onto an off-screen surface
and has no feedback into physics. Visualizer owns the window, turns Pygame
events into simulation inputs (pointer, shockwaves, scroll dispersion,
resize, visibility) and presents the rendered frame.
"""
import logging
import pygame
import numpy as np
from typing import Dict, List, Optional, Sequence, Set, Tuple
from particle import ParticleField
from quadtree import QuadTree
from utils import Throttle
from constants import (
    BACKGROUND_COLOR, FULLSCREEN, DEFAULT_WIDTH, DEFAULT_HEIGHT, MAX_PIXEL_DENSITY,
    PALETTE, BASE_ALPHA, GLOW_RANGE, GLOW_ALPHA_BOOST, GLOW_SIZE_BOOST,
    QUADTREE_OVERLAY_COLOR, RESIZE_THROTTLE_MS, DISPERSION_SCROLL_FRACTION,
    SCROLL_STEP
)

# Forward reference for type hinting to avoid circular import
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from simulation import Simulation, SimulationInputs
    from loop import SimulationLoop


# --- Data Contracts ---
#
# scroll_to_dispersion(section_top: float, section_height: float) -> float:
#   - Outputs: clamp(-section_top / (section_height * 0.6), 0, 1); 0 when
#     the section has no height.
#
# class Renderer:
#   - resize(self, width: float, height: float) -> None:
#     - Side Effects: Allocates a surface of viewport * pixel density,
#       where pixel density is capped at 2.
#   - render(self, field, inputs, quadtree=None) -> Optional[pygame.Surface]:
#     - Outputs: The rendered surface, or None before the first valid resize.
#     - Invariants: Reads particle state only; never mutates it.
#
# class Visualizer:
#   - handle_event(self, event: pygame.event.Event, now: float) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: Writes SimulationInputs, triggers shockwaves, feeds the
#       resize throttle, and pauses/resumes the SimulationLoop.


def scroll_to_dispersion(section_top: float, section_height: float) -> float:
    """Maps how far the hosting section has scrolled past the top of the viewport to [0, 1]."""
    if section_height <= 0:
        return 0.0
    progress = -section_top / (section_height * DISPERSION_SCROLL_FRACTION)
    return min(max(progress, 0.0), 1.0)


def glow_factors(positions: np.ndarray, pointer_x: float, pointer_y: float) -> np.ndarray:
    """Linear falloff from 1 at the pointer to 0 at GLOW_RANGE and beyond."""
    distances = np.hypot(positions[:, 0] - pointer_x, positions[:, 1] - pointer_y)
    return np.clip(1.0 - distances / GLOW_RANGE, 0.0, 1.0)


class Renderer:
    """
    Draws each particle as a translucent filled circle.
    """
    def __init__(self, colors: Sequence, pixel_density: float = 1.0,
                 background: Tuple[int, int, int] = BACKGROUND_COLOR, show_quadtree: bool = False):
        if pixel_density <= 0:
            logging.warning(f"Invalid pixel density {pixel_density}; using 1.0.")
            pixel_density = 1.0
        self.pixel_density = min(float(pixel_density), MAX_PIXEL_DENSITY)
        self.colors = [pygame.Color(c) for c in colors]
        self.background = background
        self.show_quadtree = show_quadtree
        self.surface: Optional[pygame.Surface] = None
        # Pre-rendered discs keyed by (color index, pixel radius)
        self._sprites: Dict[Tuple[int, int], pygame.Surface] = {}

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            self.surface = None
            return
        size = (max(1, int(width * self.pixel_density)), max(1, int(height * self.pixel_density)))
        self.surface = pygame.Surface(size)
        logging.debug(f"Render surface resized to {size[0]}x{size[1]} (density {self.pixel_density}).")

    def _sprite(self, color_index: int, radius: int) -> pygame.Surface:
        key = (color_index, radius)
        sprite = self._sprites.get(key)
        if sprite is None:
            sprite = pygame.Surface((radius * 2 + 1, radius * 2 + 1), pygame.SRCALPHA)
            pygame.draw.circle(sprite, self.colors[color_index % len(self.colors)], (radius, radius), radius)
            self._sprites[key] = sprite
        return sprite

    def render(self, field: ParticleField, inputs: "SimulationInputs",
               quadtree: Optional[QuadTree] = None) -> Optional[pygame.Surface]:
        """
        Clears the surface and draws every particle.

        Alpha fades toward 0 as the dispersion factor approaches 1 and gets a
        small bounded boost near the pointer, where particles are also drawn
        slightly larger.
        """
        surface = self.surface
        if surface is None:
            return None
        surface.fill(self.background)
        scale = self.pixel_density

        if self.show_quadtree and quadtree is not None:
            for x, y, w, h in quadtree.leaf_bounds():
                rect = pygame.Rect(int(x * scale), int(y * scale), int(w * scale), int(h * scale))
                pygame.draw.rect(surface, QUADTREE_OVERLAY_COLOR, rect, 1)

        if len(field) == 0:
            return surface

        base_alpha = max(0.0, BASE_ALPHA * (1.0 - inputs.dispersion))
        glow = glow_factors(field.positions, inputs.pointer_x, inputs.pointer_y)
        alphas = np.minimum(1.0, base_alpha + glow * GLOW_ALPHA_BOOST)
        pixel_radii = np.rint(field.radii * (1.0 + glow * GLOW_SIZE_BOOST) * scale).astype(np.int32)

        for i in range(len(field)):
            alpha = int(alphas[i] * 255)
            if alpha <= 0:
                continue
            radius = int(pixel_radii[i])
            sprite = self._sprite(int(field.colors[i]), radius)
            sprite.set_alpha(alpha)
            surface.blit(
                sprite,
                (int(field.positions[i, 0] * scale) - radius, int(field.positions[i, 1] * scale) - radius)
            )
        return surface


class Visualizer:
    """
    Owns the Pygame window and translates its events into simulation inputs.
    """
    def __init__(self, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params if vis_params is not None else {}
        pygame.init()

        if vis_params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width = int(vis_params.get('width', DEFAULT_WIDTH))
            height = int(vis_params.get('height', DEFAULT_HEIGHT))
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        pygame.display.set_caption("Particle Field")
        self.clock = pygame.time.Clock()
        self.width = width
        self.height = height

        self.colors = self._initialize_colors(vis_params.get('particle_colors'))
        self.renderer = Renderer(
            self.colors,
            pixel_density=float(vis_params.get('pixel_density', 1.0)),
            show_quadtree=bool(vis_params.get('show_quadtree', False))
        )

        # Emulated page scroll: the hosting section is one viewport tall
        # and starts at the top of the page.
        self.scroll_offset = 0.0

        # Active touch fingers and the one steering the pointer, if any.
        self._fingers_down: Set[int] = set()
        self._pointer_finger: Optional[int] = None

        self.simulation: Optional["Simulation"] = None
        self.loop: Optional["SimulationLoop"] = None
        self.resize_throttle = Throttle(RESIZE_THROTTLE_MS, self._apply_resize)

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _initialize_colors(self, config_colors: Optional[list]) -> List[Tuple[int, int, int]]:
        """Loads the palette from config, falling back to the built-in six colors."""
        if not config_colors:
            logging.info("No colors found in config. Using the default palette.")
            return list(PALETTE)

        try:
            colors = [tuple(pygame.Color(rgb))[:3] for rgb in config_colors]
        except (ValueError, TypeError) as e:
            logging.error(f"Could not parse colors from config due to invalid format: {e}. Using the default palette.")
            return list(PALETTE)

        if len(colors) != len(PALETTE):
            logging.warning(
                f"Config provides {len(colors)} colors; the default palette has {len(PALETTE)}. "
                "Using the configured colors as given."
            )
        else:
            logging.info(f"Loaded {len(colors)} particle colors from configuration.")
        return colors

    def bind(self, simulation: "Simulation", loop: "SimulationLoop") -> None:
        """Connects the window to the simulation and applies the initial viewport."""
        self.simulation = simulation
        self.loop = loop
        self._apply_resize(self.width, self.height)

    def _apply_resize(self, width: int, height: int) -> None:
        self.width, self.height = width, height
        self.simulation.resize(width, height)
        self.renderer.resize(width, height)
        self._update_scroll()
        logging.info(f"Viewport resized to {width}x{height}.")

    def _update_scroll(self) -> None:
        section_height = self.height
        self.scroll_offset = min(max(self.scroll_offset, 0.0), 2.0 * section_height)
        section_top = -self.scroll_offset
        self.simulation.inputs.set_dispersion(scroll_to_dispersion(section_top, section_height))
        visible = section_top + section_height > 0
        if visible != self.loop.section_visible:
            logging.debug(f"Hosting section {'entered' if visible else 'left'} the viewport.")
        self.loop.set_section_visible(visible)

    def handle_event(self, event: pygame.event.Event, now: float) -> bool:
        """
        Applies one Pygame event to the simulation inputs.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        inputs = self.simulation.inputs

        if event.type == pygame.QUIT:
            logging.info("Quit event received. Shutting down visualizer.")
            return False
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            logging.info("ESC key pressed. Shutting down visualizer.")
            return False

        # Touch input arrives as FINGER events; ignore the synthesized mouse copies.
        if event.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN) and getattr(event, 'touch', False):
            return True

        if event.type == pygame.MOUSEMOTION:
            inputs.set_pointer(*event.pos)
        elif event.type == pygame.WINDOWLEAVE:
            inputs.clear_pointer()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            self.simulation.trigger_shockwave(event.pos[0], event.pos[1], now)
        elif event.type == pygame.FINGERDOWN:
            # Only a lone finger acts as the pointer and fires a shockwave.
            if not self._fingers_down:
                self._pointer_finger = event.finger_id
                x, y = event.x * self.width, event.y * self.height
                inputs.set_pointer(x, y)
                self.simulation.trigger_shockwave(x, y, now)
            self._fingers_down.add(event.finger_id)
        elif event.type == pygame.FINGERMOTION:
            if event.finger_id == self._pointer_finger:
                inputs.set_pointer(event.x * self.width, event.y * self.height)
        elif event.type == pygame.FINGERUP:
            self._fingers_down.discard(event.finger_id)
            if event.finger_id == self._pointer_finger:
                self._pointer_finger = None
                inputs.clear_pointer()
        elif event.type == pygame.MOUSEWHEEL:
            self.scroll_offset -= event.y * SCROLL_STEP
            self._update_scroll()
        elif event.type == pygame.VIDEORESIZE:
            self.resize_throttle.submit(now, event.w, event.h)
        elif event.type in (pygame.WINDOWHIDDEN, pygame.WINDOWMINIMIZED):
            self.loop.set_foreground(False)
        elif event.type in (pygame.WINDOWSHOWN, pygame.WINDOWRESTORED):
            self.loop.set_foreground(True)
        return True

    def process_events(self, now: float) -> bool:
        """Drains the Pygame event queue and delivers any throttled resize."""
        for event in pygame.event.get():
            if not self.handle_event(event, now):
                return False
        self.resize_throttle.flush(now)
        return True

    def draw(self) -> None:
        """Renders the current particle state and presents it on the window."""
        frame = self.renderer.render(self.simulation.field, self.simulation.inputs, self.simulation.quadtree)
        if frame is None:
            return
        if frame.get_size() != self.screen.get_size():
            pygame.transform.smoothscale(frame, self.screen.get_size(), self.screen)
        else:
            self.screen.blit(frame, (0, 0))
        pygame.display.flip()

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
