# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They cover the rendering look of the field, the default physics tuning
(overridable from config.json) and the fixed geometry of the spatial index.
"""

# Visualization settings
# Set to True to run in borderless fullscreen mode.
FULLSCREEN = False
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 720
FPS = 60
# Frame rate of the event-only loop while the simulation is paused.
PAUSED_POLL_FPS = 10
BACKGROUND_COLOR = (17, 17, 17)  # #111111
# Surface memory and fill cost grow with the square of this.
MAX_PIXEL_DENSITY = 2.0

# --- Physics defaults ---
HOME_STRENGTH = 0.005
CURSOR_REPULSION = 8000.0
CURSOR_RADIUS = 200.0
DAMPING = 0.88
# Velocity factor applied on the axis that hit a boundary.
BOUNCE_FACTOR = -0.5
DISPERSION_STRENGTH = 2.5
SHOCKWAVE_STRENGTH = 15.0
SHOCKWAVE_RADIUS = 300.0
SHOCKWAVE_LIFETIME_MS = 400.0
MAX_SHOCKWAVES = 32
COLLISION_MARGIN = 1.0
COLLISION_STIFFNESS = 0.3
# Squared distances at or below this are treated as coincident points.
MIN_DISTANCE_SQ = 1e-9

# --- Population ---
DEFAULT_PARTICLE_COUNT = 280
PARTICLE_MIN_RADIUS = 4.0
PARTICLE_MAX_RADIUS = 16.0
HOME_MIN_DISTANCE = 50.0
HOME_SPREAD = 0.35
SPAWN_MODES = ("home", "rain")

# Pointer position meaning "no pointer influence".
POINTER_SENTINEL = (-9999.0, -9999.0)

# --- Spatial index ---
QUADTREE_CAPACITY = 8
QUADTREE_MAX_DEPTH = 6

# --- Rendering ---
BASE_ALPHA = 0.6
GLOW_RANGE = 150.0
GLOW_ALPHA_BOOST = 0.08
GLOW_SIZE_BOOST = 0.05
QUADTREE_OVERLAY_COLOR = (60, 60, 60)

# --- Host behaviour ---
RESIZE_THROTTLE_MS = 150.0
# Fraction of the section height that must scroll away for full dispersion.
DISPERSION_SCROLL_FRACTION = 0.6
SCROLL_STEP = 60.0

# The fixed six-color palette every particle draws its color from.
PALETTE = [
    (0, 156, 222),   # Blue
    (70, 200, 178),  # Teal
    (245, 216, 0),   # Yellow
    (255, 139, 34),  # Orange
    (255, 104, 89),  # Coral
    (252, 77, 119),  # Pink
]
