"""
Configuration for the layout engine.

All tuning knobs live on ``LayoutConfig``. The module-level constants below
are the defaults, grouped the same way the pipeline runs.
"""

import math
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .errors import ConfigurationError

# =============================================================================
# LAYOUT DEFAULTS
# =============================================================================

# --- Force-directed refinement ---

# Number of force iterations
DEFAULT_ITERATIONS = 150

# Strength of the box-to-box repulsion (scaled by 1 / gap^2)
DEFAULT_REPULSION_STRENGTH = 10000.0

# Spring constant pulling connected nodes together
DEFAULT_ATTRACTION_STRENGTH = 0.1

# Fraction of the net force applied as displacement each iteration
DEFAULT_STEP_FACTOR = 0.1

# Cooling schedule: maximum displacement of the first iteration and its
# per-iteration decay
DEFAULT_INITIAL_TEMPERATURE = 50.0
DEFAULT_COOLING_RATE = 0.95

# Consecutive low-energy iterations before stopping early
DEFAULT_EARLY_STOP_PATIENCE = 5

# Upper bound on push-apart sweeps of the spacing pass
DEFAULT_SEPARATION_SWEEPS = 200

# --- Spacing and canvas ---

# Minimum gap between two node bounding boxes
DEFAULT_MIN_SPACING = 30.0

# Smallest canvas produced, before padding is added
DEFAULT_CANVAS_MIN_WIDTH = 400.0
DEFAULT_CANVAS_MIN_HEIGHT = 300.0

# --- Routing ---

# Resolution of the routing grid
DEFAULT_GRID_CELL_SIZE = 5.0

# Extra search cost per change of direction (A* only)
DEFAULT_BEND_PENALTY = 1.0

SEARCH_ALGORITHMS = ("astar", "bfs")

# Settings grouped by the type validate() expects
_COUNT_FIELDS = ("iterations", "early_stop_patience", "separation_sweeps")
_NUMBER_FIELDS = (
    "repulsion_strength",
    "attraction_strength",
    "min_spacing",
    "grid_cell_size",
    "canvas_min_width",
    "canvas_min_height",
    "initial_temperature",
    "cooling_rate",
    "step_factor",
    "bend_penalty",
)
_OPTIONAL_NUMBER_FIELDS = ("padding", "early_stop_energy", "grid_padding")
_FLAG_FIELDS = ("allow_diagonals", "spaced_edges", "prevent_overlap")

# =============================================================================


@dataclass
class LayoutConfig:
    """
    Settings for a layout run.

    Attributes:
        iterations: Force-directed pass count.
        repulsion_strength: Magnitude of node-node repulsion.
        attraction_strength: Spring constant of edge attraction.
        min_spacing: Minimum gap enforced between node bounding boxes.
        grid_cell_size: Routing grid resolution; all output coordinates are
            multiples of it.
        allow_diagonals: Allow diagonal moves while routing.
        spaced_edges: Route later edges around earlier ones.
        prevent_overlap: Run the spacing pass after the force simulation.
        canvas_min_width: Minimum canvas width before padding.
        canvas_min_height: Minimum canvas height before padding.
        padding: Margin around the layout; defaults to ``min_spacing``.
        initial_temperature: Largest per-node move in the first iteration.
        cooling_rate: Factor applied to the temperature every iteration.
        step_factor: Fraction of the net force turned into displacement.
        early_stop_energy: Stop once the total squared force stays below this
            for ``early_stop_patience`` iterations. None disables it.
        early_stop_patience: See ``early_stop_energy``.
        separation_sweeps: Bound on push-apart sweeps of the spacing pass.
        grid_padding: Free border around the nodes in the routing grid;
            computed from the spacing and cell size when None.
        search: Path search algorithm, ``"astar"`` or ``"bfs"``.
        bend_penalty: Extra A* cost per change of direction.
    """

    iterations: int = DEFAULT_ITERATIONS
    repulsion_strength: float = DEFAULT_REPULSION_STRENGTH
    attraction_strength: float = DEFAULT_ATTRACTION_STRENGTH
    min_spacing: float = DEFAULT_MIN_SPACING
    grid_cell_size: float = DEFAULT_GRID_CELL_SIZE
    allow_diagonals: bool = False
    spaced_edges: bool = False
    prevent_overlap: bool = True
    canvas_min_width: float = DEFAULT_CANVAS_MIN_WIDTH
    canvas_min_height: float = DEFAULT_CANVAS_MIN_HEIGHT
    padding: Optional[float] = None
    initial_temperature: float = DEFAULT_INITIAL_TEMPERATURE
    cooling_rate: float = DEFAULT_COOLING_RATE
    step_factor: float = DEFAULT_STEP_FACTOR
    early_stop_energy: Optional[float] = None
    early_stop_patience: int = DEFAULT_EARLY_STOP_PATIENCE
    separation_sweeps: int = DEFAULT_SEPARATION_SWEEPS
    grid_padding: Optional[float] = None
    search: str = "astar"
    bend_penalty: float = DEFAULT_BEND_PENALTY

    @property
    def effective_padding(self) -> float:
        """Canvas padding rounded up to a whole number of grid cells."""
        padding = self.min_spacing if self.padding is None else self.padding
        cells = math.ceil(padding / self.grid_cell_size - 1e-9)
        return cells * self.grid_cell_size

    @property
    def effective_grid_padding(self) -> float:
        if self.grid_padding is not None:
            return self.grid_padding
        return max(2 * self.min_spacing, 8 * self.grid_cell_size)

    def validate(self) -> None:
        """
        Check every setting before any computation starts.

        Raises:
            ConfigurationError: If a setting has the wrong type or is out of
                range.
        """
        self._check_types()

        if not _is_finite(self.grid_cell_size) or self.grid_cell_size <= 0:
            raise ConfigurationError(
                f"grid_cell_size must be positive, got {self.grid_cell_size}"
            )
        if not _is_finite(self.min_spacing) or self.min_spacing < 0:
            raise ConfigurationError(
                f"min_spacing must not be negative, got {self.min_spacing}"
            )
        if self.iterations < 0:
            raise ConfigurationError(
                f"iterations must not be negative, got {self.iterations}"
            )
        if not _is_finite(self.repulsion_strength) or self.repulsion_strength < 0:
            raise ConfigurationError(
                f"repulsion_strength must not be negative, "
                f"got {self.repulsion_strength}"
            )
        if not _is_finite(self.attraction_strength) or self.attraction_strength < 0:
            raise ConfigurationError(
                f"attraction_strength must not be negative, "
                f"got {self.attraction_strength}"
            )
        if not 0 < self.cooling_rate <= 1:
            raise ConfigurationError(
                f"cooling_rate must be in (0, 1], got {self.cooling_rate}"
            )
        if self.initial_temperature <= 0 or self.step_factor <= 0:
            raise ConfigurationError(
                "initial_temperature and step_factor must be positive"
            )
        if self.canvas_min_width < 0 or self.canvas_min_height < 0:
            raise ConfigurationError("canvas minimum size must not be negative")
        if self.padding is not None and self.padding < 0:
            raise ConfigurationError(f"padding must not be negative, got {self.padding}")
        if self.grid_padding is not None and self.grid_padding < 0:
            raise ConfigurationError(
                f"grid_padding must not be negative, got {self.grid_padding}"
            )
        if self.early_stop_patience < 1:
            raise ConfigurationError("early_stop_patience must be at least 1")
        if self.separation_sweeps < 0:
            raise ConfigurationError("separation_sweeps must not be negative")
        if self.search not in SEARCH_ALGORITHMS:
            raise ConfigurationError(
                f"search must be one of {', '.join(SEARCH_ALGORITHMS)}, "
                f"got '{self.search}'"
            )
        if self.bend_penalty < 0:
            raise ConfigurationError("bend_penalty must not be negative")

    def _check_types(self) -> None:
        for name in _COUNT_FIELDS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        for name in _NUMBER_FIELDS:
            value = getattr(self, name)
            if not _is_finite(value):
                raise ConfigurationError(
                    f"{name} must be a finite number, got {value!r}"
                )
        for name in _OPTIONAL_NUMBER_FIELDS:
            value = getattr(self, name)
            if value is not None and not _is_finite(value):
                raise ConfigurationError(
                    f"{name} must be a finite number or None, got {value!r}"
                )
        for name in _FLAG_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigurationError(f"{name} must be True or False, got {value!r}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "LayoutConfig":
        """
        Build a config from a plain mapping, e.g. loaded from JSON.

        Raises:
            ConfigurationError: On unknown keys.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**values)


def _is_finite(value: float) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)
