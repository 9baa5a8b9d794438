"""
Auto-scaling live line graph.

A GraphSeries keeps a rolling window of (time, value) samples together
with persistent axis ranges:

- x axis: snaps to the data extent on every insertion (sliding window)
- y axis: expands with hysteresis and never contracts, so the plot does
  not jitter as old samples scroll out

Gridlines sit at fixed absolute multiples of their spacing measured from a
configurable origin, so they do not "swim" while the window scrolls.

Screen coordinates use a top-left origin: x grows right, y grows down.
"""

import math
import numpy as np
from collections import deque
from dataclasses import dataclass, field
from typing import Optional, List, Tuple

Color = Tuple[float, float, float, float]

# Axes that would need more lines than this get none
MAX_GRIDLINES = 1000


@dataclass(frozen=True)
class GridlineConfig:
    """
    Gridline spacing policy.

    Fixed: explicit spacing in data units.
    Dynamic: spacing = ceil((range / num_lines) / min_spacing) · min_spacing,
    never closer than min_spacing while approximating num_lines lines.

    Build with GridlineConfig.fixed() or GridlineConfig.dynamic().
    """
    spacing: float = 1.0
    num_lines: Optional[int] = None

    def __post_init__(self):
        if not self.spacing > 0:
            raise ValueError("Gridline spacing must be positive")
        if self.num_lines is not None and self.num_lines < 1:
            raise ValueError("num_lines must be at least 1")

    @classmethod
    def fixed(cls, spacing: float) -> 'GridlineConfig':
        return cls(spacing=float(spacing))

    @classmethod
    def dynamic(cls, min_spacing: float, num_lines: int) -> 'GridlineConfig':
        return cls(spacing=float(min_spacing), num_lines=int(num_lines))

    @property
    def is_dynamic(self) -> bool:
        return self.num_lines is not None

    def spacing_for(self, axis_range: float) -> float:
        """
        Gridline spacing for an axis of the given extent.

        Args:
            axis_range: max - min of the axis

        Returns:
            Spacing in data units (a positive multiple of the minimum
            spacing for the dynamic policy)
        """
        if not self.is_dynamic:
            return self.spacing
        target = axis_range / self.num_lines
        multiplier = math.ceil(target / self.spacing) if math.isfinite(target) else 1
        return self.spacing * max(multiplier, 1)


def compute_gridlines(axis_min: float, axis_max: float, spacing: float,
                      origin: float = 0.0) -> List[float]:
    """
    Gridline values inside [axis_min, axis_max].

    Lines lie at origin + k · spacing for integer k. The first candidate is
    origin + floor((axis_min - origin) / spacing) · spacing; candidates below
    axis_min are discarded.

    Args:
        axis_min: Lower axis bound
        axis_max: Upper axis bound
        spacing: Distance between lines (> 0)
        origin: Alignment origin

    Returns:
        Ascending list of gridline values (empty for non-finite bounds or
        when more than MAX_GRIDLINES lines would be needed)
    """
    if not spacing > 0:
        raise ValueError("Gridline spacing must be positive")
    if not (math.isfinite(axis_min) and math.isfinite(axis_max)):
        return []
    if (axis_max - axis_min) / spacing > MAX_GRIDLINES:
        return []

    k = math.floor((axis_min - origin) / spacing)
    lines = []
    value = origin + k * spacing
    while value <= axis_max:
        if value >= axis_min:
            lines.append(value)
        k += 1
        value = origin + k * spacing
    return lines


@dataclass
class GraphParams:
    """
    Graph widget options.

    Attributes:
        position: Top-left corner on screen (pixels)
        size: Width and height (pixels)
        max_points: Number of samples kept
        line_color: Data line RGBA
        grid_color: Gridline and axis label RGBA
        x_gridlines: Spacing policy for vertical gridlines
        y_gridlines: Spacing policy for horizontal gridlines
        gridline_origin: Alignment origin (x, y) in data units
        expansion_threshold: Fraction of the y range; data closer than this
            to an edge pushes that edge out
        min_y_range: Smallest allowed y_max - y_min
        label: Title text
        show_current_x: Show the latest x value
        show_current_y: Show the latest y value
        text_color: Title and current-value RGBA
        font_size: Title font size (gridline labels use 0.8x)
    """
    position: Tuple[float, float] = (20.0, 20.0)
    size: Tuple[float, float] = (300.0, 200.0)
    max_points: int = 200
    line_color: Color = (1.0, 0.6, 0.2, 1.0)
    grid_color: Color = (0.5, 0.5, 0.5, 0.5)
    x_gridlines: GridlineConfig = field(default_factory=lambda: GridlineConfig.fixed(1.0))
    y_gridlines: GridlineConfig = field(default_factory=lambda: GridlineConfig.dynamic(10.0, 4))
    gridline_origin: Tuple[float, float] = (0.0, 0.0)
    expansion_threshold: float = 0.1
    min_y_range: float = 0.1
    label: str = "Graph"
    show_current_x: bool = False
    show_current_y: bool = True
    text_color: Color = (0.9, 0.9, 0.9, 1.0)
    font_size: float = 12.0

    def __post_init__(self):
        if self.max_points < 1:
            raise ValueError("max_points must be positive")
        if self.size[0] <= 0 or self.size[1] <= 0:
            raise ValueError("Graph size must be positive")
        if self.expansion_threshold < 0:
            raise ValueError("expansion_threshold must be non-negative")
        if not self.min_y_range > 0:
            raise ValueError("min_y_range must be positive")


@dataclass
class GraphLabel:
    """Text to draw: anchor is one of 'top-left', 'top-right', 'top-center'."""
    text: str
    position: Tuple[float, float]
    anchor: str
    font_size: float
    color: Color


@dataclass
class GraphPrimitives:
    """
    Everything a renderer needs to draw one graph frame (screen coordinates).

    Attributes:
        data_segments: (S, 2, 2) line segments of the data polyline
        gridline_segments: (G, 2, 2) horizontal then vertical gridlines
        x_gridlines: (value, screen_x) pairs
        y_gridlines: (value, screen_y) pairs
        labels: Title, current value and gridline labels
        latest: Most recent (x, y) sample, if any
    """
    data_segments: np.ndarray
    gridline_segments: np.ndarray
    x_gridlines: List[Tuple[float, float]]
    y_gridlines: List[Tuple[float, float]]
    labels: List[GraphLabel]
    latest: Optional[Tuple[float, float]]


class GraphSeries:
    """
    Rolling (x, y) series with persistent, jitter-free axis ranges.

    Example:
        >>> graph = GraphSeries(GraphParams(max_points=600, label="Energy"))
        >>> graph.add_point(sim.elapsed, pendulum.energy(state))
        >>> prims = graph.primitives()
    """

    def __init__(self, params: Optional[GraphParams] = None):
        self.params = params or GraphParams()
        self.data = deque(maxlen=self.params.max_points)
        self.x_min = 0.0
        self.x_max = 10.0
        self.y_min = -1.0
        self.y_max = 1.0

    def add_point(self, x: float, y: float) -> None:
        """
        Append a sample and update the axis ranges.

        Args:
            x: Sample time
            y: Sample value
        """
        self.data.append((float(x), float(y)))
        self._update_ranges()

    def _update_ranges(self) -> None:
        if not self.data:
            return

        xs = [p[0] for p in self.data]
        ys = [p[1] for p in self.data]
        data_y_min, data_y_max = min(ys), max(ys)

        # Sliding window on x
        self.x_min = min(xs)
        self.x_max = max(xs)

        # Expand-only hysteresis on y
        threshold = (self.y_max - self.y_min) * self.params.expansion_threshold
        if data_y_max > self.y_max - threshold:
            self.y_max = data_y_max + threshold
        if data_y_min < self.y_min + threshold:
            self.y_min = data_y_min - threshold

        min_range = self.params.min_y_range
        if self.y_max - self.y_min < min_range:
            center = (self.y_max + self.y_min) / 2.0
            self.y_max = center + min_range / 2.0
            self.y_min = center - min_range / 2.0

    @property
    def latest(self) -> Optional[Tuple[float, float]]:
        """Most recent sample."""
        return self.data[-1] if self.data else None

    def points(self) -> np.ndarray:
        """Retained samples as an (N, 2) array, oldest first."""
        if not self.data:
            return np.zeros((0, 2))
        return np.array(self.data)

    def normalize(self, x: float, y: float) -> Tuple[float, float]:
        """Map data coordinates to [0, 1] (0.5 when an axis has zero range)."""
        x_range = self.x_max - self.x_min
        y_range = self.y_max - self.y_min
        nx = (x - self.x_min) / x_range if x_range > 0 else 0.5
        ny = (y - self.y_min) / y_range if y_range > 0 else 0.5
        return nx, ny

    def to_screen(self, x: float, y: float) -> Tuple[float, float]:
        """
        Convert data coordinates to screen coordinates.

        Args:
            x, y: Data coordinates

        Returns:
            (sx, sy) with y_max at the widget top and y_min at its bottom
        """
        nx, ny = self.normalize(x, y)
        px, py = self.params.position
        w, h = self.params.size
        return px + nx * w, py + (1.0 - ny) * h

    def x_spacing(self) -> float:
        return self.params.x_gridlines.spacing_for(self.x_max - self.x_min)

    def y_spacing(self) -> float:
        return self.params.y_gridlines.spacing_for(self.y_max - self.y_min)

    def x_gridlines(self) -> List[Tuple[float, float]]:
        """Vertical gridlines as (value, screen_x) pairs."""
        values = compute_gridlines(self.x_min, self.x_max, self.x_spacing(),
                                   self.params.gridline_origin[0])
        return [(v, self.to_screen(v, self.y_min)[0]) for v in values]

    def y_gridlines(self) -> List[Tuple[float, float]]:
        """Horizontal gridlines as (value, screen_y) pairs."""
        values = compute_gridlines(self.y_min, self.y_max, self.y_spacing(),
                                   self.params.gridline_origin[1])
        return [(v, self.to_screen(self.x_min, v)[1]) for v in values]

    def current_text(self) -> str:
        """Latest value formatted for the top-right annotation."""
        if not self.data:
            return ""
        x, y = self.data[-1]
        show_x, show_y = self.params.show_current_x, self.params.show_current_y
        if show_x and show_y:
            return f"({x:.2f}, {y:.2f})"
        if show_x:
            return f"{x:.2f}"
        if show_y:
            return f"{y:.2f}"
        return ""

    def primitives(self) -> GraphPrimitives:
        """Build the draw primitives for the current frame."""
        p = self.params
        px, py = p.position
        w, h = p.size

        x_lines = self.x_gridlines()
        y_lines = self.y_gridlines()

        segments = [((px, sy), (px + w, sy)) for _, sy in y_lines]
        segments += [((sx, py), (sx, py + h)) for _, sx in x_lines]
        gridline_segments = np.array(segments, dtype=float).reshape(-1, 2, 2)

        if len(self.data) >= 2:
            screen = np.array([self.to_screen(x, y) for x, y in self.data])
            data_segments = np.stack([screen[:-1], screen[1:]], axis=1)
        else:
            data_segments = np.zeros((0, 2, 2))

        labels = [GraphLabel(p.label, (px + 5.0, py - 15.0), 'top-left',
                             p.font_size, p.text_color)]
        current = self.current_text()
        if current:
            labels.append(GraphLabel(current, (px + w - 5.0, py - 15.0),
                                     'top-right', p.font_size, p.text_color))
        for value, sy in y_lines:
            labels.append(GraphLabel(f"{value:.1f}", (px + w, sy + 3.0),
                                     'top-right', p.font_size * 0.8, p.grid_color))
        for value, sx in x_lines:
            labels.append(GraphLabel(f"{value:.1f}", (sx, py + h + 3.0),
                                     'top-center', p.font_size * 0.8, p.grid_color))

        return GraphPrimitives(
            data_segments=data_segments,
            gridline_segments=gridline_segments,
            x_gridlines=x_lines,
            y_gridlines=y_lines,
            labels=labels,
            latest=self.latest
        )

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        return (f"GraphSeries(label={self.params.label!r}, points={len(self.data)}, "
                f"y=[{self.y_min:.3g}, {self.y_max:.3g}])")
