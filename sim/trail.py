"""
Trail history and tapered ribbon mesh.

A TrailBuffer keeps the most recent positions of a moving point. From a
snapshot of that history, build_ribbon_mesh() synthesizes a triangle strip
that is zero-width and transparent at the oldest sample and full-width and
opaque at the newest:

    progress p_i = i / (N - 1)                      (oldest 0 -> newest 1)
    offset      = ± width/2 · width_profile(p_i)    (default p²)
    alpha       = alpha_profile(p_i)                (default p¹⁰)

The mesh is regenerated from scratch on every update and never patched.
"""

import numpy as np
from collections import deque
from dataclasses import dataclass, field
from typing import Optional, Tuple, Sequence

# Squared length below which a normalized perpendicular counts as degenerate
DEGENERATE_PERP_SQ = 0.01


@dataclass(frozen=True)
class Interpolation:
    """
    Profile p -> p**exponent applied along the ribbon.

    Use Interpolation.linear() or Interpolation.poly(exponent).
    """
    exponent: float = 1.0

    def __post_init__(self):
        if not self.exponent > 0:
            raise ValueError("Interpolation exponent must be positive")

    @classmethod
    def linear(cls) -> 'Interpolation':
        return cls(1.0)

    @classmethod
    def poly(cls, exponent: float) -> 'Interpolation':
        return cls(float(exponent))

    def apply(self, progress):
        return np.power(progress, self.exponent)


@dataclass
class RibbonParams:
    """
    Ribbon options.

    Attributes:
        width: Full width at the newest sample (world units)
        max_points: Trail capacity
        color: RGB vertex color
        fade_to_transparent: Fade alpha along the trail; otherwise use flat_alpha
        width_profile: Taper profile (default quadratic)
        alpha_profile: Fade profile (default 10th power)
        flat_alpha: Constant alpha when fading is off
        min_distance: Minimum distance between stored points
        warmup: Seconds of fixed-clock time before points are recorded
    """
    width: float = 0.1
    max_points: int = 100
    color: Tuple[float, float, float] = (1.0, 0.3, 0.1)
    fade_to_transparent: bool = True
    width_profile: Interpolation = field(default_factory=lambda: Interpolation.poly(2))
    alpha_profile: Interpolation = field(default_factory=lambda: Interpolation.poly(10))
    flat_alpha: float = 0.25
    min_distance: float = 0.001
    warmup: float = 0.1

    def __post_init__(self):
        if self.width < 0:
            raise ValueError("Ribbon width must be non-negative")
        if self.max_points < 2:
            raise ValueError("max_points must be at least 2")
        if len(self.color) != 3:
            raise ValueError("color must be an RGB triple")


class TrailBuffer:
    """
    Bounded FIFO of 3-D points, oldest first.

    A point is stored only if it is at least min_distance away from the
    last stored point. When full, the oldest point is evicted.
    """

    def __init__(self, max_points: int = 100, min_distance: float = 0.001):
        if max_points < 1:
            raise ValueError("max_points must be positive")
        self.max_points = max_points
        self.min_distance = min_distance
        self._points = deque(maxlen=max_points)

    def push(self, point: Sequence[float]) -> bool:
        """
        Append a point.

        Args:
            point: (x, y) or (x, y, z); 2-D points get z = 0

        Returns:
            True if the point was stored
        """
        p = np.zeros(3)
        values = np.asarray(point, dtype=float).ravel()
        p[:len(values)] = values[:3]

        if self._points and np.linalg.norm(p - self._points[-1]) < self.min_distance:
            return False

        self._points.append(p)
        return True

    def points(self) -> np.ndarray:
        """Snapshot as an (N, 3) array, oldest first."""
        if not self._points:
            return np.zeros((0, 3))
        return np.array(self._points)

    @property
    def last(self) -> Optional[np.ndarray]:
        return self._points[-1] if self._points else None

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)


class RibbonMesh:
    """
    Renderable triangle-list geometry of a ribbon.

    Attributes:
        positions: (2N, 3) float32, left/right vertex pairs
        normals: (2N, 3) float32, all +z
        uvs: (2N, 2) float32, u = 0 left / 1 right, v = progress
        colors: (2N, 4) float32 RGBA
        indices: (6(N-1),) uint32, two triangles per consecutive pair
    """

    def __init__(self):
        self.positions = np.zeros((0, 3), dtype=np.float32)
        self.normals = np.zeros((0, 3), dtype=np.float32)
        self.uvs = np.zeros((0, 2), dtype=np.float32)
        self.colors = np.zeros((0, 4), dtype=np.float32)
        self.indices = np.zeros(0, dtype=np.uint32)
        self.generation = 0

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    @property
    def index_count(self) -> int:
        return len(self.indices)

    @property
    def is_empty(self) -> bool:
        return self.index_count == 0

    def triangles(self) -> np.ndarray:
        """Triangle corner positions, shape (T, 3, 3)."""
        return self.positions[self.indices.reshape(-1, 3)]

    def triangle_colors(self) -> np.ndarray:
        """Per-triangle RGBA (mean of the three corners), shape (T, 4)."""
        return self.colors[self.indices.reshape(-1, 3)].mean(axis=1)


def build_ribbon_mesh(points: np.ndarray, params: RibbonParams,
                      mesh: RibbonMesh) -> bool:
    """
    Regenerate a ribbon mesh from a point history.

    Args:
        points: (N, 3) positions, oldest first
        params: Ribbon options
        mesh: Mesh whose buffers are replaced

    Returns:
        True if the mesh was regenerated, False if there were fewer than
        2 points (the mesh is then left untouched)
    """
    pts = np.asarray(points, dtype=np.float32).reshape(-1, 3)
    n = len(pts)
    if n < 2:
        return False

    progress = np.arange(n, dtype=np.float32) / np.float32(n - 1)

    # Direction to the next point; the last point uses the previous segment
    tangents = np.empty_like(pts)
    tangents[:-1] = pts[1:] - pts[:-1]
    tangents[-1] = tangents[-2]
    lengths = np.linalg.norm(tangents, axis=1, keepdims=True)
    tangents = np.divide(tangents, lengths, out=np.zeros_like(tangents),
                         where=lengths > 0)

    # In-plane perpendicular (tangent rotated 90° about +z)
    perp = np.zeros_like(pts)
    perp[:, 0] = -tangents[:, 1]
    perp[:, 1] = tangents[:, 0]
    perp_len = np.linalg.norm(perp, axis=1, keepdims=True)
    perp = np.divide(perp, perp_len, out=np.zeros_like(perp), where=perp_len > 0)
    keep = np.sum(perp**2, axis=1) >= DEGENERATE_PERP_SQ

    pts, perp, progress = pts[keep], perp[keep], progress[keep]
    m = len(pts)

    half_width = np.float32(params.width * 0.5) * params.width_profile.apply(progress)
    offset = perp * half_width[:, None].astype(np.float32)

    positions = np.empty((2 * m, 3), dtype=np.float32)
    positions[0::2] = pts + offset
    positions[1::2] = pts - offset

    normals = np.zeros((2 * m, 3), dtype=np.float32)
    normals[:, 2] = 1.0

    uvs = np.empty((2 * m, 2), dtype=np.float32)
    uvs[0::2, 0] = 0.0
    uvs[1::2, 0] = 1.0
    uvs[:, 1] = np.repeat(progress, 2)

    if params.fade_to_transparent:
        alpha = params.alpha_profile.apply(progress)
    else:
        alpha = np.full(m, params.flat_alpha, dtype=np.float32)
    colors = np.empty((2 * m, 4), dtype=np.float32)
    colors[:, :3] = params.color
    colors[:, 3] = np.repeat(alpha, 2)

    if m >= 2:
        base = 2 * np.arange(m - 1, dtype=np.uint32)
        indices = np.stack([base, base + 2, base + 1,
                            base + 1, base + 2, base + 3], axis=1).ravel()
    else:
        indices = np.zeros(0, dtype=np.uint32)

    mesh.positions = positions
    mesh.normals = normals
    mesh.uvs = uvs
    mesh.colors = colors
    mesh.indices = indices.astype(np.uint32)
    mesh.generation += 1
    return True


class MeshRibbon:
    """
    A trail and its mesh, fed with one position per presentation frame.

    Example:
        >>> ribbon = MeshRibbon(RibbonParams(width=5.0, max_points=2000))
        >>> ribbon.update(bob_position, elapsed=sim.elapsed)
    """

    def __init__(self, params: Optional[RibbonParams] = None,
                 name: str = "ribbon"):
        self.params = params or RibbonParams()
        self.name = name
        self.trail = TrailBuffer(self.params.max_points, self.params.min_distance)
        self.mesh = RibbonMesh()

    def update(self, position: Sequence[float],
               elapsed: Optional[float] = None) -> bool:
        """
        Record a position and regenerate the mesh.

        Args:
            position: Current point (2-D or 3-D)
            elapsed: Fixed-clock time; positions before params.warmup are ignored

        Returns:
            True if the mesh was regenerated
        """
        if elapsed is not None and elapsed < self.params.warmup:
            return False
        if not self.trail.push(position):
            return False
        return build_ribbon_mesh(self.trail.points(), self.params, self.mesh)

    def __len__(self) -> int:
        return len(self.trail)

    def __repr__(self) -> str:
        return f"MeshRibbon(name={self.name!r}, points={len(self.trail)})"
