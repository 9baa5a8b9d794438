"""
Plotting utilities.

Static matplotlib views of ribbon meshes, live graphs, energy drift,
trajectories and convergence studies. draw_graph_primitives() and
draw_ribbon_mesh() are also used by the animator.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection, PolyCollection
from matplotlib.patches import Rectangle
from typing import Optional, List, Sequence
import os

from .graph import GraphSeries, GraphPrimitives, GraphParams
from .trail import RibbonMesh

_ANCHORS = {
    'top-left': ('left', 'top'),
    'top-right': ('right', 'top'),
    'top-center': ('center', 'top'),
}


def draw_ribbon_mesh(ax: plt.Axes, mesh: RibbonMesh,
                     collection: Optional[PolyCollection] = None) -> PolyCollection:
    """
    Draw (or refresh) a ribbon mesh as filled triangles in the x-y plane.

    Args:
        ax: Target axes
        mesh: Ribbon geometry
        collection: Existing collection to update in place

    Returns:
        The PolyCollection holding the triangles
    """
    if mesh.is_empty:
        verts, colors = np.zeros((0, 3, 2)), np.zeros((0, 4))
    else:
        verts = mesh.triangles()[:, :, :2]
        colors = np.clip(mesh.triangle_colors(), 0.0, 1.0)

    if collection is None:
        collection = PolyCollection(verts, facecolors=colors,
                                    edgecolors='none', zorder=1)
        ax.add_collection(collection)
    else:
        collection.set_verts(verts)
        collection.set_facecolor(colors)
    return collection


def draw_graph_primitives(ax: plt.Axes, prims: GraphPrimitives,
                          params: GraphParams, dpi: float = 100.0) -> List:
    """
    Draw one graph widget on an axes that uses screen coordinates.

    The axes is expected to have a top-left origin (inverted y).

    Args:
        ax: Overlay axes
        prims: Primitives from GraphSeries.primitives()
        params: Widget options (colors, frame)
        dpi: Figure dpi, to convert pixel font sizes to points

    Returns:
        List of created artists (so the caller can remove them)
    """
    artists = []
    px, py = params.position
    w, h = params.size

    frame = Rectangle((px, py), w, h, fill=False,
                      edgecolor=params.grid_color, linewidth=0.8)
    ax.add_patch(frame)
    artists.append(frame)

    if len(prims.gridline_segments):
        grid = LineCollection(prims.gridline_segments, colors=[params.grid_color],
                              linewidths=0.5)
        ax.add_collection(grid)
        artists.append(grid)

    if len(prims.data_segments):
        line = LineCollection(prims.data_segments, colors=[params.line_color],
                              linewidths=1.5)
        ax.add_collection(line)
        artists.append(line)

    for label in prims.labels:
        ha, va = _ANCHORS.get(label.anchor, ('left', 'top'))
        text = ax.text(label.position[0], label.position[1], label.text,
                       ha=ha, va=va, color=label.color,
                       fontsize=label.font_size * 72.0 / dpi)
        artists.append(text)

    return artists


def plot_graph_series(graph: GraphSeries, ax: Optional[plt.Axes] = None,
                      title: Optional[str] = None) -> plt.Axes:
    """
    Render a GraphSeries the way the live widget shows it.

    Args:
        graph: Graph to draw
        ax: Matplotlib axes (creates new if None)
        title: Plot title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 4))

    p = graph.params
    margin = 30.0
    ax.set_xlim(p.position[0] - margin, p.position[0] + p.size[0] + margin)
    ax.set_ylim(p.position[1] + p.size[1] + margin, p.position[1] - margin)
    ax.set_facecolor('black')
    ax.set_xticks([])
    ax.set_yticks([])

    draw_graph_primitives(ax, graph.primitives(), p,
                          dpi=ax.figure.dpi)

    if title:
        ax.set_title(title)

    return ax


def plot_ribbon_mesh(mesh: RibbonMesh, ax: Optional[plt.Axes] = None,
                     show_wireframe: bool = False,
                     title: Optional[str] = None) -> plt.Axes:
    """
    Plot a ribbon mesh.

    Args:
        mesh: Ribbon geometry
        ax: Matplotlib axes
        show_wireframe: Overlay triangle edges
        title: Plot title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(8, 8))

    ax.set_facecolor('black')
    draw_ribbon_mesh(ax, mesh)

    if show_wireframe and not mesh.is_empty:
        edges = mesh.triangles()[:, [0, 1, 2, 0], :2]
        ax.add_collection(LineCollection(edges, colors='gray', linewidths=0.3))

    if mesh.vertex_count:
        ax.update_datalim(mesh.positions[:, :2])
        ax.autoscale_view()
    ax.set_aspect('equal')

    if title:
        ax.set_title(title)

    return ax


def plot_energy_drift(result, ax: Optional[plt.Axes] = None,
                      relative: bool = True,
                      title: Optional[str] = None) -> plt.Axes:
    """
    Plot E(t) - E(0) over a run.

    Args:
        result: SimulationResult
        ax: Matplotlib axes
        relative: Divide by the system's energy scale
        title: Plot title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))

    drift = result.energy_drift
    if len(drift) == 0:
        ax.text(0.5, 0.5, 'No energy data available',
                ha='center', va='center', transform=ax.transAxes)
        return ax

    if relative:
        drift = drift / (result.metadata.get('energy_scale', 1.0) or 1.0)

    ax.plot(result.time, drift, 'b-', linewidth=1.2)
    ax.axhline(0.0, color='k', linewidth=0.8, alpha=0.5)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('ΔE / E_scale' if relative else 'ΔE (J)')
    ax.grid(True, alpha=0.3)
    ax.set_title(title or 'Energy Drift')

    return ax


def plot_trajectory_3d(result, ax=None, color: str = 'purple',
                       title: Optional[str] = None):
    """
    Plot the first three state components as a 3-D curve (e.g. Lorenz).

    Args:
        result: SimulationResult with at least 3 state columns
        ax: 3-D axes (creates new if None)
        color: Line color
        title: Plot title

    Returns:
        Matplotlib 3-D axes
    """
    if ax is None:
        fig = plt.figure(figsize=(8, 8))
        ax = fig.add_subplot(projection='3d')

    states = result.states
    ax.plot(states[:, 0], states[:, 1], states[:, 2], '-', color=color,
            linewidth=0.6)
    ax.set_xlabel('x')
    ax.set_ylabel('y')
    ax.set_zlabel('z')

    if title:
        ax.set_title(title)

    return ax


def plot_convergence(dts: Sequence[float], errors: Sequence[float],
                     order: Optional[float] = None,
                     ax: Optional[plt.Axes] = None,
                     title: Optional[str] = None) -> plt.Axes:
    """
    Log-log plot of global error against step size.

    Args:
        dts: Step sizes
        errors: Final errors per step size
        order: Fitted order, shown in the legend
        ax: Matplotlib axes
        title: Plot title

    Returns:
        Matplotlib axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(6, 5))

    dts = np.asarray(dts, dtype=float)
    errors = np.asarray(errors, dtype=float)

    ax.loglog(dts, errors, 'o-', label='RK4 error')
    ref = errors[0] * (dts / dts[0])**4
    ax.loglog(dts, ref, 'k--', alpha=0.5, label='O(dt⁴)')
    if order is not None:
        ax.plot([], [], ' ', label=f'fitted order {order:.2f}')

    ax.set_xlabel('dt')
    ax.set_ylabel('Global error')
    ax.grid(True, which='both', alpha=0.3)
    ax.legend()
    ax.set_title(title or 'RK4 Convergence')

    return ax


def save_figure(fig: plt.Figure, filename: str,
                output_dir: str = 'report/figures',
                formats: List[str] = ['png', 'pdf']) -> None:
    """
    Save figure to multiple formats.

    Args:
        fig: Matplotlib figure
        filename: Base filename (without extension)
        output_dir: Output directory
        formats: List of file formats
    """
    os.makedirs(output_dir, exist_ok=True)

    for fmt in formats:
        path = os.path.join(output_dir, f'{filename}.{fmt}')
        fig.savefig(path, dpi=150, bbox_inches='tight')
