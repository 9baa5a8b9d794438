"""
Animation of demo scenarios with matplotlib.

The figure has two layers:
- a world axes (equal aspect) with ribbons, rods and bobs
- a screen overlay (pixel coordinates, top-left origin) for live graphs

Supports exporting as:
- MP4 video files (requires ffmpeg)
- GIF animations (requires pillow)
- HTML5 animations (for Jupyter notebooks)
"""

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation, PillowWriter, FFMpegWriter
from matplotlib.collections import LineCollection
from typing import Optional, Tuple
from tqdm.auto import tqdm
import os

from .plotting import draw_ribbon_mesh, draw_graph_primitives
from .scenarios import Scenario, build_scenario


class ScenarioAnimator:
    """
    Draw and export scenario animations.

    Each animation frame advances the scenario by 1/fps seconds (the
    presentation lane) and redraws ribbons, bodies and graphs.
    """

    def __init__(self, figsize: Tuple[int, int] = (10, 8), dpi: int = 100,
                 background: str = 'black'):
        """
        Initialize animator.

        Args:
            figsize: Figure size in inches (width, height)
            dpi: Resolution; graph positions are in pixels of this figure
            background: Figure background color
        """
        self.figsize = figsize
        self.dpi = dpi
        self.background = background

    @property
    def screen_size(self) -> Tuple[float, float]:
        return self.figsize[0] * self.dpi, self.figsize[1] * self.dpi

    def setup(self, scenario: Scenario):
        """
        Create the figure and persistent artists for a scenario.

        Returns:
            fig, state dictionary of artists
        """
        fig = plt.figure(figsize=self.figsize, dpi=self.dpi,
                         facecolor=self.background)

        world = fig.add_axes([0, 0, 1, 1])
        xmin, xmax, ymin, ymax = scenario.extent
        world.set_xlim(xmin, xmax)
        world.set_ylim(ymin, ymax)
        world.set_aspect('equal', adjustable='datalim')
        world.set_facecolor(self.background)
        world.axis('off')

        overlay = fig.add_axes([0, 0, 1, 1], facecolor='none')
        width, height = self.screen_size
        overlay.set_xlim(0, width)
        overlay.set_ylim(height, 0)
        overlay.axis('off')

        ribbons = [draw_ribbon_mesh(world, r.mesh) for r in scenario.ribbons]
        rods = LineCollection([], colors=[(0.65, 0.53, 0.37, 1.0)],
                              linewidths=2.0, zorder=2)
        world.add_collection(rods)
        bobs = world.scatter([], [], s=80, c=[(1.0, 0.6, 0.2, 1.0)], zorder=3)
        title = overlay.text(width / 2, 20, scenario.title, ha='center', va='top',
                             color='white', fontsize=14)
        time_text = overlay.text(width / 2, height - 20, '', ha='center',
                                 va='bottom', color='gray', fontsize=10)

        artists = {
            'world': world,
            'overlay': overlay,
            'ribbons': ribbons,
            'rods': rods,
            'bobs': bobs,
            'title': title,
            'time_text': time_text,
            'graph_artists': [],
        }
        return fig, artists

    def draw(self, scenario: Scenario, artists: dict) -> None:
        """Refresh all artists from the scenario's current state."""
        state = scenario.state

        for ribbon, collection in zip(scenario.ribbons, artists['ribbons']):
            draw_ribbon_mesh(artists['world'], ribbon.mesh, collection)

        artists['rods'].set_segments(scenario.body_lines(state))
        artists['bobs'].set_offsets(scenario.markers(state))

        for artist in artists['graph_artists']:
            artist.remove()
        artists['graph_artists'] = []
        for graph in scenario.graphs:
            artists['graph_artists'].extend(
                draw_graph_primitives(artists['overlay'], graph.primitives(),
                                      graph.params, dpi=self.dpi))

        artists['time_text'].set_text(f't = {scenario.simulator.time:.2f}s')

    def animate(self, scenario: Scenario, n_frames: int = 600,
                fps: int = 30) -> FuncAnimation:
        """
        Create an animation that runs the scenario live.

        Args:
            scenario: Scenario to play (it is advanced as frames are drawn)
            n_frames: Number of frames
            fps: Frames per second

        Returns:
            FuncAnimation object
        """
        fig, artists = self.setup(scenario)
        frame_dt = 1.0 / fps

        def update(i):
            scenario.frame(frame_dt)
            self.draw(scenario, artists)
            return []

        anim = FuncAnimation(fig, update, frames=n_frames,
                             interval=1000 / fps, blit=False, repeat=False)
        return anim

    def render_frames(self, scenario: Scenario, n_frames: int, fps: int = 30,
                      output_dir: Optional[str] = None,
                      save_every: int = 0) -> plt.Figure:
        """
        Run a scenario headless, optionally saving PNG snapshots.

        Args:
            scenario: Scenario to run
            n_frames: Number of presentation frames
            fps: Frame rate used for frame_dt
            output_dir: Where snapshots go (required when save_every > 0)
            save_every: Save every n-th frame (0 = only draw the last frame)

        Returns:
            The figure showing the final frame
        """
        fig, artists = self.setup(scenario)
        frame_dt = 1.0 / fps

        if save_every > 0:
            if output_dir is None:
                raise ValueError("output_dir is required when save_every > 0")
            os.makedirs(output_dir, exist_ok=True)

        for i in tqdm(range(n_frames), desc=scenario.name):
            scenario.frame(frame_dt)
            if save_every > 0 and (i + 1) % save_every == 0:
                self.draw(scenario, artists)
                fig.savefig(os.path.join(output_dir, f'{scenario.name}_{i + 1:05d}.png'),
                            facecolor=self.background)

        self.draw(scenario, artists)
        return fig

    def save(self, anim: FuncAnimation, path: str, fmt: str = 'gif',
             fps: int = 30) -> str:
        """
        Write an animation to disk.

        MP4 needs ffmpeg; when it is unavailable the animation is written
        as a GIF next to the requested path instead.

        Args:
            anim: FuncAnimation object
            path: Output path (the format's extension is appended if missing)
            fmt: 'gif', 'mp4', or 'html'
            fps: Frames per second

        Returns:
            Path of the written file
        """
        fmt = fmt.lower()
        if fmt not in ('gif', 'mp4', 'html'):
            raise ValueError(f"Unknown format: {fmt}")

        root, ext = os.path.splitext(path)
        if ext.lower() != f'.{fmt}':
            root = path
        filename = f'{root}.{fmt}'

        if fmt == 'html':
            with open(filename, 'w', encoding='utf-8') as f:
                f.write(anim.to_jshtml(fps=fps))
        elif fmt == 'mp4':
            try:
                writer = FFMpegWriter(fps=fps, metadata={'title': 'PhyzViz'})
                anim.save(filename, writer=writer, dpi=self.dpi)
            except (FileNotFoundError, RuntimeError) as e:
                print(f"MP4 export unavailable ({e}), writing GIF instead")
                return self.save(anim, root, 'gif', fps=fps)
        else:
            anim.save(filename, writer=PillowWriter(fps=fps), dpi=self.dpi)

        print(f"Animation saved to {filename}")
        return filename


def export_scenario(name: str, output_path: str, format: str = 'gif',
                    n_frames: int = 300, fps: int = 30, **kwargs) -> str:
    """
    Build a scenario, play it for n_frames and write the animation.

    Args:
        name: Scenario name (see sim.scenarios.SCENARIOS)
        output_path: Output file path (extension added automatically)
        format: 'gif', 'mp4', or 'html'
        n_frames: Number of frames
        fps: Frames per second
        **kwargs: Forwarded to the scenario builder

    Returns:
        Path of the written file
    """
    scenario = build_scenario(name, **kwargs)
    animator = ScenarioAnimator()
    anim = animator.animate(scenario, n_frames=n_frames, fps=fps)
    try:
        return animator.save(anim, output_path, format, fps=fps)
    finally:
        plt.close()
