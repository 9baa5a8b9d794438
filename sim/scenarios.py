"""
Ready-made demo scenarios.

A Scenario couples one Simulator with the ribbons and graphs it feeds.
The fixed lane integrates; once per frame the presentation lane pushes the
latest bob position into each ribbon and derived scalars (energy, angle,
position) into each graph.

World coordinates handed to ribbons and renderers are physical positions
multiplied by the scenario's render scale.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Tuple

from systems import SimplePendulum, DoublePendulum, LorenzSystem, PendulumCart
from .simulator import Simulator, DriverConfig
from .trail import MeshRibbon, RibbonParams, Interpolation
from .graph import GraphSeries, GraphParams, GridlineConfig


@dataclass
class Scenario:
    """
    One simulated system with its presentation widgets.

    Attributes:
        name: Registry key
        title: Display title
        simulator: Driver owning the state
        ribbons: Trails fed every frame
        graphs: Live graphs fed every frame
        extent: World bounds (xmin, xmax, ymin, ymax) for rendering
        body_lines: state -> list of (k, 2) polylines (rods, track)
        markers: state -> (m, 2) array of body centers (pivots, bobs)
    """
    name: str
    title: str
    simulator: Simulator
    ribbons: List[MeshRibbon] = field(default_factory=list)
    graphs: List[GraphSeries] = field(default_factory=list)
    extent: Tuple[float, float, float, float] = (-200.0, 200.0, -200.0, 200.0)
    body_lines: Callable[[np.ndarray], List[np.ndarray]] = lambda state: []
    markers: Callable[[np.ndarray], np.ndarray] = lambda state: np.zeros((0, 2))

    def frame(self, frame_dt: float) -> int:
        """Advance one presentation frame; returns the fixed ticks run."""
        return self.simulator.advance(frame_dt)

    @property
    def state(self) -> np.ndarray:
        return self.simulator.state


def pendulum_scenario(theta0: float = 3.14, omega0: float = 0.0,
                      length: float = 2.0, gravity: float = 9.81,
                      render_scale: float = 80.0) -> Scenario:
    """Simple pendulum released almost upside down, with energy and angle graphs."""
    system = SimplePendulum(length=length, gravity=gravity)
    sim = Simulator(system, [theta0, omega0], DriverConfig(fixed_dt=1.0 / 120.0))

    ribbon = MeshRibbon(RibbonParams(width=6.0, max_points=300,
                                     color=(1.0, 0.6, 0.2)), name="bob_ribbon")
    energy_graph = GraphSeries(GraphParams(
        position=(40.0, 60.0), size=(250.0, 150.0), max_points=600,
        label="Energy", x_gridlines=GridlineConfig.fixed(2.0),
        y_gridlines=GridlineConfig.dynamic(1.0, 4)))
    angle_graph = GraphSeries(GraphParams(
        position=(710.0, 60.0), size=(250.0, 150.0), max_points=600,
        label="Angle (deg)", x_gridlines=GridlineConfig.fixed(2.0),
        y_gridlines=GridlineConfig.dynamic(20.0, 4), expansion_threshold=0.15))

    def present(elapsed, state):
        ribbon.update(system.bob_position(state) * render_scale, elapsed)
        energy_graph.add_point(elapsed, system.energy(state))
        angle_graph.add_point(elapsed, np.degrees(state[0]))

    sim.add_presentation_hook(present)

    def body_lines(state):
        bob = system.bob_position(state)[:2] * render_scale
        return [np.array([[0.0, 0.0], bob])]

    def markers(state):
        return np.array([[0.0, 0.0], system.bob_position(state)[:2] * render_scale])

    r = 1.25 * length * render_scale
    return Scenario(name="pendulum", title="Simple Pendulum", simulator=sim,
                    ribbons=[ribbon], graphs=[energy_graph, angle_graph],
                    extent=(-r, r, -r, r), body_lines=body_lines, markers=markers)


def double_pendulum_scenario(theta1: float = 2.899002795870406,
                             theta2: float = 1.913720799888307,
                             render_scale: float = 80.0) -> Scenario:
    """Chaotic double pendulum with a ribbon behind each bob, at half speed."""
    system = DoublePendulum()
    sim = Simulator(system, [theta1, 0.0, theta2, 0.0],
                    DriverConfig(fixed_dt=1.0 / 120.0, time_scale=0.5))

    ribbon_params = RibbonParams(width=3.0, max_points=1000, color=(1.0, 0.87, 1.0))
    ribbon1 = MeshRibbon(ribbon_params, name="bob1_ribbon")
    ribbon2 = MeshRibbon(ribbon_params, name="bob2_ribbon")
    energy_graph = GraphSeries(GraphParams(
        position=(40.0, 60.0), size=(250.0, 150.0), max_points=600,
        label="Energy", x_gridlines=GridlineConfig.fixed(4.0),
        y_gridlines=GridlineConfig.dynamic(0.5, 4)))

    def present(elapsed, state):
        p1, p2 = system.bob_positions(state)
        ribbon1.update(p1 * render_scale, elapsed)
        ribbon2.update(p2 * render_scale, elapsed)
        energy_graph.add_point(elapsed, system.energy(state))

    sim.add_presentation_hook(present)

    def body_lines(state):
        p1, p2 = system.bob_positions(state)
        return [np.array([[0.0, 0.0], p1[:2], p2[:2]]) * render_scale]

    def markers(state):
        p1, p2 = system.bob_positions(state)
        return np.array([[0.0, 0.0], p1[:2], p2[:2]]) * render_scale

    r = 1.15 * (system.l1 + system.l2) * render_scale
    return Scenario(name="double_pendulum", title="Double Pendulum", simulator=sim,
                    ribbons=[ribbon1, ribbon2], graphs=[energy_graph],
                    extent=(-r, r, -r, r), body_lines=body_lines, markers=markers)


def lorenz_scenario(start: Tuple[float, float, float] = (10.0, 10.0, 10.0),
                    render_scale: float = 10.0) -> Scenario:
    """Lorenz attractor traced by a long ribbon, at quarter speed."""
    system = LorenzSystem()
    sim = Simulator(system, list(start),
                    DriverConfig(fixed_dt=1.0 / 120.0, time_scale=0.25))

    ribbon = MeshRibbon(RibbonParams(
        width=5.0, max_points=20000, color=(0.6, 0.47, 1.0),
        width_profile=Interpolation.poly(0.2),
        alpha_profile=Interpolation.poly(0.2)), name="lorenz_ribbon")
    z_graph = GraphSeries(GraphParams(
        position=(40.0, 60.0), size=(250.0, 150.0), max_points=600,
        label="z", x_gridlines=GridlineConfig.fixed(1.0),
        y_gridlines=GridlineConfig.dynamic(10.0, 4)))

    def present(elapsed, state):
        ribbon.update(system.position(state) * render_scale, elapsed)
        z_graph.add_point(elapsed, state[2])

    sim.add_presentation_hook(present)

    def markers(state):
        return np.array([system.position(state)[:2] * render_scale])

    return Scenario(name="lorenz", title="Lorenz Attractor", simulator=sim,
                    ribbons=[ribbon], graphs=[z_graph],
                    extent=(-25.0 * render_scale, 25.0 * render_scale,
                            -30.0 * render_scale, 30.0 * render_scale),
                    markers=markers)


def pendulum_cart_scenario(phi0: float = 11.0 * np.pi / 12.0,
                           render_scale: float = 60.0) -> Scenario:
    """
    Pendulum on a free cart, integrated at 480 Hz (4 substeps per 120 Hz tick).

    Graphs show the cart position and the pendulum angle.
    """
    system = PendulumCart()
    sim = Simulator(system, [0.0, 0.0, phi0, 0.0],
                    DriverConfig(fixed_dt=1.0 / 120.0, substeps=4))

    ribbon = MeshRibbon(RibbonParams(width=10.0, max_points=200,
                                     color=(0.2, 0.68, 1.0)), name="pendulum_trail")
    cart_graph = GraphSeries(GraphParams(
        position=(40.0, 60.0), size=(250.0, 150.0), max_points=600,
        line_color=(0.2, 0.6, 1.0, 1.0), label="Cart X-Position",
        x_gridlines=GridlineConfig.fixed(4.0),
        y_gridlines=GridlineConfig.dynamic(20.0, 4), font_size=14.0))
    angle_graph = GraphSeries(GraphParams(
        position=(710.0, 60.0), size=(250.0, 150.0), max_points=600,
        grid_color=(0.5, 0.5, 0.5, 0.3), label="Pendulum Angle",
        x_gridlines=GridlineConfig.fixed(4.0),
        y_gridlines=GridlineConfig.dynamic(20.0, 4),
        expansion_threshold=0.15, font_size=14.0))

    def present(elapsed, state):
        ribbon.update(system.bob_position(state) * render_scale, elapsed)
        cart_graph.add_point(elapsed, system.cart_position(state)[0] * render_scale)
        angle_graph.add_point(elapsed, np.degrees(system.pendulum_angle(state)))

    sim.add_presentation_hook(present)

    def body_lines(state):
        cart = system.cart_position(state)[:2] * render_scale
        bob = system.bob_position(state)[:2] * render_scale
        track = np.array([[-1e4, 0.0], [1e4, 0.0]])
        return [track, np.array([cart, bob])]

    def markers(state):
        return np.array([system.cart_position(state)[:2],
                         system.bob_position(state)[:2]]) * render_scale

    r = 2.0 * system.length * render_scale
    return Scenario(name="pendulum_cart", title="Pendulum on a Cart", simulator=sim,
                    ribbons=[ribbon], graphs=[cart_graph, angle_graph],
                    extent=(-r, r, -r, r), body_lines=body_lines, markers=markers)


SCENARIOS: Dict[str, Callable[..., Scenario]] = {
    'pendulum': pendulum_scenario,
    'double_pendulum': double_pendulum_scenario,
    'lorenz': lorenz_scenario,
    'pendulum_cart': pendulum_cart_scenario,
}


def build_scenario(name: str, **kwargs) -> Scenario:
    """
    Build a registered scenario.

    Args:
        name: Key in SCENARIOS
        **kwargs: Forwarded to the builder

    Raises:
        ValueError: For an unknown name
    """
    if name not in SCENARIOS:
        raise ValueError(f"Unknown scenario: {name} (choose from {sorted(SCENARIOS)})")
    return SCENARIOS[name](**kwargs)
