#!/usr/bin/env python3
"""
Lorenz attractor demo.

    x' = σ (y - x),  y' = x (ρ - z) - y,  z' = x y - β z
    σ = 10, ρ = 28, β = 8/3, start (10, 10, 10)

Runs the attractor at quarter speed behind a long ribbon, compares the
single-precision RK4 trajectory against the scipy reference, and plots
the attractor.

Pass --gif to also export an animation.
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import os
import sys

# Ensure project root is in path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from systems import LorenzSystem
from sim.simulator import Simulator, DriverConfig
from sim.scenarios import build_scenario
from sim.animation import ScenarioAnimator, export_scenario
from sim.plotting import plot_trajectory_3d, plot_ribbon_mesh, save_figure
from analysis.convergence import compare_with_reference


def ensure_dirs():
    """Create output directories."""
    os.makedirs('report/figures', exist_ok=True)


def main():
    """Run the Lorenz demo."""
    print("="*60)
    print("DEMO: Lorenz Attractor")
    print("="*60)

    ensure_dirs()

    lorenz = LorenzSystem()
    y0 = [10.0, 10.0, 10.0]
    print(f"\nSystem: {lorenz!r}")
    print(f"  Equilibria:\n{lorenz.equilibria()}")

    print("\n" + "="*60)
    print("(a) ACCURACY VS REFERENCE")
    print("="*60)

    dt = 1.0 / 480.0
    for duration in (0.5, 1.0, 2.0):
        n_steps = int(round(duration / dt))
        err32 = compare_with_reference(lorenz, y0, dt, n_steps)
        err64 = compare_with_reference(lorenz, y0, dt, n_steps, dtype=np.float64)
        print(f"  T = {duration:3.1f} s: max error float32 = {err32:.3e}, "
              f"float64 = {err64:.3e}")

    print("\n" + "="*60)
    print("(b) LIVE SCENARIO")
    print("="*60)

    scenario = build_scenario('lorenz')
    animator = ScenarioAnimator()
    fig = animator.render_frames(scenario, n_frames=900, fps=30)
    save_figure(fig, 'lorenz_frame')
    plt.close(fig)

    ribbon = scenario.ribbons[0]
    print(f"\n  Simulated time: {scenario.simulator.time:.2f} s")
    print(f"  {ribbon.name}: {len(ribbon)} points, {ribbon.mesh.vertex_count} vertices")

    if '--gif' in sys.argv:
        export_scenario('lorenz', 'report/figures/lorenz', format='gif',
                        n_frames=300, fps=30)

    print("\n" + "="*60)
    print("GENERATING PLOTS")
    print("="*60)

    result = Simulator(lorenz, y0, DriverConfig(fixed_dt=1.0 / 480.0)).run(40.0)
    fig = plt.figure(figsize=(8, 8))
    ax = fig.add_subplot(projection='3d')
    plot_trajectory_3d(result, ax=ax, title='Lorenz Attractor (RK4, float32)')
    save_figure(fig, 'lorenz_attractor')
    plt.close(fig)
    print("  Saved: lorenz_attractor.png")

    fig, ax = plt.subplots(figsize=(8, 8))
    plot_ribbon_mesh(ribbon.mesh, ax=ax, title='Lorenz Ribbon (x-y projection)')
    save_figure(fig, 'lorenz_ribbon')
    plt.close(fig)
    print("  Saved: lorenz_ribbon.png")

    print("\n" + "="*60)
    print("LORENZ DEMO COMPLETE")
    print("="*60)

    return not result.compute_metrics()['has_non_finite']


if __name__ == '__main__':
    success = main()
    sys.exit(0 if success else 1)
