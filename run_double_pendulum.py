#!/usr/bin/env python3
"""
Double pendulum demo.

Runs the chaotic double pendulum at half speed with a ribbon behind each
bob, reports energy drift, and shows sensitivity to initial conditions.

Initial state: θ1 = 2.899, θ2 = 1.914 (rad), both at rest.

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

from systems import DoublePendulum
from sim.integrator import RK4Integrator
from sim.scenarios import build_scenario
from sim.animation import ScenarioAnimator, export_scenario
from sim.plotting import plot_energy_drift, plot_ribbon_mesh, save_figure


def ensure_dirs():
    """Create output directories."""
    os.makedirs('report/figures', exist_ok=True)


def run_sensitivity_test(system, y0, eps=1e-6, duration=10.0, dt=1.0 / 240.0):
    """Distance between two runs started eps apart."""
    print("\n" + "="*60)
    print("(a) SENSITIVITY TO INITIAL CONDITIONS")
    print("="*60)

    n_steps = int(round(duration / dt))
    y0_b = np.array(y0, dtype=float)
    y0_b[0] += eps

    a = RK4Integrator(system, y0, dtype=np.float64).integrate(0.0, dt, y0, n_steps)
    b = RK4Integrator(system, y0_b, dtype=np.float64).integrate(0.0, dt, y0_b, n_steps)
    separation = np.linalg.norm(a - b, axis=1)
    t = np.arange(n_steps + 1) * dt

    print(f"\n  Initial separation: {eps:.1e}")
    for t_check in (1.0, 5.0, 10.0):
        k = int(round(t_check / dt))
        print(f"  |Δy| at t = {t_check:4.1f} s: {separation[k]:.3e}")

    return t, separation


def run_live_scenario(export_gif=False):
    """Drive the scenario and report its widgets."""
    print("\n" + "="*60)
    print("(b) LIVE SCENARIO")
    print("="*60)

    scenario = build_scenario('double_pendulum')
    animator = ScenarioAnimator()
    fig = animator.render_frames(scenario, n_frames=600, fps=30)
    save_figure(fig, 'double_pendulum_frame')
    plt.close(fig)

    print(f"\n  Simulated time: {scenario.simulator.time:.2f} s "
          f"(time scale {scenario.simulator.config.time_scale})")
    for ribbon in scenario.ribbons:
        print(f"  {ribbon.name}: {len(ribbon)} points, {ribbon.mesh.vertex_count} vertices")

    result = scenario.simulator.run(20.0)
    metrics = result.compute_metrics()
    print(f"\n  Headless 20 s: max |ΔE| / E_scale = {metrics['max_relative_drift']:.3e}")

    if export_gif:
        export_scenario('double_pendulum', 'report/figures/double_pendulum',
                        format='gif', n_frames=300, fps=30)

    return scenario, result


def main():
    """Run the double pendulum demo."""
    print("="*60)
    print("DEMO: Double Pendulum")
    print("="*60)

    ensure_dirs()

    system = DoublePendulum()
    y0 = [2.899002795870406, 0.0, 1.913720799888307, 0.0]
    print(f"\nSystem: {system!r}")
    print(f"  Initial state: {y0}")
    print(f"  E(0) = {system.energy(y0):.4f} J")

    t, separation = run_sensitivity_test(system, y0)
    scenario, result = run_live_scenario(export_gif='--gif' in sys.argv)

    print("\n" + "="*60)
    print("GENERATING PLOTS")
    print("="*60)

    fig, ax = plt.subplots(figsize=(10, 4))
    ax.semilogy(t, separation, 'r-', linewidth=1.0)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('|Δy|')
    ax.set_title('Double Pendulum: Divergence of Nearby Trajectories')
    ax.grid(True, alpha=0.3)
    save_figure(fig, 'double_pendulum_sensitivity')
    plt.close(fig)
    print("  Saved: double_pendulum_sensitivity.png")

    fig, ax = plt.subplots(figsize=(10, 4))
    plot_energy_drift(result, ax=ax, title='Double Pendulum Energy Drift')
    save_figure(fig, 'double_pendulum_energy_drift')
    plt.close(fig)
    print("  Saved: double_pendulum_energy_drift.png")

    fig, ax = plt.subplots(figsize=(8, 8))
    for ribbon in scenario.ribbons:
        plot_ribbon_mesh(ribbon.mesh, ax=ax)
    ax.set_title('Double Pendulum Ribbons')
    save_figure(fig, 'double_pendulum_ribbons')
    plt.close(fig)
    print("  Saved: double_pendulum_ribbons.png")

    print("\n" + "="*60)
    print("DOUBLE PENDULUM DEMO COMPLETE")
    print("="*60)

    return not result.compute_metrics()['has_non_finite']


if __name__ == '__main__':
    success = main()
    sys.exit(0 if success else 1)
