#!/usr/bin/env python3
"""
Simple pendulum demo.

Runs:
(a) Energy drift check at θ0 = π/2 (1000 steps at 120 Hz)
(b) Convergence study of the RK4 integrator
(c) Live scenario with ribbon trail and energy/angle graphs

Pendulum:
    θ'' = -(g / L) sin θ,   L = 2 m, g = 9.81 m/s²

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

from systems import SimplePendulum
from sim.simulator import Simulator, DriverConfig
from sim.scenarios import build_scenario
from sim.animation import ScenarioAnimator, export_scenario
from sim.plotting import (plot_energy_drift, plot_convergence,
                          plot_graph_series, plot_ribbon_mesh, save_figure)
from analysis.energy import measure_energy_drift
from analysis.convergence import convergence_sweep


def ensure_dirs():
    """Create output directories."""
    os.makedirs('report/figures', exist_ok=True)


def run_energy_test(pendulum):
    """Energy drift at θ0 = π/2."""
    print("\n" + "="*60)
    print("(a) ENERGY DRIFT")
    print("="*60)

    y0 = np.array([np.pi / 2, 0.0])
    sim = Simulator(pendulum, y0, DriverConfig(fixed_dt=1.0 / 120.0))
    result = sim.run(1000.0 / 120.0)
    metrics = result.compute_metrics()

    print(f"\nRun:")
    print(f"  Samples: {metrics['n_samples']}")
    print(f"  Final time: {metrics['final_time']:.3f} s")
    print(f"  Non-finite values: {metrics['has_non_finite']}")
    print(f"\nEnergy:")
    print(f"  E(0) = {result.energies[0]:.6f} J")
    print(f"  Max |ΔE| = {metrics['max_energy_drift']:.3e} J")
    print(f"  Max |ΔE| / mgL = {metrics['max_relative_drift']:.3e}")

    drift = measure_energy_drift(pendulum, y0, dt=1.0 / 120.0, n_steps=1000,
                                 dtype=np.float64)
    print(f"  Same run in float64: max |ΔE| / mgL = {drift.max_rel_drift:.3e}")
    print(f"  Bounded: {drift.is_bounded}")

    return result


def run_convergence_test(pendulum):
    """Observed order of accuracy against the scipy reference."""
    print("\n" + "="*60)
    print("(b) CONVERGENCE")
    print("="*60)

    dts = [0.1, 0.05, 0.025, 0.0125]
    study = convergence_sweep(pendulum, [1.0, 0.0], 2.0, dts, progress=True)

    print(f"\n  {'dt':>8}  {'error':>12}")
    for dt, err in zip(study.dts, study.errors):
        print(f"  {dt:8.4f}  {err:12.3e}")
    print(f"\n  Observed order: {study.order:.2f} (expected 4)")

    return study


def run_live_scenario(export_gif=False):
    """Drive the scenario for 10 s of frames and plot its widgets."""
    print("\n" + "="*60)
    print("(c) LIVE SCENARIO")
    print("="*60)

    scenario = build_scenario('pendulum')
    animator = ScenarioAnimator()
    fig = animator.render_frames(scenario, n_frames=300, fps=30)
    save_figure(fig, 'pendulum_frame')
    plt.close(fig)

    print(f"\n  Ticks: {scenario.simulator.tick_count}")
    for ribbon in scenario.ribbons:
        print(f"  {ribbon.name}: {len(ribbon)} points, {ribbon.mesh.vertex_count} vertices")
    for graph in scenario.graphs:
        print(f"  {graph}")

    if export_gif:
        export_scenario('pendulum', 'report/figures/pendulum', format='gif',
                        n_frames=300, fps=30)

    return scenario


def generate_plots(result, study, scenario):
    """Generate static figures."""
    print("\n" + "="*60)
    print("GENERATING PLOTS")
    print("="*60)

    fig, ax = plt.subplots(figsize=(10, 4))
    plot_energy_drift(result, ax=ax, title='Pendulum Energy Drift (float32, 120 Hz)')
    save_figure(fig, 'pendulum_energy_drift')
    plt.close(fig)
    print("  Saved: pendulum_energy_drift.png")

    fig, ax = plt.subplots(figsize=(6, 5))
    plot_convergence(study.dts, study.errors, order=study.order, ax=ax)
    save_figure(fig, 'pendulum_convergence')
    plt.close(fig)
    print("  Saved: pendulum_convergence.png")

    fig, axes = plt.subplots(1, 2, figsize=(12, 4))
    for ax, graph in zip(axes, scenario.graphs):
        plot_graph_series(graph, ax=ax)
    save_figure(fig, 'pendulum_graphs')
    plt.close(fig)
    print("  Saved: pendulum_graphs.png")

    fig, ax = plt.subplots(figsize=(8, 8))
    plot_ribbon_mesh(scenario.ribbons[0].mesh, ax=ax, title='Pendulum Ribbon')
    save_figure(fig, 'pendulum_ribbon')
    plt.close(fig)
    print("  Saved: pendulum_ribbon.png")


def main():
    """Run the pendulum demo."""
    print("="*60)
    print("DEMO: Simple Pendulum")
    print("="*60)

    ensure_dirs()

    pendulum = SimplePendulum(length=2.0, gravity=9.81)
    print(f"\nSystem: {pendulum}")
    print(f"  Energy scale mgL = {pendulum.energy_scale():.3f} J")

    result = run_energy_test(pendulum)
    study = run_convergence_test(pendulum)
    scenario = run_live_scenario(export_gif='--gif' in sys.argv)

    generate_plots(result, study, scenario)

    print("\n" + "="*60)
    print("PENDULUM DEMO COMPLETE")
    print("="*60)
    print("\nOutputs:")
    print("  - report/figures/pendulum_*.png")

    return not result.compute_metrics()['has_non_finite']


if __name__ == '__main__':
    success = main()
    sys.exit(0 if success else 1)
