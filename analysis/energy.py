"""
Energy drift diagnostics.

For conservative systems (undamped pendulums, free cart-pendulum) the
exact flow keeps the total energy constant. A fixed-step RK4 integrator
does not conserve it exactly; it shows a small drift that grows with the
step size and, in single precision, with rounding.

Drift is reported both in absolute units and relative to the system's
characteristic energy scale (e.g. m·g·L), because the initial energy
itself can be zero (a pendulum released horizontally).

Limitations:
    - A bounded result over a finite horizon is an empirical observation,
      not a long-time guarantee
    - Systems without an energy() method cannot be checked
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Sequence
from tqdm.auto import tqdm

from sim.integrator import RK4Integrator, DEFAULT_DTYPE


@dataclass
class EnergyDriftResult:
    """Result of an energy drift measurement."""
    is_bounded: bool
    max_abs_drift: float   # max |E(t) - E(0)|
    max_rel_drift: float   # max_abs_drift / energy scale
    final_drift: float     # E(T) - E(0)
    n_steps: int
    energies: np.ndarray
    details: Dict[str, Any]


def measure_energy_drift(system, y0: Sequence[float], dt: float, n_steps: int,
                         tolerance: float = 1e-3,
                         dtype=DEFAULT_DTYPE) -> EnergyDriftResult:
    """
    Integrate a conservative system and measure how far its energy wanders.

    Args:
        system: ODEFunction with energy(y) and energy_scale()
        y0: Initial state
        dt: Step size
        n_steps: Number of RK4 steps
        tolerance: Largest relative drift still counted as bounded
        dtype: Working precision of the integrator

    Returns:
        EnergyDriftResult
    """
    if not hasattr(system, 'energy'):
        raise ValueError(f"{system!r} does not define energy()")

    integrator = RK4Integrator(system, y0, dtype=dtype)
    states = integrator.integrate(0.0, dt, y0, n_steps)

    energies = np.array([system.energy(s) for s in states])
    drift = energies - energies[0]
    scale = system.energy_scale()

    max_abs = float(np.max(np.abs(drift)))
    max_rel = max_abs / scale
    is_bounded = bool(np.all(np.isfinite(drift)) and max_rel <= tolerance)

    return EnergyDriftResult(
        is_bounded=is_bounded,
        max_abs_drift=max_abs,
        max_rel_drift=max_rel,
        final_drift=float(drift[-1]),
        n_steps=n_steps,
        energies=energies,
        details={
            'time': np.arange(n_steps + 1) * dt,
            'drift': drift,
            'energy_scale': scale,
            'dt': dt,
            'dtype': np.dtype(dtype).name,
            'tolerance': tolerance
        }
    )


def drift_vs_step_size(system, y0: Sequence[float], dts: Sequence[float],
                       duration: float, dtype=DEFAULT_DTYPE,
                       progress: bool = True) -> Dict[float, EnergyDriftResult]:
    """
    Measure energy drift over the same duration for several step sizes.

    Args:
        system: Conservative ODEFunction
        y0: Initial state
        dts: Step sizes to try
        duration: Simulated time per run
        dtype: Working precision
        progress: Show a tqdm progress bar

    Returns:
        Mapping dt -> EnergyDriftResult
    """
    results = {}
    for dt in tqdm(dts, desc="Step sizes", disable=not progress):
        n_steps = int(round(duration / dt))
        results[dt] = measure_energy_drift(system, y0, dt, n_steps, dtype=dtype)
    return results
