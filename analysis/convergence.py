"""
Accuracy checks for the fixed-step integrator.

- reference_solution(): high-accuracy solution from scipy's DOP853
- compare_with_reference(): max error of an RK4 trajectory
- convergence_sweep(): global error for several step sizes and the
  observed order from a log-log fit (≈ 4 for RK4)

Convergence studies run in double precision by default; in single
precision rounding dominates long before the O(dt⁴) truncation error.
"""

import numpy as np
from dataclasses import dataclass
from typing import Callable, Optional, Sequence
from scipy.integrate import solve_ivp
from tqdm.auto import tqdm

from systems.base import ODEFunction
from sim.integrator import RK4Integrator, DEFAULT_DTYPE


@dataclass
class ConvergenceStudy:
    """Global errors per step size and the fitted order."""
    dts: np.ndarray
    errors: np.ndarray
    order: float


def reference_solution(func: ODEFunction, y0: Sequence[float],
                       t_eval: np.ndarray, rtol: float = 1e-10,
                       atol: float = 1e-12) -> np.ndarray:
    """
    High-accuracy reference trajectory.

    Args:
        func: Dynamical system
        y0: Initial state at t_eval[0]
        t_eval: Output times (ascending)
        rtol, atol: Tolerances for solve_ivp

    Returns:
        states: Array of shape (len(t_eval), n_states)
    """
    t_eval = np.asarray(t_eval, dtype=float)
    y0 = np.asarray(y0, dtype=float)

    sol = solve_ivp(lambda t, y: func.derivative(t, y),
                    (t_eval[0], t_eval[-1]), y0, method='DOP853',
                    t_eval=t_eval, rtol=rtol, atol=atol)
    if not sol.success:
        raise RuntimeError(f"Reference solver failed: {sol.message}")
    return sol.y.T


def compare_with_reference(func: ODEFunction, y0: Sequence[float], dt: float,
                           n_steps: int, dtype=DEFAULT_DTYPE) -> float:
    """
    Max absolute state error of an RK4 run against the reference.

    Args:
        func: Dynamical system
        y0: Initial state
        dt: Step size
        n_steps: Number of steps
        dtype: Working precision of the RK4 run

    Returns:
        max over time and components of |y_rk4 - y_ref|
    """
    states = RK4Integrator(func, y0, dtype=dtype).integrate(0.0, dt, y0, n_steps)
    t_eval = np.arange(n_steps + 1) * dt
    ref = reference_solution(func, y0, t_eval)
    return float(np.max(np.abs(states.astype(float) - ref)))


def global_error(func: ODEFunction, y0: Sequence[float], t_end: float, dt: float,
                 exact: Callable[[float], np.ndarray],
                 dtype=np.float64) -> float:
    """
    Error at t_end of an RK4 run against a known solution.

    Args:
        func: Dynamical system
        y0: Initial state
        t_end: Final time (should be a multiple of dt)
        dt: Step size
        exact: t -> exact state
        dtype: Working precision

    Returns:
        max |y_rk4(t_end) - exact(t_end)|
    """
    n_steps = int(round(t_end / dt))
    states = RK4Integrator(func, y0, dtype=dtype).integrate(0.0, dt, y0, n_steps)
    return float(np.max(np.abs(states[-1].astype(float) - exact(n_steps * dt))))


def convergence_sweep(func: ODEFunction, y0: Sequence[float], t_end: float,
                      dts: Sequence[float],
                      exact: Optional[Callable[[float], np.ndarray]] = None,
                      dtype=np.float64, progress: bool = False) -> ConvergenceStudy:
    """
    Estimate the observed order of accuracy.

    Args:
        func: Dynamical system
        y0: Initial state
        t_end: Final time
        dts: Step sizes (each should divide t_end)
        exact: Known solution t -> state (default: scipy reference)
        dtype: Working precision
        progress: Show a tqdm progress bar

    Returns:
        ConvergenceStudy with the slope of log(error) against log(dt)
    """
    if len(dts) < 2:
        raise ValueError("Need at least two step sizes")

    if exact is None:
        y_end = reference_solution(func, y0, np.array([0.0, t_end]))[-1]

        def exact(t):
            return y_end

    dts = np.asarray(dts, dtype=float)
    errors = np.array([global_error(func, y0, t_end, dt, exact, dtype=dtype)
                       for dt in tqdm(dts, desc="Convergence", disable=not progress)])

    order = float(np.polyfit(np.log(dts), np.log(errors), 1)[0])
    return ConvergenceStudy(dts=dts, errors=errors, order=order)


def estimate_convergence_order(func: ODEFunction, y0: Sequence[float], t_end: float,
                               dts: Sequence[float],
                               exact: Optional[Callable[[float], np.ndarray]] = None,
                               dtype=np.float64) -> float:
    """Observed order of accuracy (slope of the log-log error fit)."""
    return convergence_sweep(func, y0, t_end, dts, exact=exact, dtype=dtype).order
