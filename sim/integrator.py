"""
Fixed-step fourth-order Runge-Kutta integrator.

One step of size dt evaluates the system at four stages:

    k1 = f(t,        y)
    k2 = f(t + dt/2, y + dt/2 · k1)
    k3 = f(t + dt/2, y + dt/2 · k2)
    k4 = f(t + dt,   y + dt · k3)

    y(t + dt) = y + dt/6 · (k1 + 2 k2 + 2 k3 + k4)

Two equivalent forms are provided:
- rk4(): allocating, returns a new array
- rk4_into(): writes into a preallocated RK4Workspace (hot path)

Both perform the same floating-point operations in the same order, so for
identical inputs they agree bit-for-bit. Arithmetic is single precision
unless another dtype is requested.

There is no step-size control, no error estimate and no NaN/Inf guarding:
choosing a stable dt (and any sub-stepping) is the caller's job.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from systems.base import ODEFunction, check_arity


DEFAULT_DTYPE = np.float32


def _stage_constants(dt: float, dtype: np.dtype):
    """dt, dt/2, dt/6 and 2 as scalars of the working dtype."""
    scalar = np.dtype(dtype).type
    h = scalar(dt)
    return h, h / scalar(2), h / scalar(6), scalar(2)


def rk4(func: ODEFunction, t: float, y: np.ndarray, dt: float) -> np.ndarray:
    """
    Advance y by one RK4 step (allocating form).

    Args:
        func: Dynamical system f(t, y)
        t: Current time (seconds)
        y: Current state (non-float input is cast to float32)
        dt: Step size (seconds)

    Returns:
        y_next: New state array, same dtype as y
    """
    y = np.asarray(y)
    if y.dtype.kind != 'f':
        y = y.astype(DEFAULT_DTYPE)

    h, half, sixth, two = _stage_constants(dt, y.dtype)

    k1 = func.derivative(t, y)
    k2 = func.derivative(t + 0.5 * dt, y + k1 * half)
    k3 = func.derivative(t + 0.5 * dt, y + k2 * half)
    k4 = func.derivative(t + dt, y + k3 * h)

    return y + (k1 + k2 * two + k3 * two + k4) * sixth


@dataclass
class RK4Workspace:
    """
    Scratch buffers for one RK4 integrator.

    The caller writes the current state into `y`, calls rk4_into(), and
    reads the result from `out`. Buffers are reused every step.

    Attributes:
        y: Input state
        k1, k2, k3, k4: Stage derivatives
        tmp: Intermediate stage state
        out: Output state
    """
    y: np.ndarray
    k1: np.ndarray
    k2: np.ndarray
    k3: np.ndarray
    k4: np.ndarray
    tmp: np.ndarray
    out: np.ndarray

    @classmethod
    def allocate(cls, n_states: int, dtype=DEFAULT_DTYPE) -> 'RK4Workspace':
        """Allocate zeroed buffers of length n_states."""
        if n_states <= 0:
            raise ValueError("n_states must be positive")
        return cls(*(np.zeros(n_states, dtype=dtype) for _ in range(7)))

    @classmethod
    def for_state(cls, y0: np.ndarray, dtype=DEFAULT_DTYPE) -> 'RK4Workspace':
        """Allocate buffers sized to y0 and load y0 as the input state."""
        y0 = np.asarray(y0, dtype=dtype)
        ws = cls.allocate(len(y0), dtype)
        ws.y[:] = y0
        return ws

    @property
    def n_states(self) -> int:
        return len(self.y)

    @property
    def dtype(self) -> np.dtype:
        return self.y.dtype


def rk4_into(func: ODEFunction, t: float, dt: float,
             ws: RK4Workspace) -> np.ndarray:
    """
    Advance ws.y by one RK4 step, writing the result into ws.out.

    No state-sized arrays are allocated.

    Args:
        func: Dynamical system f(t, y)
        t: Current time (seconds)
        dt: Step size (seconds)
        ws: Workspace holding the input state in ws.y

    Returns:
        ws.out (the same buffer, returned for convenience)
    """
    h, half, sixth, two = _stage_constants(dt, ws.dtype)
    y, tmp, out = ws.y, ws.tmp, ws.out

    func.derivative_into(t, y, ws.k1)

    np.multiply(ws.k1, half, out=tmp)
    np.add(y, tmp, out=tmp)
    func.derivative_into(t + 0.5 * dt, tmp, ws.k2)

    np.multiply(ws.k2, half, out=tmp)
    np.add(y, tmp, out=tmp)
    func.derivative_into(t + 0.5 * dt, tmp, ws.k3)

    np.multiply(ws.k3, h, out=tmp)
    np.add(y, tmp, out=tmp)
    func.derivative_into(t + dt, tmp, ws.k4)

    # ((k1 + 2 k2) + 2 k3) + k4, same association as rk4()
    np.multiply(ws.k2, two, out=out)
    np.add(ws.k1, out, out=out)
    np.multiply(ws.k3, two, out=tmp)
    np.add(out, tmp, out=out)
    np.add(out, ws.k4, out=out)
    np.multiply(out, sixth, out=out)
    np.add(y, out, out=out)

    return out


class RK4Integrator:
    """
    RK4 stepper bound to one dynamical system and one workspace.

    The state dimension is checked once here; the stepping methods do not
    re-check it.

    Example:
        >>> pendulum = SimplePendulum()
        >>> integ = RK4Integrator(pendulum, [np.pi / 2, 0.0])
        >>> y1 = integ.step(0.0, 1 / 120, [np.pi / 2, 0.0])
    """

    def __init__(self, func: ODEFunction, y0: np.ndarray,
                 dtype=DEFAULT_DTYPE):
        """
        Initialize integrator.

        Args:
            func: Dynamical system
            y0: Initial state (sets the workspace size)
            dtype: Working precision (float32 by default)

        Raises:
            ValueError: If len(y0) does not match func.n_states
        """
        y0 = np.asarray(y0, dtype=dtype)
        check_arity(func, y0)

        self.func = func
        self.dtype = np.dtype(dtype)
        self.workspace = RK4Workspace.for_state(y0, dtype)

    @staticmethod
    def _check_dt(dt: float) -> None:
        if not dt > 0:
            raise ValueError(f"Step size must be positive, got dt={dt}")

    def load_state(self, y: np.ndarray) -> None:
        """
        Copy a state into the workspace input buffer.

        Raises:
            ValueError: If y does not match the system dimension
        """
        y = np.asarray(y, dtype=self.dtype)
        check_arity(self.func, y)
        self.workspace.y[:] = y

    def step(self, t: float, dt: float, y: np.ndarray) -> np.ndarray:
        """
        One allocating RK4 step.

        Args:
            t: Current time
            dt: Step size (> 0)
            y: Current state

        Returns:
            y_next: New state array
        """
        self._check_dt(dt)
        return rk4(self.func, t, np.asarray(y, dtype=self.dtype), dt)

    def step_in_place(self, t: float, dt: float,
                      y: Optional[np.ndarray] = None) -> np.ndarray:
        """
        One preallocated RK4 step.

        Args:
            t: Current time
            dt: Step size (> 0)
            y: State to load into the workspace first (default: keep
               whatever ws.y holds)

        Returns:
            The workspace output buffer. It is overwritten by the next
            step, so copy it if it has to be kept.
        """
        self._check_dt(dt)
        if y is not None:
            self.load_state(y)
        return rk4_into(self.func, t, dt, self.workspace)

    def integrate(self, t0: float, dt: float, y0: np.ndarray,
                  n_steps: int) -> np.ndarray:
        """
        Run n_steps fixed steps from y0.

        Args:
            t0: Initial time
            dt: Step size (> 0)
            y0: Initial state
            n_steps: Number of steps

        Returns:
            states: Array of shape (n_steps + 1, n_states), states[0] = y0
        """
        self._check_dt(dt)
        self.load_state(y0)
        ws = self.workspace
        states = np.empty((n_steps + 1, ws.n_states), dtype=self.dtype)
        states[0] = ws.y

        for k in range(n_steps):
            rk4_into(self.func, t0 + k * dt, dt, ws)
            ws.y[:] = ws.out
            states[k + 1] = ws.y

        return states

    def __repr__(self) -> str:
        return f"RK4Integrator(func={self.func!r}, dtype={self.dtype.name})"
