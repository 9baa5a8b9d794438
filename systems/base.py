"""
Base interface for continuous-time dynamical systems.

Every system exposes a single capability: given time and state, produce
the state derivative

    dy/dt = f(t, y)

with a fixed state dimension (arity) for the lifetime of a run.
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Callable


class ODEFunction(ABC):
    """
    Derivative evaluator for a continuous-time dynamical system.

    Subclasses implement derivative_into(), which writes the derivative
    into a caller-owned buffer. The allocating derivative() delegates to
    it, so both integration paths run exactly the same arithmetic.

    Attributes:
        n_states: Dimension of the state vector
    """

    n_states: int = 0

    @abstractmethod
    def derivative_into(self, t: float, y: np.ndarray, out: np.ndarray) -> None:
        """
        Evaluate f(t, y) into out.

        Args:
            t: Current time (seconds)
            y: Current state vector
            out: Buffer of the same length as y, overwritten
        """
        pass

    def derivative(self, t: float, y: np.ndarray) -> np.ndarray:
        """
        Evaluate f(t, y) into a new array.

        Args:
            t: Current time (seconds)
            y: Current state vector

        Returns:
            dydt: State derivative (same dtype as y)
        """
        out = np.empty_like(y)
        self.derivative_into(t, y, out)
        return out

    def __call__(self, t: float, y: np.ndarray) -> np.ndarray:
        return self.derivative(t, y)

    def energy_scale(self) -> float:
        """Characteristic energy used to normalize drift (1.0 if unknown)."""
        return 1.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n_states={self.n_states})"


class FunctionODE(ODEFunction):
    """
    Wrap a plain closure f(t, y) -> dy/dt as an ODEFunction.

    Example:
        >>> decay = FunctionODE(lambda t, y: -y, n_states=1)
    """

    def __init__(self, func: Callable[[float, np.ndarray], np.ndarray],
                 n_states: int, name: str = "FunctionODE"):
        if n_states <= 0:
            raise ValueError("n_states must be positive")
        self.func = func
        self.n_states = n_states
        self.name = name

    def derivative_into(self, t: float, y: np.ndarray, out: np.ndarray) -> None:
        out[:] = self.func(t, y)

    def __repr__(self) -> str:
        return f"FunctionODE(name={self.name!r}, n_states={self.n_states})"


def check_arity(func: ODEFunction, y: np.ndarray) -> None:
    """
    Check that a state vector matches the system dimension.

    Args:
        func: Dynamical system
        y: State vector

    Raises:
        ValueError: If len(y) differs from func.n_states
    """
    if np.ndim(y) != 1 or len(y) != func.n_states:
        raise ValueError(
            f"State of shape {np.shape(y)} does not match {func!r} "
            f"(expected {func.n_states} states)"
        )
