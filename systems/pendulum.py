"""
Simple (single) pendulum.

    θ' = ω
    ω' = -(g / L) sin θ

State: y = [θ, ω], with θ measured from the downward vertical.
Default parameters: L = 2.0 m, g = 9.81 m/s², m = 1.0 kg
"""

import numpy as np
from .base import ODEFunction


class SimplePendulum(ODEFunction):
    """
    Frictionless point-mass pendulum on a massless rod.

    The undamped dynamics conserve mechanical energy exactly; a numerical
    integrator shows small bounded drift instead, which makes this the
    standard sanity check for the RK4 stepper.
    """

    n_states = 2

    def __init__(self, length: float = 2.0, gravity: float = 9.81,
                 mass: float = 1.0):
        """
        Initialize pendulum.

        Args:
            length: Rod length (m)
            gravity: Gravitational acceleration (m/s²)
            mass: Bob mass (kg), only used for energy
        """
        if length <= 0:
            raise ValueError("Pendulum length must be positive")
        self.length = length
        self.gravity = gravity
        self.mass = mass

    def derivative_into(self, t, y, out):
        theta = y[0]
        omega = y[1]
        out[0] = omega
        out[1] = -(self.gravity / self.length) * np.sin(theta)

    def energy(self, y: np.ndarray) -> float:
        """
        Total mechanical energy E = ½ m L² ω² - m g L cos θ.

        Args:
            y: State [θ, ω]

        Returns:
            E: Energy (J), zero reference at the pivot height
        """
        theta, omega = float(y[0]), float(y[1])
        kinetic = 0.5 * self.mass * self.length**2 * omega**2
        potential = -self.mass * self.gravity * self.length * np.cos(theta)
        return kinetic + potential

    def energy_scale(self) -> float:
        return self.mass * self.gravity * self.length

    def bob_position(self, y: np.ndarray) -> np.ndarray:
        """Bob position (x, y, 0) relative to the pivot."""
        theta = float(y[0])
        return np.array([self.length * np.sin(theta),
                         -self.length * np.cos(theta),
                         0.0])

    def __repr__(self) -> str:
        return f"SimplePendulum(length={self.length}, gravity={self.gravity})"
