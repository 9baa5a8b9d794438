"""
Planar double pendulum with point masses.

State: y = [θ₁, ω₁, θ₂, ω₂], angles measured from the downward vertical.

Equations of motion (Lagrangian, massless rods):

    Δ = θ₁ - θ₂
    D = 2m₁ + m₂ - m₂ cos(2θ₁ - 2θ₂)

    ω₁' = [-g(2m₁ + m₂) sin θ₁ - m₂ g sin(θ₁ - 2θ₂)
           - 2 sin Δ · m₂ (ω₂² ℓ₂ + ω₁² ℓ₁ cos Δ)] / (ℓ₁ D)

    ω₂' = [2 sin Δ · (ω₁² ℓ₁ (m₁ + m₂) + g (m₁ + m₂) cos θ₁
           + ω₂² ℓ₂ m₂ cos Δ)] / (ℓ₂ D)

Reference: https://web.mit.edu/jorloff/www/chaosTalk/double-pendulum/double-pendulum-en.html
"""

import numpy as np
from typing import Tuple
from .base import ODEFunction


class DoublePendulum(ODEFunction):
    """
    Chaotic double pendulum.

    Default parameters: m₁ = m₂ = 1.0 kg, ℓ₁ = ℓ₂ = 1.0 m, g = 9.81 m/s²
    """

    n_states = 4

    def __init__(self, m1: float = 1.0, m2: float = 1.0,
                 l1: float = 1.0, l2: float = 1.0,
                 g: float = 9.81):
        """
        Initialize double pendulum.

        Args:
            m1, m2: Bob masses (kg)
            l1, l2: Rod lengths (m)
            g: Gravitational acceleration (m/s²)
        """
        if l1 <= 0 or l2 <= 0:
            raise ValueError("Rod lengths must be positive")
        self.m1 = m1
        self.m2 = m2
        self.l1 = l1
        self.l2 = l2
        self.g = g

    def derivative_into(self, t, y, out):
        theta1, omega1, theta2, omega2 = y[0], y[1], y[2], y[3]
        m1, m2, l1, l2, g = self.m1, self.m2, self.l1, self.l2, self.g

        delta = theta1 - theta2
        denom = 2.0 * m1 + m2 - m2 * np.cos(2.0 * theta1 - 2.0 * theta2)

        domega1 = (
            -g * (2.0 * m1 + m2) * np.sin(theta1)
            - m2 * g * np.sin(theta1 - 2.0 * theta2)
            - 2.0 * m2 * np.sin(delta)
            * (omega2**2 * l2 + omega1**2 * l1 * np.cos(delta))
        ) / (l1 * denom)

        domega2 = (
            2.0 * np.sin(delta)
            * (omega1**2 * l1 * (m1 + m2)
               + g * (m1 + m2) * np.cos(theta1)
               + omega2**2 * l2 * m2 * np.cos(delta))
        ) / (l2 * denom)

        out[0] = omega1
        out[1] = domega1
        out[2] = omega2
        out[3] = domega2

    def energy(self, y: np.ndarray) -> float:
        """
        Total mechanical energy T + V.

        Args:
            y: State [θ₁, ω₁, θ₂, ω₂]

        Returns:
            E: Energy (J), zero reference at the pivot height
        """
        theta1, omega1, theta2, omega2 = (float(v) for v in y[:4])
        m1, m2, l1, l2, g = self.m1, self.m2, self.l1, self.l2, self.g

        kinetic = (0.5 * (m1 + m2) * l1**2 * omega1**2
                   + 0.5 * m2 * l2**2 * omega2**2
                   + m2 * l1 * l2 * omega1 * omega2 * np.cos(theta1 - theta2))
        potential = (-(m1 + m2) * g * l1 * np.cos(theta1)
                     - m2 * g * l2 * np.cos(theta2))
        return kinetic + potential

    def energy_scale(self) -> float:
        return (self.m1 + self.m2) * self.g * (self.l1 + self.l2)

    def bob_positions(self, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute bob positions relative to the pivot.

        Args:
            y: State [θ₁, ω₁, θ₂, ω₂]

        Returns:
            p1: First bob (x, y, 0)
            p2: Second bob (x, y, 0)
        """
        theta1, theta2 = float(y[0]), float(y[2])
        p1 = np.array([self.l1 * np.sin(theta1), -self.l1 * np.cos(theta1), 0.0])
        p2 = p1 + np.array([self.l2 * np.sin(theta2), -self.l2 * np.cos(theta2), 0.0])
        return p1, p2
