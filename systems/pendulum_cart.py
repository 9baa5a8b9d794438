"""
Pendulum hanging from a cart that slides on a horizontal track.

State: y = [x, ẋ, φ, φ̇]
    x: Cart position (m, positive right)
    φ: Pendulum angle from the downward vertical (rad, positive right)

Let M be the cart mass, m the bob mass and ℓ the rod length. With an
external force F(t) on the cart and linear friction b:

    ẍ = [F - b ẋ + m sin φ (ℓ φ̇² + g cos φ)] / (M + m sin² φ)
    φ̈ = -(ẍ cos φ + g sin φ) / ℓ

The pivot is frictionless and the rod massless, so with F = 0 and b = 0
both the total energy and the horizontal momentum are conserved.
"""

import numpy as np
from typing import Callable, Optional
from .base import ODEFunction


class PendulumCart(ODEFunction):
    """
    Underactuated cart-pendulum.

    Default parameters: M = 2.0 kg, m = 1.0 kg, ℓ = 2.0 m, g = 9.81 m/s²
    """

    n_states = 4

    def __init__(self, cart_mass: float = 2.0, pendulum_mass: float = 1.0,
                 length: float = 2.0, gravity: float = 9.81,
                 friction: float = 0.0,
                 force: Optional[Callable[[float], float]] = None):
        """
        Initialize cart-pendulum.

        Args:
            cart_mass: Cart mass M (kg)
            pendulum_mass: Bob mass m (kg)
            length: Rod length ℓ (m)
            gravity: Gravitational acceleration (m/s²)
            friction: Cart friction coefficient b (N·s/m)
            force: Optional external force on the cart, F(t) in N
        """
        if length <= 0:
            raise ValueError("Pendulum length must be positive")
        if cart_mass <= 0 or pendulum_mass <= 0:
            raise ValueError("Masses must be positive")
        self.cart_mass = cart_mass
        self.pendulum_mass = pendulum_mass
        self.length = length
        self.gravity = gravity
        self.friction = friction
        self.force = force

    def derivative_into(self, t, y, out):
        x_dot, phi, phi_dot = y[1], y[2], y[3]
        M, m, l, g = self.cart_mass, self.pendulum_mass, self.length, self.gravity

        F = self.force(t) if self.force is not None else 0.0
        s = np.sin(phi)
        c = np.cos(phi)

        x_ddot = (F - self.friction * x_dot
                  + m * s * (l * phi_dot**2 + g * c)) / (M + m * s**2)
        phi_ddot = -(x_ddot * c + g * s) / l

        out[0] = x_dot
        out[1] = x_ddot
        out[2] = phi_dot
        out[3] = phi_ddot

    def energy(self, y: np.ndarray) -> float:
        """
        Total mechanical energy (cart track level as zero potential).

        Args:
            y: State [x, ẋ, φ, φ̇]

        Returns:
            E: Energy (J)
        """
        x_dot, phi, phi_dot = float(y[1]), float(y[2]), float(y[3])
        M, m, l, g = self.cart_mass, self.pendulum_mass, self.length, self.gravity

        kinetic = (0.5 * (M + m) * x_dot**2
                   + m * l * x_dot * phi_dot * np.cos(phi)
                   + 0.5 * m * l**2 * phi_dot**2)
        potential = -m * g * l * np.cos(phi)
        return kinetic + potential

    def energy_scale(self) -> float:
        return self.pendulum_mass * self.gravity * self.length

    def horizontal_momentum(self, y: np.ndarray) -> float:
        """p_x = (M + m) ẋ + m ℓ φ̇ cos φ"""
        x_dot, phi, phi_dot = float(y[1]), float(y[2]), float(y[3])
        return ((self.cart_mass + self.pendulum_mass) * x_dot
                + self.pendulum_mass * self.length * phi_dot * np.cos(phi))

    def cart_position(self, y: np.ndarray) -> np.ndarray:
        """Cart pivot (x, 0, 0)."""
        return np.array([float(y[0]), 0.0, 0.0])

    def bob_position(self, y: np.ndarray) -> np.ndarray:
        """Bob (x + ℓ sin φ, -ℓ cos φ, 0)."""
        x, phi = float(y[0]), float(y[2])
        return np.array([x + self.length * np.sin(phi),
                         -self.length * np.cos(phi),
                         0.0])

    def pendulum_angle(self, y: np.ndarray) -> float:
        """Angle from the downward vertical, wrapped to [-π, π]."""
        phi = float(y[2])
        return float(np.arctan2(np.sin(phi), np.cos(phi)))
