"""
Lorenz attractor.

    x' = σ (y - x)
    y' = x (ρ - z) - y
    z' = x y - β z

Classic chaotic parameters: σ = 10, ρ = 28, β = 8/3
"""

import numpy as np
from .base import ODEFunction


class LorenzSystem(ODEFunction):
    """Lorenz '63 convection model, state y = [x, y, z]."""

    n_states = 3

    def __init__(self, sigma: float = 10.0, rho: float = 28.0,
                 beta: float = 8.0 / 3.0):
        self.sigma = sigma
        self.rho = rho
        self.beta = beta

    def derivative_into(self, t, y, out):
        x, yy, z = y[0], y[1], y[2]
        out[0] = self.sigma * (yy - x)
        out[1] = x * (self.rho - z) - yy
        out[2] = x * yy - self.beta * z

    def position(self, y: np.ndarray) -> np.ndarray:
        """The state itself is the point in 3-D space."""
        return np.array([float(y[0]), float(y[1]), float(y[2])])

    def equilibria(self) -> np.ndarray:
        """
        Fixed points of the flow.

        Returns:
            Array of shape (k, 3): the origin, plus C± when ρ > 1
        """
        points = [np.zeros(3)]
        if self.rho > 1.0:
            r = np.sqrt(self.beta * (self.rho - 1.0))
            points.append(np.array([r, r, self.rho - 1.0]))
            points.append(np.array([-r, -r, self.rho - 1.0]))
        return np.array(points)

    def __repr__(self) -> str:
        return f"LorenzSystem(sigma={self.sigma}, rho={self.rho}, beta={self.beta:.4f})"
