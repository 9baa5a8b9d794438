"""
Unit tests for the dynamical systems.

Tests verify:
1. Derivatives at known states
2. Energy and geometry helpers
3. Conservation laws along short float64 runs
"""

import numpy as np
import pytest
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from systems import (ODEFunction, FunctionODE, SimplePendulum, DoublePendulum,
                     LorenzSystem, PendulumCart)
from sim.integrator import RK4Integrator


class TestODEFunction:
    """Tests for the shared interface."""

    def test_derivative_delegates(self):
        """derivative() and derivative_into() produce the same values."""
        pendulum = SimplePendulum()
        y = np.array([0.3, -0.2])
        out = np.empty(2)
        pendulum.derivative_into(0.0, y, out)

        np.testing.assert_array_equal(pendulum.derivative(0.0, y), out)
        np.testing.assert_array_equal(pendulum(0.0, y), out)

    def test_derivative_keeps_dtype(self):
        """Single-precision input gives single-precision output."""
        dydt = LorenzSystem().derivative(0.0, np.ones(3, dtype=np.float32))

        assert dydt.dtype == np.float32

    def test_function_ode(self):
        """A closure can be wrapped as a system."""
        growth = FunctionODE(lambda t, y: 2.0 * y, n_states=2, name="growth")

        assert isinstance(growth, ODEFunction)
        np.testing.assert_array_almost_equal(
            growth.derivative(0.0, np.array([1.0, -1.0])), [2.0, -2.0])
        assert "growth" in repr(growth)

    def test_function_ode_invalid_arity(self):
        """n_states must be positive."""
        with pytest.raises(ValueError):
            FunctionODE(lambda t, y: y, n_states=0)

    def test_default_energy_scale(self):
        """Systems without a natural energy use 1.0."""
        assert LorenzSystem().energy_scale() == 1.0


class TestSimplePendulum:
    """Tests for the simple pendulum."""

    def test_derivative_horizontal(self):
        """At θ = π/2 the angular acceleration is -g/L."""
        dydt = SimplePendulum(length=2.0, gravity=9.81).derivative(
            0.0, np.array([np.pi / 2, 0.5]))

        np.testing.assert_array_almost_equal(dydt, [0.5, -4.905])

    def test_equilibrium(self):
        """Hanging at rest is a fixed point."""
        dydt = SimplePendulum().derivative(0.0, np.zeros(2))

        np.testing.assert_array_almost_equal(dydt, [0.0, 0.0])

    def test_energy(self):
        """E = ½ m L² ω² - m g L cos θ."""
        pendulum = SimplePendulum(length=2.0, gravity=9.81, mass=1.0)

        assert pendulum.energy([0.0, 0.0]) == pytest.approx(-19.62)
        assert pendulum.energy([np.pi / 2, 1.0]) == pytest.approx(2.0)
        assert pendulum.energy_scale() == pytest.approx(19.62)

    def test_bob_position(self):
        """Bob hangs straight down at θ = 0."""
        pendulum = SimplePendulum(length=2.0)

        np.testing.assert_array_almost_equal(pendulum.bob_position([0.0, 0.0]), [0.0, -2.0, 0.0])
        np.testing.assert_array_almost_equal(pendulum.bob_position([np.pi / 2, 0.0]), [2.0, 0.0, 0.0])

    def test_invalid_length(self):
        """Non-positive lengths raise."""
        with pytest.raises(ValueError):
            SimplePendulum(length=0.0)


class TestDoublePendulum:
    """Tests for the double pendulum."""

    def test_equilibrium(self):
        """Both rods hanging at rest is a fixed point."""
        dydt = DoublePendulum().derivative(0.0, np.zeros(4))

        np.testing.assert_array_almost_equal(dydt, np.zeros(4))

    def test_energy_at_rest(self):
        """Potential energy of the hanging configuration."""
        dp = DoublePendulum(m1=1.0, m2=1.0, l1=1.0, l2=1.0, g=9.81)

        assert dp.energy(np.zeros(4)) == pytest.approx(-29.43)

    def test_bob_positions(self):
        """Second bob is offset from the first by the second rod."""
        dp = DoublePendulum(l1=1.0, l2=1.0)
        p1, p2 = dp.bob_positions([np.pi / 2, 0.0, 0.0, 0.0])

        np.testing.assert_array_almost_equal(p1, [1.0, 0.0, 0.0])
        np.testing.assert_array_almost_equal(p2, [1.0, -1.0, 0.0])

    def test_energy_conservation(self):
        """Energy is nearly conserved over a short double-precision run."""
        dp = DoublePendulum()
        y0 = [2.899002795870406, 0.0, 1.913720799888307, 0.0]
        states = RK4Integrator(dp, y0, dtype=np.float64).integrate(0.0, 1e-3, y0, 2000)
        energies = np.array([dp.energy(s) for s in states])

        assert np.max(np.abs(energies - energies[0])) / dp.energy_scale() < 1e-5


class TestLorenzSystem:
    """Tests for the Lorenz system."""

    def test_derivative(self):
        """Right-hand side at the classic start point."""
        dydt = LorenzSystem().derivative(0.0, np.array([10.0, 10.0, 10.0]))

        np.testing.assert_array_almost_equal(dydt, [0.0, 170.0, 100.0 - 80.0 / 3.0])

    def test_equilibria_are_fixed_points(self):
        """The flow vanishes at every equilibrium."""
        lorenz = LorenzSystem()
        eq = lorenz.equilibria()

        assert eq.shape == (3, 3)
        for point in eq:
            np.testing.assert_array_almost_equal(lorenz.derivative(0.0, point), np.zeros(3))

    def test_only_origin_below_threshold(self):
        """For ρ ≤ 1 the origin is the only equilibrium."""
        assert LorenzSystem(rho=0.5).equilibria().shape == (1, 3)


class TestPendulumCart:
    """Tests for the cart-pendulum."""

    def test_equilibrium(self):
        """Hanging at rest on a still cart is a fixed point."""
        dydt = PendulumCart().derivative(0.0, np.zeros(4))

        np.testing.assert_array_almost_equal(dydt, np.zeros(4))

    def test_external_force(self):
        """A push on the still cart accelerates it and swings the bob back."""
        cart = PendulumCart(cart_mass=2.0, pendulum_mass=1.0, length=2.0,
                            force=lambda t: 3.0)
        dydt = cart.derivative(0.0, np.zeros(4))

        np.testing.assert_array_almost_equal(dydt, [0.0, 1.5, 0.0, -0.75])

    def test_conservation(self):
        """Energy and horizontal momentum are conserved without force or friction."""
        cart = PendulumCart()
        y0 = [0.0, 0.0, 11.0 * np.pi / 12.0, 0.0]
        states = RK4Integrator(cart, y0, dtype=np.float64).integrate(
            0.0, 1.0 / 480.0, y0, 960)

        energies = np.array([cart.energy(s) for s in states])
        momenta = np.array([cart.horizontal_momentum(s) for s in states])

        assert np.max(np.abs(energies - energies[0])) / cart.energy_scale() < 1e-4
        assert np.max(np.abs(momenta - momenta[0])) < 1e-4

    def test_friction_dissipates(self):
        """With friction the energy decreases."""
        cart = PendulumCart(friction=2.0)
        y0 = [0.0, 1.0, 0.5, 0.0]
        states = RK4Integrator(cart, y0, dtype=np.float64).integrate(0.0, 0.005, y0, 400)

        assert cart.energy(states[-1]) < cart.energy(states[0])

    def test_positions(self):
        """Bob hangs below the cart at φ = 0."""
        cart = PendulumCart(length=2.0)
        y = [1.5, 0.0, 0.0, 0.0]

        np.testing.assert_array_almost_equal(cart.cart_position(y), [1.5, 0.0, 0.0])
        np.testing.assert_array_almost_equal(cart.bob_position(y), [1.5, -2.0, 0.0])

    def test_angle_wrapping(self):
        """pendulum_angle() wraps into [-π, π]."""
        cart = PendulumCart()

        assert cart.pendulum_angle([0.0, 0.0, 1.5 * np.pi, 0.0]) == pytest.approx(-0.5 * np.pi)

    def test_invalid_masses(self):
        """Non-positive masses raise."""
        with pytest.raises(ValueError):
            PendulumCart(cart_mass=0.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
