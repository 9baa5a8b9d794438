"""
Unit tests for the RK4 integrator.

Tests verify:
1. Accuracy on problems with known solutions
2. Bit-identical allocating and preallocated forms
3. Determinism
4. Precondition checks (arity, step size)
"""

import numpy as np
import pytest
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from systems import FunctionODE, SimplePendulum, DoublePendulum, LorenzSystem, PendulumCart
from sim.integrator import rk4, rk4_into, RK4Workspace, RK4Integrator


def exponential_decay():
    return FunctionODE(lambda t, y: -y, n_states=1, name="decay")


class TestRK4Accuracy:
    """Tests against exact solutions."""

    def test_exponential_decay(self):
        """dy/dt = -y from y0 = 1 tracks e^{-t}."""
        integ = RK4Integrator(exponential_decay(), [1.0])
        states = integ.integrate(0.0, 0.01, [1.0], 100)

        assert states[-1, 0] == pytest.approx(np.exp(-1.0), abs=5e-5)

    def test_exponential_decay_every_step(self):
        """Error stays small at every intermediate time."""
        integ = RK4Integrator(exponential_decay(), [1.0])
        states = integ.integrate(0.0, 0.01, [1.0], 200)
        t = np.arange(201) * 0.01

        np.testing.assert_allclose(states[:, 0], np.exp(-t), atol=1e-4)

    def test_cubic_is_exact(self):
        """RK4 reduces to Simpson's rule for y' = f(t), exact for cubics."""
        cubic = FunctionODE(lambda t, y: np.array([t**3]), n_states=1)
        integ = RK4Integrator(cubic, [0.0], dtype=np.float64)
        states = integ.integrate(0.0, 0.5, [0.0], 2)

        assert states[-1, 0] == pytest.approx(0.25, abs=1e-14)

    def test_constant_derivative(self):
        """y' = 1 advances by exactly dt per step."""
        ramp = FunctionODE(lambda t, y: np.ones_like(y), n_states=2)
        y_next = rk4(ramp, 0.0, np.array([1.0, 2.0]), 0.5)

        np.testing.assert_array_almost_equal(y_next, [1.5, 2.5])

    def test_time_dependent_stages(self):
        """Stages are evaluated at t, t + dt/2 and t + dt."""
        seen = []

        def f(t, y):
            seen.append(t)
            return np.zeros_like(y)

        rk4(FunctionODE(f, n_states=1), 1.0, np.array([0.0]), 0.5)

        assert seen == [1.0, 1.25, 1.25, 1.5]


class TestRK4Forms:
    """Tests for the allocating and preallocated forms."""

    @pytest.mark.parametrize("system,y0", [
        (SimplePendulum(), [np.pi / 2, 0.0]),
        (DoublePendulum(), [2.899002795870406, 0.0, 1.913720799888307, 0.0]),
        (LorenzSystem(), [10.0, 10.0, 10.0]),
        (PendulumCart(), [0.0, 0.0, 11.0 * np.pi / 12.0, 0.0]),
    ])
    def test_bit_identical(self, system, y0):
        """rk4() and rk4_into() agree bit-for-bit over many steps."""
        dt = 1.0 / 120.0
        y_alloc = np.asarray(y0, dtype=np.float32)
        ws = RK4Workspace.for_state(y0)

        for k in range(500):
            t = k * dt
            y_alloc = rk4(system, t, y_alloc, dt)
            rk4_into(system, t, dt, ws)
            ws.y[:] = ws.out

            assert np.array_equal(y_alloc, ws.y)

    def test_single_step_identical(self):
        """One step from the same state gives the same bits."""
        pendulum = SimplePendulum()
        y = np.array([np.pi / 2, 0.0], dtype=np.float32)
        integ = RK4Integrator(pendulum, y)

        a = integ.step(0.0, 1.0 / 120.0, y)
        b = integ.step_in_place(0.0, 1.0 / 120.0, y)

        assert a.dtype == np.float32
        assert np.array_equal(a, b)

    def test_step_in_place_returns_workspace_buffer(self):
        """step_in_place() hands back the workspace output buffer."""
        integ = RK4Integrator(SimplePendulum(), [0.5, 0.0])
        out = integ.step_in_place(0.0, 0.01)

        assert out is integ.workspace.out

    def test_workspace_allocation(self):
        """Workspace buffers have the requested size and dtype."""
        ws = RK4Workspace.allocate(4)

        assert ws.n_states == 4
        assert ws.dtype == np.float32
        for buf in (ws.y, ws.k1, ws.k2, ws.k3, ws.k4, ws.tmp, ws.out):
            assert buf.shape == (4,)

    def test_integer_input_cast_to_float32(self):
        """Non-float state input is promoted to single precision."""
        y_next = rk4(exponential_decay(), 0.0, np.array([1]), 0.1)

        assert y_next.dtype == np.float32


class TestRK4Integrator:
    """Tests for the integrator wrapper."""

    def test_deterministic(self):
        """Identical inputs produce identical trajectories."""
        y0 = [2.899002795870406, 0.0, 1.913720799888307, 0.0]
        a = RK4Integrator(DoublePendulum(), y0).integrate(0.0, 1 / 240, y0, 1000)
        b = RK4Integrator(DoublePendulum(), y0).integrate(0.0, 1 / 240, y0, 1000)

        assert np.array_equal(a, b)

    def test_integrate_shape(self):
        """integrate() returns n_steps + 1 rows starting at y0."""
        y0 = [10.0, 10.0, 10.0]
        states = RK4Integrator(LorenzSystem(), y0).integrate(0.0, 0.005, y0, 50)

        assert states.shape == (51, 3)
        assert states.dtype == np.float32
        np.testing.assert_array_equal(states[0], np.float32(y0))

    def test_float64_precision(self):
        """A double-precision integrator keeps its dtype."""
        integ = RK4Integrator(exponential_decay(), [1.0], dtype=np.float64)
        states = integ.integrate(0.0, 0.1, [1.0], 10)

        assert states.dtype == np.float64
        assert states[-1, 0] == pytest.approx(np.exp(-1.0), abs=1e-6)

    def test_arity_mismatch(self):
        """A state of the wrong length is rejected at construction."""
        with pytest.raises(ValueError):
            RK4Integrator(SimplePendulum(), [0.0, 0.0, 0.0])

    def test_non_vector_state(self):
        """A 2-D state is rejected at construction."""
        with pytest.raises(ValueError):
            RK4Integrator(SimplePendulum(), [[0.0, 0.0]])

    def test_integrate_arity_mismatch(self):
        """integrate() rejects a start state of the wrong length."""
        integ = RK4Integrator(DoublePendulum(), [1.0, 0.0, 0.5, 0.0])

        with pytest.raises(ValueError):
            integ.integrate(0.0, 0.01, [2.0], 10)

    def test_step_in_place_arity_mismatch(self):
        """A wrong-length state is not broadcast into the workspace."""
        y0 = [1.0, 0.0, 0.5, 0.0]
        integ = RK4Integrator(DoublePendulum(), y0)

        with pytest.raises(ValueError):
            integ.step_in_place(0.0, 0.01, [2.0])
        np.testing.assert_array_equal(integ.workspace.y, np.float32(y0))

    @pytest.mark.parametrize("dt", [0.0, -0.01])
    def test_non_positive_dt(self, dt):
        """Zero and negative step sizes raise."""
        integ = RK4Integrator(SimplePendulum(), [0.1, 0.0])

        with pytest.raises(ValueError):
            integ.step(0.0, dt, [0.1, 0.0])
        with pytest.raises(ValueError):
            integ.step_in_place(0.0, dt)
        with pytest.raises(ValueError):
            integ.integrate(0.0, dt, [0.1, 0.0], 10)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
