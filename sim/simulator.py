"""
Fixed-step simulation driver.

Runs two lanes in sequence, never overlapping:
- fixed lane: integrates the system with RK4 at a constant tick rate
- presentation lane: hands the latest state to ribbons, graphs and
  renderers once per (variable-rate) frame

Wall-clock frame time is accumulated and converted into whole fixed ticks,
so the simulation is deterministic regardless of frame rate.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Callable

from systems.base import ODEFunction
from .integrator import RK4Integrator, rk4_into, DEFAULT_DTYPE


@dataclass
class DriverConfig:
    """
    Timing options for the fixed lane.

    Attributes:
        fixed_dt: Fixed tick period in seconds (default 1/120)
        substeps: RK4 steps per tick; each step is fixed_dt * time_scale / substeps
        time_scale: Simulated seconds per tick second (0.25 plays 4x slower)
        max_ticks_per_frame: Cap on ticks run by one advance() call; any
            backlog beyond it is dropped
    """
    fixed_dt: float = 1.0 / 120.0
    substeps: int = 1
    time_scale: float = 1.0
    max_ticks_per_frame: int = 8

    def __post_init__(self):
        if not self.fixed_dt > 0:
            raise ValueError("fixed_dt must be positive")
        if self.substeps < 1:
            raise ValueError("substeps must be at least 1")
        if not self.time_scale > 0:
            raise ValueError("time_scale must be positive")
        if self.max_ticks_per_frame < 1:
            raise ValueError("max_ticks_per_frame must be at least 1")

    @property
    def step_dt(self) -> float:
        """Integration step size."""
        return self.fixed_dt * self.time_scale / self.substeps

    @property
    def tick_sim_time(self) -> float:
        """Simulated time covered by one tick."""
        return self.fixed_dt * self.time_scale


@dataclass
class SimulationResult:
    """
    Container for a headless run.

    Attributes:
        time: Simulated time vector
        states: State trajectory (T x n_states)
        energies: Total energy per sample (empty if the system has none)
        metadata: Run information (system, dt, substeps, ...)
    """
    time: np.ndarray
    states: np.ndarray
    energies: np.ndarray = field(default_factory=lambda: np.array([]))
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def energy_drift(self) -> np.ndarray:
        """E(t) - E(0)."""
        if len(self.energies) == 0:
            return np.array([])
        return self.energies - self.energies[0]

    def compute_metrics(self) -> Dict[str, float]:
        """
        Summarize the run.

        Returns:
            Dictionary with step count, final time, energy drift figures
            and whether any non-finite value appeared
        """
        metrics = {
            'n_samples': len(self.time),
            'final_time': float(self.time[-1]) if len(self.time) else 0.0,
            'has_non_finite': bool(not np.all(np.isfinite(self.states))),
        }

        drift = self.energy_drift
        if len(drift) > 0:
            scale = self.metadata.get('energy_scale', 1.0) or 1.0
            metrics['final_energy_drift'] = float(drift[-1])
            metrics['max_energy_drift'] = float(np.max(np.abs(drift)))
            metrics['max_relative_drift'] = float(np.max(np.abs(drift)) / scale)

        return metrics


class Simulator:
    """
    Two-lane driver for one dynamical system.

    The state lives in the integrator workspace and is advanced in place;
    `state` returns a copy for readers on the presentation lane.
    """

    def __init__(self, system: ODEFunction, y0: np.ndarray,
                 config: Optional[DriverConfig] = None,
                 dtype=DEFAULT_DTYPE):
        """
        Initialize simulator.

        Args:
            system: Dynamical system to integrate
            y0: Initial state
            config: Timing options (defaults to DriverConfig())
            dtype: Working precision

        Raises:
            ValueError: If y0 does not match the system dimension
        """
        self.system = system
        self.config = config or DriverConfig()
        self.integrator = RK4Integrator(system, y0, dtype=dtype)
        self.y0 = self.integrator.workspace.y.copy()

        self.time = 0.0          # simulated time
        self.elapsed = 0.0       # fixed-clock time (ticks * fixed_dt)
        self.tick_count = 0
        self.dropped_time = 0.0
        self._accumulator = 0.0
        self._hooks: List[Callable[[float, np.ndarray], None]] = []

    @property
    def state(self) -> np.ndarray:
        """Copy of the current state."""
        return self.integrator.workspace.y.copy()

    def reset(self, y0: Optional[np.ndarray] = None) -> None:
        """
        Restore the initial (or a new) state and zero all clocks.

        Raises:
            ValueError: If y0 does not match the system dimension
        """
        self.integrator.load_state(self.y0 if y0 is None else y0)
        self.time = 0.0
        self.elapsed = 0.0
        self.tick_count = 0
        self.dropped_time = 0.0
        self._accumulator = 0.0

    def add_presentation_hook(self, hook: Callable[[float, np.ndarray], None]) -> None:
        """
        Register a presentation-lane callback.

        Args:
            hook: Called as hook(elapsed, state) once per advance()
        """
        self._hooks.append(hook)

    def tick(self) -> None:
        """Run one fixed-lane tick (config.substeps RK4 steps)."""
        ws = self.integrator.workspace
        dt = self.config.step_dt

        for _ in range(self.config.substeps):
            rk4_into(self.system, self.time, dt, ws)
            ws.y[:] = ws.out
            self.time += dt

        self.elapsed += self.config.fixed_dt
        self.tick_count += 1

    def advance(self, frame_dt: float) -> int:
        """
        Advance by one presentation frame.

        Args:
            frame_dt: Wall-clock time since the previous frame (seconds)

        Returns:
            Number of fixed ticks executed
        """
        if frame_dt < 0:
            raise ValueError("frame_dt must be non-negative")

        fixed_dt = self.config.fixed_dt
        self._accumulator += frame_dt

        ticks = 0
        while self._accumulator >= fixed_dt and ticks < self.config.max_ticks_per_frame:
            self.tick()
            self._accumulator -= fixed_dt
            ticks += 1

        if self._accumulator >= fixed_dt:
            backlog = self._accumulator - (self._accumulator % fixed_dt)
            self.dropped_time += backlog
            self._accumulator -= backlog

        self.present()
        return ticks

    def present(self) -> None:
        """Run the presentation lane on the current state."""
        state = self.state
        for hook in self._hooks:
            hook(self.elapsed, state)

    def run(self, duration: float, record_every: int = 1) -> SimulationResult:
        """
        Headless run of the fixed lane only.

        Args:
            duration: Fixed-clock seconds to run
            record_every: Keep one sample every this many ticks

        Returns:
            SimulationResult starting at the current state
        """
        if record_every < 1:
            raise ValueError("record_every must be at least 1")

        n_ticks = int(round(duration / self.config.fixed_dt))
        energy = getattr(self.system, 'energy', None)

        times = [self.time]
        states = [self.state]
        for k in range(1, n_ticks + 1):
            self.tick()
            if k % record_every == 0:
                times.append(self.time)
                states.append(self.state)

        states = np.array(states)
        energies = np.array([energy(s) for s in states]) if energy else np.array([])

        metadata = {
            'system': repr(self.system),
            'fixed_dt': self.config.fixed_dt,
            'step_dt': self.config.step_dt,
            'substeps': self.config.substeps,
            'time_scale': self.config.time_scale,
            'dtype': self.integrator.dtype.name,
            'energy_scale': self.system.energy_scale(),
            'y0': states[0].copy(),
        }

        return SimulationResult(
            time=np.array(times),
            states=states,
            energies=energies,
            metadata=metadata
        )
