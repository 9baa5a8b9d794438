"""
Continuous-time dynamical systems.

Each system implements the ODEFunction interface: f(t, y) -> dy/dt.
"""

from .base import ODEFunction, FunctionODE, check_arity
from .pendulum import SimplePendulum
from .double_pendulum import DoublePendulum
from .lorenz import LorenzSystem
from .pendulum_cart import PendulumCart

__all__ = ['ODEFunction', 'FunctionODE', 'check_arity', 'SimplePendulum',
           'DoublePendulum', 'LorenzSystem', 'PendulumCart']
