"""
Simulation engine, trails, live graphs and rendering.

Provides the fixed-step RK4 integrator, the two-lane driver, ribbon and
graph widgets, demo scenarios, and matplotlib animation export.
"""

from .integrator import rk4, rk4_into, RK4Workspace, RK4Integrator
from .simulator import Simulator, SimulationResult, DriverConfig
from .trail import (TrailBuffer, RibbonMesh, RibbonParams, MeshRibbon,
                    Interpolation, build_ribbon_mesh)
from .graph import (GraphSeries, GraphParams, GridlineConfig, GraphPrimitives,
                    compute_gridlines)
from .scenarios import Scenario, SCENARIOS, build_scenario

__all__ = [
    'rk4',
    'rk4_into',
    'RK4Workspace',
    'RK4Integrator',
    'Simulator',
    'SimulationResult',
    'DriverConfig',
    'TrailBuffer',
    'RibbonMesh',
    'RibbonParams',
    'MeshRibbon',
    'Interpolation',
    'build_ribbon_mesh',
    'GraphSeries',
    'GraphParams',
    'GridlineConfig',
    'GraphPrimitives',
    'compute_gridlines',
    'Scenario',
    'SCENARIOS',
    'build_scenario'
]
