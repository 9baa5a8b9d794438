"""
Numerical diagnostics.

Energy drift of conservative systems and accuracy/convergence checks of
the RK4 integrator against exact or high-accuracy reference solutions.
"""

from .energy import EnergyDriftResult, measure_energy_drift, drift_vs_step_size
from .convergence import (ConvergenceStudy, reference_solution,
                          compare_with_reference, global_error,
                          convergence_sweep, estimate_convergence_order)

__all__ = ['EnergyDriftResult', 'measure_energy_drift', 'drift_vs_step_size',
           'ConvergenceStudy', 'reference_solution', 'compare_with_reference',
           'global_error', 'convergence_sweep',
           'estimate_convergence_order']
