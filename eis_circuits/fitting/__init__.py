"""
Equivalent circuit fitting.

Modules
-------
- fit.py: fit_circuit, FitResult
- bounds.py: physically reasonable parameter bounds
- covariance.py: SVD covariance and confidence intervals
- diagnostics.py: weighting, fit metrics and result logging

Usage Example
-------------
```python
from eis_circuits import Circuit
from eis_circuits.fitting import fit_circuit

circuit = Circuit('voigt', 'Rs=R(90) - (Rp=R(900) | Cp=C(2e-6))')
result, Z_fit = fit_circuit(circuit, omega, Z)
print(result.params_opt)
```
"""

from .fit import fit_circuit, FitResult, FitDiagnostics
from .covariance import CovarianceResult
from .diagnostics import VALID_WEIGHTINGS, compute_weights, log_fit_results

__all__ = [
    'fit_circuit',
    'FitResult',
    'FitDiagnostics',
    'CovarianceResult',
    'VALID_WEIGHTINGS',
    'compute_weights',
    'log_fit_results',
]
