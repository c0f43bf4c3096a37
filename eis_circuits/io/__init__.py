"""
Sweep generation and synthetic data.
"""

from .synthetic import angular_sweep, generate_synthetic_spectrum

__all__ = ['angular_sweep', 'generate_synthetic_spectrum']
