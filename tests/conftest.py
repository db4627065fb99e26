"""
Pytest configuration and fixtures for reproducible testing.

This file provides centralized test configuration including:
- Random seed management for reproducibility
- A non-interactive matplotlib backend
- Shared configuration fixtures
"""
import os
import sys

import pytest
import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), 'src'))

try:
    import matplotlib
    matplotlib.use('Agg')
except ImportError:
    pass  # Plotting tests skip themselves

from changepoint_mcmc.config import AlgorithmConfig, MuPair, Params


@pytest.fixture(scope="session", autouse=True)
def set_random_seeds():
    """Set the legacy NumPy global seed once per session.

    The engine itself only draws from explicit generators, so this only
    guards against accidental use of the global state in tests.
    """
    np.random.seed(42)
    yield


@pytest.fixture
def rng():
    """Fresh seeded generator for each test."""
    return np.random.default_rng(42)


@pytest.fixture
def make_config():
    """Factory for a small, valid configuration with keyword overrides."""
    def _make(**overrides):
        base = dict(
            total_samples=10,
            burn_in_samples=0,
            observation_count=10,
            known_sigma=0.9,
            true_params=Params(tau=14.5, mu1=12.3, mu2=13.2),
            prior_mu_means=MuPair(mu1=15.0, mu2=15.0),
            prior_mu_stds=MuPair(mu1=5.0, mu2=5.0),
            initial_params=Params(tau=12.0, mu1=12.0, mu2=13.0),
            proposal_widths=Params(tau=0.1, mu1=0.2, mu2=0.2),
        )
        base.update(overrides)
        return AlgorithmConfig(**base)
    return _make
