"""
Change-Point MCMC - Bayesian single change-point inference

Metropolis sampling of the posterior over the change time τ and the two
regime means μ1, μ2 of a noisy scalar series with known noise σ.
"""

__version__ = "0.1.0"

# Configuration
from .config import (
    Params,
    MuPair,
    PriorMuMeans,
    PriorMuStds,
    AlgorithmConfig,
    DEFAULT_CONFIG,
    sanitize_config,
)

# Numeric engine
from .data_generator import DataPoint, generate_data
from .model import log_likelihood, log_prior, log_posterior
from .metropolis import (
    StepResult,
    propose,
    log_acceptance_ratio,
    acceptance_probability,
    step,
)

# Driver
from .sampler import ChainSample, ChangePointSampler

# Plotting helpers
from .visualization import (
    ParameterBounds,
    compute_bounds,
    normalize,
    params_to_position,
    plot_chain,
)

__all__ = [
    "Params",
    "MuPair",
    "PriorMuMeans",
    "PriorMuStds",
    "AlgorithmConfig",
    "DEFAULT_CONFIG",
    "sanitize_config",
    "DataPoint",
    "generate_data",
    "log_likelihood",
    "log_prior",
    "log_posterior",
    "StepResult",
    "propose",
    "log_acceptance_ratio",
    "acceptance_probability",
    "step",
    "ChainSample",
    "ChangePointSampler",
    "ParameterBounds",
    "compute_bounds",
    "normalize",
    "params_to_position",
    "plot_chain",
]
