"""
Change-Point MCMC — Posterior Model
====================================
Log-likelihood, log-prior and log-posterior for the single change-point model.

Mathematical Framework:
    y_i ~ N(μ1, σ²)  if t_i < τ
    y_i ~ N(μ2, σ²)  if t_i >= τ

    τ  ~ Uniform[0, 24]
    μ1 ~ N(m1, s1²),  μ2 ~ N(m2, s2²)

    log P(θ|D) = log P(D|θ) + log P(θ) + const

Zero-density points are reported as -inf, never as exceptions: they are a
normal outcome of a random-walk proposal stepping outside the support.

License: MIT
"""

import numpy as np
from typing import Sequence

from .config import Params, MuPair, DAY_START, DAY_END
from .data_generator import DataPoint, data_to_arrays


LOG_2PI = np.log(2.0 * np.pi)
LOG_TAU_DENSITY = -np.log(DAY_END - DAY_START)


def log_normal_pdf(x, mean, std):
    """Log of the normal PDF. Works elementwise on arrays."""
    z = (x - mean) / std
    return -0.5 * (LOG_2PI + 2.0 * np.log(std) + z * z)


def log_likelihood(params: Params,
                   data: Sequence[DataPoint],
                   known_sigma: float) -> float:
    """Log-likelihood of the data under the change-point model.

    Args:
        params: Candidate (τ, μ1, μ2)
        data: Observations
        known_sigma: Measurement noise (non-positive gives -inf)

    Returns:
        Sum of per-observation Gaussian log densities
    """
    if not known_sigma > 0:
        return -np.inf

    times, values = data_to_arrays(data)
    means = np.where(times < params.tau, params.mu1, params.mu2)
    return float(np.sum(log_normal_pdf(values, means, known_sigma)))


def log_prior(params: Params,
              prior_mu_means: MuPair,
              prior_mu_stds: MuPair) -> float:
    """Log-prior: τ uniform on [0, 24], μ1 and μ2 independent normals."""
    if not DAY_START <= params.tau <= DAY_END:
        return -np.inf
    if not (prior_mu_stds.mu1 > 0 and prior_mu_stds.mu2 > 0):
        return -np.inf

    lp_mu1 = log_normal_pdf(params.mu1, prior_mu_means.mu1, prior_mu_stds.mu1)
    lp_mu2 = log_normal_pdf(params.mu2, prior_mu_means.mu2, prior_mu_stds.mu2)
    return float(LOG_TAU_DENSITY + lp_mu1 + lp_mu2)


def log_posterior(params: Params,
                  data: Sequence[DataPoint],
                  known_sigma: float,
                  prior_mu_means: MuPair,
                  prior_mu_stds: MuPair) -> float:
    """Unnormalized log-posterior = log-likelihood + log-prior.

    The likelihood is not evaluated when the prior already rules the point
    out, so an invalid sigma cannot turn a rejected point into NaN.
    """
    lp = log_prior(params, prior_mu_means, prior_mu_stds)
    if lp == -np.inf:
        return -np.inf

    total = log_likelihood(params, data, known_sigma) + lp
    # NaN only arises from NaN inputs that bypassed sanitization
    if np.isnan(total):
        return -np.inf
    return total
