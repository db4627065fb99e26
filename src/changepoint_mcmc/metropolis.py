"""
Change-Point MCMC — Metropolis Stepper
=======================================
One propose → evaluate → accept/reject transition of a random-walk
Metropolis sampler over (τ, μ1, μ2).

The proposal kernel is an independent Gaussian perturbation of each
component, which is symmetric, so the acceptance ratio is the plain
posterior ratio with no Hastings correction.

Numerical contract: `step` never raises and never returns NaN, including
when one or both log-posteriors are -inf. The degenerate cases are
resolved by explicit branches in `log_acceptance_ratio`.

License: MIT
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence

from .config import Params, MuPair
from .data_generator import DataPoint
from .model import log_posterior


@dataclass(frozen=True)
class StepResult:
    """Diagnostics for a single Metropolis transition."""
    proposed: Params
    log_posterior_current: float
    log_posterior_proposed: float
    log_ratio: float
    acceptance_probability: float
    accepted: bool
    random_draw: float         # Uniform draw used for the accept test
    new_params: Params         # proposed if accepted, else current


def propose(current: Params, widths: Params,
            rng: Optional[np.random.Generator] = None) -> Params:
    """Propose new parameters by adding a symmetric normal perturbation."""
    if rng is None:
        rng = np.random.default_rng()

    z_tau, z_mu1, z_mu2 = (float(z) for z in rng.standard_normal(3))
    return Params(
        tau=_perturb(current.tau, widths.tau, z_tau),
        mu1=_perturb(current.mu1, widths.mu1, z_mu1),
        mu2=_perturb(current.mu2, widths.mu2, z_mu2),
    )


def _perturb(value: float, width: float, z: float) -> float:
    # inf + (-inf) keeps the current value rather than producing NaN
    moved = float(value) + float(width) * z
    return float(value) if math.isnan(moved) else moved


def log_acceptance_ratio(log_posterior_current: float,
                         log_posterior_proposed: float) -> float:
    """Log of the Metropolis ratio, with the -inf - (-inf) case resolved."""
    log_ratio = log_posterior_proposed - log_posterior_current
    if not math.isnan(log_ratio):
        return log_ratio

    # Impossible vs impossible is a reject
    if log_posterior_current == -math.inf and log_posterior_proposed == -math.inf:
        return -math.inf
    if log_posterior_current == log_posterior_proposed:
        return 0.0
    return math.inf if log_posterior_proposed > log_posterior_current else -math.inf


def acceptance_probability(log_posterior_current: float,
                           log_posterior_proposed: float) -> float:
    """Metropolis acceptance probability min(1, p_proposed / p_current)."""
    log_ratio = log_acceptance_ratio(log_posterior_current, log_posterior_proposed)
    if log_ratio >= 0:
        return 1.0
    if log_ratio == -math.inf:
        return 0.0
    alpha = math.exp(log_ratio)
    return min(1.0, alpha) if math.isfinite(alpha) else 0.0


def step(current: Params,
         data: Sequence[DataPoint],
         widths: Params,
         known_sigma: float,
         prior_mu_means: MuPair,
         prior_mu_stds: MuPair,
         rng: Optional[np.random.Generator] = None) -> StepResult:
    """Run one complete Metropolis step.

    Args:
        current: Current chain position
        data: Fixed observations
        widths: Proposal standard deviations per component
        known_sigma: Measurement noise
        prior_mu_means: Prior means for μ1, μ2
        prior_mu_stds: Prior standard deviations for μ1, μ2
        rng: Random source (fresh default generator if None)

    Returns:
        StepResult with the proposal, both log-posteriors and the decision
    """
    if rng is None:
        rng = np.random.default_rng()

    proposed = propose(current, widths, rng)
    lp_current = log_posterior(current, data, known_sigma,
                               prior_mu_means, prior_mu_stds)
    lp_proposed = log_posterior(proposed, data, known_sigma,
                                prior_mu_means, prior_mu_stds)

    log_ratio = log_acceptance_ratio(lp_current, lp_proposed)
    alpha = acceptance_probability(lp_current, lp_proposed)
    u = float(rng.random())
    accepted = u < alpha

    return StepResult(
        proposed=proposed,
        log_posterior_current=lp_current,
        log_posterior_proposed=lp_proposed,
        log_ratio=log_ratio,
        acceptance_probability=alpha,
        accepted=accepted,
        random_draw=u,
        new_params=proposed if accepted else current,
    )
