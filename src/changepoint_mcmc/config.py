"""
Change-Point MCMC — Algorithm Configuration
============================================
Parameter containers, defaults and the configuration sanitizer.

The sanitizer is the first line of defense for the numeric engine: every
value that reaches the model or the stepper has been through it, so NaN,
infinities and non-positive scale parameters never propagate downstream.

Usage:
    from changepoint_mcmc.config import AlgorithmConfig, sanitize_config

    raw = AlgorithmConfig.from_dict({'known_sigma': -3, 'total_samples': 0.2})
    config = sanitize_config(raw)   # known_sigma=0.01, total_samples=1

License: MIT
"""

import math
from dataclasses import dataclass, asdict, replace
from typing import Dict, Optional


# ═══════════════════════════════════════════════════════════════
# Constants
# ═══════════════════════════════════════════════════════════════

DAY_START = 0.0
DAY_END = 24.0

MIN_KNOWN_SIGMA = 0.01
MIN_PRIOR_STD = 0.01
MIN_PROPOSAL_WIDTH = 0.01


# ═══════════════════════════════════════════════════════════════
# Parameter containers
# ═══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Params:
    """A point in (τ, μ1, μ2) parameter space.

    Also used for proposal widths, where each field is the standard
    deviation of the symmetric Gaussian perturbation for that component.
    """
    tau: float    # Change time (hours, prior support [0, 24])
    mu1: float    # Mean before the change
    mu2: float    # Mean after the change

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> 'Params':
        """Build from a (possibly partial) dict; missing fields become NaN."""
        return cls(
            tau=d.get('tau', math.nan),
            mu1=d.get('mu1', math.nan),
            mu2=d.get('mu2', math.nan),
        )


@dataclass(frozen=True)
class MuPair:
    """Hyperparameters of the independent Gaussian priors on μ1 and μ2."""
    mu1: float
    mu2: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, float]) -> 'MuPair':
        return cls(mu1=d.get('mu1', math.nan), mu2=d.get('mu2', math.nan))


# Prior means and prior standard deviations share the same shape
PriorMuMeans = MuPair
PriorMuStds = MuPair


@dataclass(frozen=True)
class AlgorithmConfig:
    """Configuration for a single change-point sampling session."""
    # Chain length
    total_samples: int = 5000       # Total Metropolis steps (including burn-in)
    burn_in_samples: int = 1000     # Leading steps marked as burn-in

    # Synthetic data
    observation_count: int = 300
    known_sigma: float = 0.9        # Measurement noise (assumed known)
    true_params: Optional[Params] = None

    # Prior
    prior_mu_means: Optional[MuPair] = None
    prior_mu_stds: Optional[MuPair] = None

    # Sampler
    initial_params: Optional[Params] = None
    proposal_widths: Optional[Params] = None

    def replace(self, **changes) -> 'AlgorithmConfig':
        """Return a copy with the given fields changed (not sanitized)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict) -> 'AlgorithmConfig':
        """Build a config from a JSON-style dict.

        Missing top-level scalars become NaN and missing nested dicts become
        None, so `sanitize_config` fills both from the defaults.
        """
        def nested(key, factory):
            value = d.get(key)
            return factory(value) if value is not None else None

        return cls(
            total_samples=d.get('total_samples', math.nan),
            burn_in_samples=d.get('burn_in_samples', math.nan),
            observation_count=d.get('observation_count', math.nan),
            known_sigma=d.get('known_sigma', math.nan),
            true_params=nested('true_params', Params.from_dict),
            prior_mu_means=nested('prior_mu_means', MuPair.from_dict),
            prior_mu_stds=nested('prior_mu_stds', MuPair.from_dict),
            initial_params=nested('initial_params', Params.from_dict),
            proposal_widths=nested('proposal_widths', Params.from_dict),
        )


DEFAULT_CONFIG = AlgorithmConfig(
    total_samples=5000,
    burn_in_samples=1000,
    observation_count=300,
    known_sigma=0.9,
    true_params=Params(tau=14.5, mu1=12.3, mu2=13.2),
    prior_mu_means=MuPair(mu1=15.0, mu2=15.0),
    prior_mu_stds=MuPair(mu1=5.0, mu2=5.0),
    initial_params=Params(tau=12.0, mu1=12.0, mu2=13.0),
    proposal_widths=Params(tau=0.3, mu1=0.2, mu2=0.2),
)


# ═══════════════════════════════════════════════════════════════
# Sanitizer
# ═══════════════════════════════════════════════════════════════

def _finite(value, fallback: float) -> float:
    """Return `value` as float if finite, else `fallback`."""
    try:
        value = float(value)
    except (TypeError, ValueError, OverflowError):
        return float(fallback)
    return value if math.isfinite(value) else float(fallback)


def _bounded_int(value, fallback: int, minimum: int) -> int:
    # Round half up, matching the usual UI number-field behavior
    return max(minimum, int(math.floor(_finite(value, fallback) + 0.5)))


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _sanitize_params(params: Optional[Params], fallback: Params) -> Params:
    source = params if params is not None else fallback
    return Params(
        tau=_clamp(_finite(source.tau, fallback.tau), DAY_START, DAY_END),
        mu1=_finite(source.mu1, fallback.mu1),
        mu2=_finite(source.mu2, fallback.mu2),
    )


def _sanitize_widths(widths: Optional[Params], fallback: Params) -> Params:
    source = widths if widths is not None else fallback
    return Params(
        tau=max(MIN_PROPOSAL_WIDTH, _finite(source.tau, fallback.tau)),
        mu1=max(MIN_PROPOSAL_WIDTH, _finite(source.mu1, fallback.mu1)),
        mu2=max(MIN_PROPOSAL_WIDTH, _finite(source.mu2, fallback.mu2)),
    )


def _sanitize_means(means: Optional[MuPair], fallback: MuPair) -> MuPair:
    source = means if means is not None else fallback
    return MuPair(
        mu1=_finite(source.mu1, fallback.mu1),
        mu2=_finite(source.mu2, fallback.mu2),
    )


def _sanitize_stds(stds: Optional[MuPair], fallback: MuPair) -> MuPair:
    source = stds if stds is not None else fallback
    return MuPair(
        mu1=max(MIN_PRIOR_STD, _finite(source.mu1, fallback.mu1)),
        mu2=max(MIN_PRIOR_STD, _finite(source.mu2, fallback.mu2)),
    )


def sanitize_config(config: AlgorithmConfig,
                    defaults: AlgorithmConfig = DEFAULT_CONFIG) -> AlgorithmConfig:
    """Repair a configuration so the numeric engine can consume it.

    Total and pure: never raises, never mutates its input. Non-finite values
    are replaced by the matching field of `defaults` before any bounds are
    applied. `defaults` must itself be fully populated.

    Args:
        config: Possibly invalid configuration
        defaults: Fallback values (DEFAULT_CONFIG if omitted)

    Returns:
        New AlgorithmConfig with every field finite and in range
    """
    return AlgorithmConfig(
        total_samples=_bounded_int(config.total_samples, defaults.total_samples, 1),
        burn_in_samples=_bounded_int(config.burn_in_samples, defaults.burn_in_samples, 0),
        observation_count=_bounded_int(config.observation_count,
                                       defaults.observation_count, 1),
        known_sigma=max(MIN_KNOWN_SIGMA,
                        _finite(config.known_sigma, defaults.known_sigma)),
        true_params=_sanitize_params(config.true_params, defaults.true_params),
        prior_mu_means=_sanitize_means(config.prior_mu_means, defaults.prior_mu_means),
        prior_mu_stds=_sanitize_stds(config.prior_mu_stds, defaults.prior_mu_stds),
        initial_params=_sanitize_params(config.initial_params, defaults.initial_params),
        proposal_widths=_sanitize_widths(config.proposal_widths, defaults.proposal_widths),
    )
