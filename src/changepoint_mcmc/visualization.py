"""
Change-Point MCMC — Visualization
==================================
Axis bounds for parameter-space views and matplotlib/seaborn chain plots.

`compute_bounds` and `params_to_position` map chain positions into a
0..10 cube, suitable for a 3D scatter of (τ, μ1, μ2).

License: MIT
"""

import warnings
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

try:
    import matplotlib.pyplot as plt
    import seaborn as sns
    PLOTTING_AVAILABLE = True
    sns.set_style('whitegrid')
except ImportError:
    PLOTTING_AVAILABLE = False

from .config import Params, DAY_START, DAY_END
from .data_generator import data_to_arrays


BOUNDS_PADDING = 0.5
CUBE_SIZE = 10.0


@dataclass(frozen=True)
class ParameterBounds:
    """Axis ranges (min, max) for each parameter."""
    tau: Tuple[float, float]
    mu1: Tuple[float, float]
    mu2: Tuple[float, float]


def compute_bounds(sampler) -> ParameterBounds:
    """Compute axis bounds from all chain positions, the true mode and the
    current and proposed points of a ChangePointSampler."""
    points: List[Params] = [sampler.config.true_params, sampler.current_params]
    points += [s.params for s in sampler.burn_in_samples]
    points += [s.params for s in sampler.posterior_samples]
    if sampler.proposed_params is not None:
        points.append(sampler.proposed_params)

    tau = np.array([p.tau for p in points])
    mu1 = np.array([p.mu1 for p in points])
    mu2 = np.array([p.mu2 for p in points])
    pad = BOUNDS_PADDING

    return ParameterBounds(
        tau=(max(DAY_START, float(tau.min()) - pad), min(DAY_END, float(tau.max()) + pad)),
        mu1=(float(mu1.min()) - pad, float(mu1.max()) + pad),
        mu2=(float(mu2.min()) - pad, float(mu2.max()) + pad),
    )


def normalize(value: float, bounds: Tuple[float, float]) -> float:
    """Normalize a parameter value to the 0..10 range given bounds."""
    span = bounds[1] - bounds[0]
    if span == 0:
        return CUBE_SIZE / 2
    return (value - bounds[0]) / span * CUBE_SIZE


def params_to_position(params: Params, bounds: ParameterBounds) -> Tuple[float, float, float]:
    return (
        normalize(params.tau, bounds.tau),
        normalize(params.mu1, bounds.mu1),
        normalize(params.mu2, bounds.mu2),
    )


def plot_chain(sampler, save_path: Optional[str] = None):
    """Plot the data, trace and marginal posteriors of a sampler.

    Creates a 2x3 figure:
    1. Observations with the true and posterior-mean regime means
    2. Log-posterior trace
    3. Acceptance running mean
    4-6. Marginal histograms of τ, μ1, μ2 (post burn-in)

    The caller owns the returned figure and should close it, except when
    `save_path` is given: the figure is then written to disk and closed.

    Returns:
        matplotlib Figure, or None if plotting libraries are unavailable
    """
    if not PLOTTING_AVAILABLE:
        warnings.warn("[WARNING] Matplotlib/Seaborn not available for plotting")
        return None

    trace = sampler.trace_dataframe(include_burn_in=True)
    posterior = sampler.trace_dataframe()
    truth = sampler.config.true_params

    fig, axes = plt.subplots(2, 3, figsize=(15, 8))

    # 1. Data and regime means
    ax = axes[0, 0]
    times, values = data_to_arrays(sampler.data)
    ax.scatter(times, values, s=8, alpha=0.6, color='gray', label='Observations')
    _plot_regimes(ax, truth, color='black', label='True')
    if len(posterior) > 0:
        mean_params = Params(tau=posterior['tau'].mean(),
                             mu1=posterior['mu1'].mean(),
                             mu2=posterior['mu2'].mean())
        _plot_regimes(ax, mean_params, color='tab:red', label='Posterior mean')
    ax.set_xlim(DAY_START, DAY_END)
    ax.set_xlabel('Time (h)')
    ax.set_ylabel('Value')
    ax.legend(fontsize=8)

    # 2. Log-posterior trace (finite values only)
    ax = axes[0, 1]
    if len(trace) > 0:
        finite = trace[np.isfinite(trace['log_posterior'].astype(float))]
        ax.plot(finite['iteration'], finite['log_posterior'], lw=0.8)
    ax.axvline(sampler.config.burn_in_samples, color='gray', ls='--', lw=1)
    ax.set_xlabel('Iteration')
    ax.set_ylabel('log posterior')

    # 3. Running acceptance rate
    ax = axes[0, 2]
    if len(trace) > 0:
        running = trace['accepted'].astype(float).expanding().mean()
        ax.plot(trace['iteration'], running, lw=0.8)
    ax.set_ylim(0, 1)
    ax.set_xlabel('Iteration')
    ax.set_ylabel('Acceptance rate')

    # 4-6. Marginals
    for ax, name, label in zip(axes[1], ('tau', 'mu1', 'mu2'), ('τ', 'μ1', 'μ2')):
        if len(posterior) > 0:
            sns.histplot(posterior[name], ax=ax, stat='density', bins=40)
        ax.axvline(getattr(truth, name), color='black', ls='--', lw=1)
        ax.set_xlabel(label)

    plt.tight_layout()
    if save_path:
        plt.savefig(f"{save_path}_chain.png", dpi=150, bbox_inches='tight')
        plt.close(fig)
    return fig


def _plot_regimes(ax, params: Params, color: str, label: str):
    ax.hlines(params.mu1, DAY_START, params.tau, colors=color, label=label)
    ax.hlines(params.mu2, params.tau, DAY_END, colors=color)
    ax.axvline(params.tau, color=color, ls=':', lw=1)
