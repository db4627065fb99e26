"""
Change-Point MCMC — Sampling Driver
====================================
Holds the state of one sampling session and drives the Metropolis stepper.

A session owns:
- the sanitized configuration
- the synthetic dataset (generated once, fixed for the whole run)
- the current chain position
- the burn-in and post-burn-in sample records

Usage:
    from changepoint_mcmc import ChangePointSampler, AlgorithmConfig

    sampler = ChangePointSampler(AlgorithmConfig(total_samples=3000,
                                                 burn_in_samples=500),
                                 seed=42, verbose=True)
    sampler.run(progressbar=True)

    summary = sampler.summarize_posterior()
    print(summary['tau']['mean'], summary['tau']['ci_lower'], summary['tau']['ci_upper'])

    sampler.save_trace('chain.csv')

License: MIT
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from .config import AlgorithmConfig, DEFAULT_CONFIG, Params, sanitize_config
from .data_generator import DataPoint, generate_data
from .metropolis import StepResult, step
from .model import log_posterior


PARAM_NAMES = ('tau', 'mu1', 'mu2')
TRACE_COLUMNS = ['iteration', 'tau', 'mu1', 'mu2', 'log_posterior', 'accepted', 'burn_in']

# Fields that change the generated dataset when edited
_DATA_FIELDS = ('observation_count', 'known_sigma', 'true_params')


@dataclass(frozen=True)
class ChainSample:
    """Chain position after one Metropolis step."""
    iteration: int
    params: Params
    log_posterior: float
    accepted: bool
    burn_in: bool


class ChangePointSampler:
    """Single-chain Metropolis sampler for the change-point model.

    The numeric engine is stateless; this class is the driver that owns the
    current position, loops the stepper, splits burn-in from posterior
    samples and summarizes the result.
    """

    def __init__(self,
                 config: Optional[AlgorithmConfig] = None,
                 seed: Optional[int] = None,
                 data: Optional[Sequence[DataPoint]] = None,
                 verbose: bool = False):
        """
        Args:
            config: Algorithm configuration (sanitized on entry; defaults if None)
            seed: Seed for the session's random generator
            data: Observations to use instead of generating synthetic data
            verbose: Print progress messages
        """
        self.config = sanitize_config(config if config is not None else DEFAULT_CONFIG)
        self.verbose = verbose
        self.rng = np.random.default_rng(seed)

        if data is not None:
            self.data = tuple(sorted(data, key=lambda p: p.time))
        else:
            self.data = self._generate()

        self.reset()

        if self.verbose:
            print(f"[Sampler] Initialized with {len(self.data)} observations")
            print(f"[Sampler] Steps: {self.config.total_samples}, "
                  f"Burn-in: {self.config.burn_in_samples}")

    # ── session state ───────────────────────────────────────────

    def _generate(self):
        return generate_data(self.config.true_params, self.config.known_sigma,
                             self.config.observation_count, self.rng)

    def reset(self, regenerate_data: bool = False):
        """Return the chain to the configured starting point.

        Args:
            regenerate_data: Draw a fresh synthetic dataset as well
        """
        if regenerate_data:
            self.data = self._generate()

        self.current_params = self.config.initial_params
        self.proposed_params: Optional[Params] = None
        self.step_result: Optional[StepResult] = None
        self.burn_in_samples: List[ChainSample] = []
        self.posterior_samples: List[ChainSample] = []
        self.n_accepted = 0
        self.status_message = "Ready"

    def update_config(self, config: AlgorithmConfig):
        """Apply an edited configuration and restart the chain.

        The dataset is regenerated only if a field that defines it changed.
        """
        new_config = sanitize_config(config)
        regenerate = any(getattr(new_config, f) != getattr(self.config, f)
                         for f in _DATA_FIELDS)
        self.config = new_config
        self.reset(regenerate_data=regenerate)

        if self.verbose:
            print(f"[Sampler] Configuration updated"
                  f"{' (data regenerated)' if regenerate else ''}")

    @property
    def iteration(self) -> int:
        """Number of steps taken so far."""
        return len(self.burn_in_samples) + len(self.posterior_samples)

    @property
    def is_complete(self) -> bool:
        return self.iteration >= self.config.total_samples

    @property
    def acceptance_rate(self) -> float:
        """Fraction of accepted proposals over all steps (0 before any step)."""
        if self.iteration == 0:
            return 0.0
        return self.n_accepted / self.iteration

    def current_log_posterior(self) -> float:
        c = self.config
        return log_posterior(self.current_params, self.data, c.known_sigma,
                             c.prior_mu_means, c.prior_mu_stds)

    # ── sampling ────────────────────────────────────────────────

    def next_step(self) -> StepResult:
        """Run one Metropolis step and record the new chain position.

        Raises:
            ValueError: If the chain already ran `total_samples` steps
        """
        if self.is_complete:
            raise ValueError(f"Chain complete after {self.config.total_samples} steps. "
                             f"Call reset() to sample again.")

        c = self.config
        result = step(self.current_params, self.data, c.proposal_widths,
                      c.known_sigma, c.prior_mu_means, c.prior_mu_stds, self.rng)

        iteration = self.iteration + 1
        burn_in = iteration <= c.burn_in_samples
        lp = result.log_posterior_proposed if result.accepted else result.log_posterior_current
        sample = ChainSample(iteration=iteration, params=result.new_params,
                             log_posterior=lp, accepted=result.accepted,
                             burn_in=burn_in)

        if burn_in:
            self.burn_in_samples.append(sample)
        else:
            self.posterior_samples.append(sample)

        if result.accepted:
            self.n_accepted += 1

        self.current_params = result.new_params
        self.proposed_params = result.proposed
        self.step_result = result
        self.status_message = self._format_status(iteration, result, burn_in)
        return result

    def run(self, n_steps: Optional[int] = None,
            progressbar: bool = False) -> List[ChainSample]:
        """Step the chain until complete, or for `n_steps` more steps.

        Args:
            n_steps: Number of steps (remaining steps if None)
            progressbar: Show a tqdm progress bar

        Returns:
            Post-burn-in samples collected so far
        """
        remaining = self.config.total_samples - self.iteration
        n = remaining if n_steps is None else min(n_steps, remaining)

        if self.verbose:
            print(f"[Sampler] Running {n} Metropolis steps...")

        iterator = range(n)
        if progressbar:
            iterator = tqdm(iterator, desc="Metropolis", unit="step")

        for _ in iterator:
            self.next_step()

        if self.verbose:
            print(f"[Sampler] {self.iteration}/{self.config.total_samples} steps, "
                  f"acceptance rate {self.acceptance_rate:.1%}")
            if self.is_complete:
                print("[Sampler] Sampling complete!")

        return self.posterior_samples

    @staticmethod
    def _format_status(iteration: int, result: StepResult, burn_in: bool) -> str:
        phase = "burn-in" if burn_in else "sampling"
        decision = "accepted" if result.accepted else "rejected"
        p = result.proposed
        return (f"Step {iteration} ({phase}): {decision} "
                f"τ={p.tau:.2f}, μ1={p.mu1:.2f}, μ2={p.mu2:.2f} | "
                f"log ratio {result.log_ratio:.3f}, "
                f"α={result.acceptance_probability:.3f}, u={result.random_draw:.3f}")

    # ── results ─────────────────────────────────────────────────

    def trace_dataframe(self, include_burn_in: bool = False) -> pd.DataFrame:
        """Chain positions as a DataFrame with one row per step."""
        samples = (self.burn_in_samples if include_burn_in else []) + self.posterior_samples
        rows = [{
            'iteration': s.iteration,
            'tau': s.params.tau,
            'mu1': s.params.mu1,
            'mu2': s.params.mu2,
            'log_posterior': s.log_posterior,
            'accepted': s.accepted,
            'burn_in': s.burn_in,
        } for s in samples]
        return pd.DataFrame(rows, columns=TRACE_COLUMNS)

    def summarize_posterior(self, credible_interval: float = 0.95) -> Dict:
        """Generate summary statistics from the post-burn-in samples.

        Args:
            credible_interval: Equal-tailed credible interval width (0.95 = 95% CI)

        Returns:
            Dict with mean, median, std, CI for each parameter, and the
            posterior probability that μ2 exceeds μ1
        """
        if not self.posterior_samples:
            raise ValueError("No posterior samples available. Run the sampler past burn-in first.")

        trace = self.trace_dataframe()
        lower_q = 100 * (1 - credible_interval) / 2
        upper_q = 100 * (1 + credible_interval) / 2

        summary = {}
        for name in PARAM_NAMES:
            values = trace[name].to_numpy()
            summary[name] = {
                'mean': float(np.mean(values)),
                'median': float(np.median(values)),
                'std': float(np.std(values)),
                'ci_lower': float(np.percentile(values, lower_q)),
                'ci_upper': float(np.percentile(values, upper_q)),
            }

        summary['prob_mu2_gt_mu1'] = float((trace['mu2'] > trace['mu1']).mean())
        summary['acceptance_rate'] = self.acceptance_rate
        summary['n_samples'] = len(trace)
        return summary

    def save_trace(self, filepath: str, include_burn_in: bool = True):
        """Save the chain to a CSV file."""
        self.trace_dataframe(include_burn_in=include_burn_in).to_csv(filepath, index=False)
        if self.verbose:
            print(f"[Sampler] Trace saved to {filepath}")

    @staticmethod
    def load_trace(filepath: str) -> pd.DataFrame:
        """Load a trace saved with `save_trace`."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Trace file not found: {filepath}")

        trace = pd.read_csv(path)
        missing = [c for c in TRACE_COLUMNS if c not in trace.columns]
        if missing:
            raise ValueError(f"Trace file {filepath} is missing columns: {missing}")
        return trace
