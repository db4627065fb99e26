"""
Unit tests for the Metropolis stepper
"""

import math

import numpy as np
import pytest

from changepoint_mcmc.config import MuPair, Params
from changepoint_mcmc.data_generator import generate_data
from changepoint_mcmc.metropolis import (
    StepResult, acceptance_probability, log_acceptance_ratio, propose, step,
)


INF = math.inf
MEANS = MuPair(mu1=15.0, mu2=15.0)
STDS = MuPair(mu1=5.0, mu2=5.0)
ZERO_WIDTHS = Params(tau=0.0, mu1=0.0, mu2=0.0)

EDGE_VALUES = [-INF, -1e308, -1000.0, -1.0, 0.0, 1.0, 1000.0, 1e308, INF]


def _numeric_fields(result: StepResult):
    return [
        result.log_posterior_current, result.log_posterior_proposed,
        result.log_ratio, result.acceptance_probability, result.random_draw,
        result.proposed.tau, result.proposed.mu1, result.proposed.mu2,
        result.new_params.tau, result.new_params.mu1, result.new_params.mu2,
    ]


class TestLogAcceptanceRatio:
    """Test the log acceptance ratio and its degenerate cases."""

    def test_regular_difference(self):
        """Test that finite log-posteriors give their difference."""
        assert log_acceptance_ratio(-10.0, -12.5) == pytest.approx(-2.5)
        assert log_acceptance_ratio(-12.5, -10.0) == pytest.approx(2.5)

    def test_impossible_vs_impossible_is_reject(self):
        """Test that -inf vs -inf gives -inf, not NaN."""
        ratio = log_acceptance_ratio(-INF, -INF)
        assert ratio == -INF
        assert not math.isnan(ratio)

    def test_escape_from_impossible(self):
        """Test moves into and out of zero-density regions."""
        assert log_acceptance_ratio(-INF, 0.0) == INF
        assert log_acceptance_ratio(0.0, -INF) == -INF

    def test_equal_positive_infinities(self):
        """Test that equal +inf log-posteriors give 0."""
        assert log_acceptance_ratio(INF, INF) == 0.0

    @pytest.mark.parametrize("current", EDGE_VALUES)
    @pytest.mark.parametrize("proposed", EDGE_VALUES)
    def test_never_nan(self, current, proposed):
        """Test that no combination of edge values gives NaN."""
        assert not math.isnan(log_acceptance_ratio(current, proposed))


class TestAcceptanceProbability:
    """Test the acceptance probability."""

    def test_degenerate_infinite_inputs(self):
        """Test acceptance with infinite log-posteriors."""
        assert acceptance_probability(-INF, -INF) == 0.0
        assert acceptance_probability(-INF, 0.0) == 1.0
        assert acceptance_probability(-INF, -5.0) == 1.0
        assert acceptance_probability(0.0, -INF) == 0.0
        assert acceptance_probability(-3.0, -INF) == 0.0

    def test_uphill_always_accepted(self):
        """Test that moves to higher density are always accepted."""
        assert acceptance_probability(-10.0, -5.0) == 1.0
        assert acceptance_probability(-5.0, -5.0) == 1.0

    def test_downhill_is_ratio(self):
        """Test that downhill moves use the posterior ratio."""
        assert acceptance_probability(0.0, -1.0) == pytest.approx(math.exp(-1.0))

    def test_underflow_gives_zero(self):
        """Test that an underflowing ratio gives probability 0."""
        assert acceptance_probability(0.0, -1e6) == 0.0

    @pytest.mark.parametrize("current", EDGE_VALUES)
    @pytest.mark.parametrize("proposed", EDGE_VALUES)
    def test_in_unit_interval(self, current, proposed):
        """Test that probabilities stay within [0, 1]."""
        alpha = acceptance_probability(current, proposed)
        assert not math.isnan(alpha)
        assert 0.0 <= alpha <= 1.0


class TestPropose:
    """Test the symmetric Gaussian proposal."""

    def test_zero_widths_reproduce_current(self, rng):
        """Test that zero widths propose the current point."""
        current = Params(tau=12.0, mu1=6.0, mu2=8.0)
        assert propose(current, ZERO_WIDTHS, rng) == current

    def test_negative_width_does_not_raise(self, rng):
        """Test that negative widths still give finite proposals."""
        proposed = propose(Params(12.0, 6.0, 8.0), Params(-1.0, -1.0, -1.0), rng)
        assert all(math.isfinite(v) for v in (proposed.tau, proposed.mu1, proposed.mu2))

    def test_perturbation_scale(self, rng):
        """Test that proposals are centered with the requested spread."""
        current = Params(tau=12.0, mu1=0.0, mu2=0.0)
        widths = Params(tau=0.5, mu1=2.0, mu2=0.1)
        draws = np.array([[p.tau, p.mu1, p.mu2] for p in
                          (propose(current, widths, rng) for _ in range(4000))])
        assert draws.mean(axis=0) == pytest.approx([12.0, 0.0, 0.0], abs=0.1)
        assert draws.std(axis=0) == pytest.approx([0.5, 2.0, 0.1], rel=0.08)


class TestStep:
    """Test complete Metropolis steps."""

    def test_zero_widths_always_accept(self, rng):
        """Test that an identical proposal is always accepted."""
        current = Params(tau=12.0, mu1=6.0, mu2=8.0)
        result = step(current, [], ZERO_WIDTHS, 0.9, MEANS, STDS, rng)

        assert result.proposed == current
        assert result.log_posterior_current == result.log_posterior_proposed
        assert result.log_ratio == 0.0
        assert result.acceptance_probability == 1.0
        assert result.accepted
        assert result.new_params is result.proposed

    def test_invalid_tau_both_impossible(self, rng):
        """Test that an out-of-support chain stays numeric and rejects."""
        current = Params(tau=-1.0, mu1=12.0, mu2=13.0)
        result = step(current, [], ZERO_WIDTHS, 0.9, MEANS, STDS, rng)

        assert result.proposed == current
        assert result.log_posterior_current == -INF
        assert result.log_posterior_proposed == -INF
        assert result.log_ratio == -INF
        assert result.acceptance_probability == 0.0
        assert not result.accepted
        assert result.new_params is current
        assert not any(math.isnan(x) for x in _numeric_fields(result))

    def test_tau_bounds_are_valid_support(self, rng):
        """Test that τ = 0 and τ = 24 have finite posterior."""
        for tau in (0.0, 24.0):
            current = Params(tau=tau, mu1=12.0, mu2=13.0)
            result = step(current, [], ZERO_WIDTHS, 0.9, MEANS, STDS, rng)
            assert math.isfinite(result.log_posterior_current)
            assert result.log_posterior_current == result.log_posterior_proposed

    def test_prior_means_shift_posterior(self, rng):
        """Test that a closer prior mean raises the posterior."""
        current = Params(tau=12.0, mu1=6.0, mu2=8.0)
        near = step(current, [], ZERO_WIDTHS, 0.9, MuPair(6.0, 8.0), STDS, rng)
        far = step(current, [], ZERO_WIDTHS, 0.9, MuPair(0.0, 0.0), STDS, rng)
        assert near.log_posterior_current > far.log_posterior_current

    def test_prior_stds_shift_posterior(self, rng):
        """Test that a wider prior raises the posterior far from its mean."""
        current = Params(tau=12.0, mu1=6.0, mu2=8.0)
        far_means = MuPair(0.0, 0.0)
        wide = step(current, [], ZERO_WIDTHS, 0.9, far_means, MuPair(100.0, 100.0), rng)
        narrow = step(current, [], ZERO_WIDTHS, 0.9, far_means, MuPair(0.1, 0.1), rng)
        assert wide.log_posterior_current > narrow.log_posterior_current

    def test_unsanitized_sigma_stays_numeric(self, rng):
        """Test that a negative sigma gives a reject, not NaN."""
        data = generate_data(Params(12.0, 1.0, 2.0), 1.0, 20, rng)
        result = step(Params(12.0, 1.0, 2.0), data, Params(0.1, 0.1, 0.1),
                      -1.0, MEANS, STDS, rng)
        assert result.log_ratio == -INF
        assert result.acceptance_probability == 0.0
        assert not any(math.isnan(x) for x in _numeric_fields(result))

    def test_decision_matches_draw(self, rng):
        """Test that acceptance follows the uniform draw."""
        truth = Params(tau=14.5, mu1=12.3, mu2=13.2)
        data = generate_data(truth, 0.9, 100, rng)
        current = truth
        for _ in range(200):
            result = step(current, data, Params(0.5, 0.3, 0.3), 0.9, MEANS, STDS, rng)
            assert 0.0 <= result.random_draw < 1.0
            assert result.accepted == (result.random_draw < result.acceptance_probability)
            expected = result.proposed if result.accepted else current
            assert result.new_params is expected
            assert not any(math.isnan(x) for x in _numeric_fields(result))
            current = result.new_params

    @pytest.mark.parametrize("value", [INF, -INF])
    @pytest.mark.parametrize("field", ["tau", "mu1", "mu2"])
    def test_infinite_position_with_infinite_width(self, rng, field, value):
        """Test that inf + inf perturbations never give NaN."""
        current = Params(**{**dict(tau=12.0, mu1=12.0, mu2=13.0), field: value})
        widths = Params(**{**dict(tau=0.1, mu1=0.1, mu2=0.1), field: INF})
        for _ in range(20):
            result = step(current, [], widths, 0.9, MEANS, STDS, rng)
            assert not any(math.isnan(x) for x in _numeric_fields(result))
            assert getattr(result.proposed, field) == value
            assert result.log_ratio == -INF
            assert result.acceptance_probability == 0.0
            assert result.new_params is current

    def test_seeded_steps_reproducible(self):
        """Test that equal seeds give equal steps."""
        current = Params(tau=12.0, mu1=12.0, mu2=13.0)
        widths = Params(0.3, 0.2, 0.2)
        a = step(current, [], widths, 0.9, MEANS, STDS, np.random.default_rng(3))
        b = step(current, [], widths, 0.9, MEANS, STDS, np.random.default_rng(3))
        assert a == b

    def test_current_not_mutated(self, rng):
        """Test that stepping leaves the current params untouched."""
        current = Params(tau=12.0, mu1=12.0, mu2=13.0)
        step(current, [], Params(1.0, 1.0, 1.0), 0.9, MEANS, STDS, rng)
        assert current == Params(tau=12.0, mu1=12.0, mu2=13.0)
