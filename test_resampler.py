"""
Tests for resampling primitives, resamplers and criteria.

Run: pytest test_resampler.py -v
"""

import pytest
import numpy as np
from numpy.random import default_rng

from ssmpack.exceptions import NumericalError
from ssmpack.filters import (
    AlwaysResample,
    ESSCriterion,
    IdentityResampler,
    NeverResample,
    StratifiedResampler,
    SystematicResampler,
)
from ssmpack.utils import (
    effective_sample_size,
    inverse_cdf_select,
    normalize_log_weights,
    stratified_positions,
    systematic_positions,
)


@pytest.fixture
def particles():
    """[2, 5] particle matrix with distinguishable columns."""
    return np.vstack([np.arange(5.0), 10 * np.arange(5.0)])


# ============================================================================
# Primitives
# ============================================================================

class TestPositions:

    @pytest.mark.parametrize("n", [1, 7, 1000])
    def test_systematic_spacing(self, n):
        u = systematic_positions(n, default_rng(0))
        assert u.shape == (n,)
        assert np.all(u >= 0) and np.all(u < 1)
        np.testing.assert_allclose(np.diff(u), 1.0 / n, atol=1e-12)
        assert u[0] < 1.0 / n
        assert np.all(np.diff(u) > 0)

    def test_stratified_one_per_stratum(self):
        n = 100
        u = stratified_positions(n, default_rng(1))
        np.testing.assert_array_equal(np.floor(u * n), np.arange(n))


class TestInverseCdf:

    def test_selects_smallest_index_exceeding_position(self):
        w = np.array([0.1, 0.2, 0.3, 0.4])
        # cdf = [0.1, 0.3, 0.6, 1.0]
        idx = inverse_cdf_select(w, np.array([0.0, 0.1, 0.29, 0.31, 0.65, 0.999]))
        np.testing.assert_array_equal(idx, [0, 1, 1, 2, 3, 3])

    def test_zero_weights_never_selected(self):
        w = np.array([0.0, 0.5, 0.0, 0.5, 0.0])
        idx = inverse_cdf_select(w, systematic_positions(1000, default_rng(2)))
        assert set(np.unique(idx)) <= {1, 3}

    def test_unnormalized_weights(self):
        idx = inverse_cdf_select(np.array([1.0, 3.0]), np.array([0.2, 0.3]))
        np.testing.assert_array_equal(idx, [0, 1])


class TestWeights:

    def test_ess_uniform(self):
        assert effective_sample_size(np.full(10, 0.1)) == pytest.approx(10.0)

    def test_ess_degenerate(self):
        w = np.zeros(10)
        w[3] = 1.0
        assert effective_sample_size(w) == pytest.approx(1.0)

    def test_normalize_log_weights_stable(self):
        """Log weights far below exp underflow still normalize."""
        w, log_sum = normalize_log_weights(np.array([-1000.0, -1000.0 + np.log(3.0)]))
        np.testing.assert_allclose(w, [0.25, 0.75])
        assert log_sum == pytest.approx(-1000.0 + np.log(4.0))

    def test_normalize_log_weights_all_vanished(self):
        with pytest.raises(NumericalError):
            normalize_log_weights(np.full(4, -np.inf))

    def test_normalize_log_weights_nan(self):
        with pytest.raises(NumericalError):
            normalize_log_weights(np.array([0.0, np.nan]))


# ============================================================================
# Criteria
# ============================================================================

class TestCriteria:

    def test_ess_uniform_does_not_fire(self):
        n = 100
        assert not ESSCriterion(n - 1)(np.full(n, 1.0 / n))

    def test_ess_degenerate_fires(self):
        w = np.zeros(100)
        w[0] = 1.0
        assert ESSCriterion(1.5)(w)

    def test_from_fraction(self):
        c = ESSCriterion.from_fraction(0.5, 200)
        assert c.threshold == 100.0

    def test_always_never(self):
        w = np.full(4, 0.25)
        assert AlwaysResample()(w)
        assert not NeverResample()(w)


# ============================================================================
# Resamplers
# ============================================================================

class TestResamplers:

    @pytest.mark.parametrize("cls", [SystematicResampler, StratifiedResampler])
    def test_fired_resets_weights(self, cls, particles):
        w = np.array([0.05, 0.05, 0.1, 0.2, 0.6])
        p, w2, fired = cls().resample(particles, w, default_rng(0))
        assert fired
        assert p.shape == particles.shape
        np.testing.assert_allclose(w2, np.full(5, 0.2))
        # every resampled column is one of the original columns
        for j in range(5):
            assert any(np.array_equal(p[:, j], particles[:, i]) for i in range(5))

    def test_systematic_counts_within_one(self, particles):
        """Systematic resampling keeps floor(N w_i) or ceil(N w_i) copies."""
        w = np.array([0.1, 0.32, 0.05, 0.35, 0.18])
        p, _, _ = SystematicResampler().resample(particles, w, default_rng(3))
        counts = np.array([np.sum(p[0] == i) for i in range(5)])
        expected = 5 * w
        assert np.all(counts >= np.floor(expected)) and np.all(counts <= np.ceil(expected))
        assert counts.sum() == 5

    def test_criterion_not_fired_is_identity(self, particles):
        w = np.full(5, 0.2)
        r = SystematicResampler(ESSCriterion(2.0))
        p, w2, fired = r.resample(particles, w, default_rng(0))
        assert not fired
        assert p is particles
        np.testing.assert_array_equal(w2, w)

    def test_degenerate_weights_collapse(self, particles):
        w = np.array([0.0, 0.0, 1.0, 0.0, 0.0])
        p, _ = SystematicResampler(ESSCriterion(2.0))(particles, w, default_rng(0))
        np.testing.assert_array_equal(p, np.repeat(particles[:, [2]], 5, axis=1))

    def test_identity(self, particles):
        w = np.array([0.5, 0.5, 0.0, 0.0, 0.0])
        p, w2, fired = IdentityResampler().resample(particles, w)
        assert not fired
        assert p is particles and w2 is w

    def test_thread_generator_used_when_rng_omitted(self, particles):
        from ssmpack.random import set_seed

        w = np.full(5, 0.2)
        set_seed(10)
        a, _ = SystematicResampler()(particles, w)
        set_seed(10)
        b, _ = SystematicResampler()(particles, w)
        np.testing.assert_array_equal(a, b)
