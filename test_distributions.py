"""
Tests for distributions and conditional distributions.

Run: pytest test_distributions.py -v
"""

import warnings

import pytest
import numpy as np
from numpy.random import default_rng

from ssmpack.distributions import (
    Categorical,
    Conditional,
    Gaussian,
    StudentT,
    ParameterSpec,
    VariableSpec,
    compatible,
)
from ssmpack.exceptions import ConstructionError, NumericalError, PreconditionError
from ssmpack.maps import FunctionMap, LinearGaussian, TransitionMatrix


# ============================================================================
# Gaussian
# ============================================================================

class TestGaussian:

    N_SAMPLES = 20000

    def test_sample_moments(self):
        """Sample mean and covariance match the parameters."""
        mean = np.array([1.0, -2.0])
        cov = np.array([[2.0, 0.6], [0.6, 1.0]])
        g = Gaussian(mean, cov)
        rng = default_rng(0)
        xs = np.array([g.random(rng=rng) for _ in range(self.N_SAMPLES)])

        np.testing.assert_allclose(xs.mean(axis=0), mean, atol=0.05)
        np.testing.assert_allclose(np.cov(xs.T), cov, atol=0.1)

    def test_likelihood_reference_1d(self):
        g = Gaussian([0.0], [[1.0]])
        assert g.likelihood([0.0]) == pytest.approx(1.0 / np.sqrt(2 * np.pi), rel=1e-12)
        assert g.likelihood([1.0]) == pytest.approx(np.exp(-0.5) / np.sqrt(2 * np.pi), rel=1e-12)

    def test_log_likelihood_reference_2d(self):
        cov = np.array([[2.0, 0.5], [0.5, 1.0]])
        g = Gaussian([1.0, 1.0], cov)
        x = np.array([0.0, 2.0])
        d = x - 1.0
        expected = -0.5 * (2 * np.log(2 * np.pi) + np.log(np.linalg.det(cov))
                           + d @ np.linalg.solve(cov, d))
        assert g.log_likelihood(x) == pytest.approx(expected, rel=1e-10)

    def test_standard(self):
        g = Gaussian.standard(3)
        assert g.dim == 3
        assert np.array_equal(g.mean, np.zeros(3))
        assert np.array_equal(g.covariance, np.eye(3))
        assert g.variable_spec == VariableSpec("real", 3)
        assert g.parameter_spec == ParameterSpec("gaussian", 3)

    def test_parameterize_returns_self(self):
        g = Gaussian.standard(1)
        assert g.parameterize((np.array([2.0]), np.array([[4.0]]))) is g
        assert g.mean[0] == 2.0
        assert g.likelihood([2.0]) == pytest.approx(1.0 / np.sqrt(8 * np.pi))

    def test_caller_arrays_are_not_aliased(self):
        mean, cov = np.zeros(2), np.eye(2)
        g = Gaussian(mean, cov)
        mean[0] = 7.0
        cov[0, 0] = 100.0
        assert g.mean[0] == 0.0
        assert g.covariance[0, 0] == 1.0
        assert g.log_likelihood(np.zeros(2)) == pytest.approx(-np.log(2 * np.pi))

    def test_accessors_are_read_only(self):
        g = Gaussian.standard(2)
        with pytest.raises(ValueError):
            g.mean[0] = 7.0
        with pytest.raises(ValueError):
            g.covariance[0, 0] = 100.0

    def test_parameterize_copies(self):
        g = Gaussian.standard(1)
        mean, cov = np.array([1.0]), np.array([[4.0]])
        g.parameterize((mean, cov))
        cov[0, 0] = 1.0
        assert g.covariance[0, 0] == 4.0
        assert g.likelihood([1.0]) == pytest.approx(1.0 / np.sqrt(8 * np.pi))

    def test_parameterize_wrong_dimension(self):
        g = Gaussian.standard(2)
        with pytest.raises(ValueError):
            g.parameterize((np.zeros(3), np.eye(3)))

    def test_not_positive_definite(self):
        with pytest.raises(NumericalError):
            Gaussian([0.0, 0.0], [[1.0, 2.0], [2.0, 1.0]])

    def test_not_symmetric(self):
        with pytest.raises(NumericalError):
            Gaussian([0.0, 0.0], [[1.0, 0.5], [0.0, 1.0]])

    def test_likelihood_wrong_shape(self):
        with pytest.raises(PreconditionError):
            Gaussian.standard(2).likelihood([0.0])

    def test_seeded_generators_agree(self):
        g = Gaussian.standard(2)
        a = g.random(rng=default_rng(5))
        b = g.random(rng=default_rng(5))
        assert np.array_equal(a, b)


# ============================================================================
# Categorical
# ============================================================================

class TestCategorical:

    N_SAMPLES = 50000

    def test_default_single_category(self):
        c = Categorical()
        assert c.size == 1
        rng = default_rng(0)
        assert all(c.random(rng=rng) == 0 for _ in range(100))
        assert c.likelihood(0) == 1.0

    def test_histogram(self):
        p = np.array([0.2, 0.5, 0.3])
        c = Categorical(p)
        rng = default_rng(1)
        ks = np.array([c.random(rng=rng) for _ in range(self.N_SAMPLES)])
        freq = np.bincount(ks, minlength=3) / self.N_SAMPLES
        np.testing.assert_allclose(freq, p, atol=0.01)

    def test_zero_probability_never_drawn(self):
        c = Categorical([0.0, 1.0, 0.0])
        rng = default_rng(2)
        assert all(c.random(rng=rng) == 1 for _ in range(1000))

    def test_likelihood(self):
        c = Categorical([0.25, 0.75])
        assert c.likelihood(1) == 0.75
        assert c.log_likelihood(0) == pytest.approx(np.log(0.25))

    def test_likelihood_out_of_range(self):
        with pytest.raises(PreconditionError):
            Categorical([0.5, 0.5]).likelihood(2)

    def test_likelihood_rejects_non_integral_label(self):
        c = Categorical([0.25, 0.75])
        with pytest.raises(PreconditionError):
            c.likelihood(1.7)
        with pytest.raises(PreconditionError):
            c.likelihood("1")
        assert c.likelihood(1.0) == 0.75
        assert c.likelihood(np.int64(1)) == 0.75

    def test_invalid_probabilities(self):
        with pytest.raises(ValueError):
            Categorical([-0.1, 1.1])
        with pytest.raises(ValueError):
            Categorical([0.0, 0.0])

    def test_unnormalized_probabilities_warn(self):
        with pytest.warns(RuntimeWarning):
            c = Categorical([1.0, 3.0])
        np.testing.assert_allclose(c.probabilities, [0.25, 0.75])

    def test_normalized_probabilities_do_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            Categorical([0.1, 0.2, 0.7])

    def test_parameterize_size_mismatch(self):
        with pytest.raises(ValueError):
            Categorical.uniform(2).parameterize([0.2, 0.3, 0.5])


# ============================================================================
# Conditional
# ============================================================================

class TestConditional:

    def test_linear_gaussian_conditional(self):
        cpdf = Conditional(Gaussian.standard(1), LinearGaussian([[2.0]], [[1.0]]))
        assert cpdf.arity == 1
        # p(x | y=1) = N(2, 1)
        assert cpdf.likelihood(np.array([2.0]), np.array([1.0])) == pytest.approx(
            1.0 / np.sqrt(2 * np.pi)
        )

    def test_random_follows_condition(self):
        cpdf = Conditional(Gaussian.standard(1), LinearGaussian([[1.0]], [[1e-4]]))
        rng = default_rng(3)
        x = cpdf.random(np.array([5.0]), rng=rng)
        assert x[0] == pytest.approx(5.0, abs=0.1)

    def test_transition_matrix_conditional(self):
        T = np.array([[0.9, 0.2], [0.1, 0.8]])
        cpdf = Conditional(Categorical.uniform(2), TransitionMatrix(T))
        assert cpdf.likelihood(1, 0) == pytest.approx(0.1)
        assert cpdf.likelihood(1, 1) == pytest.approx(0.8)

    def test_parameter_type_mismatch(self):
        with pytest.raises(ConstructionError):
            Conditional(Categorical.uniform(2), LinearGaussian([[1.0]], [[1.0]]))
        with pytest.raises(ConstructionError):
            Conditional(Gaussian.standard(2), LinearGaussian([[1.0]], [[1.0]]))

    def test_wrong_condition_count(self):
        cpdf = Conditional(Gaussian.standard(1), LinearGaussian([[1.0]], [[1.0]]))
        with pytest.raises(PreconditionError):
            cpdf.random()
        with pytest.raises(PreconditionError):
            cpdf.likelihood(np.zeros(1), np.zeros(1), np.zeros(1))

    def test_untyped_function_map(self):
        fmap = FunctionMap(lambda a, b: (np.array([a + b]), np.eye(1)), 2)
        cpdf = Conditional(Gaussian.standard(1), fmap)
        assert cpdf.arity == 2
        assert cpdf.condition_specs == (None, None)
        assert cpdf.likelihood(np.array([3.0]), 1.0, 2.0) == pytest.approx(
            1.0 / np.sqrt(2 * np.pi)
        )


def test_compatible():
    assert compatible(None, VariableSpec("real", 2))
    assert compatible(VariableSpec("real", 2), VariableSpec("real", 2))
    assert not compatible(VariableSpec("real", 2), VariableSpec("real", 3))
    assert not compatible(VariableSpec("real", 2), VariableSpec("categorical", 2))


# ============================================================================
# Student-t
# ============================================================================

class TestStudentT:

    def test_log_likelihood_reference(self):
        from scipy import stats

        t = StudentT([1.0, -1.0], [0.5, 2.0], df=3.0)
        x = np.array([1.2, 0.0])
        expected = (stats.t.logpdf(0.2, df=3.0, scale=0.5)
                    + stats.t.logpdf(1.0, df=3.0, scale=2.0))
        assert t.log_likelihood(x) == pytest.approx(expected, rel=1e-12)

    def test_median_is_location(self):
        t = StudentT([2.0], 1.0, df=2.0)
        rng = default_rng(0)
        xs = np.array([t.random(rng=rng)[0] for _ in range(20000)])
        assert np.median(xs) == pytest.approx(2.0, abs=0.05)

    def test_parameterize_location(self):
        t = StudentT(np.zeros(2), 1.0)
        t.parameterize(np.array([3.0, 4.0]))
        np.testing.assert_array_equal(t.location, [3.0, 4.0])
        assert t.parameter_spec == ParameterSpec("student_t", 2)

    def test_invalid_scale(self):
        with pytest.raises(ValueError):
            StudentT([0.0], [0.0])

    def test_conditional_with_function_map(self):
        fmap = FunctionMap(
            lambda x: 2 * x, 1,
            parameter_spec=ParameterSpec("student_t", 1),
            condition_specs=(VariableSpec("real", 1),),
        )
        cpdf = Conditional(StudentT([0.0], 1.0), fmap)
        assert cpdf.likelihood(np.array([2.0]), np.array([1.0])) == pytest.approx(
            StudentT([0.0], 1.0).likelihood([0.0])
        )
