import numpy as np
import pytest

from qlab.stats.random_source import RandomSource


def test_standard_normal_moments():
    z = RandomSource(seed=123).standard_normal(100_000)

    assert abs(z.mean()) < 0.02
    assert abs(z.var() - 1.0) < 0.05


def test_uniform_is_open_interval():
    u = RandomSource(seed=1).uniform(50_000)
    assert np.all(u > 0.0)
    assert np.all(u < 1.0)


def test_seed_reproducibility():
    a = RandomSource(seed=7).standard_normal(10)
    b = RandomSource(seed=7).standard_normal(10)
    np.testing.assert_array_equal(a, b)


def test_next_standard_normal_is_float():
    assert isinstance(RandomSource(seed=3).next_standard_normal(), float)


def test_bernoulli_frequency():
    hits = RandomSource(seed=5).bernoulli(0.3, 100_000)
    assert hits.dtype == bool
    assert hits.mean() == pytest.approx(0.3, abs=0.01)
