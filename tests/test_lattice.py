import numpy as np
import pytest
from structlog.testing import capture_logs

from qlab.pricers import black_scholes as bs
from qlab.pricers.american import american_put_boundary, critical_price
from qlab.pricers.binomial import binomial_call, convergence_table, crr_parameters
from qlab.pricers.pde_grid import GridKind, pde_grid
from qlab.stats.random_source import RandomSource


@pytest.mark.parametrize("K", [90.0, 100.0, 110.0])
def test_binomial_converges_to_black_scholes(K):
    ref = bs.call_price(100.0, K, 1.0, 0.05, 0.2)
    assert binomial_call(100.0, K, 1.0, 0.05, 0.2, steps=150) == pytest.approx(ref, rel=0.005)


def test_crr_parameters():
    dt, u, d, p = crr_parameters(1.0, 0.05, 0.2, 50)
    assert dt == pytest.approx(0.02)
    assert u * d == pytest.approx(1.0)
    assert 0.0 < p < 1.0


def test_binomial_degenerate_returns_intrinsic():
    assert binomial_call(110.0, 100.0, 0.0, 0.05, 0.2) == 10.0
    assert binomial_call(90.0, 100.0, 1.0, 0.05, 0.0) == 0.0


def test_binomial_arbitrage_violation_returns_zero():
    # r dt > sigma sqrt(dt) => p > 1
    with capture_logs() as logs:
        price = binomial_call(100.0, 100.0, 1.0, 0.5, 0.01, steps=10)

    assert price == 0.0
    assert any(e["event"] == "binomial_no_arbitrage_violated" for e in logs)


@pytest.mark.parametrize("sigma, steps", [(50.0, 5000), (1000.0, 1), (200.0, 50)])
def test_binomial_extreme_volatility_stays_bounded(sigma, steps):
    price = binomial_call(100.0, 100.0, 1.0, 0.05, sigma, steps=steps)

    assert np.isfinite(price)
    assert 0.0 <= price <= 100.0


def test_binomial_overflow_falls_back_to_spot():
    with capture_logs() as logs:
        price = binomial_call(100.0, 100.0, 1.0, 0.05, 1000.0, steps=1)

    assert price == 100.0
    assert any(e["event"] == "binomial_overflow" for e in logs)


def test_convergence_table():
    res = convergence_table(100.0, 100.0, 1.0, 0.05, 0.2, max_steps=150, stride=5)

    assert list(res.table["steps"]) == list(range(5, 155, 5))
    assert res.black_scholes == pytest.approx(bs.call_price(100.0, 100.0, 1.0, 0.05, 0.2))
    assert res.relative_error < 0.005


def test_convergence_table_degenerate_reference():
    res = convergence_table(110.0, 100.0, 0.0, 0.05, 0.2, max_steps=20, stride=5)

    assert res.black_scholes == pytest.approx(10.0)
    assert (res.table["binomial"] == 10.0).all()
    assert res.relative_error == 0.0


def test_american_put_boundary_shape():
    df = american_put_boundary(100.0, 1.0, 0.05, 0.2, steps=50)

    assert len(df) == 51
    assert df["time"].is_monotonic_increasing
    assert df["boundary"].iloc[-1] == pytest.approx(100.0)
    assert (df["boundary"] <= 100.0 + 1e-9).all()
    assert (df["boundary"] > 0.0).all()
    assert np.all(np.diff(df["boundary"].to_numpy()) >= 0.0)


def test_american_put_never_exercised_without_rates():
    df = american_put_boundary(100.0, 1.0, 0.0, 0.2, steps=10)

    assert (df["boundary"].iloc[:-1] == 0.0).all()
    assert critical_price(100.0, 0.0, 0.0, 0.2) == 100.0


def test_uniform_pde_grid():
    df = pde_grid(GridKind.UNIFORM, K=100.0)

    assert len(df) == 121
    assert df["S"].max() == pytest.approx(200.0)
    assert df["t"].max() == pytest.approx(1.0)


def test_adaptive_pde_grid_is_seeded():
    a = pde_grid("adaptive", K=100.0, rng=RandomSource(seed=11))
    b = pde_grid(GridKind.ADAPTIVE, K=100.0, rng=RandomSource(seed=11))

    assert a.equals(b)
    # 20 points grossiers + raffinements éclaircis (189 autour de K, 105 près de l'échéance)
    assert 20 < len(a) < 20 + 189 + 105


def test_adaptive_pde_grid_is_denser_near_strike():
    df = pde_grid(GridKind.ADAPTIVE, K=100.0, rng=RandomSource(seed=3))

    late = df[df["t"] > 0.2 + 1e-9]
    near = late["S"].between(80.0, 120.0).sum()
    far = (~late["S"].between(80.0, 120.0)).sum()
    assert near > far
