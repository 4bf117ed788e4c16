import math

import pytest
from scipy import stats
from structlog.testing import capture_logs

from qlab.pricers import black_scholes as bs


def _scipy_call(S, K, T, r, sigma):
    d1 = (math.log(S / K) + (r + 0.5 * sigma ** 2) * T) / (sigma * math.sqrt(T))
    d2 = d1 - sigma * math.sqrt(T)
    return S * stats.norm.cdf(d1) - K * math.exp(-r * T) * stats.norm.cdf(d2)


def test_reference_prices():
    p = bs.price(100.0, 100.0, 1.0, 0.05, 0.20)
    assert p.call == pytest.approx(10.4506, abs=1e-3)
    assert p.put == pytest.approx(5.5735, abs=1e-3)


@pytest.mark.parametrize("K", [80.0, 100.0, 125.0])
def test_call_matches_scipy_formula(K):
    assert bs.call_price(100.0, K, 0.5, 0.03, 0.25) == pytest.approx(_scipy_call(100.0, K, 0.5, 0.03, 0.25), abs=1e-4)


def test_put_call_parity():
    S, K, T, r, sigma = 105.0, 95.0, 2.0, 0.04, 0.3
    p = bs.price(S, K, T, r, sigma)
    assert p.call - p.put == pytest.approx(S - K * math.exp(-r * T), abs=1e-8)


@pytest.mark.parametrize("T, sigma", [(0.0, 0.2), (-1.0, 0.2), (1.0, 0.0)])
def test_degenerate_inputs_return_intrinsic_value(T, sigma):
    with capture_logs() as logs:
        p = bs.price(110.0, 100.0, T, 0.05, sigma)

    assert p.call == 10.0
    assert p.put == 0.0
    assert any(e["event"] == "bs_degenerate_inputs" for e in logs)


def test_greeks_match_analytic_scipy():
    S, K, T, r, sigma = 100.0, 100.0, 1.0, 0.05, 0.2
    d1 = (math.log(S / K) + (r + 0.5 * sigma ** 2) * T) / (sigma * math.sqrt(T))

    call = bs.greeks(S, K, T, r, sigma, kind="call")
    put = bs.greeks(S, K, T, r, sigma, kind="put")

    assert call.delta == pytest.approx(stats.norm.cdf(d1), abs=1e-6)
    assert put.delta == pytest.approx(stats.norm.cdf(d1) - 1.0, abs=1e-6)
    assert call.gamma == pytest.approx(stats.norm.pdf(d1) / (S * sigma * math.sqrt(T)))
    assert call.gamma == pytest.approx(put.gamma)
    assert call.vega == pytest.approx(put.vega)
    assert call.rho > 0 > put.rho


def test_greeks_degenerate():
    assert bs.greeks(110.0, 100.0, 0.0, 0.05, 0.2, "call").delta == 1.0
    assert bs.greeks(90.0, 100.0, 0.0, 0.05, 0.2, "call").delta == 0.0
    assert bs.greeks(90.0, 100.0, 0.0, 0.05, 0.2, "put").delta == -1.0
    assert bs.greeks(90.0, 100.0, 1.0, 0.05, 0.0, "put").vega == 0.0


def test_greeks_rejects_unknown_kind():
    with pytest.raises(ValueError):
        bs.greeks(100.0, 100.0, 1.0, 0.05, 0.2, kind="straddle")


def test_payoff_profile():
    df = bs.payoff_profile(100.0, 100.0, 1.0, 0.05, 0.2, n_points=50, span=0.3)

    assert list(df.columns) == ["spot", "call", "put", "call_intrinsic", "put_intrinsic"]
    assert len(df) == 51
    assert df["spot"].iloc[0] == pytest.approx(70.0)
    assert df["spot"].iloc[-1] == pytest.approx(130.0)
    assert (df["call"] >= df["call_intrinsic"] - 1e-9).all()
    assert (df[["call", "put"]] >= 0).all().all()


def test_zero_strike_or_spot_returns_arbitrage_bounds():
    with capture_logs() as logs:
        p = bs.price(100.0, 0.0, 1.0, 0.05, 0.2)
    assert p.call == pytest.approx(100.0)
    assert p.put == 0.0
    assert any(e["event"] == "bs_boundary_inputs" for e in logs)

    q = bs.price(0.0, 100.0, 1.0, 0.05, 0.2)
    assert q.call == 0.0
    assert q.put == pytest.approx(100.0 * math.exp(-0.05))
    assert bs.greeks(0.0, 100.0, 1.0, 0.05, 0.2, "put").delta == -1.0


def test_payoff_profile_full_span_starts_at_zero_spot():
    df = bs.payoff_profile(100.0, 100.0, 1.0, 0.05, 0.2, span=1.0)

    assert df["spot"].iloc[0] == 0.0
    assert df["call"].iloc[0] == 0.0
    assert df["put"].iloc[0] == pytest.approx(100.0 * math.exp(-0.05))
    assert bs.payoff_profile(100.0, 100.0, 1.0, 0.05, 0.2, span=3.0)["spot"].min() == 0.0
