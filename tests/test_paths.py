import math

import numpy as np
import pytest
from structlog.testing import capture_logs

from qlab.models.cir import CIRModel, simulate_cir
from qlab.models.gbm import GBMModel
from qlab.models.jump_diffusion import MertonJumpModel
from qlab.models.paths import PathSimulation
from qlab.pricers import black_scholes as bs
from qlab.pricers.monte_carlo import asian_call
from qlab.stats.random_source import RandomSource


def test_gbm_paths_shape_and_mean(rng):
    paths = PathSimulation(GBMModel(), n_paths=2000, n_steps=50, rng=rng).simulate(1.0)

    assert paths.values.shape == (2000, 51)
    assert paths.times[-1] == pytest.approx(1.0)
    assert (paths.values[:, 0] == 100.0).all()
    assert (paths.values > 0).all()
    assert paths.terminal().mean() == pytest.approx(100.0 * math.exp(0.05), abs=2.5)


def test_simulated_paths_views(rng):
    paths = PathSimulation(GBMModel(), n_paths=30, n_steps=10, rng=rng).simulate(1.0)

    shown = paths.display(n=5)
    assert len(shown) == 5
    assert len(shown[0]) == 11
    assert shown[0].points()[0] == (0.0, 100.0)
    assert paths.to_frame().shape == (11, 30)


def test_unknown_model_parameter():
    with pytest.raises(ValueError):
        GBMModel({"S0": 100.0, "kappa": 1.0})


def test_progress_callback(rng):
    payloads = []
    PathSimulation(GBMModel(), n_paths=10, n_steps=100, rng=rng).simulate(
        1.0, progress_cb=payloads.append, progress_every=50
    )

    assert [p["step_i"] for p in payloads] == [50, 100]
    assert payloads[-1]["pct"] == pytest.approx(1.0)
    assert payloads[-1]["stage"] == "steps"


def test_cir_stays_non_negative_over_long_run(rng):
    model = CIRModel({"r0": 0.03, "a": 0.3, "b": 0.03, "sigma": 0.05})
    paths = PathSimulation(model, n_paths=10, n_steps=10_000, rng=rng).simulate(10.0)

    assert model.feller_condition
    assert paths.values.min() >= 0.0
    assert not np.isnan(paths.values).any()


def test_cir_feller_violation_is_logged(rng):
    with capture_logs() as logs:
        paths, feller_met = simulate_cir(0.01, 0.1, 0.01, 0.5, 5.0, n_paths=50, n_steps=500, rng=rng)

    assert not feller_met
    assert paths.values.min() >= 0.0
    assert any(e["event"] == "cir_feller_condition_violated" for e in logs)


def test_jump_diffusion_paths_positive(rng):
    model = MertonJumpModel({"lam": 2.0, "mu_j": -0.2, "delta_j": 0.3})
    paths = PathSimulation(model, n_paths=500, n_steps=252, rng=rng).simulate(1.0)

    assert (paths.values > 0).all()
    assert paths.values.shape == (500, 253)


def test_jump_compensator_vanishes_for_degenerate_jumps():
    assert MertonJumpModel({"mu_j": 0.0, "delta_j": 0.0}).jump_compensator == pytest.approx(0.0)


def test_jump_probability_above_one_is_logged(rng):
    model = MertonJumpModel({"lam": 300.0})
    with capture_logs() as logs:
        PathSimulation(model, n_paths=5, n_steps=100, rng=rng).simulate(1.0)

    assert any(e["event"] == "jump_probability_above_one" for e in logs)


def test_asian_call_below_european():
    res = asian_call(100.0, 100.0, 1.0, 0.05, 0.2, n_paths=5000, n_steps=50, rng=RandomSource(seed=7))

    assert 0.0 < res.price < bs.call_price(100.0, 100.0, 1.0, 0.05, 0.2)
    assert res.std_error > 0.0
    assert res.paths.n_paths == 5000


def test_asian_call_is_reproducible_and_worthless_far_otm():
    a = asian_call(100.0, 100.0, 1.0, 0.05, 0.2, n_paths=200, n_steps=20, rng=RandomSource(seed=1))
    b = asian_call(100.0, 100.0, 1.0, 0.05, 0.2, n_paths=200, n_steps=20, rng=RandomSource(seed=1))
    assert a.price == b.price

    far = asian_call(100.0, 1000.0, 1.0, 0.05, 0.2, n_paths=200, n_steps=20, rng=RandomSource(seed=1))
    assert far.price == 0.0


def test_jump_diffusion_discounted_price_is_martingale():
    n = 20000
    paths = PathSimulation(MertonJumpModel(), n_paths=n, n_steps=50, rng=RandomSource(seed=11)).simulate(1.0)
    s_t = paths.terminal()

    forward = 100.0 * math.exp(0.05)
    assert abs(s_t.mean() - forward) < 4.0 * s_t.std(ddof=1) / math.sqrt(n)


def test_jump_frequency_matches_intensity():
    # Sans diffusion, un saut de -0.5 en log est la seule source de baisse
    model = MertonJumpModel({"sigma": 0.0, "lam": 10.0, "mu_j": -0.5, "delta_j": 0.0})
    paths = PathSimulation(model, n_paths=2000, n_steps=100, rng=RandomSource(seed=5)).simulate(1.0)

    incr = np.diff(np.log(paths.values), axis=1)
    assert (incr < -0.2).mean() == pytest.approx(0.1, abs=0.005)


def test_extreme_jump_dispersion_stays_finite():
    model = MertonJumpModel({"delta_j": 40.0})
    assert model.jump_compensator == math.inf

    paths = PathSimulation(model, n_paths=5, n_steps=10, rng=RandomSource(seed=1)).simulate(1.0)
    assert np.isfinite(paths.values).all()
    assert (paths.values >= 0.0).all()
