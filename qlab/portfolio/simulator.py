# -*- coding: utf-8 -*-
"""
simulator.py

Simulation Monte Carlo de la valeur d'un portefeuille (GBM sur la moyenne /
volatilité agrégées) + quantiles terminaux + cône analytique à 90%.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import numpy as np
import pandas as pd

from qlab.log import get_logger
from qlab.market.series import PriceSeries
from qlab.models.gbm import GBMModel
from qlab.models.paths import PathSimulation, SimulatedPaths
from qlab.portfolio.aggregator import PortfolioStats, asset_stats, portfolio_stats
from qlab.stats.random_source import RandomSource

logger = get_logger(__name__)

VOL_CAP = 5.0
CONE_Z = 1.645
PERCENTILES = {"p5": 0.05, "p50": 0.50, "p95": 0.95}


@dataclass(frozen=True, eq=False)
class PortfolioSimulationResult:
    """
    stats : statistiques agrégées (volatilité non plafonnée)
    paths : trajectoires simulées
    percentiles : {"p5", "p50", "p95"} de la valeur terminale
    cone : DataFrame (time, center, lower, upper)
    """
    stats: PortfolioStats
    paths: SimulatedPaths
    percentiles: Dict[str, float]
    cone: pd.DataFrame


def terminal_percentiles(terminal: np.ndarray) -> Dict[str, float]:
    """Quantiles par indice trié floor(N q) (borné à N - 1)."""
    x = np.sort(np.asarray(terminal, dtype=float))
    n = len(x)
    return {k: float(x[min(int(np.floor(n * q)), n - 1)]) for k, q in PERCENTILES.items()}


def value_cone(initial_value: float, mean: float, vol: float, times: np.ndarray) -> pd.DataFrame:
    """
    Cône à 90% :
        center(t) = V0 exp(mu t)
        width(t)  = center(t) sigma sqrt(t) 1.645
    borne basse plancher à 0.
    """
    t = np.asarray(times, dtype=float)
    center = initial_value * np.exp(mean * t)
    width = center * vol * np.sqrt(t) * CONE_Z
    return pd.DataFrame(
        {
            "time": t,
            "center": center,
            "lower": np.maximum(center - width, 0.0),
            "upper": center + width,
        }
    )


def simulate_portfolio(
    weights: Mapping[str, float],
    series: Mapping[str, PriceSeries],
    initial_value: float = 1_000_000.0,
    T: float = 1.0,
    n_paths: int = 1000,
    n_steps: int = 100,
    correlation: float = 0.4,
    rng: Optional[RandomSource] = None,
    progress_cb: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> PortfolioSimulationResult:
    """
    Paramètres
    ----------
    weights : dict[str, float]
        Poids par ticker.
    series : dict[str, PriceSeries]
        Historique par ticker (statistiques annualisées).
    initial_value : float
        Valeur initiale V0.
    T : float
        Horizon (années).
    n_paths, n_steps : int
        Granularité de la simulation.
    correlation : float
        Corrélation supposée entre actifs.
    rng : RandomSource, optionnel
    progress_cb : callable, optionnel

    Erreurs
    -------
    ValueError si un ticker pondéré n'a pas d'historique.
    """
    missing = [t for t in weights if t not in series]
    if missing:
        raise ValueError(f"Tickers inconnus : {missing}")

    stats = portfolio_stats(weights, {t: asset_stats(series[t]) for t in weights}, correlation)

    vol = stats.vol
    if vol > VOL_CAP:
        logger.warning("portfolio_vol_capped", vol=vol, cap=VOL_CAP)
        vol = VOL_CAP

    model = GBMModel({"S0": initial_value, "mu": stats.mean, "sigma": vol})
    paths = PathSimulation(model, n_paths=n_paths, n_steps=n_steps, rng=rng).simulate(T, progress_cb=progress_cb)

    return PortfolioSimulationResult(
        stats=stats,
        paths=paths,
        percentiles=terminal_percentiles(paths.terminal()),
        cone=value_cone(initial_value, stats.mean, vol, paths.times),
    )
