# -*- coding: utf-8 -*-
"""
monte_carlo.py

Pricing Monte Carlo d'un call asiatique à moyenne arithmétique sous GBM.

    prix = e^{-rT} * (1/N) * sum_paths max(0, moyenne(S_path) - K)

La moyenne porte sur les n_steps + 1 points de la trajectoire (S0 inclus).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import numpy as np

from qlab.log import get_logger
from qlab.models.gbm import GBMModel
from qlab.models.paths import PathSimulation, SimulatedPaths
from qlab.stats.random_source import RandomSource

logger = get_logger(__name__)


@dataclass(frozen=True, eq=False)
class AsianResult:
    """
    price : prix Monte Carlo du call asiatique
    std_error : erreur standard de l'estimateur (actualisée)
    paths : trajectoires simulées
    """
    price: float
    std_error: float
    paths: SimulatedPaths


def asian_payoffs(paths: SimulatedPaths, K: float) -> np.ndarray:
    """Payoffs max(0, moyenne - K), un par trajectoire."""
    return np.maximum(paths.values.mean(axis=1) - K, 0.0)


def asian_call(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    n_paths: int = 1000,
    n_steps: int = 100,
    rng: Optional[RandomSource] = None,
    progress_cb: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> AsianResult:
    """
    Prix d'un call asiatique arithmétique par simulation GBM risque-neutre.

    Paramètres
    ----------
    S, K, T, r, sigma : float
        Spot, strike, maturité (années), taux et vol (décimaux).
    n_paths : int
        Nombre de trajectoires.
    n_steps : int
        Nombre de dates d'observation (hors t = 0).
    rng : RandomSource, optionnel
        Source d'aléa (graine pour reproductibilité).
    progress_cb : callable, optionnel
        Callback de progression transmis au moteur de simulation.

    Retourne
    --------
    AsianResult
    """
    model = GBMModel({"S0": S, "mu": r, "sigma": sigma})
    sim = PathSimulation(model, n_paths=n_paths, n_steps=n_steps, rng=rng)
    paths = sim.simulate(T, progress_cb=progress_cb)

    payoffs = asian_payoffs(paths, K)
    disc = math.exp(-r * max(float(T), 0.0))

    price = disc * float(payoffs.mean())
    std_error = disc * float(payoffs.std(ddof=1) / math.sqrt(len(payoffs))) if len(payoffs) > 1 else 0.0

    logger.debug("asian_call_priced", price=price, std_error=std_error, n_paths=sim.n_paths)
    return AsianResult(price=price, std_error=std_error, paths=paths)
