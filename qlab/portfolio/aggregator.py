# -*- coding: utf-8 -*-
"""
aggregator.py

Agrégation moyenne / volatilité d'un portefeuille multi-actifs.

- Statistiques par actif : rendements log journaliers annualisés
      mu_a = moyenne * 252 ; sigma_a = écart-type (N-1) * sqrt(252)
- Portefeuille :
      mu_p = sum_i w_i mu_i
      var_p = sum_i sum_j w_i w_j sigma_i sigma_j rho_ij
  avec une corrélation unique rho pour toutes les paires (rho_ii = 1).
  Ce n'est pas une estimation de covariance : c'est une hypothèse simplificatrice.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping

import numpy as np

from qlab.log import get_logger
from qlab.market.series import PriceSeries
from qlab.market.types import AllocationResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssetStats:
    """Moyenne et volatilité annualisées (décimaux)."""
    annual_return: float
    annual_vol: float


@dataclass(frozen=True)
class PortfolioStats:
    mean: float
    vol: float

    @property
    def variance(self) -> float:
        return self.vol ** 2


def asset_stats(series: PriceSeries, trading_days: int = 252) -> AssetStats:
    """
    Statistiques annualisées d'un actif.

    Moins de deux rendements : (0, 0), la série ne contribue pas au risque.
    """
    r = series.log_returns()
    if len(r) < 2:
        return AssetStats(annual_return=0.0, annual_vol=0.0)

    daily_mean = float(r.mean())
    daily_vol = float(np.std(r, ddof=1))
    return AssetStats(
        annual_return=daily_mean * trading_days,
        annual_vol=daily_vol * math.sqrt(trading_days),
    )


def normalize_weights(weights: Mapping[str, float]) -> AllocationResult:
    """Ramène la somme des poids à 1 (inchangés si la somme est <= 0)."""
    total = float(sum(weights.values()))
    if total <= 0.0:
        return AllocationResult(dict(weights))
    return AllocationResult({k: float(w) / total for k, w in weights.items()})


def portfolio_stats(
    weights: Mapping[str, float] | AllocationResult,
    stats: Mapping[str, AssetStats],
    correlation: float = 0.4,
) -> PortfolioStats:
    """
    Moyenne et volatilité annualisées du portefeuille.

    Paramètres
    ----------
    weights : dict | AllocationResult
        Poids par ticker (non normalisés : utilisés tels quels).
    stats : dict[str, AssetStats]
        Statistiques par ticker (voir asset_stats).
    correlation : float
        Corrélation supposée entre chaque paire d'actifs distincts.

    Erreurs
    -------
    ValueError si un ticker pondéré n'a pas de statistiques.
    """
    if isinstance(weights, AllocationResult):
        weights = weights.weights

    tickers = list(weights)
    if not tickers:
        return PortfolioStats(mean=0.0, vol=0.0)

    missing = [t for t in tickers if t not in stats]
    if missing:
        raise ValueError(f"Statistiques manquantes pour les tickers : {missing}")

    w = np.array([weights[t] for t in tickers], dtype=float)
    mu = np.array([stats[t].annual_return for t in tickers], dtype=float)
    sig = np.array([stats[t].annual_vol for t in tickers], dtype=float)

    rho = np.full((len(tickers), len(tickers)), float(correlation))
    np.fill_diagonal(rho, 1.0)

    ws = w * sig
    variance = float(ws @ rho @ ws)
    # dérive flottante / poids exotiques
    variance = max(variance, 0.0)

    return PortfolioStats(mean=float(w @ mu), vol=math.sqrt(variance))
