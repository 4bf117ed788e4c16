# -*- coding: utf-8 -*-
"""
var.py

Value-at-Risk / Conditional VaR (Expected Shortfall) sur une série de rendements.

Deux méthodes (variant explicite RiskMethod, une fonction par méthode) :
- HISTORICAL : quantile empirique des rendements triés
- PARAMETRIC : hypothèse gaussienne (moyenne / écart-type empiriques)

Convention
----------
VaR et CVaR sont exprimées en fraction de perte (positive = perte), puis
passées à l'horizon h jours par la règle de la racine du temps (x sqrt(h)).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Union

import numpy as np
import pandas as pd

from qlab.config import clamp_setting
from qlab.log import get_logger
from qlab.market.series import PriceSeries
from qlab.market.types import RiskMeasure
from qlab.stats.distributions import normal_inverse_cdf, normal_pdf

logger = get_logger(__name__)

Returns = Union[np.ndarray, Iterable[float], PriceSeries]


class RiskMethod(Enum):
    HISTORICAL = "historical"
    PARAMETRIC = "parametric"


def log_returns(series: PriceSeries) -> np.ndarray:
    """Rendements logarithmiques d'une série de prix."""
    return series.log_returns()


def _as_returns(returns: Returns) -> np.ndarray:
    if isinstance(returns, PriceSeries):
        arr = returns.log_returns()
    elif isinstance(returns, np.ndarray):
        arr = returns.astype(float)
    else:
        arr = np.asarray(list(returns), dtype=float)
    arr = arr[np.isfinite(arr)]
    if len(arr) == 0:
        raise ValueError("Série de rendements vide.")
    return arr


def _check_confidence(confidence: float) -> float:
    c = float(confidence)
    if not (0.0 < c < 1.0):
        raise ValueError(f"Le niveau de confiance doit être dans (0,1), reçu {confidence!r}")
    return c


# ----------------------------
# Méthodes
# ----------------------------

def historical_var(returns: Returns, confidence: float = 0.95, horizon: int = 1) -> RiskMeasure:
    """
    VaR / CVaR historiques.

    Algorithme
    ----------
    - tri croissant des rendements, alpha = 1 - c, k = floor(alpha N)
    - VaR  = -r_(k) sqrt(h)
    - CVaR = -moyenne(r_(0..k-1)) sqrt(h)   (queue strictement pire que la VaR)

    Queue vide (k = 0) : CVaR = 0 (statistique non définie, pas d'erreur).
    L'horizon est borné dans [1, 252] jours.
    """
    c = _check_confidence(confidence)
    r = np.sort(_as_returns(returns))
    alpha = 1.0 - c
    h = clamp_setting("horizon", horizon)
    scale = math.sqrt(h)

    k = int(math.floor(alpha * len(r)))
    k = min(k, len(r) - 1)

    var = -float(r[k]) * scale
    tail = r[:k]
    cvar = -float(tail.mean()) * scale if len(tail) > 0 else 0.0

    return RiskMeasure(var=var, cvar=cvar, confidence=c, horizon=h)


def parametric_var(returns: Returns, confidence: float = 0.95, horizon: int = 1) -> RiskMeasure:
    """
    VaR / CVaR gaussiennes.

        z_alpha = N^{-1}(1 - c)
        VaR  = -(mu + sigma z_alpha) sqrt(h)
        CVaR = ( -mu + sigma phi(z_alpha) / alpha ) sqrt(h)

    mu : moyenne empirique ; sigma : écart-type sans biais (N - 1).
    La CVaR est l'espérance de perte conditionnelle d'une loi normale,
    elle domine toujours la VaR.
    """
    c = _check_confidence(confidence)
    r = _as_returns(returns)
    alpha = 1.0 - c
    h = clamp_setting("horizon", horizon)
    scale = math.sqrt(h)

    mu = float(r.mean())
    sigma = float(np.std(r, ddof=1)) if len(r) > 1 else 0.0

    z = normal_inverse_cdf(alpha)
    var = -(mu + sigma * z) * scale
    cvar = (-mu + sigma * normal_pdf(z) / alpha) * scale

    return RiskMeasure(var=float(var), cvar=float(cvar), confidence=c, horizon=h)


_METHODS = {
    RiskMethod.HISTORICAL: historical_var,
    RiskMethod.PARAMETRIC: parametric_var,
}


def value_at_risk(
    returns: Returns,
    confidence: float = 0.95,
    horizon: int = 1,
    method: RiskMethod = RiskMethod.HISTORICAL,
) -> RiskMeasure:
    """
    Point d'entrée unique : dispatch sur la méthode demandée.

    Paramètres
    ----------
    returns : array_like | PriceSeries
        Rendements (log) ou série de prix (convertie en rendements log).
    confidence : float
        Niveau c dans (0,1).
    horizon : int
        Horizon en jours de bourse.
    method : RiskMethod

    Retourne
    --------
    RiskMeasure
    """
    measure = _METHODS[RiskMethod(method)](returns, confidence, horizon)
    logger.debug("var_computed", method=RiskMethod(method).value, var=measure.var, cvar=measure.cvar)
    return measure


# ----------------------------
# Affichage
# ----------------------------

def return_histogram(returns: Returns, bins: int = 20) -> pd.DataFrame:
    """
    Histogramme à pas constant des rendements (affichage uniquement).

    Indice de classe : min(bins - 1, floor((r - min) / largeur)).
    Si tous les rendements sont égaux, tout tombe dans la première classe.

    Retourne
    --------
    pd.DataFrame
        Colonnes : range_start, count.
    """
    r = _as_returns(returns)
    bins = max(int(bins), 1)
    lo, hi = float(r.min()), float(r.max())
    width = (hi - lo) / bins

    if width > 0:
        idx = np.minimum(bins - 1, np.floor((r - lo) / width).astype(int))
    else:
        idx = np.zeros(len(r), dtype=int)

    counts = np.bincount(idx, minlength=bins)
    return pd.DataFrame({"range_start": lo + width * np.arange(bins), "count": counts})


@dataclass(frozen=True, eq=False)
class RiskReport:
    """Les deux méthodes + l'histogramme, pour un même jeu de paramètres."""
    historical: RiskMeasure
    parametric: RiskMeasure
    histogram: pd.DataFrame

    def measure(self, method: RiskMethod) -> RiskMeasure:
        return self.historical if RiskMethod(method) is RiskMethod.HISTORICAL else self.parametric


def risk_report(returns: Returns, confidence: float = 0.95, horizon: int = 10, bins: int = 20) -> RiskReport:
    r = _as_returns(returns)
    return RiskReport(
        historical=historical_var(r, confidence, horizon),
        parametric=parametric_var(r, confidence, horizon),
        histogram=return_histogram(r, bins),
    )
