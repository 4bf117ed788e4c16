# -*- coding: utf-8 -*-
"""
garch.py

Prévision de volatilité GARCH(1,1) et "cône" de prix associé.

    sigma^2_t = omega + alpha eps^2_{t-1} + beta sigma^2_{t-1}

Prévision à partir de la dernière observation :
  - sigma^2_0 : variance d'amorçage (moyenne des rendements au carré)
  - pas 1     : eps^2_0 = dernier rendement observé au carré
  - pas t > 1 : plus de choc observé, E[eps^2] = sigma^2, d'où
                sigma^2_t = omega + (alpha + beta) sigma^2_{t-1}
La prévision converge vers omega / (1 - alpha - beta) si alpha + beta < 1.

Annualisation : sigma_annuel = sigma_jour * sqrt(252).
Les paramètres sont fixés (pas d'estimation par maximum de vraisemblance).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from qlab.log import get_logger
from qlab.market.series import PriceSeries
from qlab.market.types import ForecastPoint

logger = get_logger(__name__)

TRADING_DAYS = 252


@dataclass(frozen=True)
class GarchParameters:
    """
    omega : constante de variance
    alpha : réaction aux chocs passés
    beta  : persistance
    """
    omega: float = 1e-6
    alpha: float = 0.10
    beta: float = 0.88

    @property
    def persistence(self) -> float:
        return self.alpha + self.beta

    @property
    def is_stationary(self) -> bool:
        return self.persistence < 1.0

    @property
    def unconditional_variance(self) -> Optional[float]:
        """omega / (1 - alpha - beta), None si le modèle n'est pas stationnaire."""
        if not self.is_stationary:
            return None
        return self.omega / (1.0 - self.persistence)


def seed_variance(returns) -> float:
    """Variance d'amorçage : moyenne des rendements au carré."""
    r = np.asarray(returns, dtype=float)
    if len(r) == 0:
        return 0.0
    return float(np.mean(r * r))


def conditional_variance(returns, params: GarchParameters = GarchParameters()) -> np.ndarray:
    """
    Filtre GARCH in-sample.

    Retourne
    --------
    np.ndarray
        sigma^2_t pour t = 0..N-1, sigma^2_0 = variance d'amorçage et
        sigma^2_t = omega + alpha r_{t-1}^2 + beta sigma^2_{t-1}.
    """
    r = np.asarray(returns, dtype=float)
    out = np.empty(len(r), dtype=float)
    if len(r) == 0:
        return out

    out[0] = seed_variance(r)
    for t in range(1, len(r)):
        out[t] = params.omega + params.alpha * r[t - 1] ** 2 + params.beta * out[t - 1]
    return out


def forecast_variance(
    last_return: float,
    initial_variance: float,
    params: GarchParameters,
    days: int,
) -> np.ndarray:
    """
    Variances journalières prévues pour les jours 1..days.

    Paramètres
    ----------
    last_return : float
        Dernier rendement observé (eps_0).
    initial_variance : float
        sigma^2_0.
    params : GarchParameters
    days : int
        Horizon de prévision.
    """
    out = np.empty(max(int(days), 0), dtype=float)
    var = float(initial_variance)
    for i in range(len(out)):
        shock = last_return ** 2 if i == 0 else var
        var = params.omega + params.alpha * shock + params.beta * var
        out[i] = max(var, 0.0)
    return out


@dataclass(frozen=True, eq=False)
class VolatilityForecast:
    """
    points : ForecastPoint par jour de prévision
    table  : date, variance, annualized_vol, volatility_pct, center, lower, upper
    """
    points: list[ForecastPoint]
    table: pd.DataFrame


class GarchForecaster:
    """
    Prévision GARCH(1,1) à paramètres fixés.

    Paramètres
    ----------
    params : GarchParameters, optionnel
        Par défaut omega=1e-6, alpha=0.10, beta=0.88.
    trading_days : int
        Convention d'annualisation.
    """

    def __init__(self, params: Optional[GarchParameters] = None, trading_days: int = TRADING_DAYS):
        self.params = params if params is not None else GarchParameters()
        self.trading_days = int(trading_days)

        if not self.params.is_stationary:
            # Non bloquant : l'appelant est censé valider alpha + beta < 1
            logger.warning(
                "garch_not_stationary",
                alpha=self.params.alpha,
                beta=self.params.beta,
                persistence=self.params.persistence,
            )

    def forecast(self, series: PriceSeries, days: int = 60, drift: float = 0.0) -> VolatilityForecast:
        """
        Prévision de volatilité et cône de prix autour du dernier cours.

        Cône au jour t :
            center(t) = S0 exp(drift t / 252)
            width(t)  = S0 sigma_annuel(t) sqrt(t / 252)

        Paramètres
        ----------
        series : PriceSeries
            Historique de prix (au moins 2 points).
        days : int
            Nombre de jours calendaires prévus après la dernière date.
        drift : float
            Drift annuel du centre du cône (0 = centré sur le dernier cours).
        """
        if len(series) < 2:
            raise ValueError("Il faut au moins deux prix pour estimer un rendement.")

        r = series.log_returns()
        daily_var = forecast_variance(r[-1], seed_variance(r), self.params, days)
        annual_vol = np.sqrt(daily_var) * math.sqrt(self.trading_days)

        s0 = series.last_price
        t = np.arange(1, len(daily_var) + 1, dtype=float)
        center = s0 * np.exp(drift * t / self.trading_days)
        width = s0 * annual_vol * np.sqrt(t / self.trading_days)

        dates = pd.DatetimeIndex([series.last_date + pd.Timedelta(days=int(i)) for i in t])

        table = pd.DataFrame(
            {
                "date": dates,
                "variance": daily_var,
                "annualized_vol": annual_vol,
                "volatility_pct": annual_vol * 100.0,
                "center": center,
                "lower": center - width,
                "upper": center + width,
            }
        )
        points = [
            ForecastPoint(date=d.date(), annualized_volatility=float(v))
            for d, v in zip(dates, annual_vol)
        ]
        return VolatilityForecast(points=points, table=table)
