# -*- coding: utf-8 -*-
"""
qlab/market/series.py

PriceSeries : wrapper d'une série de prix historiques (pd.Series indexée par date).

Hypothèses (vérifiées à la construction)
----------------------------------------
- dates strictement croissantes (pas de doublon)
- prix strictement positifs et finis
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from qlab.market.types import PricePoint


@dataclass(frozen=True, eq=False)
class PriceSeries:
    """
    Série de prix d'un ticker.

    Attributs
    ---------
    prices : pd.Series
        Prix (float) indexés par un DatetimeIndex strictement croissant.
    ticker : str
        Identifiant de l'actif (informatif).
    """
    prices: pd.Series
    ticker: str = ""

    def __post_init__(self):
        s = pd.Series(self.prices, dtype=float).copy()
        s.index = pd.DatetimeIndex(pd.to_datetime(s.index)).normalize()
        s.name = self.ticker or s.name

        if len(s) > 1 and not s.index.is_monotonic_increasing:
            raise ValueError(f"Dates non croissantes dans la série {self.ticker!r}.")
        if s.index.has_duplicates:
            raise ValueError(f"Dates en double dans la série {self.ticker!r}.")
        if not np.all(np.isfinite(s.values)) or np.any(s.values <= 0):
            raise ValueError(f"Prix non positifs ou non finis dans la série {self.ticker!r}.")

        object.__setattr__(self, "prices", s)

    # -------------------------
    # Constructeurs
    # -------------------------

    @classmethod
    def from_points(cls, points: Iterable[PricePoint], ticker: str = "") -> "PriceSeries":
        points = list(points)
        index = pd.DatetimeIndex([pd.Timestamp(p.date) for p in points])
        return cls(pd.Series([p.price for p in points], index=index, dtype=float), ticker=ticker)

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        date_col: str = "date",
        price_col: str = "price",
        ticker: str = "",
    ) -> "PriceSeries":
        """Construit la série depuis un DataFrame (colonnes date / prix)."""
        dates = pd.to_datetime(df[date_col])
        return cls(pd.Series(df[price_col].astype(float).values, index=dates), ticker=ticker)

    # -------------------------
    # Accès
    # -------------------------

    def __len__(self) -> int:
        return len(self.prices)

    @property
    def dates(self) -> pd.DatetimeIndex:
        return self.prices.index

    @property
    def values(self) -> np.ndarray:
        return self.prices.to_numpy(dtype=float)

    @property
    def last_date(self) -> pd.Timestamp:
        return self.prices.index[-1]

    @property
    def last_price(self) -> float:
        return float(self.prices.iloc[-1])

    def points(self) -> list[PricePoint]:
        return [PricePoint(date=d.date(), price=float(p)) for d, p in self.prices.items()]

    def log_returns(self) -> np.ndarray:
        """
        Rendements logarithmiques ln(P_i / P_{i-1}) (longueur n-1).
        """
        v = self.values
        if len(v) < 2:
            return np.zeros(0)
        return np.log(v[1:] / v[:-1])
