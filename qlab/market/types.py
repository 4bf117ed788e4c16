# -*- coding: utf-8 -*-
"""
qlab/market/types.py

Objets valeur échangés avec la couche de présentation.

Tous sont immuables (dataclasses frozen) : une fois émis, un résultat n'est
plus modifié, seulement affiché ou rejoué.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Mapping, Optional


@dataclass(frozen=True)
class PricePoint:
    """Un cours de clôture : (date, prix > 0)."""
    date: date
    price: float


@dataclass(frozen=True)
class SimulatedPath:
    """
    Trajectoire simulée : suite de (temps, valeur) commençant à t = 0.

    times et values ont la même longueur ; values[0] est la valeur initiale.
    """
    times: tuple[float, ...]
    values: tuple[float, ...]

    def __post_init__(self):
        if len(self.times) != len(self.values):
            raise ValueError("times et values doivent avoir la même longueur.")

    def __len__(self) -> int:
        return len(self.values)

    def points(self) -> list[tuple[float, float]]:
        return list(zip(self.times, self.values))


@dataclass(frozen=True)
class RiskMeasure:
    """
    Couple (VaR, CVaR) en fraction de perte décimale.

    confidence : niveau c (ex 0.95)
    horizon : horizon en jours de bourse
    """
    var: float
    cvar: float
    confidence: float
    horizon: int


@dataclass(frozen=True)
class ForecastPoint:
    """Volatilité annualisée prévue à une date (décimal, > 0)."""
    date: date
    annualized_volatility: float


@dataclass(frozen=True)
class AllocationResult:
    """
    Poids par actif (négatif = vente à découvert, > 1 = levier).

    Les poids ne somment pas nécessairement à 1 sauf normalisation explicite.
    """
    weights: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        clean = {}
        for asset, w in self.weights.items():
            w = float(w)
            if not math.isfinite(w):
                raise ValueError(f"Poids non fini pour {asset!r} : {w!r}")
            clean[str(asset)] = w
        object.__setattr__(self, "weights", clean)

    def __getitem__(self, asset: str) -> float:
        return self.weights[asset]

    @property
    def total_weight(self) -> float:
        return float(sum(self.weights.values()))

    @property
    def active_assets(self) -> int:
        return sum(1 for w in self.weights.values() if w != 0.0)


class SignalKind(Enum):
    ENTER_SHORT = "enter_short"
    ENTER_LONG = "enter_long"
    EXIT = "exit"


@dataclass(frozen=True)
class SignalEvent:
    """
    Signal émis par la machine à états de pairs trading.

    date : date de déclenchement (None si la série n'est pas datée)
    kind : type de signal
    z_score : z-score au déclenchement
    ratio : ratio de prix au déclenchement (optionnel)
    """
    date: Optional[date]
    kind: SignalKind
    z_score: float
    ratio: Optional[float] = None
