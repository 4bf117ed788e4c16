# -*- coding: utf-8 -*-
"""
merton.py

Problème de Merton : allocation optimale entre un actif risqué et un actif sans risque
pour un investisseur CRRA (aversion relative au risque gamma).

    pi* = (mu - r) / (gamma sigma^2)

La fraction théorique est toujours rapportée non plafonnée ; seul le poids
affiché est borné (par défaut [-1, 2] : 100% de vente à découvert, 200% de levier).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from qlab.log import get_logger
from qlab.market.types import AllocationResult

logger = get_logger(__name__)

RISKY = "risky"
RISK_FREE = "risk_free"


@dataclass(frozen=True)
class MertonAllocation:
    """
    fraction : pi* non plafonnée (None si gamma sigma^2 <= 0, non définie)
    allocation : poids affichés {risky: pi* plafonnée, risk_free: 1 - pi* plafonnée}
    """
    fraction: Optional[float]
    allocation: AllocationResult

    @property
    def risky_weight(self) -> float:
        return self.allocation[RISKY]

    @property
    def risk_free_weight(self) -> float:
        return self.allocation[RISK_FREE]


def merton_fraction(
    mu: float,
    r: float,
    sigma: float,
    gamma: float,
    cap: tuple[float, float] = (-1.0, 2.0),
) -> MertonAllocation:
    """
    Fraction de Merton et répartition risqué / sans risque.

    Paramètres
    ----------
    mu : float
        Rendement espéré de l'actif risqué (décimal).
    r : float
        Taux sans risque (décimal).
    sigma : float
        Volatilité de l'actif risqué (décimal).
    gamma : float
        Aversion relative au risque.
    cap : (float, float)
        Bornes du poids risqué affiché.

    Retourne
    --------
    MertonAllocation
    """
    denom = float(gamma) * float(sigma) ** 2
    if denom <= 0.0:
        logger.warning("merton_fraction_undefined", gamma=gamma, sigma=sigma)
        return MertonAllocation(
            fraction=None,
            allocation=AllocationResult({RISKY: 0.0, RISK_FREE: 1.0}),
        )

    fraction = (float(mu) - float(r)) / denom
    lo, hi = cap
    capped = max(lo, min(hi, fraction))

    logger.debug("merton_fraction", fraction=fraction, capped=capped)
    return MertonAllocation(
        fraction=fraction,
        allocation=AllocationResult({RISKY: capped, RISK_FREE: 1.0 - capped}),
    )
