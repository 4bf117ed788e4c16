# -*- coding: utf-8 -*-
"""
cardinality.py

Portefeuilles optimaux sous contrainte de cardinalité (nombre maximal d'actifs).

Le programme mixte en nombres entiers est résolu hors ligne ; ce module ne
sert que les allocations pré-calculées pour un univers fixe de 8 actifs.
"""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from qlab.market.types import AllocationResult

ASSETS = ("Tech", "Healthcare", "Finance", "Energy", "Retail", "Infrastructure", "Bonds", "Gold")

# poids dans l'ordre de ASSETS, par cardinalité maximale
_OPTIMAL = {
    8: (0.20, 0.15, 0.15, 0.10, 0.10, 0.10, 0.15, 0.05),
    7: (0.22, 0.18, 0.15, 0.10, 0.10, 0.10, 0.15, 0.00),
    6: (0.25, 0.20, 0.15, 0.10, 0.00, 0.10, 0.20, 0.00),
    5: (0.30, 0.25, 0.15, 0.00, 0.00, 0.05, 0.25, 0.00),
    4: (0.35, 0.25, 0.10, 0.00, 0.00, 0.00, 0.30, 0.00),
    3: (0.40, 0.30, 0.00, 0.00, 0.00, 0.00, 0.30, 0.00),
    2: (0.60, 0.00, 0.00, 0.00, 0.00, 0.00, 0.40, 0.00),
    1: (1.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00, 0.00),
}


@dataclass(frozen=True, eq=False)
class CardinalityPortfolio:
    """
    max_assets : contrainte de cardinalité
    allocation : poids par actif
    """
    max_assets: int
    allocation: AllocationResult

    @property
    def active_assets(self) -> int:
        return self.allocation.active_assets

    @property
    def total_weight(self) -> float:
        return self.allocation.total_weight

    def to_frame(self) -> pd.DataFrame:
        """Actifs triés par poids croissant (pour un graphique en barres)."""
        df = pd.DataFrame({"asset": list(self.allocation.weights), "weight": list(self.allocation.weights.values())})
        return df.sort_values("weight", kind="stable").reset_index(drop=True)


def cardinality_portfolio(max_assets: int) -> CardinalityPortfolio:
    """
    Allocation optimale pré-calculée pour au plus max_assets actifs.

    Erreurs
    -------
    ValueError si max_assets n'est pas dans 1..8.
    """
    if max_assets not in _OPTIMAL:
        raise ValueError(f"Cardinalité inconnue : {max_assets!r} (attendu 1..{len(ASSETS)})")

    weights = dict(zip(ASSETS, _OPTIMAL[max_assets]))
    return CardinalityPortfolio(max_assets=int(max_assets), allocation=AllocationResult(weights))
