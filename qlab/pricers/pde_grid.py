# -*- coding: utf-8 -*-
"""
pde_grid.py

Points de discrétisation du plan (t, S) pour un solveur EDP d'option.

- UNIFORM  : maillage régulier à 10 % sur t in [0,1] et S in [0, 2K]
- ADAPTIVE : maillage grossier loin du strike, raffiné (et aléatoirement
             éclairci) autour de K et près de l'échéance, là où le gamma est fort
"""

from __future__ import annotations

from enum import Enum

import numpy as np
import pandas as pd

from qlab.stats.random_source import RandomSource

# Probabilité de garder un point raffiné
KEEP_PROBABILITY = 0.7


class GridKind(Enum):
    UNIFORM = "uniform"
    ADAPTIVE = "adaptive"


def _uniform_grid(K: float) -> list[tuple[float, float]]:
    ts = np.linspace(0.0, 1.0, 11)
    ss = np.linspace(0.0, 2.0 * K, 11)
    return [(float(t), float(s)) for t in ts for s in ss]


def _adaptive_grid(K: float, rng: RandomSource) -> list[tuple[float, float]]:
    points = []

    # Grossier hors de la zone [0.8K, 1.2K]
    for t in np.linspace(0.2, 1.0, 5):
        for s in np.linspace(0.0, 2.0 * K, 6):
            if s < 0.8 * K or s > 1.2 * K:
                points.append((float(t), float(s)))

    # Raffinement autour du strike
    near_strike = [(t, s) for t in np.linspace(0.0, 1.0, 21) for s in np.linspace(0.8 * K, 1.2 * K, 9)]
    keep = rng.uniform(len(near_strike)) < KEEP_PROBABILITY
    points.extend((float(t), float(s)) for (t, s), k in zip(near_strike, keep) if k)

    # Raffinement près de l'échéance
    near_expiry = [(t, s) for t in np.linspace(0.0, 0.2, 5) for s in np.linspace(0.0, 2.0 * K, 21)]
    keep = rng.uniform(len(near_expiry)) < KEEP_PROBABILITY
    points.extend((float(t), float(s)) for (t, s), k in zip(near_expiry, keep) if k)

    return points


def pde_grid(kind: GridKind, K: float = 100.0, rng: RandomSource | None = None) -> pd.DataFrame:
    """
    Génère les nœuds du maillage.

    Paramètres
    ----------
    kind : GridKind
        Type de maillage.
    K : float
        Strike (centre de la zone raffinée).
    rng : RandomSource, optionnel
        Aléa pour l'éclaircissement du maillage adaptatif.

    Retourne
    --------
    pd.DataFrame
        Colonnes t (temps normalisé) et S (spot).
    """
    kind = GridKind(kind)
    if kind is GridKind.UNIFORM:
        points = _uniform_grid(K)
    else:
        points = _adaptive_grid(K, rng if rng is not None else RandomSource())
    return pd.DataFrame(points, columns=["t", "S"])
