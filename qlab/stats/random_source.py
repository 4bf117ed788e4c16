# -*- coding: utf-8 -*-
"""
random_source.py

Source d'aléa injectable pour les simulateurs (Box–Muller).

Chaque simulateur reçoit explicitement un RandomSource : aucun état global
numpy n'est utilisé, ce qui rend les tests reproductibles via une graine.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


class RandomSource:
    """
    Générateur de N(0,1) par transformation de Box–Muller.

    Deux uniformes indépendantes u, v sur (0,1) donnent :
        z = sqrt(-2 ln u) * cos(2 pi v)

    Paramètres
    ----------
    seed : int | None
        Graine du générateur sous-jacent (np.random.default_rng).
        None => tirages non déterministes.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    # -------------------------
    # Uniformes sur (0,1)
    # -------------------------

    def uniform(self, size: Optional[int] = None):
        """
        Tire des uniformes sur (0,1) (0 exclu : on retire les zéros exacts).

        Paramètres
        ----------
        size : int | None
            None => un float ; sinon un tableau de taille `size`.
        """
        if size is None:
            u = 0.0
            while u == 0.0:
                u = float(self._rng.random())
            return u

        u = self._rng.random(size)
        # Re-tirage des zéros exacts (log(0) interdit)
        zero = u == 0.0
        while np.any(zero):
            u[zero] = self._rng.random(int(zero.sum()))
            zero = u == 0.0
        return u

    # -------------------------
    # Normales
    # -------------------------

    def next_standard_normal(self) -> float:
        """Un tirage N(0,1) (consomme deux uniformes)."""
        u = self.uniform()
        v = self.uniform()
        return float(np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v))

    def standard_normal(self, size: int) -> np.ndarray:
        """
        Version vectorisée de next_standard_normal.

        Paramètres
        ----------
        size : int
            Nombre de tirages.

        Retourne
        --------
        np.ndarray
            Tableau (size,) de N(0,1).
        """
        u = self.uniform(size)
        v = self.uniform(size)
        return np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)

    def bernoulli(self, p: float, size: int) -> np.ndarray:
        """Indicatrices booléennes {U < p} (taille `size`)."""
        return self.uniform(size) < p
