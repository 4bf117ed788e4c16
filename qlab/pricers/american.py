# -*- coding: utf-8 -*-
"""
american.py

Frontière d'exercice anticipé d'un put américain (aide visuelle).

On utilise l'approximation quadratique de Barone-Adesi & Whaley (sans dividende)
pour le prix critique S*(tau) en dessous duquel il est optimal d'exercer :

    M = N = 2r / sigma^2
    k(tau) = 1 - exp(-r tau)
    q = ( -(N-1) + sqrt((N-1)^2 + 4M/k) ) / 2
    S*(tau) = K (q - 1) / q

À l'échéance (tau = 0) la frontière vaut K.
"""

from __future__ import annotations

import math

import numpy as np
import pandas as pd


def critical_price(K: float, tau: float, r: float, sigma: float) -> float:
    """
    Prix critique approché S*(tau) pour un temps restant tau.

    Sans taux positif (r <= 0) ou sans volatilité, l'exercice anticipé
    d'un put sans dividende n'est jamais optimal : on renvoie 0.
    """
    if tau <= 0:
        return float(K)
    if r <= 0 or sigma <= 0:
        return 0.0

    M = 2.0 * r / (sigma * sigma)
    N = M
    k = 1.0 - math.exp(-r * tau)
    q = (-(N - 1.0) + math.sqrt((N - 1.0) ** 2 + 4.0 * M / k)) / 2.0
    return float(K * (q - 1.0) / q)


def american_put_boundary(K: float, T: float, r: float, sigma: float, steps: int = 50) -> pd.DataFrame:
    """
    Frontière d'exercice sur une grille de dates 0..T.

    Paramètres
    ----------
    K : float
        Strike.
    T : float
        Maturité (années).
    r, sigma : float
        Taux et volatilité (décimaux).
    steps : int
        Nombre d'intervalles de la grille.

    Retourne
    --------
    pd.DataFrame
        Colonnes : time (date depuis aujourd'hui), time_to_expiry, boundary ;
        trié par time croissant.
    """
    taus = np.linspace(0.0, float(T), int(steps) + 1)
    rows = [
        {
            "time": float(T - tau),
            "time_to_expiry": float(tau),
            "boundary": critical_price(K, float(tau), r, sigma),
        }
        for tau in taus
    ]
    return pd.DataFrame(rows).sort_values("time").reset_index(drop=True)
