# -*- coding: utf-8 -*-
"""
binomial.py

Treillis binomial de Cox–Ross–Rubinstein (CRR) pour un call européen,
et table de convergence vers Black–Scholes.

Remarque
--------
L'induction rétrograde n'utilise que la valeur de continuation : le pricer
est européen (pas de test d'exercice anticipé).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from qlab.log import get_logger
from qlab.pricers import black_scholes as bs

logger = get_logger(__name__)


def crr_parameters(T: float, r: float, sigma: float, steps: int) -> tuple[float, float, float, float]:
    """
    Paramètres d'un pas du treillis CRR.

        dt = T / n
        u  = exp(sigma sqrt(dt)), d = 1/u
        p  = (exp(r dt) - d) / (u - d)

    Retourne
    --------
    (dt, u, d, p)
    """
    dt = T / steps
    # vol extrême : u = inf, d = 0, p = 0 (ou NaN), filtré par l'appelant
    with np.errstate(over="ignore", invalid="ignore"):
        u = float(np.exp(sigma * np.sqrt(dt)))
        d = 1.0 / u
        p = float((np.exp(r * dt) - d) / (u - d))
    return dt, u, d, p


def binomial_call(S: float, K: float, T: float, r: float, sigma: float, steps: int = 50) -> float:
    """
    Prix d'un call européen par induction rétrograde sur un arbre CRR.

    Étapes
    ------
    1) couche terminale : payoff max(0, S u^{n-i} d^i - K), i = 0..n
    2) à chaque couche antérieure :
         V_i = e^{-r dt} ( p V_i + (1-p) V_{i+1} )
       jusqu'à la racine.

    Paramètres
    ----------
    S, K, T, r, sigma : float
        Spot, strike, maturité (années), taux et volatilité (décimaux).
    steps : int
        Nombre de pas n (>= 1).

    Retourne
    --------
    float
        Prix >= 0, toujours fini. Vaut 0 si la probabilité risque-neutre sort
        de [0,1] (paramètres incompatibles avec l'absence d'arbitrage) ;
        valeur intrinsèque max(0, S-K) si T <= 0 ou sigma <= 0 ;
        borne haute S si l'arbre déborde (volatilité extrême).
    """
    S, K, T, r, sigma = float(S), float(K), float(T), float(r), float(sigma)
    n = max(int(steps), 1)

    if T <= 0 or sigma <= 0:
        logger.warning("binomial_degenerate_inputs", T=T, sigma=sigma)
        return max(0.0, S - K)

    dt, u, d, p = crr_parameters(T, r, sigma, n)

    # Test de non-arbitrage (NaN compris)
    if not (0.0 <= p <= 1.0):
        logger.warning("binomial_no_arbitrage_violated", p=p, steps=n, r=r, sigma=sigma)
        return 0.0

    # Couche terminale (i = nombre de mouvements "down") : S u^{n-i} d^i = S exp(sigma sqrt(dt) (n - 2i))
    i = np.arange(n + 1)
    disc = math.exp(-r * dt)
    with np.errstate(over="ignore", invalid="ignore"):
        values = np.maximum(0.0, S * np.exp(sigma * math.sqrt(dt) * (n - 2 * i)) - K)
        for _ in range(n):
            values = disc * (p * values[:-1] + (1.0 - p) * values[1:])

    root = float(values[0])
    if not math.isfinite(root):
        # Un call ne vaut jamais plus que le sous-jacent
        logger.warning("binomial_overflow", steps=n, sigma=sigma, fallback=S)
        return max(S, 0.0)

    return max(root, 0.0)


@dataclass(frozen=True)
class ConvergenceResult:
    """
    table : colonnes steps, binomial, black_scholes
    black_scholes : prix de référence
    relative_error : |binomial(max_steps) - BS| / BS (0 si BS = 0)
    """
    table: pd.DataFrame
    black_scholes: float
    relative_error: float


def convergence_table(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    max_steps: int = 150,
    stride: int = 5,
) -> ConvergenceResult:
    """
    Compare le prix binomial au prix Black–Scholes pour n = stride, 2 stride, ..., max_steps.

    Dans le cas dégénéré (T <= 0 ou sigma <= 0) la référence est la borne
    max(0, S - K e^{-rT}).
    """
    if T <= 0 or sigma <= 0:
        reference = max(0.0, S - K * math.exp(-r * T))
    else:
        reference = bs.call_price(S, K, T, r, sigma)

    rows = []
    last = 0.0
    for n in range(stride, max_steps + 1, stride):
        last = binomial_call(S, K, T, r, sigma, n)
        rows.append({"steps": n, "binomial": last, "black_scholes": reference})

    error = abs(last - reference) / reference if reference > 0 else 0.0
    return ConvergenceResult(table=pd.DataFrame(rows), black_scholes=reference, relative_error=error)
