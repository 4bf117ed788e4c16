# -*- coding: utf-8 -*-
"""
black_scholes.py

Pricer fermé Black–Scholes–Merton (calls / puts européens) et outils associés :
- prix call / put
- grecques
- profil de valeur en fonction du spot (valeur temps vs valeur intrinsèque)

Politique des cas dégénérés
---------------------------
Si T <= 0 ou sigma <= 0, on ne lève pas d'erreur : on renvoie la valeur
intrinsèque max(0, S-K) (call) / max(0, K-S) (put).
Si S <= 0 ou K <= 0 (ln(S/K) non défini), on renvoie la limite exacte
max(0, S - K e^{-rT}) (call) / max(0, K e^{-rT} - S) (put).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from qlab.log import get_logger
from qlab.stats.distributions import normal_cdf, normal_pdf

logger = get_logger(__name__)


@dataclass(frozen=True)
class OptionPrice:
    """Prix d'un call et d'un put de mêmes caractéristiques."""
    call: float
    put: float


@dataclass(frozen=True)
class Greeks:
    """Sensibilités d'une option (theta par an, vega/rho pour 1.00 de vol/taux)."""
    delta: float
    gamma: float
    vega: float
    theta: float
    rho: float


def is_degenerate(T: float, sigma: float) -> bool:
    """True si la formule fermée n'est pas définie (T <= 0 ou sigma <= 0)."""
    return T <= 0 or sigma <= 0


def d1_d2(S: float, K: float, T: float, r: float, sigma: float) -> tuple[float, float]:
    """
    Calcule (d1, d2).

        d1 = ( ln(S/K) + (r + sigma^2/2) T ) / ( sigma sqrt(T) )
        d2 = d1 - sigma sqrt(T)
    """
    vol_sqrt_t = sigma * math.sqrt(T)
    d1 = (math.log(S / K) + (r + 0.5 * sigma * sigma) * T) / vol_sqrt_t
    return d1, d1 - vol_sqrt_t


def price(S: float, K: float, T: float, r: float, sigma: float) -> OptionPrice:
    """
    Prix Black–Scholes d'un call et d'un put européens.

        call = S N(d1) - K e^{-rT} N(d2)
        put  = K e^{-rT} N(-d2) - S N(-d1)

    Paramètres
    ----------
    S : float
        Spot.
    K : float
        Strike.
    T : float
        Maturité (années).
    r : float
        Taux sans risque (décimal).
    sigma : float
        Volatilité (décimal).

    Retourne
    --------
    OptionPrice
        Valeur intrinsèque si T <= 0 ou sigma <= 0.
        Bornes d'arbitrage si S <= 0 ou K <= 0.
    """
    S, K, T, r, sigma = float(S), float(K), float(T), float(r), float(sigma)

    if is_degenerate(T, sigma):
        logger.warning("bs_degenerate_inputs", T=T, sigma=sigma)
        return OptionPrice(call=max(0.0, S - K), put=max(0.0, K - S))

    disc_K = K * math.exp(-r * T)

    if S <= 0 or K <= 0:
        logger.warning("bs_boundary_inputs", S=S, K=K)
        return OptionPrice(call=max(0.0, S - disc_K), put=max(0.0, disc_K - S))

    d1, d2 = d1_d2(S, K, T, r, sigma)

    call = S * normal_cdf(d1) - disc_K * normal_cdf(d2)
    put = disc_K * normal_cdf(-d2) - S * normal_cdf(-d1)
    return OptionPrice(call=float(call), put=float(put))


def call_price(S: float, K: float, T: float, r: float, sigma: float) -> float:
    return price(S, K, T, r, sigma).call


def put_price(S: float, K: float, T: float, r: float, sigma: float) -> float:
    return price(S, K, T, r, sigma).put


def greeks(S: float, K: float, T: float, r: float, sigma: float, kind: str = "call") -> Greeks:
    """
    Grecques analytiques d'un call ("call") ou d'un put ("put").

    Cas dégénéré (T <= 0, sigma <= 0, S <= 0 ou K <= 0) : sensibilités de la valeur intrinsèque
    (delta = +1 / -1 dans la monnaie, 0 sinon ; le reste à 0).
    """
    if kind not in ("call", "put"):
        raise ValueError(f"kind doit valoir 'call' ou 'put', reçu {kind!r}")

    S, K, T, r, sigma = float(S), float(K), float(T), float(r), float(sigma)
    is_call = kind == "call"

    if is_degenerate(T, sigma) or S <= 0 or K <= 0:
        if is_call:
            delta = 1.0 if S > K else 0.0
        else:
            delta = -1.0 if S < K else 0.0
        return Greeks(delta=delta, gamma=0.0, vega=0.0, theta=0.0, rho=0.0)

    d1, d2 = d1_d2(S, K, T, r, sigma)
    sqrt_t = math.sqrt(T)
    pdf_d1 = normal_pdf(d1)
    disc_K = K * math.exp(-r * T)

    # Communs aux deux sens
    gamma_ = pdf_d1 / (S * sigma * sqrt_t)
    vega = S * pdf_d1 * sqrt_t
    decay = -S * pdf_d1 * sigma / (2.0 * sqrt_t)

    if is_call:
        delta = normal_cdf(d1)
        theta = decay - r * disc_K * normal_cdf(d2)
        rho = T * disc_K * normal_cdf(d2)
    else:
        delta = normal_cdf(d1) - 1.0
        theta = decay + r * disc_K * normal_cdf(-d2)
        rho = -T * disc_K * normal_cdf(-d2)

    return Greeks(
        delta=float(delta),
        gamma=float(gamma_),
        vega=float(vega),
        theta=float(theta),
        rho=float(rho),
    )


def payoff_profile(
    S: float,
    K: float,
    T: float,
    r: float,
    sigma: float,
    n_points: int = 50,
    span: float = 0.3,
) -> pd.DataFrame:
    """
    Valeur du call / put et valeur intrinsèque sur une grille de spots.

    La grille couvre [S(1-span), S(1+span)] en n_points intervalles.
    span est ramené dans [0, 1] : la grille ne descend pas sous un spot nul.
    L'écart entre valeur et intrinsèque est la valeur temps.

    Retourne
    --------
    pd.DataFrame
        Colonnes : spot, call, put, call_intrinsic, put_intrinsic.
    """
    span = min(max(float(span), 0.0), 1.0)
    spots = np.linspace(S * (1.0 - span), S * (1.0 + span), int(n_points) + 1)

    rows = []
    for spot in spots:
        p = price(spot, K, T, r, sigma)
        rows.append(
            {
                "spot": float(spot),
                "call": max(0.0, p.call),
                "put": max(0.0, p.put),
                "call_intrinsic": max(0.0, spot - K),
                "put_intrinsic": max(0.0, K - spot),
            }
        )
    return pd.DataFrame(rows)
