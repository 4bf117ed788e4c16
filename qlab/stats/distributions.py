# -*- coding: utf-8 -*-
"""
distributions.py

Bibliothèque de lois utilisée par les pricers et le moteur de risque :
- N(x) : approximation polynomiale d'Abramowitz–Stegun (26.2.17)
- N^{-1}(p) : approximation rationnelle d'Acklam
- Gamma (Lanczos) et densité de Student
- kurtosis de Student, comparaison des queues normale / Student

Tout est écrit "à la main" (pas de scipy.stats) pour garder des formules
identiques à celles affichées dans l'application ; les tests les comparent
à scipy.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

SQRT_2PI = math.sqrt(2.0 * math.pi)
INV_SQRT_2PI = 1.0 / SQRT_2PI

# Abramowitz–Stegun 26.2.17
_AS_P = 0.2316419
_AS_B = (0.3193815, -0.3565638, 1.781478, -1.821256, 1.330274)

# Acklam : numérateur / dénominateur région centrale (a, b) et queues (c, d)
_A = (-39.69683028665376, 220.9460984245205, -275.9285104469687,
      138.3577518672690, -30.66479806614716, 2.506628277459239)
_B = (-54.47609879822406, 161.5858368580409, -155.6989798598866,
      66.80131188771972, -13.28068155288572)
_C = (-7.784894002430293e-3, -0.3223964580411365, -2.400758277161838,
      -2.549732539343734, 4.374664141464968, 2.938163982698783)
_D = (7.784695709041462e-3, 0.3224671290700398, 2.445134137142996,
      3.754408661907416)
P_LOW = 0.02425
P_HIGH = 1.0 - P_LOW

# Lanczos (g = 7, 9 coefficients)
_LANCZOS_G = 7
_LANCZOS = (
    0.99999999999980993, 676.5203681218851, -1259.1392167224028,
    771.32342877765313, -176.61502916214059, 12.507343278686905,
    -0.13857109526572012, 9.9843695780195716e-6, 1.5056327351493116e-7,
)


# ----------------------------
# Loi normale
# ----------------------------

def normal_pdf(x, mu: float = 0.0, sigma: float = 1.0):
    """Densité de N(mu, sigma^2) (scalaire ou tableau)."""
    z = (np.asarray(x, dtype=float) - mu) / sigma
    out = INV_SQRT_2PI / sigma * np.exp(-0.5 * z * z)
    return float(out) if out.ndim == 0 else out


def normal_cdf(x):
    """
    Fonction de répartition de N(0,1), approximation d'Abramowitz–Stegun.

    Formule (pour x >= 0)
    ---------------------
        t = 1 / (1 + p|x|)
        N(-|x|) ~ phi(x) * (b1 t + b2 t^2 + b3 t^3 + b4 t^4 + b5 t^5)

    La queue est calculée sur |x| puis reflétée : N(-x) = 1 - N(x) tient donc
    par construction, et N(0) = 0.5 exactement.

    Paramètres
    ----------
    x : float ou array_like

    Retourne
    --------
    float ou np.ndarray
        N(x), erreur absolue ~1e-7.
    """
    xa = np.asarray(x, dtype=float)
    ax = np.abs(xa)
    t = 1.0 / (1.0 + _AS_P * ax)

    b1, b2, b3, b4, b5 = _AS_B
    poly = t * (b1 + t * (b2 + t * (b3 + t * (b4 + t * b5))))
    tail = INV_SQRT_2PI * np.exp(-0.5 * ax * ax) * poly

    out = np.where(xa > 0, 1.0 - tail, tail)
    out = np.where(xa == 0, 0.5, out)
    return float(out) if out.ndim == 0 else out


def normal_inverse_cdf(p: float) -> float:
    """
    Quantile de N(0,1) par l'approximation rationnelle d'Acklam.

    Trois régions : queue basse (p < 0.02425), centre, queue haute.

    Paramètres
    ----------
    p : float
        Probabilité, strictement dans (0, 1).

    Retourne
    --------
    float
        x tel que N(x) = p (erreur relative ~1e-9).

    Erreurs
    -------
    ValueError si p n'est pas dans (0, 1).
    """
    p = float(p)
    if not (0.0 < p < 1.0):
        raise ValueError(f"normal_inverse_cdf : p doit être dans (0,1), reçu {p!r}")

    c1, c2, c3, c4, c5, c6 = _C
    d1, d2, d3, d4 = _D

    if p < P_LOW:
        q = math.sqrt(-2.0 * math.log(p))
        return (((((c1 * q + c2) * q + c3) * q + c4) * q + c5) * q + c6) / \
               ((((d1 * q + d2) * q + d3) * q + d4) * q + 1.0)

    if p <= P_HIGH:
        a1, a2, a3, a4, a5, a6 = _A
        b1, b2, b3, b4, b5 = _B
        q = p - 0.5
        r = q * q
        return (((((a1 * r + a2) * r + a3) * r + a4) * r + a5) * r + a6) * q / \
               (((((b1 * r + b2) * r + b3) * r + b4) * r + b5) * r + 1.0)

    q = math.sqrt(-2.0 * math.log(1.0 - p))
    return -(((((c1 * q + c2) * q + c3) * q + c4) * q + c5) * q + c6) / \
            ((((d1 * q + d2) * q + d3) * q + d4) * q + 1.0)


# ----------------------------
# Gamma / Student
# ----------------------------

def gamma(z: float) -> float:
    """
    Fonction Gamma, approximation de Lanczos.

    Pour z < 0.5 on passe par la formule de réflexion :
        Gamma(z) Gamma(1-z) = pi / sin(pi z)
    """
    z = float(z)
    if z < 0.5:
        return math.pi / (math.sin(math.pi * z) * gamma(1.0 - z))

    z -= 1.0
    x = _LANCZOS[0]
    for i in range(1, _LANCZOS_G + 2):
        x += _LANCZOS[i] / (z + i)
    t = z + _LANCZOS_G + 0.5
    return SQRT_2PI * t ** (z + 0.5) * math.exp(-t) * x


def log_gamma(z: float) -> float:
    """ln Gamma(z) pour z > 0 (même série de Lanczos, sans overflow)."""
    z = float(z)
    if z < 0.5:
        return math.log(math.pi / math.sin(math.pi * z)) - log_gamma(1.0 - z)

    z -= 1.0
    x = _LANCZOS[0]
    for i in range(1, _LANCZOS_G + 2):
        x += _LANCZOS[i] / (z + i)
    t = z + _LANCZOS_G + 0.5
    return 0.5 * math.log(2.0 * math.pi) + (z + 0.5) * math.log(t) - t + math.log(x)


def student_t_pdf(x, nu: float):
    """
    Densité de Student à nu degrés de liberté.

        f(x) = Gamma((nu+1)/2) / ( sqrt(nu pi) Gamma(nu/2) ) * (1 + x^2/nu)^(-(nu+1)/2)

    Le ratio des Gamma passe par log_gamma pour rester stable quand nu est grand.

    Paramètres
    ----------
    x : float ou array_like
    nu : float
        Degrés de liberté (nu >= 1 en pratique).
    """
    nu = float(nu)
    xa = np.asarray(x, dtype=float)
    log_norm = log_gamma(0.5 * (nu + 1.0)) - log_gamma(0.5 * nu) - 0.5 * math.log(nu * math.pi)
    out = np.exp(log_norm) * (1.0 + xa * xa / nu) ** (-0.5 * (nu + 1.0))
    return float(out) if out.ndim == 0 else out


def excess_kurtosis(nu: float) -> Optional[float]:
    """
    Kurtosis de la loi de Student, à comparer au 3 de la loi normale.

        k(nu) = 3 + 6 / (nu - 4)   pour nu > 4

    Retourne None (non défini) pour nu <= 4 : le quatrième moment est infini.
    """
    nu = float(nu)
    if nu <= 4.0:
        return None
    return 3.0 + 6.0 / (nu - 4.0)


@dataclass(frozen=True)
class TailComparison:
    """
    Comparaison normale vs Student pour l'affichage des queues épaisses.

    table : colonnes x, gaussian, student_t
    normal_kurtosis : 3
    student_t_kurtosis : float | None (None = non défini)
    """
    table: pd.DataFrame
    normal_kurtosis: float
    student_t_kurtosis: Optional[float]


def tail_comparison(nu: float, x_min: float = -5.0, x_max: float = 5.0, step: float = 0.1) -> TailComparison:
    """
    Évalue les deux densités sur une grille régulière [x_min, x_max].

    Paramètres
    ----------
    nu : float
        Degrés de liberté de la Student.
    x_min, x_max, step : float
        Grille d'évaluation.
    """
    n = int(round((x_max - x_min) / step)) + 1
    x = np.round(x_min + step * np.arange(n), 10)

    table = pd.DataFrame(
        {
            "x": x,
            "gaussian": normal_pdf(x),
            "student_t": student_t_pdf(x, nu),
        }
    )
    return TailComparison(table=table, normal_kurtosis=3.0, student_t_kurtosis=excess_kurtosis(nu))
