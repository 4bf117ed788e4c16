# -*- coding: utf-8 -*-
"""
jump_diffusion.py

Modèle de Merton (diffusion + sauts log-normaux), sous la mesure risque-neutre.

Par pas de temps :
  - saut avec probabilité lambda dt (Bernoulli, approximation du Poisson)
  - facteur de saut J = exp(mu_J + delta_J Z_J)
  - drift compensé : (r - sigma^2/2 - lambda (e^{mu_J + delta_J^2/2} - 1)) dt

    S <- S * exp(drift + sigma sqrt(dt) Z) * (J si saut, 1 sinon)

L'approximation de Bernoulli n'est valable que pour lambda dt petit : rien
ne l'impose, on se contente d'un warning quand lambda dt > 1.
"""

from __future__ import annotations

import numpy as np

from qlab.log import get_logger
from qlab.models.paths import DiffusionModel
from qlab.stats.random_source import RandomSource

logger = get_logger(__name__)


class MertonJumpModel(DiffusionModel):
    """
    Paramètres
    ----------
    S0 : spot initial
    r : taux sans risque (décimal)
    sigma : volatilité de diffusion (décimal)
    lam : intensité des sauts (par an)
    mu_j : moyenne du log-saut
    delta_j : écart-type du log-saut
    """

    DEFAULTS = {"S0": 100.0, "r": 0.05, "sigma": 0.20, "lam": 0.5, "mu_j": -0.1, "delta_j": 0.2}

    @property
    def initial_value(self) -> float:
        return self.parameters["S0"]

    @property
    def jump_compensator(self) -> float:
        """lambda * (E[J] - 1), avec E[J] = exp(mu_J + delta_J^2 / 2)."""
        p = self.parameters
        if p["lam"] == 0:
            return 0.0
        # delta_J extrême : E[J] = inf, le drift vaut -inf et les trajectoires tombent à 0
        with np.errstate(over="ignore"):
            return float(p["lam"] * (np.exp(p["mu_j"] + 0.5 * p["delta_j"] ** 2) - 1.0))

    def check_time_step(self, dt: float) -> None:
        prob = self.parameters["lam"] * dt
        if prob > 1.0:
            logger.warning("jump_probability_above_one", lam=self.parameters["lam"], dt=dt, prob=prob)

    def step(self, x: np.ndarray, dt: float, rng: RandomSource) -> np.ndarray:
        p = self.parameters
        n = len(x)

        drift = (p["r"] - 0.5 * p["sigma"] ** 2 - self.jump_compensator) * dt
        diffusion = p["sigma"] * np.sqrt(dt) * rng.standard_normal(n)

        jumps = rng.bernoulli(p["lam"] * dt, n)
        jump_factor = np.where(jumps, np.exp(p["mu_j"] + p["delta_j"] * rng.standard_normal(n)), 1.0)

        return x * np.exp(drift + diffusion) * jump_factor
