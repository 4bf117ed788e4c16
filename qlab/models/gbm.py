# -*- coding: utf-8 -*-
"""
gbm.py

Mouvement brownien géométrique (prix d'actif, valeur de portefeuille).

    dS = mu S dt + sigma S dW

Pas exact (log-normal) :
    S <- S * exp( (mu - sigma^2/2) dt + sigma sqrt(dt) Z )

Sous la mesure risque-neutre mu = r ; pour un portefeuille, mu et sigma sont
la moyenne et la volatilité agrégées des actifs.
"""

from __future__ import annotations

import numpy as np

from qlab.models.paths import DiffusionModel
from qlab.stats.random_source import RandomSource


class GBMModel(DiffusionModel):
    """
    Paramètres
    ----------
    S0 : valeur initiale
    mu : drift (décimal, = r sous Q)
    sigma : volatilité (décimal)
    """

    DEFAULTS = {"S0": 100.0, "mu": 0.05, "sigma": 0.20}

    @property
    def initial_value(self) -> float:
        return self.parameters["S0"]

    def step(self, x: np.ndarray, dt: float, rng: RandomSource) -> np.ndarray:
        mu = self.parameters["mu"]
        sigma = self.parameters["sigma"]
        z = rng.standard_normal(len(x))
        return x * np.exp((mu - 0.5 * sigma * sigma) * dt + sigma * np.sqrt(dt) * z)
