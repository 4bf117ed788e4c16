# -*- coding: utf-8 -*-
"""
cir.py

Modèle de taux court de Cox–Ingersoll–Ross (racine carrée, retour à la moyenne).

    dr = a (b - r) dt + sigma sqrt(r) dW

Schéma d'Euler "full truncation" :
    r <- r + a (b - r) dt + sigma sqrt(max(r, 0)) sqrt(dt) Z
    r <- max(r, 0)

Condition de Feller : 2ab >= sigma^2 garantit r > 0 en temps continu.
Si elle n'est pas remplie, le schéma reste >= 0 grâce au plancher, mais
le taux peut toucher 0.
"""

from __future__ import annotations

import numpy as np

from qlab.log import get_logger
from qlab.models.paths import DiffusionModel, PathSimulation, SimulatedPaths
from qlab.stats.random_source import RandomSource

logger = get_logger(__name__)


class CIRModel(DiffusionModel):
    """
    Paramètres
    ----------
    r0 : taux initial (décimal)
    a : vitesse de retour à la moyenne
    b : moyenne de long terme (décimal)
    sigma : volatilité du taux
    """

    DEFAULTS = {"r0": 0.02, "a": 0.3, "b": 0.03, "sigma": 0.005}

    @property
    def initial_value(self) -> float:
        return max(self.parameters["r0"], 0.0)

    @property
    def feller_condition(self) -> bool:
        """True si 2ab >= sigma^2."""
        a = self.parameters["a"]
        b = self.parameters["b"]
        sigma = self.parameters["sigma"]
        return 2.0 * a * b >= sigma * sigma

    def check_time_step(self, dt: float) -> None:
        if not self.feller_condition:
            logger.warning("cir_feller_condition_violated", **self.parameters)

    def step(self, x: np.ndarray, dt: float, rng: RandomSource) -> np.ndarray:
        a = self.parameters["a"]
        b = self.parameters["b"]
        sigma = self.parameters["sigma"]

        dW = rng.standard_normal(len(x)) * np.sqrt(dt)
        drift = a * (b - x) * dt
        diffusion = sigma * np.sqrt(np.maximum(x, 0.0)) * dW
        return np.maximum(x + drift + diffusion, 0.0)


def simulate_cir(
    r0: float,
    a: float,
    b: float,
    sigma: float,
    T: float,
    n_paths: int = 25,
    n_steps: int = 252,
    rng: RandomSource | None = None,
) -> tuple[SimulatedPaths, bool]:
    """
    Raccourci : trajectoires CIR + statut de la condition de Feller.

    Retourne
    --------
    (paths, feller_met)
    """
    model = CIRModel({"r0": r0, "a": a, "b": b, "sigma": sigma})
    paths = PathSimulation(model, n_paths=n_paths, n_steps=n_steps, rng=rng).simulate(T)
    return paths, model.feller_condition
