# -*- coding: utf-8 -*-
"""
paths.py

Moteur Monte Carlo générique (schéma d'Euler / pas exact) pour les modèles
de diffusion du labo, et conteneur des trajectoires simulées.

Un modèle expose :
  - initial_value        : valeur en t = 0
  - step(x, dt, rng)     : vecteur des valeurs au pas suivant (n_paths,)
  - non_negative         : True si le processus doit rester >= 0
  - check_time_step(dt)  : hook de validation (log uniquement, jamais d'erreur)

Les trajectoires sont simulées en bloc : une mise à jour vectorielle numpy
par pas de temps, toutes trajectoires confondues.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import numpy as np
import pandas as pd

from qlab.log import get_logger
from qlab.market.types import SimulatedPath
from qlab.stats.random_source import RandomSource

logger = get_logger(__name__)


class DiffusionModel:
    """
    Base des modèles simulables.

    Attributs
    ---------
    parameters : dict
        Paramètres du modèle (DEFAULTS complétés par les overrides).
    """

    DEFAULTS: Dict[str, float] = {}
    non_negative: bool = True

    def __init__(self, parameters: Optional[dict] = None):
        if parameters is None:
            parameters = {}
        unknown = set(parameters) - set(self.DEFAULTS)
        if unknown:
            raise ValueError(f"Paramètres inconnus pour {type(self).__name__} : {sorted(unknown)}")
        self.parameters = {k: float(parameters.get(k, v)) for k, v in self.DEFAULTS.items()}

    @property
    def initial_value(self) -> float:
        raise NotImplementedError

    def step(self, x: np.ndarray, dt: float, rng: RandomSource) -> np.ndarray:
        raise NotImplementedError

    def check_time_step(self, dt: float) -> None:
        return None


@dataclass(frozen=True, eq=False)
class SimulatedPaths:
    """
    Bloc de trajectoires.

    Attributs
    ---------
    times : np.ndarray
        Grille (n_steps + 1,), times[0] = 0.
    values : np.ndarray
        Valeurs (n_paths, n_steps + 1), values[:, 0] = valeur initiale.
    """
    times: np.ndarray
    values: np.ndarray

    @property
    def n_paths(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_steps(self) -> int:
        return int(self.values.shape[1] - 1)

    def path(self, i: int) -> SimulatedPath:
        return SimulatedPath(
            times=tuple(float(t) for t in self.times),
            values=tuple(float(v) for v in self.values[i]),
        )

    def display(self, n: int = 25) -> list[SimulatedPath]:
        """Les n premières trajectoires (pour un graphique)."""
        return [self.path(i) for i in range(min(int(n), self.n_paths))]

    def terminal(self) -> np.ndarray:
        return self.values[:, -1].copy()

    def to_frame(self) -> pd.DataFrame:
        """DataFrame indexé par le temps, une colonne par trajectoire."""
        return pd.DataFrame(self.values.T, index=pd.Index(self.times, name="time"))


class PathSimulation:
    """
    Simule n_paths trajectoires de n_steps pas d'un DiffusionModel.

    Paramètres
    ----------
    model : DiffusionModel
        Modèle à simuler.
    n_paths : int
        Nombre de trajectoires.
    n_steps : int
        Nombre de pas de temps.
    rng : RandomSource, optionnel
        Source d'aléa injectée (une nouvelle source non déterministe sinon).
    """

    def __init__(
        self,
        model: DiffusionModel,
        n_paths: int = 1000,
        n_steps: int = 252,
        rng: Optional[RandomSource] = None,
    ):
        self.model = model
        self.n_paths = max(int(n_paths), 1)
        self.n_steps = max(int(n_steps), 1)
        self.rng = rng if rng is not None else RandomSource()

    def simulate(
        self,
        T: float,
        progress_cb: Optional[Callable[[Dict[str, Any]], None]] = None,
        progress_every: int = 50,
    ) -> SimulatedPaths:
        """
        Simule les trajectoires sur [0, T].

        Paramètres
        ----------
        T : float
            Horizon (années).
        progress_cb : callable, optionnel
            Reçoit un dict {"stage", "step_i", "step_n", "pct", "elapsed_s"}.
        progress_every : int
            Fréquence des appels au callback (en pas).

        Retourne
        --------
        SimulatedPaths
            Sans NaN ; >= 0 pour les modèles non négatifs.
        """
        T = max(float(T), 0.0)
        dt = T / self.n_steps
        self.model.check_time_step(dt)

        logger.debug(
            "simulation_start",
            model=type(self.model).__name__,
            parameters=self.model.parameters,
            n_paths=self.n_paths,
            n_steps=self.n_steps,
            T=T,
        )

        t0 = time.perf_counter()
        values = np.empty((self.n_paths, self.n_steps + 1), dtype=float)
        values[:, 0] = self.model.initial_value

        x = values[:, 0].copy()
        for j in range(1, self.n_steps + 1):
            with np.errstate(over="ignore", invalid="ignore"):
                x = self.model.step(x, dt, self.rng)
            x = self._sanitize(x)
            values[:, j] = x

            if progress_cb is not None and (j == self.n_steps or j % max(progress_every, 1) == 0):
                progress_cb(
                    {
                        "stage": "steps",
                        "step_i": j,
                        "step_n": self.n_steps,
                        "pct": j / self.n_steps,
                        "elapsed_s": time.perf_counter() - t0,
                    }
                )

        times = dt * np.arange(self.n_steps + 1)
        return SimulatedPaths(times=times, values=values)

    def _sanitize(self, x: np.ndarray) -> np.ndarray:
        # NaN (ex : 0 * inf) ramené à 0 ; plancher à 0 si le processus l'exige
        x = np.where(np.isnan(x), 0.0, x)
        if self.model.non_negative:
            x = np.maximum(x, 0.0)
        return x
