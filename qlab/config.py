# -*- coding: utf-8 -*-
"""
qlab/config.py

Réglages globaux du labo ("knobs") : granularité de simulation, risque,
seuils du signal de pairs trading, taille du treillis.

Précédence
----------
1) overrides explicites (kwargs)
2) fichier YAML (chemin passé en argument ou variable d'env QLAB_SETTINGS)
3) valeurs par défaut ci-dessous

Une valeur hors plage n'est pas une erreur : elle est ramenée dans sa plage
documentée (avec un warning). Seule une valeur non numérique lève ValueError.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from qlab.log import get_logger

logger = get_logger(__name__)

ENV_VAR = "QLAB_SETTINGS"

# Plages valides (bornes incluses). None = pas de borne.
RANGES = {
    "n_steps": (1, 10_000),
    "n_paths": (1, 1_000_000),
    "lattice_steps": (1, 5_000),
    "confidence": (1e-6, 1.0 - 1e-6),
    "horizon": (1, 252),
    "lookback": (2, 1_000),
    "entry_z": (0.0, None),
    "exit_z": (0.0, None),
    "correlation": (-1.0, 1.0),
    "trading_days": (1, 366),
}

_INT_KNOBS = {"n_steps", "n_paths", "lattice_steps", "horizon", "lookback", "trading_days"}


@dataclass(frozen=True)
class LabSettings:
    """
    Jeu complet de réglages (immutable).

    Attributs
    ---------
    n_steps : int
        Nombre de pas de temps des simulations Monte Carlo.
    n_paths : int
        Nombre de trajectoires Monte Carlo.
    seed : int | None
        Graine du RandomSource (None = non déterministe).
    lattice_steps : int
        Nombre de pas du treillis binomial.
    confidence : float
        Niveau de confiance VaR/CVaR (décimal, ex 0.95).
    horizon : int
        Horizon de risque en jours de bourse.
    lookback : int
        Fenêtre glissante du z-score (pairs trading).
    entry_z, exit_z : float
        Seuils d'entrée / de sortie (|z|).
    correlation : float
        Corrélation uniforme supposée entre actifs.
    trading_days : int
        Convention d'annualisation.
    """
    n_steps: int = 252
    n_paths: int = 1000
    seed: Optional[int] = None
    lattice_steps: int = 50
    confidence: float = 0.95
    horizon: int = 10
    lookback: int = 30
    entry_z: float = 2.0
    exit_z: float = 0.5
    correlation: float = 0.4
    trading_days: int = 252

    def with_overrides(self, **overrides: Any) -> "LabSettings":
        """Nouvelle instance avec overrides appliqués (et bornés)."""
        return replace(self, **_sanitize(overrides))


def pct(value: float) -> float:
    """Conversion d'un pourcentage d'UI en décimal (division exacte par 100)."""
    return float(value) / 100.0


def clamp_setting(name: str, value: Any) -> Any:
    """Borne `value` dans RANGES[name] (warning setting_clamped si modifiée)."""
    lo, hi = RANGES[name]
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Réglage {name!r} non numérique : {value!r}")

    clamped = v
    if lo is not None and clamped < lo:
        clamped = lo
    if hi is not None and clamped > hi:
        clamped = hi
    if clamped != v:
        logger.warning("setting_clamped", setting=name, value=v, clamped=clamped)

    if name in _INT_KNOBS:
        return int(round(clamped))
    return float(clamped)


def _sanitize(raw: dict) -> dict:
    known = {f.name for f in fields(LabSettings)}
    out = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("setting_ignored", setting=key)
            continue
        if key == "seed":
            out[key] = None if value is None else int(value)
        else:
            out[key] = clamp_setting(key, value)
    return out


def load_settings(path: Optional[str | Path] = None, **overrides: Any) -> LabSettings:
    """
    Construit un LabSettings à partir des défauts, d'un YAML optionnel et d'overrides.

    Paramètres
    ----------
    path : str | Path, optionnel
        Fichier YAML (clés de premier niveau = noms des réglages).
        Si None, on regarde la variable d'environnement QLAB_SETTINGS.
    **overrides :
        Valeurs prioritaires sur le fichier.

    Retourne
    --------
    LabSettings
    """
    if path is None:
        path = os.environ.get(ENV_VAR) or None

    settings = LabSettings()

    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            settings = settings.with_overrides(**data)
        else:
            logger.warning("settings_file_missing", path=str(p))

    if overrides:
        settings = settings.with_overrides(**overrides)
    return settings
