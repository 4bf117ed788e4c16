# -*- coding: utf-8 -*-
"""
pairs.py

Pairs trading sur le ratio de prix de deux actifs (ex : KO / PEP).

Chaîne de calcul :
  1) align_pair        : jointure interne sur les dates communes
  2) spread_analysis   : ratio, moyenne et écart-type glissants (population, fenêtre = lookback),
                         bandes +/- entry_z, z-score
  3) run_state_machine : machine à états à hystérésis, un signal par franchissement de seuil

Transitions (fonction pure `transition`) :
  FLAT          -> SHORT_SPREAD  si z >  entry_z   (ENTER_SHORT)
  FLAT          -> LONG_SPREAD   si z < -entry_z   (ENTER_LONG)
  SHORT_SPREAD  -> FLAT          si z <  exit_z    (EXIT)
  LONG_SPREAD   -> FLAT          si z > -exit_z    (EXIT)

entry_z > exit_z >= 0 est supposé ; sinon les signaux oscillent ou disparaissent,
sans erreur.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence

import pandas as pd

from qlab.log import get_logger
from qlab.market.series import PriceSeries
from qlab.market.types import SignalEvent, SignalKind

logger = get_logger(__name__)


class SpreadState(str, Enum):
    FLAT = "flat"
    SHORT_SPREAD = "short_spread"
    LONG_SPREAD = "long_spread"


def transition(
    state: SpreadState,
    z: float,
    entry_z: float = 2.0,
    exit_z: float = 0.5,
) -> tuple[SpreadState, Optional[SignalKind]]:
    """
    Un pas de la machine à états.

    Retourne
    --------
    (nouvel état, signal émis ou None)
    """
    if state is SpreadState.FLAT:
        if z > entry_z:
            return SpreadState.SHORT_SPREAD, SignalKind.ENTER_SHORT
        if z < -entry_z:
            return SpreadState.LONG_SPREAD, SignalKind.ENTER_LONG
    elif state is SpreadState.SHORT_SPREAD:
        if z < exit_z:
            return SpreadState.FLAT, SignalKind.EXIT
    elif state is SpreadState.LONG_SPREAD:
        if z > -exit_z:
            return SpreadState.FLAT, SignalKind.EXIT
    return state, None


@dataclass(frozen=True)
class StateMachineRun:
    """Signaux émis dans l'ordre chronologique et état final."""
    events: tuple[SignalEvent, ...]
    final_state: SpreadState

    @property
    def kinds(self) -> list[SignalKind]:
        return [e.kind for e in self.events]


def run_state_machine(
    z_scores: Iterable[Optional[float]],
    entry_z: float = 2.0,
    exit_z: float = 0.5,
    dates: Optional[Sequence] = None,
    ratios: Optional[Sequence[float]] = None,
    initial_state: SpreadState = SpreadState.FLAT,
) -> StateMachineRun:
    """
    Déroule la machine à états sur une suite de z-scores.

    Les z-scores None / NaN (fenêtre incomplète ou écart-type nul) ne
    déclenchent aucune transition.

    Paramètres
    ----------
    z_scores : iterable
        z-scores successifs.
    entry_z, exit_z : float
        Seuils d'entrée et de sortie.
    dates, ratios : séquences, optionnel
        Alignées sur z_scores, recopiées dans les SignalEvent.
    initial_state : SpreadState
    """
    state = initial_state
    events = []
    for i, z in enumerate(z_scores):
        if z is None or not math.isfinite(z):
            continue
        state, kind = transition(state, float(z), entry_z, exit_z)
        if kind is None:
            continue

        d = dates[i] if dates is not None else None
        if isinstance(d, pd.Timestamp):
            d = d.date()
        events.append(
            SignalEvent(
                date=d,
                kind=kind,
                z_score=float(z),
                ratio=float(ratios[i]) if ratios is not None else None,
            )
        )

    logger.debug("pairs_state_machine", n_events=len(events), final_state=state.value)
    return StateMachineRun(events=tuple(events), final_state=state)


# ----------------------------
# Préparation des données
# ----------------------------

def align_pair(series_a: PriceSeries, series_b: PriceSeries) -> pd.DataFrame:
    """
    Jointure interne sur les dates communes.

    Retourne
    --------
    pd.DataFrame
        Index date, colonnes price_a, price_b.
    """
    df = pd.concat(
        {"price_a": series_a.prices, "price_b": series_b.prices},
        axis=1,
        join="inner",
    )
    df.index.name = "date"
    return df


def normalized_prices(aligned: pd.DataFrame) -> pd.DataFrame:
    """Prix rebasés à 100 sur la première date commune."""
    if aligned.empty:
        return aligned.copy()
    return aligned / aligned.iloc[0] * 100.0


def spread_analysis(aligned: pd.DataFrame, lookback: int = 30, entry_z: float = 2.0) -> pd.DataFrame:
    """
    Ratio, moyenne glissante, bandes et z-score.

    Écart-type de population (division par lookback). Fenêtre incomplète :
    moyenne, bandes et z-score à NaN. Écart-type nul : z-score et bandes à NaN.

    Retourne
    --------
    pd.DataFrame
        Colonnes : ratio, moving_avg, moving_std, upper_band, lower_band, z_score.
    """
    lookback = max(int(lookback), 1)
    ratio = aligned["price_a"] / aligned["price_b"]

    roll = ratio.rolling(window=lookback, min_periods=lookback)
    ma = roll.mean()
    std = roll.std(ddof=0)

    std_ok = std.where(std > 0)
    z = (ratio - ma) / std_ok

    return pd.DataFrame(
        {
            "ratio": ratio,
            "moving_avg": ma,
            "moving_std": std,
            "upper_band": ma + entry_z * std_ok,
            "lower_band": ma - entry_z * std_ok,
            "z_score": z,
        },
        index=aligned.index,
    )


@dataclass(frozen=True, eq=False)
class PairsResult:
    prices: pd.DataFrame
    spread: pd.DataFrame
    run: StateMachineRun

    @property
    def signals(self) -> tuple[SignalEvent, ...]:
        return self.run.events


def pairs_trading(
    series_a: PriceSeries,
    series_b: PriceSeries,
    lookback: int = 30,
    entry_z: float = 2.0,
    exit_z: float = 0.5,
) -> PairsResult:
    """
    Pipeline complet : alignement, analyse du spread, signaux.

    Paramètres
    ----------
    series_a, series_b : PriceSeries
        Actifs du ratio price_a / price_b.
    lookback : int
        Taille de la fenêtre glissante.
    entry_z, exit_z : float
        Seuils de la machine à états.
    """
    if entry_z <= exit_z or exit_z < 0:
        logger.warning("pairs_thresholds_inconsistent", entry_z=entry_z, exit_z=exit_z)

    aligned = align_pair(series_a, series_b)
    spread = spread_analysis(aligned, lookback=lookback, entry_z=entry_z)
    run = run_state_machine(
        spread["z_score"].to_numpy(dtype=float),
        entry_z=entry_z,
        exit_z=exit_z,
        dates=list(spread.index),
        ratios=spread["ratio"].to_numpy(dtype=float),
    )
    return PairsResult(prices=normalized_prices(aligned), spread=spread, run=run)
