# -*- coding: utf-8 -*-
"""
qlab/market/loaders.py

Loaders fichiers -> PriceSeries (source de données statique, opaque pour le reste du labo).

Usage typique :
    sp500 = load_price_csv("sp500.csv", ticker="SPX")
    table = load_price_table("stocks.csv")   # format large : une colonne par ticker
    ko, pep = table["KO"], table["PEP"]
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd

from qlab.market.series import PriceSeries


def load_price_csv(
    path: str | Path,
    date_col: str = "date",
    price_col: str = "price",
    ticker: str = "",
) -> PriceSeries:
    """
    Lit un CSV (date, prix) et construit une PriceSeries.

    Les lignes sont triées par date avant validation : l'ordre du fichier
    n'a pas d'importance, mais les doublons de date sont refusés.

    Paramètres
    ----------
    path : str | Path
        Chemin du fichier.
    date_col, price_col : str
        Noms des colonnes.
    ticker : str
        Identifiant de l'actif.

    Retourne
    --------
    PriceSeries
    """
    df = pd.read_csv(path)
    df = _sorted_by_date(df, date_col)
    return PriceSeries.from_frame(df, date_col=date_col, price_col=price_col, ticker=ticker)


def load_price_xlsx(
    path: str | Path,
    sheet: str = "Prices",
    date_col: str = "date",
    price_col: str = "price",
    ticker: str = "",
) -> PriceSeries:
    """Même chose que load_price_csv pour une feuille Excel."""
    df = pd.read_excel(path, sheet_name=sheet)
    df = _sorted_by_date(df, date_col)
    return PriceSeries.from_frame(df, date_col=date_col, price_col=price_col, ticker=ticker)


def load_price_table(
    path: str | Path,
    date_col: str = "date",
    tickers: Optional[list[str]] = None,
) -> dict[str, PriceSeries]:
    """
    Lit un CSV "large" (une colonne date + une colonne de prix par ticker).

    Les cellules vides sont ignorées ticker par ticker : chaque série ne garde
    que ses propres dates de cotation.

    Retourne
    --------
    dict[str, PriceSeries]
    """
    df = _sorted_by_date(pd.read_csv(path), date_col)
    columns = tickers if tickers is not None else [c for c in df.columns if c != date_col]

    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"Tickers absents du fichier : {missing}")

    out = {}
    for ticker in columns:
        sub = df[[date_col, ticker]].dropna()
        out[ticker] = PriceSeries.from_frame(sub, date_col=date_col, price_col=ticker, ticker=ticker)
    return out


def _sorted_by_date(df: pd.DataFrame, date_col: str) -> pd.DataFrame:
    if date_col not in df.columns:
        raise ValueError(f"Colonne de dates {date_col!r} introuvable.")
    out = df.copy()
    out[date_col] = pd.to_datetime(out[date_col])
    return out.sort_values(date_col).reset_index(drop=True)
