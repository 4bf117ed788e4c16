from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from qlab.market.loaders import load_price_csv
from qlab.market.series import PriceSeries
from qlab.stats.random_source import RandomSource

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def sp500_csv() -> Path:
    return DATA_DIR / "sp500.csv"


@pytest.fixture
def sp500(sp500_csv) -> PriceSeries:
    return load_price_csv(sp500_csv, ticker="SPX")


@pytest.fixture
def rng() -> RandomSource:
    return RandomSource(seed=42)


@pytest.fixture
def make_series():
    """Série datée (jours ouvrés à partir du 2 janvier 2023)."""
    def _make(values, ticker="", start="2023-01-02"):
        index = pd.bdate_range(start, periods=len(values))
        return PriceSeries(pd.Series(np.asarray(values, dtype=float), index=index), ticker=ticker)

    return _make
