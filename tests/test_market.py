from datetime import date

import numpy as np
import pandas as pd
import pytest

from qlab.market.loaders import load_price_csv, load_price_table, load_price_xlsx
from qlab.market.series import PriceSeries
from qlab.market.types import AllocationResult, PricePoint, SimulatedPath


def test_load_sp500(sp500):
    assert len(sp500) == 62
    assert sp500.dates[0] == pd.Timestamp("2023-01-03")
    assert sp500.last_date == pd.Timestamp("2023-03-31")
    assert sp500.last_price == pytest.approx(4109.31)
    assert sp500.ticker == "SPX"


def test_log_returns(sp500):
    r = sp500.log_returns()

    assert len(r) == 61
    assert r[0] == pytest.approx(np.log(3852.97 / 3824.14))


def test_loader_sorts_rows(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_text("date,price\n2023-01-04,11\n2023-01-03,10\n")

    s = load_price_csv(path)
    assert list(s.values) == [10.0, 11.0]


def test_loader_rejects_duplicates(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_text("date,price\n2023-01-03,10\n2023-01-03,11\n")

    with pytest.raises(ValueError):
        load_price_csv(path)


def test_loader_missing_date_column(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_text("day,price\n2023-01-03,10\n")

    with pytest.raises(ValueError):
        load_price_csv(path)


def test_load_price_table(tmp_path):
    path = tmp_path / "stocks.csv"
    path.write_text("date,KO,PEP\n2023-01-03,60,180\n2023-01-04,,181\n2023-01-05,61,182\n")

    table = load_price_table(path)
    assert len(table["KO"]) == 2
    assert len(table["PEP"]) == 3
    assert table["PEP"].ticker == "PEP"

    with pytest.raises(ValueError):
        load_price_table(path, tickers=["KO", "MSFT"])


def test_load_price_xlsx(tmp_path):
    path = tmp_path / "prices.xlsx"
    df = pd.DataFrame({"date": ["2023-01-03", "2023-01-04"], "price": [10.0, 10.5]})
    df.to_excel(path, sheet_name="Prices", index=False)

    s = load_price_xlsx(path, ticker="X")
    assert len(s) == 2
    assert s.last_price == pytest.approx(10.5)


@pytest.mark.parametrize(
    "dates, prices",
    [
        (["2023-01-04", "2023-01-03"], [10.0, 11.0]),
        (["2023-01-03", "2023-01-04"], [10.0, 0.0]),
        (["2023-01-03", "2023-01-04"], [10.0, -1.0]),
        (["2023-01-03", "2023-01-04"], [10.0, np.nan]),
    ],
)
def test_price_series_validation(dates, prices):
    with pytest.raises(ValueError):
        PriceSeries(pd.Series(prices, index=pd.to_datetime(dates)))


def test_price_series_points_roundtrip():
    pts = [PricePoint(date(2023, 1, 3), 10.0), PricePoint(date(2023, 1, 4), 12.0)]
    s = PriceSeries.from_points(pts, ticker="T")

    assert s.points() == pts
    assert len(PriceSeries.from_points(pts[:1]).log_returns()) == 0


def test_allocation_result():
    a = AllocationResult({"x": 0.5, "y": 0.0, "z": -0.2})

    assert a.active_assets == 2
    assert a.total_weight == pytest.approx(0.3)
    with pytest.raises(ValueError):
        AllocationResult({"x": float("inf")})


def test_simulated_path_lengths_must_match():
    with pytest.raises(ValueError):
        SimulatedPath(times=(0.0, 1.0), values=(1.0,))
