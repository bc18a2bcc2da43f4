import csv
import json
from io import StringIO

import pytest

from stockgrabber.broker import serialize_broker_activity, serialize_broker_activity_summary
from stockgrabber.formatters import (
    CsvFormatter,
    JsonFormatter,
    TableFormatter,
    get_formatter,
)
from stockgrabber.insider import serialize_insider_movement
from stockgrabber.keystats import serialize_keystats
from stockgrabber.models import InsiderActivity, ParsedTable, StockSummary, Watchlist
from stockgrabber.watchlist import serialize_watchlist


@pytest.fixture
def watchlist():
    return serialize_watchlist(
        {
            "data": {
                "watchlist_id": 1,
                "name": "Main",
                "total": 1,
                "result": [
                    {
                        "symbol": "BBCA",
                        "name": "Bank Central Asia Tbk.",
                        "last": "9,875",
                        "change": "+75",
                        "percent": "+0.77",
                        "volume": "45,123,400",
                        "prices": ["9,800", "9,900", "9,775"],
                    }
                ],
            }
        }
    )


@pytest.fixture
def broker_raw():
    return {
        "data": {
            "broker_code": "YP",
            "broker_name": "Mirae",
            "from": "2024-03-14",
            "to": "2024-03-15",
            "broker_summary": {
                "brokers_buy": [
                    {"netbs_stock_code": "BBRI", "blot": "100", "bval": "5E+06", "netbs_buy_avg_price": "5000"}
                ],
                "brokers_sell": [
                    {"netbs_stock_code": "BBCA", "slot": "-20", "sval": "-2E+06", "netbs_sell_avg_price": "10000"}
                ],
            },
        }
    }


@pytest.fixture
def tables():
    return [
        ParsedTable(headers=("Item", "2023"), rows=(("Revenue", "1,234,567,890"),)),
        ParsedTable(headers=("Ratio", "Value"), rows=(("ROE", "-"),)),
    ]


# Tests for get_formatter
@pytest.mark.parametrize(
    "name, cls",
    [("table", TableFormatter), ("JSON", JsonFormatter), ("csv", CsvFormatter), ("xml", TableFormatter)],
)
def test_get_formatter(name, cls):
    """Test lookup is case-insensitive and falls back to table."""
    assert isinstance(get_formatter(name), cls)


# Tests for TableFormatter
def test_table_watchlist(watchlist):
    """Test watchlist header and locale prices."""
    out = TableFormatter().format_watchlist(watchlist)
    assert "Watchlist: Main (1 stocks)" in out
    assert "9.875" in out
    assert "+75" in out
    assert "+0.77%" in out
    assert "9.900" in out
    assert "45.12M" in out


def test_table_watchlist_empty():
    """Test empty watchlist message."""
    empty = Watchlist(
        id=None, name="", description="", total_stocks=0, is_default=False,
        sort_by="", sort_direction="", stocks=(),
    )
    assert TableFormatter().format_watchlist(empty) == "No stocks found."


def test_table_broker_activity(broker_raw):
    """Test buy/sell sections and the net row."""
    out = TableFormatter().format_broker_activity(serialize_broker_activity(broker_raw))
    lines = out.splitlines()
    assert "Broker: YP - Mirae" in out
    assert "Period: 2024-03-14 to 2024-03-15" in out
    assert "BUY" in lines
    assert "SELL" in lines
    net_line = next(line for line in lines if line.startswith("Net"))
    assert "3.00M" in net_line


def test_table_broker_summary(broker_raw):
    """Test the compact broker view lists both sides."""
    out = TableFormatter().format_broker_summary(
        serialize_broker_activity_summary(broker_raw)
    )
    assert "buy    BBRI" in out
    assert "sell   BBCA" in out
    assert "5.00M" in out


def test_table_tables(tables):
    """Test numeric cells are scaled and placeholders kept."""
    out = TableFormatter().format_tables(tables)
    assert "1.23B" in out
    assert "Revenue" in out
    assert "ROE" in out
    assert "1,234,567,890" not in out


def test_table_tables_empty():
    """Test message when there are no tables."""
    assert TableFormatter().format_tables([]) == "No financial tables found."


def test_table_insider_activity():
    """Test insider row contents."""
    activity = InsiderActivity(
        movements=(
            serialize_insider_movement(
                {
                    "symbol": "TLKM",
                    "name": "Negara Republik Indonesia",
                    "date": "01 Mar 24",
                    "action_type": "ACTION_TYPE_SELL",
                    "changes": {"value": "-5,000"},
                    "current": {"percentage": "52.09"},
                }
            ),
        ),
        is_more=False,
    )
    out = TableFormatter().format_insider_activity(activity)
    assert "TLKM" in out
    assert "Sell" in out
    assert "-5,000" in out
    assert "52.09" in out


# Tests for JsonFormatter
def test_json_watchlist(watchlist):
    """Test watchlist serializes to JSON."""
    data = json.loads(JsonFormatter().format_watchlist(watchlist))
    assert data["name"] == "Main"
    assert data["stocks"][0]["symbol"] == "BBCA"
    assert data["stocks"][0]["high_price"] == 9900


def test_json_tables_keep_raw_cells(tables):
    """Test JSON output leaves cell text untouched."""
    data = json.loads(JsonFormatter().format_tables(tables))
    assert data[0]["rows"][0] == ["Revenue", "1,234,567,890"]


def test_json_broker_activity(broker_raw):
    """Test nested detector and transactions serialize."""
    data = json.loads(JsonFormatter().format_broker_activity(serialize_broker_activity(broker_raw)))
    assert data["net_value"] == 3_000_000
    assert data["market_detector"]["average"]["acc_dist"] == ""
    assert data["sell_transactions"][0]["sell_lot"] == 20


# Tests for CsvFormatter
def test_csv_watchlist_summary():
    """Test header and row order."""
    stocks = [
        StockSummary(
            symbol="BBCA", name="BCA", icon_url="", open_price=9800.0, close_price=9875.0,
            change=75.0, change_percent=0.77, volume="45.12M", trend="up",
        )
    ]
    rows = list(csv.reader(StringIO(CsvFormatter().format_watchlist_summary(stocks))))
    assert rows[0] == [
        "symbol", "name", "open_price", "close_price", "change", "change_percent", "volume", "trend",
    ]
    assert rows[1][0] == "BBCA"
    assert rows[1][-1] == "up"


def test_csv_broker_activity(broker_raw):
    """Test one row per fill with a side column."""
    out = CsvFormatter().format_broker_activity(serialize_broker_activity(broker_raw))
    rows = list(csv.reader(StringIO(out)))
    assert rows[0][0] == "side"
    assert [r[0] for r in rows[1:]] == ["buy", "sell"]
    assert rows[2][1] == "BBCA"


def test_csv_tables_blank_row_between(tables):
    """Test tables are separated by an empty row."""
    rows = list(csv.reader(StringIO(CsvFormatter().format_tables(tables))))
    assert rows[0] == ["Item", "2023"]
    assert rows[1] == ["Revenue", "1,234,567,890"]
    assert rows[2] == []
    assert rows[3] == ["Ratio", "Value"]


def test_csv_empty_outputs():
    """Test empty collections give empty CSV."""
    formatter = CsvFormatter()
    assert formatter.format_watchlist_summary([]) == ""
    assert formatter.format_tables([]) == ""
    assert formatter.format_insider_activity(InsiderActivity(movements=(), is_more=False)) == ""


# Tests for key statistics
@pytest.fixture
def keystats():
    return serialize_keystats(
        {"data": {"pe_ratio": 15.234, "roe": 0.25, "market_cap": 0, "avg_volume": 2.5e6}},
        symbol="BBCA",
    )


def test_table_keystats(keystats):
    """Test sections, ratio decimals and percent rendering."""
    out = TableFormatter().format_keystats(keystats)
    lines = out.splitlines()
    assert "Key Statistics: BBCA" in out
    for title in ("Valuation", "Profitability", "Dividend", "Size & Scale"):
        assert title in lines
    assert next(line for line in lines if line.startswith("P/E Ratio")).endswith("15.23")
    assert next(line for line in lines if line.startswith("ROE")).endswith("25.00%")
    assert next(line for line in lines if line.startswith("ROA")).endswith("-")
    assert next(line for line in lines if line.startswith("Market Cap")).endswith("-")
    assert next(line for line in lines if line.startswith("Avg Volume")).endswith("2.50M")


def test_json_keystats(keystats):
    """Test JSON keeps raw numbers alongside formatted figures."""
    data = json.loads(JsonFormatter().format_keystats(keystats))
    assert data["roe"] == 0.25
    assert data["roa"] is None
    assert data["market_cap_formatted"] == "-"


def test_csv_keystats(keystats):
    """Test one row per metric with its section."""
    rows = list(csv.reader(StringIO(CsvFormatter().format_keystats(keystats))))
    assert rows[0] == ["symbol", "section", "metric", "value"]
    assert rows[1] == ["BBCA", "Valuation", "P/E Ratio", "15.23"]
    assert ["BBCA", "Profitability", "ROE", "25.00%"] in rows
    assert ["BBCA", "Size & Scale", "Market Cap", "-"] in rows
