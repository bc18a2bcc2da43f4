"""Normalized records produced from upstream brokerage payloads."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Stock:
    """One row of a watchlist."""

    symbol: str
    name: str
    exchange: str
    icon_url: str

    last_price: float
    previous_close: float
    open_price: float
    high_price: float
    low_price: float

    change: float
    change_percent: float
    is_positive: bool
    is_negative: bool

    volume: float
    volume_formatted: str

    intraday_prices: tuple[float, ...] = ()

    bid: Optional[float] = None
    offer: Optional[float] = None
    has_corporate_action: bool = False
    is_uma: bool = False  # under special monitoring
    tradeable: bool = True


@dataclass(frozen=True)
class Watchlist:
    """A watchlist with its stocks in upstream order."""

    id: Optional[int]
    name: str
    description: str
    total_stocks: int
    is_default: bool
    sort_by: str
    sort_direction: str
    stocks: tuple[Stock, ...] = ()


@dataclass(frozen=True)
class StockSummary:
    """Compact watchlist row."""

    symbol: str
    name: str
    icon_url: str
    open_price: float
    close_price: float
    change: float
    change_percent: float
    volume: str
    trend: str  # "up", "down" or "flat"


@dataclass(frozen=True)
class BrokerTransaction:
    """A single buy- or sell-side broker fill."""

    stock_code: str
    broker_code: str
    date: str  # YYYY-MM-DD format
    investor_type: str  # "Lokal" or "Asing"
    side: str  # "buy" or "sell"

    buy_lot: float
    buy_value: float
    buy_avg_price: float

    sell_lot: float
    sell_value: float
    sell_avg_price: float

    net_lot: float
    net_value: float

    buy_value_formatted: str
    sell_value_formatted: str
    net_value_formatted: str
    buy_avg_price_formatted: str
    sell_avg_price_formatted: str


@dataclass(frozen=True)
class AccDistStat:
    """Accumulation/distribution statistics bucket."""

    acc_dist: str
    amount: float
    percent: float
    volume: float


@dataclass(frozen=True)
class MarketDetector:
    """Broker concentration statistics for a stock."""

    average_price: float
    total_value: float
    total_volume: float
    total_buyers: int
    total_sellers: int
    broker_acc_dist: str

    average: AccDistStat
    average_5day: AccDistStat
    top1: AccDistStat
    top3: AccDistStat
    top5: AccDistStat
    top10: AccDistStat


@dataclass(frozen=True)
class BrokerActivity:
    """Broker activity over a date range with buy/sell totals."""

    broker_code: str
    broker_name: str
    date_from: str
    date_to: str

    market_detector: MarketDetector

    buy_transactions: tuple[BrokerTransaction, ...]
    total_buy_value: float
    total_buy_lot: float

    sell_transactions: tuple[BrokerTransaction, ...]
    total_sell_value: float
    total_sell_lot: float

    net_value: float
    net_lot: float

    total_buy_value_formatted: str
    total_sell_value_formatted: str
    net_value_formatted: str


@dataclass(frozen=True)
class BrokerTransactionSummary:
    """Side-tagged transaction for the compact broker view."""

    stock_code: str
    investor_type: str
    side: str  # "buy" or "sell"
    lot: float
    value: float
    avg_price: float
    value_formatted: str
    avg_price_formatted: str


@dataclass(frozen=True)
class BrokerActivitySummary:
    """Compact broker activity view."""

    broker_code: str
    broker_name: str
    date: str
    buys: tuple[BrokerTransactionSummary, ...]
    sells: tuple[BrokerTransactionSummary, ...]
    total_buy_value: str
    total_sell_value: str
    net_value: str


@dataclass(frozen=True)
class ParsedTable:
    """Header and body text extracted from an HTML table."""

    headers: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class InsiderMovement:
    """A major shareholder position change."""

    id: str
    name: str
    symbol: str
    date: str
    previous_value: str
    previous_percentage: str
    current_value: str
    current_percentage: str
    change_value: str
    change_percentage: str
    change_formatted: str
    nationality: str  # "Local", "Foreign" or "-"
    action: str  # "Buy", "Sell", "Transfer" or "Unknown"
    source: str
    broker_code: str
    broker_group: str  # "Local", "Foreign", "Gov" or "-"
    badges: tuple[str, ...] = ()


@dataclass(frozen=True)
class InsiderActivity:
    """A page of insider movements."""

    movements: tuple[InsiderMovement, ...] = ()
    is_more: bool = False


@dataclass(frozen=True)
class KeyStats:
    """Key statistics for a stock.

    Ratios are None when upstream omits them. Percent fields are fractions
    (0.18 means 18%).
    """

    symbol: str
    # Valuation
    pe_ratio: Optional[float] = None
    pb_ratio: Optional[float] = None
    ps_ratio: Optional[float] = None
    peg_ratio: Optional[float] = None
    ev_ebitda: Optional[float] = None
    # Profitability
    roe: Optional[float] = None
    roa: Optional[float] = None
    net_profit_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    gross_margin: Optional[float] = None
    # Debt & liquidity
    debt_to_equity: Optional[float] = None
    current_ratio: Optional[float] = None
    quick_ratio: Optional[float] = None
    # Dividend
    dividend_yield: Optional[float] = None
    payout_ratio: Optional[float] = None
    dividend_per_share: Optional[float] = None
    # Growth
    revenue_growth: Optional[float] = None
    earnings_growth: Optional[float] = None
    # Per share
    eps: Optional[float] = None
    book_value_per_share: Optional[float] = None
    # Size & scale
    beta: Optional[float] = None
    shares_outstanding: Optional[float] = None
    avg_volume: Optional[float] = None
    market_cap: Optional[float] = None
    enterprise_value: Optional[float] = None
    avg_volume_formatted: str = "-"
    market_cap_formatted: str = "-"
    enterprise_value_formatted: str = "-"


@dataclass
class TokenBundle:
    """Tokens returned by the refresh endpoint."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int = 300
