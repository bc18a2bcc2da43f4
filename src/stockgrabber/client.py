"""Thin wrapper around the Stockbit REST endpoints used by the dashboard."""

from typing import Any, Optional

import requests

from .models import TokenBundle

# Constants
API_BASE_URL = "https://exodus.stockbit.com"
REFRESH_URL = "https://api.stockbit.com/v1/refresh-token"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
DEFAULT_TIMEOUT = 30
DEFAULT_EXPIRES_IN = 300
WATCHLIST_PAGE_LIMIT = 500

# Operation name -> (client method, required argument)
OPERATIONS = {
    "profile": ("get_profile", "symbol"),
    "quote": ("get_quote", "symbol"),
    "financials": ("get_financials", "symbol"),
    "keystats": ("get_keystats", "symbol"),
    "price-performance": ("get_price_performance", "symbol"),
    "stream": ("get_stream", "symbol"),
    "broker": ("get_broker_activity", "symbol"),
    "search": ("search", "query"),
    "watchlist": ("get_watchlist", None),
    "insider": ("get_insider_activity", None),
}


class StockbitError(Exception):
    """Base error for upstream failures."""


class StockbitAPIError(StockbitError):
    """Raised when the upstream answers with a non-2xx status."""

    def __init__(self, operation: str, status_code: int, reason: str):
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Failed to fetch {operation}: {status_code} {reason}")


class UnknownOperationError(StockbitError):
    """Raised when dispatching an operation name that does not exist."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Unknown operation '{operation}'. "
            f"Expected one of: {', '.join(sorted(OPERATIONS))}"
        )


def _base_headers() -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": USER_AGENT,
    }


def create_auth_headers(
    access_token: Optional[str], cookies: Optional[str] = None
) -> dict[str, str]:
    """Build headers for an authenticated GET.

    Args:
        access_token: Bearer token; omitted from headers when empty
        cookies: Optional raw session cookie string

    Returns:
        Header dict
    """
    headers = _base_headers()
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if cookies:
        headers["Cookie"] = cookies
    return headers


def refresh_access_token(
    refresh_token: str, timeout: float = DEFAULT_TIMEOUT
) -> TokenBundle:
    """Exchange a refresh token for a new access token (single attempt).

    Raises:
        StockbitAPIError: If the refresh endpoint rejects the request
    """
    response = requests.post(
        REFRESH_URL,
        json={"refresh_token": refresh_token},
        headers=_base_headers(),
        timeout=timeout,
    )
    if not response.ok:
        raise StockbitAPIError("token refresh", response.status_code, response.reason)

    body = response.json() or {}
    data = body.get("data") or {}
    return TokenBundle(
        access_token=data.get("access_token") or body.get("access_token"),
        refresh_token=data.get("refresh_token") or body.get("refresh_token"),
        expires_in=data.get("expires_in")
        or body.get("expires_in")
        or DEFAULT_EXPIRES_IN,
    )


class StockbitClient:
    """Authenticated read-only client. The token is bound per instance."""

    def __init__(
        self,
        access_token: str,
        cookies: Optional[str] = None,
        base_url: str = API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(create_auth_headers(access_token, cookies))

    def _get(
        self, path: str, operation: str, params: Optional[dict[str, Any]] = None
    ) -> Any:
        response = self.session.get(
            f"{self.base_url}{path}", params=params, timeout=self.timeout
        )
        if not response.ok:
            raise StockbitAPIError(operation, response.status_code, response.reason)
        return response.json()

    def get_profile(self, symbol: str) -> Any:
        return self._get(f"/v2.4/company/profile/{symbol}", "stock profile")

    def get_quote(self, symbol: str) -> Any:
        return self._get(f"/v2.4/quote/{symbol}", "stock quote")

    def get_financials(self, symbol: str) -> Any:
        """Fetch the financial statement payload (contains embedded HTML)."""
        params = {
            "symbol": symbol,
            "data_type": 1,
            "report_type": 1,
            "statement_type": 1,
        }
        return self._get("/findata-view/company/financial", "financials", params)

    def get_keystats(self, symbol: str) -> Any:
        return self._get(
            f"/keystats/ratio/v1/{symbol}", "key stats", {"year_limit": 10}
        )

    def get_price_performance(self, symbol: str) -> Any:
        return self._get(
            f"/company-price-feed/price-performance/{symbol}", "price performance"
        )

    def get_stream(self, symbol: str, limit: int = 20) -> Any:
        return self._get(f"/v2.4/stream/symbol/{symbol}", "stream", {"limit": limit})

    def search(self, query: str) -> Any:
        return self._get("/v2.4/search", "search results", {"q": query})

    def get_watchlist(self) -> Any:
        """Fetch the first watchlist with its stocks.

        The upstream needs two calls: list the watchlists, then fetch one by id.
        An account without watchlists yields an empty payload.
        """
        listing = self._get(
            "/watchlist",
            "watchlist",
            {"page": 1, "limit": WATCHLIST_PAGE_LIMIT},
        )
        watchlists = (listing or {}).get("data") or []
        if not watchlists:
            return {"data": {}}

        watchlist_id = watchlists[0].get("watchlist_id")
        return self._get(
            f"/watchlist/{watchlist_id}",
            "watchlist",
            {"page": 1, "limit": WATCHLIST_PAGE_LIMIT, "setfincol": 1},
        )

    def get_broker_activity(
        self,
        broker_code: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
        transaction_type: str = "TRANSACTION_TYPE_NET",
        market_board: str = "MARKET_BOARD_REGULER",
        investor_type: str = "INVESTOR_TYPE_ALL",
    ) -> Any:
        """Fetch broker activity detail.

        Args:
            broker_code: Broker code (e.g., 'YP')
            start_date: Optional range start, YYYY-MM-DD
            end_date: Optional range end, YYYY-MM-DD
            page: Page number
            limit: Page size
            transaction_type: TRANSACTION_TYPE_NET, _BUY or _SELL
            market_board: MARKET_BOARD_REGULER, _TUNAI or _NEGO
            investor_type: INVESTOR_TYPE_ALL, _DOMESTIC or _FOREIGN
        """
        params: dict[str, Any] = {
            "page": page,
            "limit": limit,
            "transaction_type": transaction_type,
            "market_board": market_board,
            "investor_type": investor_type,
        }
        if start_date:
            params["from"] = start_date
        if end_date:
            params["to"] = end_date

        return self._get(
            f"/findata-view/marketdetectors/activity/{broker_code}/detail",
            "broker activity",
            params,
        )

    def get_insider_activity(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
        action_type: str = "ACTION_TYPE_UNSPECIFIED",
        source_type: str = "SOURCE_TYPE_UNSPECIFIED",
    ) -> Any:
        """Fetch major holder movements.

        Args:
            start_date: Optional range start, YYYY-MM-DD
            end_date: Optional range end, YYYY-MM-DD
            page: Page number
            limit: Page size
            action_type: ACTION_TYPE_UNSPECIFIED, _BUY, _SELL or _TRANSFER
            source_type: SOURCE_TYPE_UNSPECIFIED, _KSEI or _IDX
        """
        params: dict[str, Any] = {
            "page": page,
            "limit": limit,
            "action_type": action_type,
            "source_type": source_type,
        }
        if start_date:
            params["date_start"] = start_date
        if end_date:
            params["date_end"] = end_date

        return self._get(
            "/insider/company/majorholder", "insider activity", params
        )

    def fetch(
        self,
        operation: str,
        symbol: Optional[str] = None,
        query: Optional[str] = None,
    ) -> Any:
        """Dispatch an operation name to the matching upstream call.

        Raises:
            UnknownOperationError: If the operation name is not known
            ValueError: If a required symbol or query is missing
        """
        if operation not in OPERATIONS:
            raise UnknownOperationError(operation)

        method_name, required = OPERATIONS[operation]
        method = getattr(self, method_name)

        if required == "symbol":
            if not symbol:
                raise ValueError(f"Symbol is required for {operation}")
            return method(symbol)
        if required == "query":
            if not query:
                raise ValueError(f"Query is required for {operation}")
            return method(query)
        return method()
