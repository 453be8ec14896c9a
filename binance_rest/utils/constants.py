"""
Constants for Binance REST Client

엔드포인트 경로, 기본 설정값 등 하드코딩된 값들을 중앙 집중화하여 관리합니다.
"""

from typing import FrozenSet

# =============================================================================
# API Defaults
# =============================================================================

DEFAULT_BASE_URL = "https://api.binance.com/api/"
DEFAULT_RECV_WINDOW = 10_000  # ms - 서버 수신 허용 오차
MAX_RECV_WINDOW = 60_000  # ms - 거래소 허용 최대값
DEFAULT_CONNECT_TIMEOUT = 20  # 초
DEFAULT_READ_TIMEOUT = 300  # 초
DEFAULT_USER_AGENT = "Binance Python API Agent"

API_KEY_HEADER = "X-MBX-APIKEY"

# =============================================================================
# Endpoints
# =============================================================================

# Public
PING = "v1/ping"
SERVER_TIME = "v1/time"
EXCHANGE_INFO = "v1/exchangeInfo"
ORDER_BOOK = "v1/depth"
RECENT_TRADES = "v1/trades"
HISTORICAL_TRADES = "v1/historicalTrades"
AGG_TRADES = "v1/aggTrades"
KLINES = "v1/klines"
TICKER_24HR = "v1/ticker/24hr"
TICKER_PRICE = "v3/ticker/price"
BOOK_TICKER = "v3/ticker/bookTicker"
USER_DATA_STREAM = "v1/userDataStream"

# Signed
ACCOUNT = "v3/account"
MY_TRADES = "v3/myTrades"
OPEN_ORDERS = "v3/openOrders"
ALL_ORDERS = "v3/allOrders"
ORDER = "v3/order"
ORDER_TEST = "v3/order/test"

# timestamp/recvWindow 파라미터가 필요 없는 엔드포인트
TIME_EXEMPT_ENDPOINTS: FrozenSet[str] = frozenset({
    PING,
    SERVER_TIME,
    EXCHANGE_INFO,
    ORDER_BOOK,
    RECENT_TRADES,
    HISTORICAL_TRADES,
    AGG_TRADES,
    KLINES,
    TICKER_24HR,
    TICKER_PRICE,
    BOOK_TICKER,
    USER_DATA_STREAM,
})

# =============================================================================
# Trading Defaults
# =============================================================================

NEW_ORDER_RESP_TYPE = "FULL"
DEFAULT_KLINES_LIMIT = 500
DEFAULT_TRADES_LIMIT = 500
DEFAULT_DEPTH_LIMIT = 100
DEFAULT_TRADES_SYMBOL = "BNBBTC"

# =============================================================================
# Logging
# =============================================================================

DEFAULT_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
DEFAULT_LOG_ROTATION = "100 MB"
DEFAULT_LOG_RETENTION = "30 days"


def is_time_exempt(endpoint: str) -> bool:
    """엔드포인트가 timestamp/recvWindow 주입 대상에서 제외되는지 확인"""
    return endpoint in TIME_EXEMPT_ENDPOINTS
