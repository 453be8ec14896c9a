"""
Type Definitions for Binance REST Client

클라이언트 전반에서 사용되는 타입 정의
"""

from typing import Any, Dict, Optional, Union
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import InvalidConfigurationException, InvalidOrderException
from ..utils.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_RECV_WINDOW,
    MAX_RECV_WINDOW,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    DEFAULT_USER_AGENT,
    NEW_ORDER_RESP_TYPE,
    ORDER,
    ORDER_TEST,
)


# ============================================================================
# Basic Types
# ============================================================================

# 쿼리 파라미터 값 (문자열, 숫자, 불리언)
ParamValue = Union[str, int, float, bool]
RequestParams = Dict[str, ParamValue]


# ============================================================================
# Enums
# ============================================================================

class HttpMethod(Enum):
    """지원하는 HTTP 메서드"""
    GET = "GET"
    POST = "POST"


class OrderSide(Enum):
    """주문 방향"""
    BUY = "BUY"
    SELL = "SELL"


class OrderType(Enum):
    """주문 유형"""
    MARKET = "MARKET"
    LIMIT = "LIMIT"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"


def _coerce_enum(enum_cls, value: Any, field_name: str):
    """문자열 또는 Enum 값을 지정된 Enum으로 변환"""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        expected = ", ".join(member.value for member in enum_cls)
        raise InvalidOrderException(field_name, value, expected)


# ============================================================================
# Configuration
# ============================================================================

@dataclass(frozen=True)
class Credentials:
    """API 키/시크릿 쌍 (생성 후 변경 불가)"""
    key: str = ""
    secret: str = field(default="", repr=False)

    @property
    def has_secret(self) -> bool:
        return bool(self.key) and bool(self.secret)

    def __repr__(self) -> str:
        masked = self.key[:4] + "*" * max(len(self.key) - 4, 0) if self.key else ""
        return f"Credentials(key='{masked}', secret='***')"


@dataclass(frozen=True)
class ClientConfig:
    """
    클라이언트 설정

    인스턴스 생성 시 한 번 검증되며 이후 변경되지 않습니다.
    """
    credentials: Credentials = field(default_factory=Credentials)
    base_url: str = DEFAULT_BASE_URL
    recv_window: int = DEFAULT_RECV_WINDOW
    verify_ssl: bool = True
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not self.base_url:
            raise InvalidConfigurationException("base_url", self.base_url, "비어있지 않은 URL")
        if not self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url + "/")

        if isinstance(self.recv_window, bool) or not isinstance(self.recv_window, int):
            raise InvalidConfigurationException("recv_window", self.recv_window, "정수 (ms)")
        if not 0 < self.recv_window <= MAX_RECV_WINDOW:
            raise InvalidConfigurationException(
                "recv_window", self.recv_window, f"1 ~ {MAX_RECV_WINDOW} ms"
            )

        for name in ("connect_timeout", "read_timeout"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise InvalidConfigurationException(name, value, "양수 (초)")

    @property
    def timeout(self):
        """requests에 전달할 (connect, read) 타임아웃 튜플"""
        return (self.connect_timeout, self.read_timeout)


# ============================================================================
# Orders
# ============================================================================

@dataclass(frozen=True)
class OrderRequest:
    """
    주문 요청

    호출마다 생성되며 저장되지 않습니다. 수량과 가격은 반올림 없이
    전달받은 그대로 전송됩니다.
    """
    symbol: str
    side: OrderSide
    order_type: OrderType
    quantity: ParamValue
    price: Optional[ParamValue] = None
    test: bool = False

    def __post_init__(self):
        if not self.symbol:
            raise InvalidOrderException("symbol", self.symbol, "비어있지 않은 심볼")
        object.__setattr__(self, "side", _coerce_enum(OrderSide, self.side, "side"))
        object.__setattr__(self, "order_type", _coerce_enum(OrderType, self.order_type, "type"))

    @property
    def endpoint(self) -> str:
        return ORDER_TEST if self.test else ORDER

    def to_params(self) -> RequestParams:
        """전송 순서가 고정된 파라미터 매핑 생성"""
        params: RequestParams = {
            'symbol': self.symbol,
            'side': self.side.value,
            'type': self.order_type.value,
            'quantity': self.quantity,
            'newOrderRespType': NEW_ORDER_RESP_TYPE,
        }

        if self.price is not None:
            params['price'] = self.price

        return params
