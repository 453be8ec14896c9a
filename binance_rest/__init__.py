"""
Binance REST Client

바이낸스 거래소 REST API 시세 조회 및 서명 주문 클라이언트
"""

from .core.exceptions import (
    BinanceRestException,
    APIException,
    APITransportException,
    APITimeoutException,
    APIDecodeException,
    MissingFieldException,
    TransportError,
    DecodeError,
    MissingFieldError,
)
from .core.types import ClientConfig, Credentials, OrderRequest, OrderSide, OrderType
from .trading.binance_client import BinanceClient

__version__ = "0.1.0"

__all__ = [
    "BinanceClient",
    "ClientConfig",
    "Credentials",
    "OrderRequest",
    "OrderSide",
    "OrderType",
    "BinanceRestException",
    "APIException",
    "APITransportException",
    "APITimeoutException",
    "APIDecodeException",
    "MissingFieldException",
    "TransportError",
    "DecodeError",
    "MissingFieldError",
]
