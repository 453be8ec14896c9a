"""
Trading Module

바이낸스 거래소 API 연동 기능을 제공합니다.
"""

from .binance_client import BinanceClient

__all__ = ["BinanceClient"]
