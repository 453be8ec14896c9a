"""
Core Module

예외, 타입 정의, 서버 시각 동기화를 담당합니다.
"""

from .clock import ClockSynchronizer
from .types import ClientConfig, Credentials, OrderRequest

__all__ = ["ClockSynchronizer", "ClientConfig", "Credentials", "OrderRequest"]
