"""
Utils Module

상수, 로깅 설정 등 유틸리티를 제공합니다.
설정 로더는 binance_rest.utils.config_loader에서 직접 import합니다.
"""

from .logging_setup import setup_logging

__all__ = ["setup_logging"]
