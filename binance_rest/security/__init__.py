"""
Security Module

요청 서명 기능을 제공합니다.
"""

from .signature import build_query_string, create_signature

__all__ = ["build_query_string", "create_signature"]
