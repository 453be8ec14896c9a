"""
Request Signing

쿼리 문자열 직렬화와 HMAC-SHA256 서명 생성
"""

import hashlib
import hmac
from decimal import Decimal
from typing import Mapping
from urllib.parse import urlencode

from ..core.types import ParamValue


def _format_value(value: ParamValue) -> str:
    # 불리언은 거래소가 기대하는 소문자 표기로 전송
    if isinstance(value, bool):
        return "true" if value else "false"
    # float는 지수 표기(1e-05) 없이 최단 표현 자릿수 그대로 전송
    if isinstance(value, float):
        return format(Decimal(repr(value)), 'f')
    return str(value)


def build_query_string(params: Mapping[str, ParamValue]) -> str:
    """
    파라미터를 form-encoding 쿼리 문자열로 직렬화

    삽입 순서를 그대로 유지합니다. 서명은 이 바이트열 그대로에 대해
    계산되므로 순서가 바뀌면 서명도 달라집니다.

    수량/가격은 거래소 정밀도를 그대로 지키도록 문자열("0.00001")로
    넘기는 것을 권장합니다. float는 지수 표기 없이 직렬화됩니다.
    """
    return urlencode([(key, _format_value(value)) for key, value in params.items()])


def create_signature(secret: str, query_string: str) -> str:
    """
    HMAC-SHA256 서명 생성

    Args:
        secret: API 시크릿 (HMAC 키로만 사용되며 전송되지 않음)
        query_string: 전송될 쿼리 문자열

    Returns:
        16진수 서명 문자열
    """
    return hmac.new(
        secret.encode('utf-8'),
        query_string.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()
