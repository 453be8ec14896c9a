"""
Custom Exception Classes for Binance REST Client

요청 전송, 응답 디코딩, 설정 단계별로 구분된 예외 클래스들
"""

from typing import Optional, Dict, Any
from datetime import datetime


class BinanceRestException(Exception):
    """클라이언트 기본 예외 클래스"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.recoverable = recoverable
        self.timestamp = datetime.now()

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 변환"""
        return {
            'error_code': self.error_code,
            'message': self.message,
            'details': self.details,
            'recoverable': self.recoverable,
            'timestamp': self.timestamp.isoformat()
        }


# API Exceptions
class APIException(BinanceRestException):
    """API 관련 기본 예외"""
    pass


class APITransportException(APIException):
    """HTTP 전송 실패 예외 (DNS, 연결, TLS 등)"""

    def __init__(self, endpoint: str, cause: Exception, error_code: str = "API_TRANSPORT_ERROR"):
        super().__init__(
            f"API 전송 실패: {endpoint} - {cause}",
            error_code=error_code,
            details={
                'endpoint': endpoint,
                'cause': repr(cause)
            },
            recoverable=True
        )
        self.endpoint = endpoint
        self.cause = cause


class APITimeoutException(APITransportException):
    """API 요청 시간 초과 예외"""

    def __init__(self, endpoint: str, cause: Exception, timeout: Any = None):
        super().__init__(endpoint, cause, error_code="API_TIMEOUT")
        self.details['timeout'] = timeout
        self.timeout = timeout


class APIDecodeException(APIException):
    """응답 본문 디코딩 실패 예외 (잘못된 JSON 또는 구조화되지 않은 값)"""

    def __init__(self, endpoint: str, reason: str, body: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(
            f"API 응답 디코딩 실패: {endpoint} - {reason}",
            error_code="API_DECODE_ERROR",
            details={
                'endpoint': endpoint,
                'reason': reason,
                'status_code': status_code,
                'body': body
            },
            recoverable=False
        )
        self.endpoint = endpoint
        self.reason = reason
        self.body = body
        self.status_code = status_code


class MissingFieldException(APIException):
    """응답에 필수 필드가 없는 경우의 예외"""

    def __init__(self, field: str, endpoint: str, response: Any = None):
        super().__init__(
            f"응답 필드 누락: {endpoint} - '{field}'",
            error_code="MISSING_FIELD",
            details={
                'field': field,
                'endpoint': endpoint,
                'response': response
            },
            recoverable=False
        )
        self.field = field
        self.endpoint = endpoint
        self.response = response


class UnsupportedMethodException(APIException):
    """지원하지 않는 HTTP 메서드 예외"""

    def __init__(self, method: str):
        super().__init__(
            f"지원하지 않는 HTTP 메서드: {method}",
            error_code="UNSUPPORTED_METHOD",
            details={'method': method},
            recoverable=False
        )


# Trading Exceptions
class TradingException(BinanceRestException):
    """거래 관련 기본 예외"""
    pass


class InvalidOrderException(TradingException):
    """주문 파라미터 검증 실패 예외"""

    def __init__(self, field: str, value: Any, expected: str):
        super().__init__(
            f"잘못된 주문 파라미터: {field} - 값: {value}, 예상: {expected}",
            error_code="INVALID_ORDER",
            details={
                'field': field,
                'value': value,
                'expected': expected
            },
            recoverable=False
        )


# Configuration Exceptions
class ConfigurationException(BinanceRestException):
    """설정 관련 기본 예외"""

    def __init__(self, config_key: str, issue: str):
        super().__init__(
            f"설정 오류: {config_key} - {issue}",
            error_code="CONFIGURATION_ERROR",
            details={
                'config_key': config_key,
                'issue': issue
            },
            recoverable=False
        )


class MissingConfigurationException(ConfigurationException):
    """필수 설정 누락 예외"""

    def __init__(self, config_key: str):
        super().__init__(
            config_key,
            f"필수 설정 누락: {config_key}"
        )


class InvalidConfigurationException(ConfigurationException):
    """잘못된 설정 예외"""

    def __init__(self, config_key: str, value: Any, expected: str):
        super().__init__(
            config_key,
            f"잘못된 값: {value}, 예상: {expected}"
        )


# 호출자 관점의 오류 분류 이름
TransportError = APITransportException
DecodeError = APIDecodeException
MissingFieldError = MissingFieldException
