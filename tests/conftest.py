"""
Pytest Configuration and Fixtures for Binance REST Client Tests

테스트를 위한 공통 설정과 픽스처들
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qsl, urlsplit

import pytest
import requests

from binance_rest.trading.binance_client import BinanceClient


# ============================================================================
# Test Constants
# ============================================================================

BASE_URL = "https://api.test.binance.local/api/"
API_KEY = "test_api_key_1234"
API_SECRET = "test_secret_key_5678"

SERVER_TIME_MS = 1_600_000_000_000
LOCAL_TIME_MS = 1_600_000_000_250  # 서버보다 250ms 앞선 로컬 시계
EXPECTED_OFFSET_MS = LOCAL_TIME_MS - SERVER_TIME_MS


# ============================================================================
# Test Configuration
# ============================================================================

def pytest_configure(config):
    """Pytest 설정"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "security: Signing-related tests")
    config.addinivalue_line("markers", "trading: Order placement tests")
    config.addinivalue_line("markers", "clock: Server clock synchronization tests")
    config.addinivalue_line("markers", "config: Configuration loading tests")
    config.addinivalue_line("markers", "cli: CLI tests")


# ============================================================================
# HTTP Doubles
# ============================================================================

def make_response(body: Any, status: int = 200) -> requests.Response:
    """
    requests.Response 생성

    body가 문자열이면 그대로, 아니면 JSON으로 직렬화합니다.
    """
    response = requests.Response()
    response.status_code = status
    if isinstance(body, bytes):
        response._content = body
    elif isinstance(body, str):
        response._content = body.encode('utf-8')
    else:
        response._content = json.dumps(body).encode('utf-8')
    response.encoding = 'utf-8'
    return response


@dataclass
class RecordedCall:
    """전송된 요청 기록"""
    method: str
    url: str
    headers: Dict[str, str]
    data: Optional[str]
    timeout: Any

    @property
    def endpoint(self) -> str:
        return urlsplit(self.url).path[len(urlsplit(BASE_URL).path):]

    @property
    def raw_query(self) -> str:
        return urlsplit(self.url).query

    @property
    def query(self) -> List[tuple]:
        return parse_qsl(self.raw_query, keep_blank_values=True)

    @property
    def params(self) -> Dict[str, str]:
        return dict(self.query)


class FakeTransport:
    """
    requests.Session.request 대체

    엔드포인트별로 응답(또는 예외)을 등록합니다. 리스트로 등록하면 순서대로
    소비되고 마지막 항목이 반복됩니다. v1/time은 기본으로 서버 시각을 응답합니다.
    """

    def __init__(self, server_time: int = SERVER_TIME_MS):
        self.server_time = server_time
        self.routes: Dict[str, List[Any]] = {}
        self.calls: List[RecordedCall] = []

    def add(self, endpoint: str, *outcomes: Any):
        self.routes[endpoint] = list(outcomes)

    def calls_to(self, endpoint: str) -> List[RecordedCall]:
        return [call for call in self.calls if call.endpoint == endpoint]

    @property
    def last_call(self) -> RecordedCall:
        return self.calls[-1]

    def __call__(self, method, url, headers=None, data=None, timeout=None, **kwargs):
        call = RecordedCall(method, url, dict(headers or {}), data, timeout)
        self.calls.append(call)

        outcomes = self.routes.get(call.endpoint)
        if outcomes is None:
            if call.endpoint == "v1/time":
                return make_response({'serverTime': self.server_time})
            raise AssertionError(f"등록되지 않은 엔드포인트: {call.endpoint}")

        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, requests.Response):
            return outcome
        return make_response(outcome)


# ============================================================================
# Client Fixtures
# ============================================================================

@pytest.fixture
def transport() -> FakeTransport:
    """Fake HTTP 전송 계층"""
    return FakeTransport()


@pytest.fixture
def session(transport) -> requests.Session:
    """request가 FakeTransport로 대체된 세션"""
    session = requests.Session()
    session.request = transport
    return session


@pytest.fixture
def client(session):
    """고정 로컬 시계를 사용하는 BinanceClient"""
    client = BinanceClient(
        api_key=API_KEY,
        secret_key=API_SECRET,
        base_url=BASE_URL,
        session=session,
        clock=lambda: LOCAL_TIME_MS
    )
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def public_client(session):
    """API 키 없는 BinanceClient"""
    client = BinanceClient(
        base_url=BASE_URL,
        session=session,
        clock=lambda: LOCAL_TIME_MS
    )
    try:
        yield client
    finally:
        client.close()


# ============================================================================
# Mock Data Fixtures
# ============================================================================

@pytest.fixture
def mock_account_response() -> Dict[str, Any]:
    """Mock 계정 정보 응답"""
    return {
        'makerCommission': 15,
        'takerCommission': 15,
        'canTrade': True,
        'balances': [
            {'asset': 'BTC', 'free': '4723846.89208129', 'locked': '0.00000000'},
            {'asset': 'BNB', 'free': '4763368.68006011', 'locked': '0.00000000'},
        ]
    }


@pytest.fixture
def mock_order_response() -> Dict[str, Any]:
    """Mock 주문 응답 (FULL)"""
    return {
        'symbol': 'BNBBTC',
        'orderId': 28,
        'clientOrderId': '6gCrw2kRUAF9CvJDGP16IP',
        'transactTime': 1507725176595,
        'price': '1.50000000',
        'origQty': '10.00000000',
        'executedQty': '0.00000000',
        'status': 'NEW',
        'type': 'LIMIT',
        'side': 'BUY',
        'fills': []
    }
