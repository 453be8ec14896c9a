"""
Binance API Client

바이낸스 거래소 REST API 연동을 위한 클라이언트 클래스
- Public API: 서명 없음, API 키 헤더 없음
- Private API: HMAC-SHA256 서명 + X-MBX-APIKEY 헤더
Reference: https://github.com/binance-exchange/binance-official-api-docs/blob/master/rest-api.md
"""

import dataclasses
from typing import Any, Dict, List, Optional, Union

import requests
from loguru import logger

from ..core.clock import ClockSynchronizer, current_millis
from ..core.exceptions import (
    APIDecodeException,
    APITimeoutException,
    APITransportException,
    MissingConfigurationException,
    MissingFieldException,
    UnsupportedMethodException,
)
from ..core.types import (
    ClientConfig,
    Credentials,
    HttpMethod,
    OrderRequest,
    OrderSide,
    OrderType,
    ParamValue,
    RequestParams,
)
from ..security.signature import build_query_string, create_signature
from ..utils import constants as api
from ..utils.constants import API_KEY_HEADER, is_time_exempt

JSONValue = Union[Dict[str, Any], List[Any]]


class BinanceClient:
    """
    바이낸스 거래소 API 클라이언트

    모든 메서드는 HTTP 요청을 정확히 한 번 보내고 (최초 시각 동기화 제외)
    디코딩된 응답을 반환하거나 예외를 발생시킵니다. 재시도는 하지 않습니다.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        recv_window: Optional[int] = None,
        verify_ssl: Optional[bool] = None,
        connect_timeout: Optional[float] = None,
        read_timeout: Optional[float] = None,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None,
        clock=current_millis
    ):
        """
        Args:
            api_key: 바이낸스 API 키
            secret_key: 바이낸스 시크릿 키
            base_url: API 기본 URL (기본값: https://api.binance.com/api/)
            recv_window: 수신 허용 오차 ms (기본값: 10000)
            verify_ssl: TLS 인증서 검증 여부
            connect_timeout: 연결 타임아웃 (초)
            read_timeout: 응답 타임아웃 (초)
            config: 미리 구성된 설정 (명시적 인자가 우선)
            session: 주입할 requests 세션 (테스트용)
            clock: 로컬 epoch 밀리초 함수
        """
        self.config = self._resolve_config(
            config, api_key, secret_key, base_url, recv_window,
            verify_ssl, connect_timeout, read_timeout
        )

        self.session = session or requests.Session()
        self.session.verify = self.config.verify_ssl
        self.session.headers.update({'User-Agent': self.config.user_agent})

        self._clock = ClockSynchronizer(self.get_server_time, clock=clock)

        logger.info(f"BinanceClient 초기화: {self.config.base_url} "
                    f"(recvWindow={self.config.recv_window}ms)")

    @staticmethod
    def _resolve_config(config, api_key, secret_key, base_url, recv_window,
                        verify_ssl, connect_timeout, read_timeout) -> ClientConfig:
        """명시적 인자를 설정 객체 위에 덮어써 최종 설정 생성"""
        config = config or ClientConfig()

        credentials = config.credentials
        if api_key or secret_key:
            credentials = Credentials(
                key=api_key or credentials.key,
                secret=secret_key or credentials.secret
            )

        overrides = {
            'base_url': base_url,
            'recv_window': recv_window,
            'verify_ssl': verify_ssl,
            'connect_timeout': connect_timeout,
            'read_timeout': read_timeout,
        }
        overrides = {key: value for key, value in overrides.items() if value is not None}

        return dataclasses.replace(config, credentials=credentials, **overrides)

    @classmethod
    def from_config(cls, loader, **kwargs) -> "BinanceClient":
        """
        ConfigLoader로부터 클라이언트 생성

        Args:
            loader: ConfigLoader 인스턴스
            **kwargs: 생성자 인자 (설정 파일 값보다 우선)
        """
        return cls(config=loader.get_client_config(), **kwargs)

    @property
    def credentials(self) -> Credentials:
        return self.config.credentials

    @property
    def clock_offset(self) -> int:
        return self._clock.offset_ms

    @property
    def is_synced(self) -> bool:
        return self._clock.synced

    def close(self):
        """HTTP 세션 종료"""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def ping(self) -> JSONValue:
        """연결 확인"""
        return self._request(api.PING)

    def get_server_time(self) -> JSONValue:
        """서버 시각 조회 (시각 동기화 상태는 변경하지 않음)"""
        return self._request(api.SERVER_TIME)

    def get_ticker(self, symbol: str) -> JSONValue:
        """
        24시간 시세 통계 조회

        Args:
            symbol: 거래 심볼 (예: BNBBTC)
        """
        return self._request(api.TICKER_24HR, {'symbol': symbol})

    def get_price(self, symbol: str) -> JSONValue:
        """
        최신 가격 조회

        Args:
            symbol: 거래 심볼

        Returns:
            {"symbol": ..., "price": ...}
        """
        return self._request(api.TICKER_PRICE, {'symbol': symbol})

    def get_book_ticker(self, symbol: str) -> JSONValue:
        """최우선 매수/매도 호가 조회"""
        return self._request(api.BOOK_TICKER, {'symbol': symbol})

    def get_order_book(self, symbol: str, limit: int = api.DEFAULT_DEPTH_LIMIT) -> JSONValue:
        """
        호가창 조회

        Args:
            symbol: 거래 심볼
            limit: 호가 단계 수
        """
        return self._request(api.ORDER_BOOK, {'symbol': symbol, 'limit': limit})

    def get_trades(self, symbol: str, limit: int = api.DEFAULT_TRADES_LIMIT) -> JSONValue:
        """시장 최근 체결 내역 조회"""
        return self._request(api.RECENT_TRADES, {'symbol': symbol, 'limit': limit})

    def get_markets(self) -> List[Dict[str, Any]]:
        """
        거래 규칙 및 심볼 정보 조회

        Returns:
            응답의 symbols 목록
        """
        response = self._request(api.EXCHANGE_INFO)
        return self._extract_field(response, 'symbols', api.EXCHANGE_INFO)

    def get_klines(self, symbol: str, interval: str, limit: int = api.DEFAULT_KLINES_LIMIT) -> JSONValue:
        """
        캔들 데이터 조회

        Args:
            symbol: 거래 심볼
            interval: 캔들 간격 (1m, 1h, 1d ...)
            limit: 최대 캔들 개수 (기본값: 500)
        """
        params = {
            'symbol': symbol,
            'interval': interval,
            'limit': limit
        }
        return self._request(api.KLINES, params)

    # ------------------------------------------------------------------
    # Private API
    # ------------------------------------------------------------------

    def get_balances(self) -> List[Dict[str, Any]]:
        """
        계정 잔고 조회

        Returns:
            자산별 잔고 목록 (account 응답의 balances 필드)

        Raises:
            MissingFieldException: 응답에 balances 필드가 없는 경우
        """
        response = self._private_request(api.ACCOUNT)
        balances = self._extract_field(response, 'balances', api.ACCOUNT)
        logger.info(f"잔고 조회 성공: {len(balances)}개 자산")
        return balances

    def get_recent_trades(self, symbol: str = api.DEFAULT_TRADES_SYMBOL,
                          limit: int = api.DEFAULT_TRADES_LIMIT) -> JSONValue:
        """
        계정의 심볼별 체결 내역 조회

        Args:
            symbol: 거래 심볼
            limit: 최대 조회 개수 (최대 500)
        """
        params = {
            'symbol': symbol,
            'limit': limit,
        }
        return self._private_request(api.MY_TRADES, params)

    def get_open_orders(self) -> JSONValue:
        """미체결 주문 전체 조회"""
        return self._private_request(api.OPEN_ORDERS)

    def get_all_orders(self, symbol: str) -> JSONValue:
        """심볼의 전체 주문 내역 조회"""
        return self._private_request(api.ALL_ORDERS, {'symbol': symbol})

    def get_order(self, symbol: str, order_id: Union[str, int]) -> JSONValue:
        """
        단일 주문 상세 조회

        Args:
            symbol: 거래 심볼
            order_id: 주문 ID
        """
        params = {
            'symbol': symbol,
            'orderId': order_id
        }
        return self._private_request(api.ORDER, params)

    def place_order(self, order: OrderRequest) -> JSONValue:
        """
        주문 실행

        test 주문은 v3/order/test로 전송되어 거래소가 검증만 하고 체결하지 않습니다.
        """
        label = "테스트 주문" if order.test else "주문"
        price = f" @ {order.price}" if order.price is not None else ""
        logger.info(f"{label}: {order.side.value} {order.order_type.value} "
                    f"{order.quantity} {order.symbol}{price}")

        try:
            response = self._private_request(order.endpoint, order.to_params(), HttpMethod.POST)
        except Exception as e:
            logger.error(f"{label} 실행 실패: {e}")
            raise

        if isinstance(response, dict) and 'orderId' in response:
            logger.info(f"✅ {label} 접수: 주문ID {response['orderId']}")
        return response

    def trade(
        self,
        symbol: str,
        quantity: ParamValue,
        side: Union[str, OrderSide],
        order_type: Union[str, OrderType] = OrderType.MARKET,
        price: Optional[ParamValue] = None,
        test: bool = False
    ) -> JSONValue:
        """
        기본 주문 함수

        Args:
            symbol: 거래 심볼
            quantity: 주문 수량 (그대로 전송)
            side: BUY, SELL
            order_type: MARKET, LIMIT, STOP_LOSS, STOP_LOSS_LIMIT,
                        TAKE_PROFIT, TAKE_PROFIT_LIMIT, LIMIT_MAKER
            price: 지정가 (None이면 price 필드 생략)
            test: 테스트 주문 여부
        """
        order = OrderRequest(
            symbol=symbol,
            side=side,
            order_type=order_type,
            quantity=quantity,
            price=price,
            test=test
        )
        return self.place_order(order)

    def market_sell(self, symbol: str, quantity: ParamValue, test: bool = False) -> JSONValue:
        """시장가 매도"""
        return self.trade(symbol, quantity, OrderSide.SELL, OrderType.MARKET, None, test)

    def market_buy(self, symbol: str, quantity: ParamValue, test: bool = False) -> JSONValue:
        """시장가 매수"""
        return self.trade(symbol, quantity, OrderSide.BUY, OrderType.MARKET, None, test)

    def limit_sell(self, symbol: str, quantity: ParamValue, price: ParamValue,
                   test: bool = False) -> JSONValue:
        """지정가 매도"""
        return self.trade(symbol, quantity, OrderSide.SELL, OrderType.LIMIT, price, test)

    def limit_buy(self, symbol: str, quantity: ParamValue, price: ParamValue,
                  test: bool = False) -> JSONValue:
        """지정가 매수"""
        return self.trade(symbol, quantity, OrderSide.BUY, OrderType.LIMIT, price, test)

    # ------------------------------------------------------------------
    # Clock
    # ------------------------------------------------------------------

    def sync_clock(self) -> int:
        """
        서버 시각과의 차이 계산

        한 번 동기화되면 이후 호출은 캐시된 값을 반환합니다.

        Returns:
            offset (ms)
        """
        return self._clock.sync()

    # ------------------------------------------------------------------
    # Request builders
    # ------------------------------------------------------------------

    def _request(self, endpoint: str, params: Optional[RequestParams] = None,
                 method: Union[str, HttpMethod] = HttpMethod.GET) -> JSONValue:
        """
        Public 요청 (Security Type: NONE)

        Args:
            endpoint: API 엔드포인트 (예: v3/ticker/price)
            params: 요청 파라미터
            method: GET 또는 POST

        Returns:
            디코딩된 응답 (dict 또는 list)
        """
        method = self._resolve_method(method)
        params = dict(params or {})

        if not is_time_exempt(endpoint):
            self.sync_clock()
            self._add_timing_params(params)

        url = f"{self.config.base_url}{endpoint}"
        query = build_query_string(params)

        if method is HttpMethod.POST:
            headers = {'Content-Type': 'application/x-www-form-urlencoded'}
            data = query
        else:
            headers = {}
            data = None
            if query:
                url = f"{url}?{query}"

        logger.debug(f"{method.value} {endpoint} params={list(params)}")
        return self._send(method, url, endpoint, headers, data)

    def _private_request(self, endpoint: str, params: Optional[RequestParams] = None,
                         method: Union[str, HttpMethod] = HttpMethod.GET) -> JSONValue:
        """
        Private 요청 (Security Type: TRADE, USER_DATA, USER_STREAM, MARKET_DATA)

        파라미터는 모두 URL 쿼리로 전송되며 POST 본문은 비어 있습니다.
        """
        method = self._resolve_method(method)

        if not self.credentials.has_secret:
            logger.error(f"API 키/시크릿 없이 서명 요청 시도: {endpoint}")
            raise MissingConfigurationException("binance.auth")

        self.sync_clock()

        params = dict(params or {})
        if not is_time_exempt(endpoint):
            self._add_timing_params(params)

        query = build_query_string(params)
        signature = create_signature(self.credentials.secret, query)
        signed_query = f"{query}&signature={signature}" if query else f"signature={signature}"

        url = f"{self.config.base_url}{endpoint}?{signed_query}"
        headers = {API_KEY_HEADER: self.credentials.key}

        logger.debug(f"{method.value} {endpoint} (signed) params={list(params)}")
        return self._send(method, url, endpoint, headers, None)

    def _add_timing_params(self, params: Dict[str, ParamValue]):
        """timestamp/recvWindow 파라미터 주입"""
        params['timestamp'] = self._clock.timestamp()
        params['recvWindow'] = self.config.recv_window

    @staticmethod
    def _resolve_method(method: Union[str, HttpMethod]) -> HttpMethod:
        if isinstance(method, HttpMethod):
            return method
        try:
            return HttpMethod(str(method).upper())
        except ValueError:
            raise UnsupportedMethodException(str(method))

    def _send(self, method: HttpMethod, url: str, endpoint: str,
              headers: Dict[str, str], data: Optional[str]) -> JSONValue:
        """HTTP 요청 실행 및 응답 디코딩"""
        try:
            response = self.session.request(
                method.value,
                url,
                headers=headers,
                data=data,
                timeout=self.config.timeout
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"API 요청 시간 초과: {endpoint} - {e}")
            raise APITimeoutException(endpoint, e, self.config.timeout) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"API 요청 실패: {endpoint} - {e}")
            raise APITransportException(endpoint, e) from e

        return self._decode(endpoint, response)

    @staticmethod
    def _decode(endpoint: str, response: requests.Response) -> JSONValue:
        """응답 본문을 JSON으로 디코딩 (객체/배열만 허용)"""
        try:
            result = response.json()
        except ValueError as e:
            logger.error(f"JSON 디코딩 실패: {endpoint} (status {response.status_code})")
            raise APIDecodeException(endpoint, f"잘못된 JSON: {e}",
                                     response.text, response.status_code) from e

        if not isinstance(result, (dict, list)):
            logger.error(f"구조화되지 않은 JSON 응답: {endpoint} - {result!r}")
            raise APIDecodeException(endpoint, "객체/배열이 아닌 JSON 값",
                                     response.text, response.status_code)

        if not response.ok and isinstance(result, dict):
            logger.warning(f"API 오류 응답: {endpoint} (status {response.status_code}) "
                           f"code={result.get('code')} msg={result.get('msg')}")

        return result

    @staticmethod
    def _extract_field(response: JSONValue, field: str, endpoint: str) -> Any:
        """응답 envelope에서 필드 추출 (없으면 MissingFieldException)"""
        if not isinstance(response, dict) or field not in response:
            logger.error(f"응답 필드 누락: {endpoint} '{field}' - {response}")
            raise MissingFieldException(field, endpoint, response)
        return response[field]
