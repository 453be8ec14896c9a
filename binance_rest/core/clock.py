"""
Server Clock Synchronization

서버 시각과 로컬 시각의 차이(offset)를 한 번 계산해 캐시합니다.
서명 요청의 timestamp가 거래소의 recvWindow 안에 들어오도록 맞추는 용도입니다.
"""

import time
from threading import Lock
from typing import Any, Callable, Dict, Mapping, Optional

from loguru import logger

from .exceptions import MissingFieldException
from ..utils.constants import SERVER_TIME


def current_millis() -> int:
    """시스템 시계 기준 현재 epoch 밀리초"""
    return int(time.time() * 1000)


class ClockSynchronizer:
    """
    서버 시각 동기화기

    상태는 Unsynced → Synced 한 방향으로만 전환됩니다.
    동기화된 이후에는 같은 offset이 클라이언트 수명 동안 재사용되며,
    주기적인 재동기화는 하지 않습니다.

    동시에 여러 호출자가 처음 요청해도 서버 시각 조회는 한 번만 일어납니다.
    """

    def __init__(
        self,
        fetch_server_time: Callable[[], Mapping[str, Any]],
        clock: Callable[[], int] = current_millis
    ):
        """
        Args:
            fetch_server_time: 서버 시각 엔드포인트를 호출해 디코딩된 응답을 반환하는 함수
            clock: 로컬 epoch 밀리초 함수
        """
        self._fetch_server_time = fetch_server_time
        self._clock = clock
        self._lock = Lock()
        self._offset_ms = 0
        self._synced = False
        self._synced_at: Optional[int] = None

    @property
    def synced(self) -> bool:
        return self._synced

    @property
    def offset_ms(self) -> int:
        return self._offset_ms

    def sync(self) -> int:
        """
        서버 시각과의 offset 계산 (이미 동기화된 경우 캐시 반환)

        offset = 응답 수신 직후 로컬 시각 - 서버 보고 시각

        Returns:
            offset (ms)

        Raises:
            서버 시각 조회 실패 시 해당 예외를 그대로 전파합니다.
            이 경우 상태는 Unsynced로 남아 다음 호출에서 다시 시도합니다.
        """
        if self._synced:
            return self._offset_ms

        with self._lock:
            # 락 대기 중 다른 호출자가 동기화를 끝냈을 수 있음
            if self._synced:
                return self._offset_ms

            response = self._fetch_server_time()
            after = self._clock()

            if not isinstance(response, Mapping) or 'serverTime' not in response:
                logger.error(f"서버 시각 응답에 serverTime 없음: {response}")
                raise MissingFieldException('serverTime', SERVER_TIME, response)

            self._offset_ms = int(after - int(response['serverTime']))
            self._synced_at = after
            self._synced = True

            logger.info(f"서버 시각 동기화 완료: offset {self._offset_ms}ms")
            return self._offset_ms

    def timestamp(self) -> int:
        """서버 시각 기준으로 보정된 현재 밀리초"""
        return self._clock() - self._offset_ms

    def get_state(self) -> Dict[str, Any]:
        """현재 상태 조회"""
        return {
            'synced': self._synced,
            'offset_ms': self._offset_ms,
            'synced_at': self._synced_at
        }
