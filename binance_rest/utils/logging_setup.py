"""
Logging Setup

loguru 핸들러 구성
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .constants import DEFAULT_LOG_FORMAT, DEFAULT_LOG_ROTATION, DEFAULT_LOG_RETENTION


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    rotation: str = DEFAULT_LOG_ROTATION,
    retention: str = DEFAULT_LOG_RETENTION,
    log_format: str = DEFAULT_LOG_FORMAT
):
    """
    로깅 시스템 설정

    기본 핸들러를 제거하고 stderr 콘솔 핸들러와 (선택적으로) 파일 핸들러를 추가합니다.
    stdout은 CLI 출력용으로 남겨 둡니다.

    Args:
        level: 로그 레벨
        log_file: 로그 파일 경로 (None이면 파일 로깅 생략)
        rotation: 파일 로테이션 기준
        retention: 파일 보관 기간
        log_format: 파일 로그 포맷
    """
    logger.remove()

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            rotation=rotation,
            retention=retention,
            format=log_format
        )

    logger.add(sys.stderr, level=level)

    logger.debug(f"로깅 시스템 설정 완료 (level={level}, file={log_file})")
