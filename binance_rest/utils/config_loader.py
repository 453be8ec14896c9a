"""
Configuration Loader

YAML 설정 파일 로딩 및 클라이언트 설정 변환을 담당하는 모듈
"""

import os
import yaml
from typing import Any, Dict
from pathlib import Path
from cryptography.fernet import Fernet, InvalidToken
from loguru import logger

from ..core.exceptions import InvalidConfigurationException
from ..core.types import ClientConfig, Credentials
from . import constants


class ConfigLoader:
    """
    설정 파일 로더

    YAML 설정 파일을 로드하고 환경 변수 치환, 암호화된 값 복호화 등을 제공합니다.

    설정 예시:
        binance:
          auth:
            key: ${BINANCE_API_KEY}
            secret: encrypted:gAAAAA...
          urls:
            api: https://api.binance.com/api/
          settings:
            timing: 10000
            ssl: true
    """

    ENCRYPTED_PREFIX = "encrypted:"

    def __init__(self, config_path: str):
        """
        Args:
            config_path: 설정 파일 경로
        """
        self.config_path = Path(config_path)
        self._config_data: Dict[str, Any] = {}
        self._encryption_key = None

        self._load_config()
        self._load_encryption_key()

        logger.info(f"ConfigLoader 초기화: {config_path}")

    def _load_config(self):
        """설정 파일 로드"""
        try:
            if not self.config_path.exists():
                raise FileNotFoundError(f"설정 파일을 찾을 수 없습니다: {self.config_path}")

            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config_data = yaml.safe_load(f) or {}

            self._substitute_env_vars(self._config_data)

            logger.info("설정 파일 로드 완료")

        except Exception as e:
            logger.error(f"설정 파일 로드 실패: {e}")
            raise

    def _substitute_env_vars(self, data: Any) -> Any:
        """
        환경 변수 치환

        ${ENV_VAR} 또는 ${ENV_VAR:default} 형태의 문자열을 환경 변수 값으로 치환합니다.
        환경 변수도 기본값도 없으면 None이 됩니다.
        """
        if isinstance(data, dict):
            for key, value in data.items():
                data[key] = self._substitute_env_vars(value)
        elif isinstance(data, list):
            for i, item in enumerate(data):
                data[i] = self._substitute_env_vars(item)
        elif isinstance(data, str):
            if data.startswith("${") and data.endswith("}"):
                env_var = data[2:-1]
                default_value = None

                if ":" in env_var:
                    env_var, default_value = env_var.split(":", 1)

                if env_var in os.environ:
                    data = os.environ[env_var]
                elif default_value is not None:
                    data = default_value
                else:
                    # 치환되지 않은 플레이스홀더는 값이 없는 것으로 취급
                    logger.warning(f"환경 변수 미설정: {env_var}")
                    data = None

        return data

    def _load_encryption_key(self):
        """암호화 키 로드"""
        encryption_config = self.get("security.encryption", {}) or {}

        if not encryption_config.get("enabled", False):
            return

        key_path = Path(encryption_config.get("key_file", "./config/.encryption_key"))

        if key_path.exists():
            with open(key_path, 'rb') as f:
                self._encryption_key = f.read().strip()
            logger.info("암호화 키 로드 완료")
        else:
            logger.warning(f"암호화 키 파일을 찾을 수 없습니다: {key_path}")

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        설정 값 조회

        Args:
            key_path: 점(.)으로 구분된 키 경로 (예: "binance.auth.key")
            default: 기본값

        Returns:
            설정 값
        """
        current = self._config_data

        for key in key_path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        if self._is_encrypted_value(current):
            return self._decrypt_value(current)

        return current

    def set(self, key_path: str, value: Any):
        """
        설정 값 설정 (런타임 전용)

        Args:
            key_path: 점(.)으로 구분된 키 경로
            value: 설정할 값
        """
        keys = key_path.split('.')
        current = self._config_data

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _is_encrypted_value(self, value: Any) -> bool:
        """암호화된 값인지 확인"""
        return (isinstance(value, str) and
                value.startswith(self.ENCRYPTED_PREFIX) and
                self._encryption_key is not None)

    def _decrypt_value(self, encrypted_value: str) -> str:
        """암호화된 값 복호화"""
        encrypted_data = encrypted_value[len(self.ENCRYPTED_PREFIX):]

        try:
            fernet = Fernet(self._encryption_key)
            return fernet.decrypt(encrypted_data.encode()).decode()
        except (InvalidToken, ValueError) as e:
            logger.error(f"값 복호화 실패: {e}")
            raise InvalidConfigurationException("encrypted value", "***", "유효한 Fernet 토큰") from e

    def encrypt_value(self, plain_value: str) -> str:
        """
        값 암호화

        Args:
            plain_value: 평문 값

        Returns:
            암호화된 값 ("encrypted:" 접두사 포함)
        """
        if not self._encryption_key:
            self._generate_encryption_key()

        fernet = Fernet(self._encryption_key)
        encrypted = fernet.encrypt(plain_value.encode())

        return f"{self.ENCRYPTED_PREFIX}{encrypted.decode()}"

    def _generate_encryption_key(self):
        """새 암호화 키 생성 및 저장"""
        encryption_config = self.get("security.encryption", {}) or {}
        key_path = Path(encryption_config.get("key_file", "./config/.encryption_key"))

        key_path.parent.mkdir(parents=True, exist_ok=True)

        self._encryption_key = Fernet.generate_key()

        with open(key_path, 'wb') as f:
            f.write(self._encryption_key)

        # 소유자만 읽기/쓰기
        if os.name != 'nt':
            os.chmod(key_path, 0o600)

        logger.info(f"새 암호화 키 생성 및 저장: {key_path}")

    def validate_required_config(self, required_keys: list) -> bool:
        """
        필수 설정 값 검증

        Args:
            required_keys: 필수 키 목록

        Returns:
            검증 통과 여부
        """
        missing_keys = []

        for key in required_keys:
            value = self.get(key)
            if value is None or value == "":
                missing_keys.append(key)

        if missing_keys:
            logger.error(f"필수 설정 값 누락: {missing_keys}")
            return False

        logger.info("필수 설정 값 검증 통과")
        return True

    def get_client_config(self) -> ClientConfig:
        """
        바이낸스 클라이언트 설정 생성

        값이 없으면 기본값(recvWindow 10000ms, 연결 20초, 응답 300초)을 사용합니다.
        """
        timing = self.get("binance.settings.timing")
        if timing is None or timing == "":
            timing = constants.DEFAULT_RECV_WINDOW
        try:
            recv_window = int(timing)
        except (TypeError, ValueError):
            raise InvalidConfigurationException("binance.settings.timing", timing, "정수 (ms)")

        return ClientConfig(
            credentials=Credentials(
                key=self.get("binance.auth.key", "") or "",
                secret=self.get("binance.auth.secret", "") or ""
            ),
            base_url=self.get("binance.urls.api") or constants.DEFAULT_BASE_URL,
            recv_window=recv_window,
            verify_ssl=self._as_bool(self.get("binance.settings.ssl"), default=True),
            connect_timeout=self._get_seconds("binance.settings.connect_timeout",
                                              constants.DEFAULT_CONNECT_TIMEOUT),
            read_timeout=self._get_seconds("binance.settings.read_timeout",
                                           constants.DEFAULT_READ_TIMEOUT)
        )

    def _get_seconds(self, key_path: str, default: float) -> float:
        """초 단위 설정 값 조회 (환경 변수 치환 결과 문자열 허용)"""
        value = self.get(key_path)
        if value is None or value == "":
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            raise InvalidConfigurationException(key_path, value, "숫자 (초)")

    @staticmethod
    def _as_bool(value: Any, default: bool = True) -> bool:
        if value is None:
            return default
        # 환경 변수 치환 결과는 문자열
        if isinstance(value, str):
            return value.strip().lower() not in ("0", "false", "no", "off", "")
        return bool(value)

    def get_logging_config(self) -> Dict[str, Any]:
        """로깅 설정 반환"""
        return self.get("logging", {}) or {}

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 반환 (민감한 정보 마스킹)"""
        config_copy = yaml.safe_load(yaml.safe_dump(self._config_data)) or {}
        self._mask_sensitive_data(config_copy)
        return config_copy

    def _mask_sensitive_data(self, data: Any, sensitive_keys: list = None):
        """민감한 데이터 마스킹"""
        if sensitive_keys is None:
            sensitive_keys = ["key", "secret", "password", "token"]

        if isinstance(data, dict):
            for key, value in data.items():
                if any(sensitive in key.lower() for sensitive in sensitive_keys) and not isinstance(value, (dict, list)):
                    if isinstance(value, str) and len(value) > 4:
                        data[key] = value[:4] + "*" * (len(value) - 4)
                    else:
                        data[key] = "***"
                else:
                    self._mask_sensitive_data(value, sensitive_keys)
        elif isinstance(data, list):
            for item in data:
                self._mask_sensitive_data(item, sensitive_keys)


# 서명 요청에 필요한 키 목록
REQUIRED_CONFIG_KEYS = [
    "binance.auth.key",
    "binance.auth.secret",
]
