"""
로깅 설정.

각 모듈은 logging.getLogger(__name__)만 사용하고,
핸들러/레벨 설정은 앱 시작 시 여기서 1회 수행.

레벨 우선순위: 인자 > LOG_LEVEL 환경변수 > config logging.level > INFO
"""

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def resolve_level(level: str | int | None = None, config: dict | None = None) -> int:
    """
    로그 레벨 결정.

    Args:
        level: 명시적 레벨 ("DEBUG", logging.INFO 등)
        config: 앱 설정 (logging.level 참조)

    Returns:
        logging 레벨 정수 (알 수 없는 이름이면 INFO)
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL")
    if level is None and config:
        level = config.get("logging", {}).get("level")
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int | None = None, config: dict | None = None) -> None:
    """패키지 루트 로거 설정 (중복 핸들러 방지)."""
    root = logging.getLogger("declutter")
    root.setLevel(resolve_level(level, config))

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
