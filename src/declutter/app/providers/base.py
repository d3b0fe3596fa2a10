"""
Chat Provider 추상 인터페이스.

- 세션 핸들은 provider 인스턴스가 단독 소유 (모듈 전역 싱글턴 금지)
- 원격 호출 실패는 재시도/래핑 없이 그대로 전파
- 빈 응답만 EmptyResponseError로 명시적 실패
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from declutter.domain.errors import DeclutterError, ErrorCodes


class SessionState(str, Enum):
    """
    세션 생명주기.

    UNINITIALIZED --start_new_session / 첫 send--> ACTIVE
    ACTIVE --start_new_session--> ACTIVE (핸들 교체)
    """
    UNINITIALIZED = "UNINITIALIZED"
    ACTIVE = "ACTIVE"


# =============================================================================
# Provider Exceptions
# =============================================================================

class ProviderError(DeclutterError):
    """Provider 관련 에러."""

    def __init__(self, code: str, message: str, **context: Any) -> None:
        super().__init__(code, message, **context)


class EmptyResponseError(ProviderError):
    """원격 호출은 성공했지만 텍스트가 없음."""

    def __init__(self, message: str = "No response from AI", **context: Any) -> None:
        super().__init__(ErrorCodes.EMPTY_RESPONSE, message, **context)


# =============================================================================
# Abstract Provider
# =============================================================================

class ChatProvider(ABC):
    """
    대화 세션 Provider.

    역할: 세션 1개 유지 + 턴 전송 → 텍스트 응답
    히스토리 기록은 호출자(화면) 책임.
    """

    @abstractmethod
    def start_new_session(self) -> Any:
        """
        기존 세션을 버리고 새 세션 생성.

        Returns:
            새 세션 핸들 (불투명)
        """
        ...

    @abstractmethod
    async def send_message(self, text: str, image: str | None = None) -> str:
        """
        턴 1개 전송.

        Args:
            text: 사용자 텍스트
            image: base64 이미지 (선택)

        Returns:
            응답 텍스트 (비어 있지 않음)

        Raises:
            EmptyResponseError: 응답 텍스트가 비어 있음
            Exception: 원격/전송 에러 (그대로 전파)
        """
        ...
