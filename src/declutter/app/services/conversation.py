"""
Conversation Service: 화면 상태 + 히스토리 관리.

역할:
- 사용자/모델 메시지 기록 (메모리만, 디스크 저장 없음)
- 진행 중 플래그로 턴 직렬화 (N번째 응답 수신 전 N+1번째 전송 금지)
- provider 실패 → 에러 말풍선 1개 (세션은 계속 사용 가능)
"""

import logging

from declutter.app.providers.base import ChatProvider
from declutter.domain.constants import (
    ANALYSIS_ERROR_TEXT,
    FOLLOWUP_ERROR_TEXT,
    FOLLOWUP_IMAGE_DISPLAY_TEXT,
    FOLLOWUP_IMAGE_PROMPT,
    INITIAL_ANALYSIS_PROMPT,
)
from declutter.domain.errors import ConversationBusyError
from declutter.domain.schemas import AppState, ChatState, Message

logger = logging.getLogger(__name__)


class ConversationService:
    """
    채팅 화면 컨트롤러.

    Provider 계약(start_new_session / send_message)에만 의존.
    """

    def __init__(self, provider: ChatProvider):
        """
        Args:
            provider: 세션 매니저 (OrganizationService 또는 테스트 fake)
        """
        self.provider = provider
        self.state = ChatState()
        self.app_state = AppState.WELCOME

    @property
    def messages(self) -> list[Message]:
        """히스토리 (복사본)."""
        return list(self.state.messages)

    @property
    def is_loading(self) -> bool:
        return self.state.is_loading

    async def start_analysis(self, image: str) -> list[Message]:
        """
        첫 분석 요청: 업로드 화면 → 채팅 화면.

        히스토리를 [사용자 메시지(이미지 포함)]로 초기화한 뒤 응답을 붙인다.

        Args:
            image: base64 이미지

        Returns:
            이번 호출로 추가된 메시지들
        """
        if not image:
            raise ValueError("start_analysis requires an image")
        self._ensure_idle()

        self.app_state = AppState.CHATTING
        user_message = Message.user(INITIAL_ANALYSIS_PROMPT, image=image)
        self.state.messages = [user_message]

        reply = await self._ask(
            INITIAL_ANALYSIS_PROMPT,
            image,
            error_text=ANALYSIS_ERROR_TEXT,
        )
        return [user_message, reply]

    async def send_followup(self, text: str, image: str | None = None) -> list[Message]:
        """
        후속 질문.

        - 텍스트/이미지 둘 다 비면 무시 (빈 리스트)
        - 이미지만 있으면 표시용/전송용 기본 문구 사용

        Returns:
            이번 호출로 추가된 메시지들
        """
        if not text.strip() and not image:
            return []
        self._ensure_idle()

        self.app_state = AppState.CHATTING
        display_text = text or (FOLLOWUP_IMAGE_DISPLAY_TEXT if image else "")
        user_message = Message.user(display_text, image=image)
        self.state.messages.append(user_message)

        reply = await self._ask(
            text or FOLLOWUP_IMAGE_PROMPT,
            image,
            error_text=FOLLOWUP_ERROR_TEXT,
        )
        return [user_message, reply]

    def new_session(self) -> None:
        """새 세션: 원격 맥락 폐기 + 히스토리 초기화 + 업로드 화면."""
        self.provider.start_new_session()
        self.state = ChatState()
        self.app_state = AppState.WELCOME
        logger.info("Conversation reset")

    def _ensure_idle(self) -> None:
        if self.state.is_loading:
            raise ConversationBusyError(pending=len(self.state.messages))

    async def _ask(self, text: str, image: str | None, *, error_text: str) -> Message:
        """provider 호출 → 모델 메시지 또는 에러 메시지 1개 추가."""
        self.state.is_loading = True
        try:
            response_text = await self.provider.send_message(text, image)
            reply = Message.model(response_text)
        except Exception:
            logger.exception("Failed to get a response from the model")
            reply = Message.error(error_text)
        finally:
            self.state.is_loading = False

        self.state.messages.append(reply)
        return reply
