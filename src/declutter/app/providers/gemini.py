"""
Google Gemini 대화 세션 매니저.

세션 규칙:
- 핸들은 최대 1개, 첫 전송 시 lazy 생성
- start_new_session() → 이전 원격 대화 맥락 폐기
- 전송 실패는 로그만 남기고 그대로 전파 (재시도/fallback 없음)
"""

import logging
import os
from typing import Any

from declutter.core.images import decode_image
from declutter.domain.constants import (
    DEFAULT_MODEL_ID,
    INLINE_IMAGE_MIME_TYPE,
    SYSTEM_INSTRUCTION,
)
from declutter.domain.errors import ErrorCodes

from .base import ChatProvider, EmptyResponseError, ProviderError, SessionState

logger = logging.getLogger(__name__)


class OrganizationService(ChatProvider):
    """
    DeclutterAI 세션 매니저.

    Usage:
        service = OrganizationService(model="gemini-3-pro-preview")
        text = await service.send_message(
            "Analyze this room and give me organization tips.",
            image_b64,
        )
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL_ID,
        api_key: str | None = None,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ):
        """
        Args:
            model: 모델 ID (config에서 주입)
            api_key: API 키 (없으면 GOOGLE_API_KEY → API_KEY 환경변수)
            system_instruction: 세션 생성 시 고정 지시문
        """
        self.model = model
        self.api_key = (
            api_key
            or os.environ.get("GOOGLE_API_KEY")
            or os.environ.get("API_KEY")
        )
        self.system_instruction = system_instruction
        self._client: Any = None
        self._session: Any = None

    @property
    def state(self) -> SessionState:
        if self._session is None:
            return SessionState.UNINITIALIZED
        return SessionState.ACTIVE

    @property
    def session(self) -> Any:
        """현재 세션 핸들 (없으면 None)."""
        return self._session

    def _get_client(self) -> Any:
        """Gemini 클라이언트 (lazy init)."""
        if self._client is None:
            try:
                import google.generativeai as genai
                genai.configure(api_key=self.api_key)
                self._client = genai
            except ImportError as e:
                raise ProviderError(
                    ErrorCodes.GEMINI_NOT_INSTALLED,
                    "google-generativeai package not installed. "
                    "Run: pip install google-generativeai",
                ) from e
        return self._client

    def start_new_session(self) -> Any:
        """
        새 채팅 세션 생성 (기존 핸들은 버림).

        Returns:
            새 ChatSession 핸들
        """
        genai = self._get_client()
        model_instance = genai.GenerativeModel(
            self.model,
            system_instruction=self.system_instruction,
        )
        self._session = model_instance.start_chat()
        logger.info(f"Started new chat session (model={self.model})")
        return self._session

    def build_turn(self, text: str, image: str | None = None) -> list[dict[str, Any]]:
        """
        전송할 턴 구성.

        - 이미지 있음: [inline_data(image/jpeg), text] 순서로 2개
        - 이미지 없음: [text] 1개

        Args:
            text: 사용자 텍스트
            image: base64 이미지

        Returns:
            parts 리스트
        """
        if not image:
            return [{"text": text}]

        return [
            {
                "inline_data": {
                    "mime_type": INLINE_IMAGE_MIME_TYPE,
                    "data": decode_image(image),
                }
            },
            {"text": text},
        ]

    async def send_message(self, text: str, image: str | None = None) -> str:
        """
        턴 1개 전송 후 전체 응답 대기.

        Raises:
            EmptyResponseError: 응답 텍스트 없음
            Exception: 원격 호출 에러 (그대로 전파)
        """
        if self._session is None:
            self.start_new_session()

        turn = self.build_turn(text, image)

        try:
            response = await self._session.send_message_async(turn)
        except Exception as e:
            logger.error(f"Gemini API Error: {e}", exc_info=True)
            raise

        response_text = self._extract_text(response)
        if not response_text:
            raise EmptyResponseError(model=self.model)

        logger.debug(
            f"Received response ({len(response_text)} chars, image={bool(image)})"
        )
        return response_text

    def _extract_text(self, response: Any) -> str | None:
        """
        응답 텍스트 추출.

        SDK는 후보/파트가 없으면 .text 접근 시 ValueError를 던짐 → 빈 응답으로 처리.
        """
        try:
            text = response.text
        except ValueError as e:
            logger.warning(f"Response had no text parts: {e}")
            return None
        return text if isinstance(text, str) else None
