"""
Pytest fixtures for the DeclutterAI tests.

구성:
- 이미지 샘플 (bytes / base64)
- Fake ChatProvider (네트워크 없이 대화 서비스/라우트 테스트)
- Mock genai 모듈 (OrganizationService._client 주입용)
"""

import base64
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from declutter.app.providers.base import ChatProvider

# 1x1 white pixel PNG (valid minimal PNG)
TINY_PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)


# =============================================================================
# Image Fixtures
# =============================================================================

@pytest.fixture
def sample_image_bytes() -> bytes:
    """작은 PNG 바이트."""
    return base64.b64decode(TINY_PNG_B64)


@pytest.fixture
def sample_image_b64() -> str:
    """작은 PNG의 base64 (접두어 없음)."""
    return TINY_PNG_B64


# =============================================================================
# Fake Provider
# =============================================================================

class FakeProvider(ChatProvider):
    """
    테스트용 provider.

    - replies: 순서대로 반환할 응답
    - error: 설정 시 send_message가 이 예외를 던짐
    """

    def __init__(self, replies: list[str] | None = None, error: Exception | None = None):
        self.replies = list(replies or ["Here are 3 tips..."])
        self.error = error
        self.calls: list[tuple[str, str | None]] = []
        self.sessions_started = 0

    def start_new_session(self) -> Any:
        self.sessions_started += 1
        return object()

    async def send_message(self, text: str, image: str | None = None) -> str:
        self.calls.append((text, image))
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0]


@pytest.fixture
def fake_provider() -> FakeProvider:
    """성공 응답을 돌려주는 provider."""
    return FakeProvider()


@pytest.fixture
def make_fake_provider() -> Callable[..., FakeProvider]:
    """응답/에러를 지정해서 provider 생성."""
    return FakeProvider


# =============================================================================
# Mock genai
# =============================================================================

@pytest.fixture
def make_mock_genai() -> Callable[..., MagicMock]:
    """
    google.generativeai 대체 Mock 생성기.

    Usage:
        genai = make_mock_genai(responses=[resp1, resp2])
        service._client = genai
        chat = genai.GenerativeModel.return_value.start_chat.return_value
    """

    def _make(responses: list[Any] | None = None, side_effect: Any = None) -> MagicMock:
        mock_chat = MagicMock()
        if side_effect is not None:
            mock_chat.send_message_async = AsyncMock(side_effect=side_effect)
        else:
            values = responses or [MagicMock(text="Here are 3 tips...")]
            mock_chat.send_message_async = AsyncMock(side_effect=list(values))

        mock_model = MagicMock()
        mock_model.start_chat.return_value = mock_chat

        mock_genai = MagicMock()
        mock_genai.GenerativeModel.return_value = mock_model
        return mock_genai

    return _make
