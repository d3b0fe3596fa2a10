"""
test_gemini.py - Gemini 세션 매니저 테스트

검증 포인트:
- 텍스트 전용 턴에는 이미지 파트 없음
- 이미지 턴: inline_data(image/jpeg) 1개 + text 1개, 이 순서
- start_new_session()은 항상 핸들 교체
- 첫 send_message가 세션을 lazy 생성
- 빈 응답 → EmptyResponseError
- 전송 에러 → 그대로 전파 (래핑/재시도 없음)
"""

import base64
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from declutter.app.providers.base import EmptyResponseError, ProviderError, SessionState
from declutter.app.providers.gemini import OrganizationService
from declutter.domain.constants import (
    DEFAULT_MODEL_ID,
    INITIAL_ANALYSIS_PROMPT,
    SYSTEM_INSTRUCTION,
)

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def service():
    """기본 세션 매니저."""
    return OrganizationService(model="gemini-3-pro", api_key="test-api-key")


# =============================================================================
# 초기화 테스트
# =============================================================================


class TestOrganizationServiceInit:
    """OrganizationService 초기화 테스트."""

    def test_init_with_defaults(self, monkeypatch):
        """기본값으로 초기화."""
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)

        service = OrganizationService()

        assert service.model == DEFAULT_MODEL_ID
        assert service.system_instruction == SYSTEM_INSTRUCTION
        assert service.api_key is None

    def test_init_with_api_key(self):
        """API 키 설정."""
        service = OrganizationService(api_key="my-api-key")

        assert service.api_key == "my-api-key"

    def test_init_uses_google_api_key_env(self, monkeypatch):
        """GOOGLE_API_KEY 환경변수 우선."""
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        monkeypatch.setenv("API_KEY", "plain-key")

        service = OrganizationService()

        assert service.api_key == "google-key"

    def test_init_falls_back_to_api_key_env(self, monkeypatch):
        """GOOGLE_API_KEY 없으면 API_KEY."""
        monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
        monkeypatch.setenv("API_KEY", "plain-key")

        service = OrganizationService()

        assert service.api_key == "plain-key"

    def test_client_and_session_lazy(self, service):
        """클라이언트/세션 모두 lazy."""
        assert service._client is None
        assert service.session is None
        assert service.state == SessionState.UNINITIALIZED

    def test_independent_instances(self, make_mock_genai):
        """인스턴스끼리 세션 공유 안 함 (모듈 싱글턴 없음)."""
        first = OrganizationService(api_key="k")
        second = OrganizationService(api_key="k")
        first._client = make_mock_genai()

        first.start_new_session()

        assert first.state == SessionState.ACTIVE
        assert second.state == SessionState.UNINITIALIZED


# =============================================================================
# build_turn 테스트
# =============================================================================


class TestBuildTurn:
    """턴 구성 테스트."""

    def test_text_only_has_no_image_part(self, service):
        """텍스트 전용 → 이미지 파트 없음."""
        turn = service.build_turn("How do I store shoes?")

        assert turn == [{"text": "How do I store shoes?"}]
        assert not any("inline_data" in part for part in turn)

    def test_image_turn_has_image_then_text(self, service, sample_image_b64, sample_image_bytes):
        """이미지 턴 → [inline_data, text] 순서."""
        turn = service.build_turn(INITIAL_ANALYSIS_PROMPT, sample_image_b64)

        assert len(turn) == 2
        assert list(turn[0]) == ["inline_data"]
        assert turn[0]["inline_data"]["mime_type"] == "image/jpeg"
        assert turn[0]["inline_data"]["data"] == sample_image_bytes
        assert turn[1] == {"text": INITIAL_ANALYSIS_PROMPT}

    def test_mime_type_fixed_for_png(self, service, sample_image_b64):
        """PNG여도 image/jpeg로 선언 (기존 계약 유지)."""
        turn = service.build_turn("look", sample_image_b64)

        assert turn[0]["inline_data"]["mime_type"] == "image/jpeg"

    def test_empty_image_string_treated_as_absent(self, service):
        """빈 문자열 이미지는 없는 것으로 처리."""
        turn = service.build_turn("hello", "")

        assert turn == [{"text": "hello"}]

    def test_payload_decoded_into_turn(self, service, sample_image_bytes):
        """인코딩된 payload → 턴의 data가 원본 바이트."""
        payload = base64.b64encode(sample_image_bytes).decode("ascii")

        turn = service.build_turn("x", payload)

        assert turn[0]["inline_data"]["data"] == sample_image_bytes


# =============================================================================
# start_new_session 테스트
# =============================================================================


class TestStartNewSession:
    """세션 생성/교체 테스트."""

    def test_creates_model_with_system_instruction(self, service, make_mock_genai):
        """모델 ID + 시스템 지시문으로 생성."""
        mock_genai = make_mock_genai()
        service._client = mock_genai

        service.start_new_session()

        mock_genai.GenerativeModel.assert_called_once_with(
            "gemini-3-pro",
            system_instruction=SYSTEM_INSTRUCTION,
        )
        assert service.state == SessionState.ACTIVE

    def test_two_calls_yield_distinct_handles(self, service, make_mock_genai):
        """연속 2회 호출 → 서로 다른 핸들."""
        mock_genai = make_mock_genai()
        first_chat, second_chat = MagicMock(), MagicMock()
        mock_genai.GenerativeModel.return_value.start_chat.side_effect = [
            first_chat,
            second_chat,
        ]
        service._client = mock_genai

        handle_1 = service.start_new_session()
        handle_2 = service.start_new_session()

        assert handle_1 is not handle_2
        assert service.session is handle_2

    @pytest.mark.asyncio
    async def test_send_after_reset_uses_only_new_session(self, service, make_mock_genai):
        """리셋 후 전송은 새 세션만 사용."""
        mock_genai = make_mock_genai()
        old_chat = MagicMock()
        new_chat = MagicMock()

        old_chat.send_message_async = AsyncMock(return_value=MagicMock(text="old"))
        new_chat.send_message_async = AsyncMock(return_value=MagicMock(text="new"))
        mock_genai.GenerativeModel.return_value.start_chat.side_effect = [
            old_chat,
            new_chat,
        ]
        service._client = mock_genai

        service.start_new_session()
        service.start_new_session()
        result = await service.send_message("After reset")

        assert result == "new"
        old_chat.send_message_async.assert_not_called()
        new_chat.send_message_async.assert_awaited_once()


# =============================================================================
# send_message 테스트 (Mock)
# =============================================================================


class TestSendMessage:
    """send_message 메서드 테스트."""

    @pytest.mark.asyncio
    async def test_lazy_session_on_first_send(self, service, make_mock_genai):
        """세션 없으면 첫 전송 시 생성 (uninitialized 에러 없음)."""
        mock_genai = make_mock_genai()
        service._client = mock_genai

        result = await service.send_message("Hello")

        assert result == "Here are 3 tips..."
        assert service.state == SessionState.ACTIVE
        mock_genai.GenerativeModel.return_value.start_chat.assert_called_once()

    @pytest.mark.asyncio
    async def test_successful_image_analysis(self, service, make_mock_genai, sample_image_b64):
        """이미지 분석 → 비어 있지 않은 응답."""
        service._client = make_mock_genai(
            responses=[MagicMock(text="Here are 3 tips...")]
        )

        result = await service.send_message(INITIAL_ANALYSIS_PROMPT, sample_image_b64)

        assert result == "Here are 3 tips..."
        chat = service.session
        sent_turn = chat.send_message_async.await_args.args[0]
        assert len(sent_turn) == 2
        assert "inline_data" in sent_turn[0]
        assert sent_turn[1] == {"text": INITIAL_ANALYSIS_PROMPT}

    @pytest.mark.asyncio
    async def test_text_only_send_has_no_image(self, service, make_mock_genai):
        """텍스트 전용 전송 → 이미지 파트 없음."""
        service._client = make_mock_genai()

        await service.send_message("Where should the books go?")

        sent_turn = service.session.send_message_async.await_args.args[0]
        assert sent_turn == [{"text": "Where should the books go?"}]

    @pytest.mark.asyncio
    async def test_session_reused_across_turns(self, service, make_mock_genai):
        """여러 턴이 같은 세션을 사용 (순서 유지)."""
        mock_genai = make_mock_genai(
            responses=[MagicMock(text="first"), MagicMock(text="second")]
        )
        service._client = mock_genai

        assert await service.send_message("one") == "first"
        assert await service.send_message("two") == "second"

        mock_genai.GenerativeModel.return_value.start_chat.assert_called_once()
        sent = [c.args[0] for c in service.session.send_message_async.await_args_list]
        assert sent == [[{"text": "one"}], [{"text": "two"}]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("empty_text", [None, ""])
    async def test_empty_response_raises(self, service, make_mock_genai, empty_text):
        """빈/없는 text → EmptyResponseError (빈 문자열 반환 금지)."""
        service._client = make_mock_genai(responses=[MagicMock(text=empty_text)])

        with pytest.raises(EmptyResponseError) as exc_info:
            await service.send_message("Hello")

        assert exc_info.value.code == "EMPTY_RESPONSE"

    @pytest.mark.asyncio
    async def test_sdk_value_error_on_text_is_empty_response(self, service, make_mock_genai):
        """SDK가 .text 접근 시 ValueError (파트 없음) → EmptyResponseError."""
        response = MagicMock()
        type(response).text = PropertyMock(side_effect=ValueError("no parts"))
        service._client = make_mock_genai(responses=[response])

        with pytest.raises(EmptyResponseError):
            await service.send_message("Hello")

    @pytest.mark.asyncio
    async def test_transport_error_propagates_unchanged(self, service, make_mock_genai):
        """전송 에러 → 같은 예외 객체 그대로 전파."""
        error = ConnectionError("network down")
        service._client = make_mock_genai(side_effect=error)

        with pytest.raises(ConnectionError) as exc_info:
            await service.send_message("Hello")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_transport_error_not_retried(self, service, make_mock_genai):
        """재시도 없음: 1회만 호출."""
        service._client = make_mock_genai(side_effect=RuntimeError("quota"))

        with pytest.raises(RuntimeError):
            await service.send_message("Hello")

        assert service.session.send_message_async.await_count == 1

    @pytest.mark.asyncio
    async def test_session_kept_after_failure(self, service, make_mock_genai):
        """실패 후에도 세션 유지 → 다음 턴 가능."""
        service._client = make_mock_genai(
            side_effect=[RuntimeError("boom"), MagicMock(text="recovered")]
        )

        with pytest.raises(RuntimeError):
            await service.send_message("first")
        result = await service.send_message("second")

        assert result == "recovered"


# =============================================================================
# Client 초기화 테스트
# =============================================================================


class TestGetClient:
    """_get_client 메서드 테스트."""

    def test_configures_api_key(self, service):
        """genai.configure에 API 키 전달."""
        mock_genai = MagicMock()
        mock_google = MagicMock(generativeai=mock_genai)
        with patch.dict(
            "sys.modules",
            {"google": mock_google, "google.generativeai": mock_genai},
        ):
            client = service._get_client()

        assert client is mock_genai
        mock_genai.configure.assert_called_once_with(api_key="test-api-key")

    def test_raises_error_if_not_installed(self, service):
        """google-generativeai 미설치 시 에러."""
        with patch.dict("sys.modules", {"google.generativeai": None}):
            with pytest.raises(ProviderError) as exc_info:
                service._get_client()

        assert exc_info.value.code == "GEMINI_NOT_INSTALLED"
