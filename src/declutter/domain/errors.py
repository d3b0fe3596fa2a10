"""
Error definitions for the chat app.

규칙:
- 조용한 실패 금지 → 코드가 붙은 예외로 명시적 실패
- 재시도 없음: 실패는 호출자(화면)에서 에러 말풍선으로 표시
"""

from typing import Any


class DeclutterError(Exception):
    """
    앱 공통 에러.

    Usage:
        raise DeclutterError("IMAGE_READ_FAILED", source="room.jpg")
    """

    def __init__(self, code: str, message: str | None = None, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        parts = [f"[{self.code}]"]
        if self.message:
            parts.append(self.message)
        if ctx_str:
            parts.append(ctx_str)
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        data: dict[str, Any] = {"code": self.code, **self.context}
        if self.message:
            data["message"] = self.message
        return data


class ImageEncodingError(DeclutterError):
    """업로드 이미지를 읽지 못함 (손상된 핸들, 닫힌 파일 등)."""

    def __init__(self, message: str = "Could not read image data", **context: Any) -> None:
        super().__init__(ErrorCodes.IMAGE_READ_FAILED, message, **context)


class ConversationBusyError(DeclutterError):
    """이전 요청이 아직 진행 중인데 새 메시지가 들어옴."""

    def __init__(self, **context: Any) -> None:
        super().__init__(
            ErrorCodes.CONVERSATION_BUSY,
            "A response is still being generated",
            **context,
        )


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Image ===
    IMAGE_READ_FAILED = "IMAGE_READ_FAILED"
    NOT_AN_IMAGE = "NOT_AN_IMAGE"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"

    # === Provider ===
    EMPTY_RESPONSE = "EMPTY_RESPONSE"
    GEMINI_NOT_INSTALLED = "GEMINI_NOT_INSTALLED"

    # === Conversation ===
    CONVERSATION_BUSY = "CONVERSATION_BUSY"
