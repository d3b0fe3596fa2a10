"""
Data schemas for the chat app.

규칙:
- Message는 생성 후 불변 (frozen)
- 히스토리는 프로세스 메모리에만 존재, 디스크 저장 금지
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from declutter.core.ids import generate_message_id, now_ms

# =============================================================================
# Enums
# =============================================================================

class Role(str, Enum):
    """메시지 작성자."""
    USER = "user"
    MODEL = "model"


class AppState(str, Enum):
    """
    화면 상태.

    WELCOME: 업로드 화면
    CHATTING: 채팅 화면
    """
    WELCOME = "WELCOME"
    CHATTING = "CHATTING"

# =============================================================================
# Message
# =============================================================================

@dataclass(frozen=True)
class Message:
    """채팅 메시지 1건."""
    id: str
    role: Role
    text: str
    timestamp: int  # epoch ms
    image: str | None = None  # base64 (data: 접두어 없음)
    is_error: bool = False

    @classmethod
    def user(cls, text: str, image: str | None = None) -> "Message":
        return cls(
            id=generate_message_id(),
            role=Role.USER,
            text=text,
            image=image,
            timestamp=now_ms(),
        )

    @classmethod
    def model(cls, text: str) -> "Message":
        return cls(
            id=generate_message_id(),
            role=Role.MODEL,
            text=text,
            timestamp=now_ms(),
        )

    @classmethod
    def error(cls, text: str) -> "Message":
        """에러 말풍선 (role=model, is_error=True)."""
        return cls(
            id=generate_message_id(),
            role=Role.MODEL,
            text=text,
            timestamp=now_ms(),
            is_error=True,
        )

    @property
    def is_user(self) -> bool:
        return self.role == Role.USER

    def to_dict(self) -> dict[str, Any]:
        """JSON 직렬화용."""
        result = {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "image": self.image,
            "timestamp": self.timestamp,
            "is_error": self.is_error,
        }
        # None 값 제거
        return {k: v for k, v in result.items() if v is not None}


@dataclass
class ChatState:
    """채팅 화면 상태: 히스토리 + 진행 중 플래그."""
    messages: list[Message] = field(default_factory=list)
    is_loading: bool = False
