"""
ID 생성: message_id, 타임스탬프

규칙:
- message_id는 불투명 문자열 (호출자가 파싱하지 않음)
- 타임스탬프는 epoch 밀리초 정수
"""

import uuid
from datetime import UTC, datetime

MESSAGE_ID_PREFIX = "MSG-"


def generate_message_id() -> str:
    """
    Message ID 생성.

    고유성 보장: UUID v4
    포맷: MSG-{timestamp(ms)}-{uuid[:8]}

    Returns:
        message_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"
    unique = uuid.uuid4().hex[:8]

    return f"{MESSAGE_ID_PREFIX}{timestamp}-{unique}"


def now_ms() -> int:
    """현재 UTC 시각 (epoch 밀리초)."""
    return int(datetime.now(UTC).timestamp() * 1000)
