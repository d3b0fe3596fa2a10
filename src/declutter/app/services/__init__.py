"""
Application Services.

역할:
- conversation: 히스토리 + 진행 중 플래그 + 에러 말풍선 매핑
"""

from .conversation import ConversationService

__all__ = [
    "ConversationService",
]
