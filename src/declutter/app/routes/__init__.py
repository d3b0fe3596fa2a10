"""
Routes.

- chat: 업로드/채팅 화면 + API
"""

from . import chat

__all__ = ["chat"]
