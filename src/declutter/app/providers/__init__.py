"""
AI Provider Abstraction.

모델명은 config만 SSOT.
"""

from .base import ChatProvider, EmptyResponseError, ProviderError, SessionState
from .gemini import OrganizationService

__all__ = [
    "ChatProvider",
    "ProviderError",
    "EmptyResponseError",
    "SessionState",
    "OrganizationService",
]
