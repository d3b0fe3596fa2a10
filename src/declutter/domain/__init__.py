"""Domain layer: errors, schemas, constants."""

from .errors import (
    ConversationBusyError,
    DeclutterError,
    ErrorCodes,
    ImageEncodingError,
)
from .schemas import AppState, ChatState, Message, Role

__all__ = [
    "DeclutterError",
    "ImageEncodingError",
    "ConversationBusyError",
    "ErrorCodes",
    "Message",
    "Role",
    "ChatState",
    "AppState",
]
