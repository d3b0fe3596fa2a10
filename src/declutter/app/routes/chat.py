"""
Chat Routes: 방 사진 업로드 + 정리 조언 채팅.

- GET /chat → 채팅 화면 (HTMX)
- POST /api/chat/analyze → 첫 사진 분석
- POST /api/chat/message → 후속 질문 (사진 첨부 선택)
- POST /api/chat/reset → 새 세션
- GET /api/chat/messages → 히스토리 JSON

단일 사용자 앱: 대화 상태는 app.state.conversation 하나뿐.
"""

import html as html_escape_module
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from declutter.app.services.conversation import ConversationService
from declutter.core.formatting import format_text
from declutter.core.images import encode_upload, is_image_content_type, to_data_url
from declutter.domain.constants import (
    BUSY_TEXT,
    EMPTY_INPUT_TEXT,
    IMAGE_TOO_LARGE_TEXT,
    INLINE_IMAGE_MIME_TYPE,
    MAX_UPLOAD_MB,
    NOT_AN_IMAGE_TEXT,
    RESET_ERROR_TEXT,
)
from declutter.domain.errors import (
    ConversationBusyError,
    DeclutterError,
    ErrorCodes,
    ImageEncodingError,
)
from declutter.domain.schemas import AppState, Message

logger = logging.getLogger(__name__)

# Jinja2 템플릿 설정
_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = (
    Jinja2Templates(directory=_templates_dir) if _templates_dir.exists() else None
)

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints


def get_conversation(request: Request) -> ConversationService:
    """앱에 붙은 대화 서비스."""
    conversation: ConversationService = request.app.state.conversation
    return conversation


# =============================================================================
# HTML Generation Helpers
# =============================================================================


def escape_html(text: str) -> str:
    """HTML 이스케이프."""
    return html_escape_module.escape(text)


def format_timestamp(timestamp_ms: int) -> str:
    """epoch ms → 로컬 시각 HH:MM."""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%H:%M")


def build_message_html(message: Message) -> str:
    """
    메시지 말풍선 HTML 생성.

    - 사용자: 원문 그대로 (줄바꿈 유지)
    - 모델: **굵게**/줄바꿈 포맷팅
    - 에러: error 클래스 추가
    """
    classes = ["message", message.role.value]
    if message.is_error:
        classes.append("error")

    image_html = ""
    if message.image:
        src = to_data_url(message.image, INLINE_IMAGE_MIME_TYPE)
        image_html = f'<img class="room-photo" src="{src}" alt="Room upload">'

    if message.is_user:
        body = f'<p class="user-text">{escape_html(message.text)}</p>'
    else:
        body = f'<div class="model-text">{format_text(message.text)}</div>'

    return (
        f'<div class="{" ".join(classes)}" id="{escape_html(message.id)}">'
        f"{image_html}{body}"
        f'<div class="timestamp">{format_timestamp(message.timestamp)}</div>'
        f"</div>"
    )


def build_messages_html(messages: list[Message]) -> str:
    """여러 말풍선 연결."""
    return "\n".join(build_message_html(m) for m in messages)


def build_notice_html(text: str) -> str:
    """히스토리에 남기지 않는 안내 말풍선."""
    return f'<div class="message model notice">{escape_html(text)}</div>'


# =============================================================================
# Upload Helpers
# =============================================================================


def _max_upload_bytes(request: Request) -> int:
    config: dict = getattr(request.app.state, "config", {}) or {}
    max_mb = config.get("upload", {}).get("max_mb", MAX_UPLOAD_MB)
    return int(max_mb * 1024 * 1024)


def _decoded_size(payload: str) -> int:
    """base64 길이로 원본 바이트 수 계산."""
    padding = payload.count("=", max(len(payload) - 2, 0))
    return len(payload) * 3 // 4 - padding


async def read_image_upload(request: Request, file: UploadFile) -> str:
    """
    업로드 파일 검증 + base64 인코딩.

    Raises:
        DeclutterError: NOT_AN_IMAGE, IMAGE_TOO_LARGE
        ImageEncodingError: 읽기 실패
    """
    if not is_image_content_type(file.content_type):
        raise DeclutterError(
            ErrorCodes.NOT_AN_IMAGE,
            NOT_AN_IMAGE_TEXT,
            content_type=file.content_type,
        )

    max_bytes = _max_upload_bytes(request)
    # 크기를 아는 경우 읽기 전에 거절
    if file.size is not None and file.size > max_bytes:
        raise _too_large_error(file, max_bytes)

    payload = await encode_upload(file)

    if _decoded_size(payload) > max_bytes:
        raise _too_large_error(file, max_bytes)
    return payload


def _too_large_error(file: UploadFile, max_bytes: int) -> DeclutterError:
    max_mb = max_bytes / (1024 * 1024)
    return DeclutterError(
        ErrorCodes.IMAGE_TOO_LARGE,
        IMAGE_TOO_LARGE_TEXT.format(max_mb=f"{max_mb:g}"),
        filename=file.filename,
        size=file.size,
    )


def _upload_error_response(error: DeclutterError) -> HTMLResponse:
    """업로드 에러 → 상태 코드 + 안내 말풍선."""
    if error.code == ErrorCodes.IMAGE_TOO_LARGE:
        status_code = 413
        text = error.message or IMAGE_TOO_LARGE_TEXT.format(max_mb=MAX_UPLOAD_MB)
    elif isinstance(error, ImageEncodingError):
        status_code = 400
        text = "Could not read that image. Please try another file."
    else:
        status_code = 400
        text = NOT_AN_IMAGE_TEXT
    logger.warning(f"Rejected upload: {error}")
    return HTMLResponse(content=build_notice_html(text), status_code=status_code)


def _busy_response() -> HTMLResponse:
    return HTMLResponse(content=build_notice_html(BUSY_TEXT), status_code=409)


# =============================================================================
# Page Routes
# =============================================================================


@router.get("/chat", response_class=HTMLResponse)
async def chat_page(request: Request) -> HTMLResponse:
    """
    채팅 화면.

    WELCOME: 업로드 화면 / CHATTING: 히스토리 + 입력창
    """
    conversation = get_conversation(request)
    is_chatting = conversation.app_state == AppState.CHATTING
    messages_html = build_messages_html(conversation.messages)

    if jinja_templates:
        return jinja_templates.TemplateResponse(
            request,
            "chat.html",
            {
                "is_chatting": is_chatting,
                "messages_html": messages_html,
                "is_loading": conversation.is_loading,
            },
        )

    # Fallback: 템플릿이 없는 경우 최소 HTML
    return HTMLResponse(
        content=f"""
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>DeclutterAI</title>
    <script src="https://unpkg.com/htmx.org@1.9.10"></script>
</head>
<body>
    <h1>DeclutterAI</h1>
    <div id="chat-messages" class="messages">{messages_html}</div>
</body>
</html>
    """
    )


# =============================================================================
# API Routes
# =============================================================================


@api_router.post("/analyze")
async def analyze_room(
    request: Request,
    file: UploadFile = File(...),
) -> HTMLResponse:
    """
    첫 사진 분석 (업로드 화면 → 채팅 화면).

    Returns:
        사용자 + 모델 말풍선 HTML, HX-Redirect로 채팅 화면 재로딩
    """
    conversation = get_conversation(request)
    if conversation.is_loading:
        return _busy_response()

    try:
        image = await read_image_upload(request, file)
    except DeclutterError as e:
        return _upload_error_response(e)

    try:
        added = await conversation.start_analysis(image)
    except ConversationBusyError:
        return _busy_response()

    return HTMLResponse(
        content=build_messages_html(added),
        headers={"HX-Redirect": "/chat"},
    )


@api_router.post("/message")
async def send_message(
    request: Request,
    content: str = Form(""),
    file: UploadFile | None = File(None),
) -> HTMLResponse:
    """
    후속 질문 전송.

    Returns:
        새 말풍선 HTML (HTMX beforeend swap용)
    """
    conversation = get_conversation(request)
    if conversation.is_loading:
        return _busy_response()

    image: str | None = None
    # 파일 미선택 시 브라우저가 빈 파일 파트를 보냄
    if file is not None and file.filename:
        try:
            image = await read_image_upload(request, file)
        except DeclutterError as e:
            return _upload_error_response(e)

    if not content.strip() and not image:
        return HTMLResponse(content=build_notice_html(EMPTY_INPUT_TEXT))

    try:
        added = await conversation.send_followup(content, image)
    except ConversationBusyError:
        return _busy_response()

    return HTMLResponse(content=build_messages_html(added))


@api_router.post("/reset")
async def reset_session(request: Request) -> HTMLResponse:
    """새 세션 시작 → 업로드 화면."""
    conversation = get_conversation(request)
    if conversation.is_loading:
        return _busy_response()

    try:
        conversation.new_session()
    except DeclutterError as e:
        # 세션 생성 실패 시 히스토리는 그대로 유지
        logger.error(f"Failed to start a new session: {e}")
        return HTMLResponse(
            content=build_notice_html(RESET_ERROR_TEXT),
            status_code=503,
        )
    return HTMLResponse(content="", headers={"HX-Redirect": "/chat"})


@api_router.get("/messages")
async def list_messages(request: Request) -> dict[str, Any]:
    """히스토리 JSON."""
    conversation = get_conversation(request)
    return {
        "app_state": conversation.app_state.value,
        "is_loading": conversation.is_loading,
        "messages": [m.to_dict() for m in conversation.messages],
    }
