"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn declutter.app.main:app --reload
- 프로덕션: uv run uvicorn declutter.app.main:app
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles

from declutter.app.providers.base import ChatProvider
from declutter.app.providers.gemini import OrganizationService
from declutter.app.routes import chat
from declutter.app.services.conversation import ConversationService
from declutter.core.logging import configure_logging
from declutter.domain.constants import DEFAULT_MODEL_ID

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = Path(__file__).resolve().parents[3] / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def build_provider(config: dict) -> ChatProvider:
    """config 기반 세션 매니저 생성."""
    ai_config = config.get("ai", {})
    return OrganizationService(model=ai_config.get("model", DEFAULT_MODEL_ID))


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: .env/설정 로드, 로깅, 세션 매니저 준비 (주입된 게 있으면 유지)
    종료 시: 정리할 리소스 없음 (원격 세션은 그냥 버림)
    """
    # Startup
    load_dotenv()
    if getattr(app.state, "config", None) is None:
        app.state.config = load_config()
    configure_logging(config=app.state.config)

    if getattr(app.state, "conversation", None) is None:
        app.state.conversation = ConversationService(build_provider(app.state.config))

    logger.info("DeclutterAI started")
    yield


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    config: dict | None = None,
    provider: ChatProvider | None = None,
) -> FastAPI:
    """
    앱 생성.

    Args:
        config: 설정 (None이면 시작 시 default.yaml 로드)
        provider: 세션 매니저 (테스트에서 fake 주입)
    """
    app = FastAPI(
        title="DeclutterAI",
        description="방 사진 → AI 정리 조언 채팅",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.conversation = (
        ConversationService(provider) if provider is not None else None
    )

    # Static files (CSS)
    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    # 페이지 라우트 (HTML)
    app.include_router(chat.router, prefix="", tags=["Chat"])
    # API 라우트
    app.include_router(chat.api_router, prefix="/api/chat", tags=["Chat API"])

    @app.get("/")
    async def root() -> RedirectResponse:
        """홈 → 채팅 화면."""
        return RedirectResponse(url="/chat")

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    return app


app = create_app()


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "declutter.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
