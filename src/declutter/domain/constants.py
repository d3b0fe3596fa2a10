"""
Domain Constants: 앱 전역 상수.

모델 ID, 시스템 지시문, 화면 문구 등 여러 레이어에서 공유하는 값들.
"""

# =============================================================================
# Model
# =============================================================================

DEFAULT_MODEL_ID = "gemini-3-pro-preview"

# 업로드 포맷과 무관하게 항상 JPEG로 선언 (기존 원격 계약 유지, DESIGN.md 참조)
INLINE_IMAGE_MIME_TYPE = "image/jpeg"

# =============================================================================
# System Instruction (세션 생성 시 1회 전달)
# =============================================================================

SYSTEM_INSTRUCTION = """You are DeclutterAI, a warm, professional, and highly practical home organization expert.
Your goal is to help users organize their spaces based on photos they upload.

When a user uploads a photo:
1. Analyze the room's current state (clutter level, style, potential storage usage).
2. Provide 3-5 specific, actionable steps to improve the space immediately.
3. Suggest storage solutions or layout changes if applicable.

Keep your tone encouraging and non-judgmental.
Format your responses with clear headings or bullet points using Markdown."""

# =============================================================================
# Prompts (사용자 대신 보내는 문구)
# =============================================================================

INITIAL_ANALYSIS_PROMPT = "Analyze this room and give me organization tips."

# 후속 턴에서 이미지만 첨부하고 텍스트가 비었을 때
FOLLOWUP_IMAGE_PROMPT = "Analyze this image."
FOLLOWUP_IMAGE_DISPLAY_TEXT = "Analyze this new image."

# =============================================================================
# Error Bubbles (사용자 노출 문구 - raw 에러 노출 금지)
# =============================================================================

ANALYSIS_ERROR_TEXT = (
    "I'm sorry, I encountered an error analyzing the image. Please try again."
)
FOLLOWUP_ERROR_TEXT = (
    "Sorry, something went wrong. Please check your connection or try again."
)
NOT_AN_IMAGE_TEXT = "Please upload an image file."
IMAGE_TOO_LARGE_TEXT = "That image is too large. Please upload a file under {max_mb}MB."
RESET_ERROR_TEXT = "Could not start a new session. Please try again."
BUSY_TEXT = "Still working on the previous answer. Please wait a moment."
EMPTY_INPUT_TEXT = "Type a question or attach a photo first."

# =============================================================================
# Upload
# =============================================================================

MAX_UPLOAD_MB = 10

