"""
DeclutterAI: 방 사진 기반 정리 조언 채팅.

레이어:
- domain: 메시지 스키마, 에러, 상수 (시스템 지시문 포함)
- core: 이미지 인코딩, ID, 텍스트 포맷팅, 로깅 설정
- app: Gemini 세션 매니저 + FastAPI/HTMX 화면
"""

__version__ = "0.1.0"
