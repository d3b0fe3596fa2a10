"""
App layer: UI 서버 (FastAPI + HTMX).

역할:
- 사진 업로드, 채팅 입력, 새 세션
- Gemini 세션 매니저 호출, 결과/에러 → 말풍선

주의: 폴더 구분
- app/templates/ → Jinja2 HTML (HTMX)
- app/static/ → CSS
"""
