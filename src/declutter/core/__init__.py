"""
Core layer: 네트워크와 무관한 순수 유틸리티.

역할:
- images: 업로드 이미지 → base64
- ids: 메시지 ID, 타임스탬프
- formatting: 응답 텍스트 → 말풍선 HTML
- logging: 로거 설정
"""
