"""
모델 응답 텍스트 → 말풍선 HTML.

- 줄 단위로 <div class="line">
- **굵게** → <strong>굵게</strong>
- 그 외 마크다운은 그대로 텍스트로 표시
"""

import re

from markupsafe import Markup, escape

_BOLD_RE = re.compile(r"(\*\*.*?\*\*)")


def format_text(text: str) -> Markup:
    """
    모델 응답을 안전한 HTML로 변환.

    Args:
        text: 원문 (HTML 포함 가능 → 전부 escape)

    Returns:
        Markup (Jinja2에서 재escape되지 않음)
    """
    lines = text.split("\n")
    rendered = [f'<div class="line">{_format_line(line)}</div>' for line in lines]
    return Markup("\n".join(rendered))


def _format_line(line: str) -> str:
    out: list[str] = []
    for part in _BOLD_RE.split(line):
        if not part:
            continue
        if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            out.append(f"<strong>{escape(part[2:-2])}</strong>")
        else:
            out.append(str(escape(part)))
    return "".join(out)
