"""
Image Encoder: 업로드 이미지 → 전송용 base64 문자열.

규칙:
- 표준 base64, data: 접두어 없음, 줄바꿈 없음
- 내용 검증 안 함 (image/* 확인은 호출자 책임)
- 읽기 실패 → ImageEncodingError (재시도 없음)
"""

import base64
import binascii
import re
from pathlib import Path
from typing import IO, Any

from declutter.domain.errors import ImageEncodingError

_DATA_URL_RE = re.compile(r"^data:[^;,]*(;[^,]*)?,")


def encode_image(source: bytes | bytearray | str | Path | IO[bytes]) -> str:
    """
    이미지 소스를 base64 문자열로 인코딩.

    Args:
        source: 바이트, 파일 경로, 또는 .read()를 가진 바이너리 파일 객체

    Returns:
        base64 문자열 (접두어/줄바꿈 없음)

    Raises:
        ImageEncodingError: 소스를 읽을 수 없는 경우
    """
    data = _read_source(source)
    return _b64(data)


async def encode_upload(upload: Any) -> str:
    """
    FastAPI UploadFile을 base64 문자열로 인코딩.

    Args:
        upload: await upload.read()를 지원하는 업로드 객체

    Returns:
        base64 문자열
    """
    filename = getattr(upload, "filename", None)
    try:
        data = await upload.read()
    except (OSError, ValueError) as e:
        raise ImageEncodingError(source=filename) from e

    if not isinstance(data, (bytes, bytearray)):
        raise ImageEncodingError(
            f"Upload returned {type(data).__name__}, expected bytes",
            source=filename,
        )
    return _b64(data)


def decode_image(payload: str) -> bytes:
    """
    base64 문자열 → 바이트. data: 접두어가 붙어 있어도 허용.

    Raises:
        ImageEncodingError: base64 형식이 아닌 경우
    """
    try:
        return base64.b64decode(strip_data_url(payload), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageEncodingError("Image payload is not valid base64") from e


def strip_data_url(value: str) -> str:
    """
    data URL 접두어 제거.

    예: "data:image/jpeg;base64,AAAA" → "AAAA"
    접두어가 없으면 그대로 반환.
    """
    return _DATA_URL_RE.sub("", value, count=1)


def to_data_url(payload: str, mime_type: str = "image/jpeg") -> str:
    """말풍선 <img src>용 data URL."""
    return f"data:{mime_type};base64,{payload}"


def is_image_content_type(content_type: str | None) -> bool:
    """업로드 Content-Type이 image/* 인지."""
    if not content_type:
        return False
    return content_type.lower().startswith("image/")


def _read_source(source: bytes | bytearray | str | Path | IO[bytes]) -> bytes:
    """소스 종류별 1회 읽기."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return path.read_bytes()
        except OSError as e:
            raise ImageEncodingError(source=str(path)) from e

    name = getattr(source, "name", None)
    try:
        data = source.read()
    except (OSError, ValueError) as e:
        # ValueError: 닫힌 파일 핸들
        raise ImageEncodingError(source=name) from e

    if not isinstance(data, (bytes, bytearray)):
        raise ImageEncodingError(
            f"Source returned {type(data).__name__}, expected bytes",
            source=name,
        )
    return bytes(data)


def _b64(data: bytes | bytearray) -> str:
    return base64.b64encode(data).decode("ascii")
