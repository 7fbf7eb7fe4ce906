from __future__ import annotations

import base64
import binascii
from io import BytesIO

import filetype
from PIL import Image, UnidentifiedImageError

DEFAULT_IMAGE_MIME = "image/png"


def is_http_url(value: str) -> bool:
    """判断是否为 http(s) URL。"""
    return value.startswith("http://") or value.startswith("https://")


def is_data_url(value: str) -> bool:
    """判断是否为 data URL。"""
    return value.startswith("data:")


def decode_base64_payload(value: str) -> bytes:
    """规范化并校验 base64 负载，返回原始字节。"""
    normalized = value.strip()
    if normalized.startswith("base64://"):
        normalized = normalized.removeprefix("base64://")
    # 兼容跨行/带空格的输入。
    normalized = "".join(normalized.split())
    if not normalized:
        raise ValueError("base64 payload is empty.")
    try:
        return base64.b64decode(normalized, validate=True)
    except (ValueError, binascii.Error) as exc:
        raise ValueError("base64 payload is invalid.") from exc


def sniff_image_mime(image_bytes: bytes, default_mime: str = DEFAULT_IMAGE_MIME) -> str:
    """先用 filetype 识别文件头，识别不了再交给 Pillow，都失败时回退默认值。"""
    guessed = filetype.guess(image_bytes)
    mime = getattr(guessed, "mime", "")
    if isinstance(mime, str) and mime.startswith("image/"):
        return mime

    try:
        with Image.open(BytesIO(image_bytes)) as image:
            format_name = (image.format or "").upper()
            pil_mime = Image.MIME.get(format_name)
            if isinstance(pil_mime, str) and pil_mime:
                return pil_mime
    except (UnidentifiedImageError, OSError, ValueError):
        return default_mime

    return default_mime


def validate_data_url(data_url: str) -> str:
    """校验 data URL 的基本结构，base64 负载必须可解码。"""
    normalized = data_url.strip()
    if "," not in normalized:
        raise ValueError("data_url must contain ',' separator.")
    header, payload = normalized.split(",", 1)
    if ";base64" in header.lower():
        decode_base64_payload(payload)
    return normalized


def base64_to_data_url(value: str, default_mime: str = DEFAULT_IMAGE_MIME) -> str:
    """将 base64（可带 `base64://` 前缀）转换为 data URL，MIME 由内容推断。"""
    image_bytes = decode_base64_payload(value)
    mime = sniff_image_mime(image_bytes, default_mime=default_mime)
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def normalize_reference_image(value: str) -> str:
    """
    统一参考图输入，返回可直接放进请求体的字符串。

    规则：
    - `http(s) URL` => 原样返回（去除首尾空白）
    - `data URL` => 校验后原样返回
    - 其他输入按 base64 处理 => 转换为 data URL
    """
    normalized = value.strip()
    if not normalized:
        raise ValueError("image reference must not be empty.")
    if is_http_url(normalized):
        return normalized
    if is_data_url(normalized):
        return validate_data_url(normalized)
    return base64_to_data_url(normalized)
