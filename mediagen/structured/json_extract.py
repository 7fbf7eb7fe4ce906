"""从模型返回的自由文本中提取并尽量修复 JSON 对象。

步骤依次兜底：去掉代码块标记 → 截取首个 `{` 到最后一个 `}` → 直接解码 →
补引号/补括号后再解码 → 仍失败则给出带位置信息的错误。
这里只处理 JSON 语法层面的问题，不关心业务结构，也不会用默认数据代替失败结果。
"""

from __future__ import annotations

import json
import re
from typing import Any, TypeVar, overload

from pydantic import TypeAdapter, ValidationError

from ..utils.errors import MediaGenErrorCode, MediaGenException, truncate_text

T = TypeVar("T")

RAW_PREVIEW_LEN = 200
CANDIDATE_PREVIEW_LEN = 300
CONTEXT_RADIUS = 100

# 行首的 ``` 或 ```json 等带语言标记的围栏。
_CODE_FENCE_PATTERN = re.compile(r"^```[\w+-]*\s*", re.MULTILINE)


class StructuredOutputError(MediaGenException):
    """结构化输出提取失败；解码失败时带有出错位置与上下文。"""

    def __init__(
        self,
        code: MediaGenErrorCode,
        message: str,
        *,
        offset: int | None = None,
        context: str | None = None,
        marker: str | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            retryable=True,
            detail=detail,
        )
        self.offset = offset
        self.context = context
        self.marker = marker


def strip_code_fences(text: str) -> str:
    """去掉首尾空白以及位于行首的代码块围栏。"""
    cleaned = _CODE_FENCE_PATTERN.sub("", text.strip())
    return cleaned.strip()


def find_json_object(text: str) -> str | None:
    """返回首个 `{` 到最后一个 `}`（含）之间的内容，找不到时返回 None。"""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None
    return text[start : end + 1]


def extract_json_text(text: str) -> str:
    """提取文本中的 JSON 对象，其次是 JSON 数组，都没有时返回清理后的文本。"""
    cleaned = strip_code_fences(text)
    candidate = find_json_object(cleaned)
    if candidate is not None:
        return candidate
    start = cleaned.find("[")
    end = cleaned.rfind("]")
    if start != -1 and end > start:
        return cleaned[start : end + 1]
    return cleaned


def validate_json(text: str) -> None:
    """校验文本是否为合法 JSON，失败时抛出 StructuredOutputError。"""
    try:
        json.loads(text)
    except json.JSONDecodeError as exc:
        raise _decode_error(text, exc) from exc


def repair_json(candidate: str) -> str:
    """启发式修复截断的 JSON：先补引号，再补 `]`，最后补 `}`。

    引号修复可能破坏某些病态输入（例如未闭合数组里的引号），这是已知局限。
    """
    repaired = candidate.strip()
    if repaired.count('"') % 2 != 0:
        repaired += '"'
    repaired += "]" * max(0, repaired.count("[") - repaired.count("]"))
    repaired += "}" * max(0, repaired.count("{") - repaired.count("}"))
    return repaired


def render_error_context(candidate: str, offset: int) -> tuple[str, str, int]:
    """返回出错位置前后各 100 个字符的窗口、对齐的 `^` 标记行以及窗口起点。"""
    start = max(0, offset - CONTEXT_RADIUS)
    end = min(len(candidate), offset + CONTEXT_RADIUS)
    context = candidate[start:end]
    marker = " " * (offset - start) + "^"
    return context, marker, start


def _decode(candidate: str, target: Any) -> Any:
    value = json.loads(candidate)
    if target is None:
        return value
    return TypeAdapter(target).validate_python(value)


def _decode_error(candidate: str, exc: Exception) -> StructuredOutputError:
    if isinstance(exc, json.JSONDecodeError):
        context, marker, start = render_error_context(candidate, exc.pos)
        return StructuredOutputError(
            MediaGenErrorCode.JSON_DECODE_FAILED,
            f"JSON decode failed: {exc.msg} (offset {exc.pos})\n"
            f"Context near error:\n{context}\n{marker}",
            offset=exc.pos,
            context=context,
            marker=marker,
            detail={"offset": exc.pos, "context_start": start},
        )
    preview = truncate_text(candidate, CANDIDATE_PREVIEW_LEN)
    return StructuredOutputError(
        MediaGenErrorCode.JSON_DECODE_FAILED,
        f"JSON decode failed: {exc}\nCandidate: {preview}",
        context=preview,
        detail={"error_type": type(exc).__name__},
    )


@overload
def extract_structured(raw_text: str, target: None = None) -> Any: ...


@overload
def extract_structured(raw_text: str, target: type[T]) -> T: ...


def extract_structured(raw_text: str, target: Any = None) -> Any:
    """从模型输出中提取 JSON 对象并按 target 解码。

    target 为 None 时返回普通的 dict；否则交给 pydantic TypeAdapter 校验，
    支持 BaseModel、dataclass、TypedDict 等。
    直接解码成功时不会进行修复；修复后仍失败则抛出首次解码的错误上下文。
    """
    if not raw_text or not raw_text.strip():
        raise StructuredOutputError(
            MediaGenErrorCode.JSON_NOT_FOUND,
            "AI response is empty.",
        )

    cleaned = strip_code_fences(raw_text)
    candidate = find_json_object(cleaned)
    if candidate is None:
        preview = truncate_text(raw_text, RAW_PREVIEW_LEN)
        raise StructuredOutputError(
            MediaGenErrorCode.JSON_NOT_FOUND,
            f"No JSON object found in response: {preview}",
            context=preview,
        )

    try:
        return _decode(candidate, target)
    except (json.JSONDecodeError, ValidationError) as exc:
        first_error = exc

    repaired = repair_json(candidate)
    if repaired != candidate:
        try:
            return _decode(repaired, target)
        except (json.JSONDecodeError, ValidationError):
            pass

    raise _decode_error(candidate, first_error) from first_error
