from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .schema import GenerationTask, InferenceMetadata, MediaKind, TaskState

FAILURE_STATUSES = frozenset({"failed", "fail", "error"})


@dataclass(slots=True)
class TaskEnvelope:
    """各供应商响应统一解码后的结构，提交与轮询共用。"""

    status: str = ""
    task_id: str | None = None
    urls: list[str] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None
    width: int | None = None
    height: int | None = None
    duration: int | None = None


def read_envelope_error(raw: Any) -> tuple[str | None, str | None]:
    """读取 error 字段，兼容纯字符串与 `{code, message}` 对象两种形式。"""
    if isinstance(raw, str):
        message = raw.strip()
        return (message or None), None
    if isinstance(raw, dict):
        message = raw.get("message")
        code = raw.get("code")
        normalized_message = message.strip() if isinstance(message, str) else ""
        normalized_code = str(code).strip() if code not in (None, "") else ""
        if not normalized_message:
            if not normalized_code:
                return None, None
            normalized_message = f"provider error code {normalized_code}"
        return normalized_message, (normalized_code or None)
    return None, None


def read_output_urls(raw: Any) -> list[str]:
    """从 `output: [{url}]` 中读取非空 URL。"""
    if not isinstance(raw, list):
        return []
    urls: list[str] = []
    for item in raw:
        url = item.get("url") if isinstance(item, dict) else None
        if isinstance(url, str) and url.strip():
            urls.append(url.strip())
    return urls


def apply_failure_status(envelope: TaskEnvelope) -> TaskEnvelope:
    """状态本身表示失败但未给出错误信息时，补一条可读的错误。"""
    if envelope.error is None and envelope.status.strip().lower() in FAILURE_STATUSES:
        envelope.error = f"provider reported status '{envelope.status}'"
    return envelope


def normalize_envelope(
    envelope: TaskEnvelope,
    *,
    media_kind: MediaKind,
    metadata: InferenceMetadata | None = None,
    task_id: str | None = None,
) -> GenerationTask:
    """把信封映射到任务状态：有错误 => failed，有产物 => completed，否则 => processing。

    错误优先于产物。
    """
    task = GenerationTask(
        media_kind=media_kind,
        state=TaskState.PROCESSING,
        task_id=envelope.task_id or task_id,
        width=envelope.width,
        height=envelope.height,
        duration=envelope.duration,
        provider_status=envelope.status or None,
        metadata=metadata,
    )
    if envelope.error is not None:
        task.state = TaskState.FAILED
        task.error = envelope.error
        task.error_code = envelope.error_code
    elif envelope.urls:
        task.state = TaskState.COMPLETED
        task.url = envelope.urls[0]
    return task
