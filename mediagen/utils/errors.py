from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from .log import summarize_log_value


class MediaGenErrorCode(str, Enum):
    PERMISSION_DENIED = "PERMISSION_DENIED"
    INVALID_REQUEST = "INVALID_REQUEST"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"
    JSON_NOT_FOUND = "JSON_NOT_FOUND"
    JSON_DECODE_FAILED = "JSON_DECODE_FAILED"


class MediaGenException(Exception):
    def __init__(
        self,
        code: MediaGenErrorCode,
        message: str,
        retryable: bool,
        detail: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.retryable = retryable
        self.detail = dict(detail) if detail else {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "retryable": self.retryable,
            "detail": self.detail,
        }

    def __str__(self) -> str:
        base = f"[{self.code.value}] {self.message} (retryable={self.retryable})"
        if not self.detail:
            return base
        detail_json = json.dumps(
            summarize_log_value(self.detail), ensure_ascii=False, default=str
        )
        return f"{base} detail={detail_json}"


def truncate_text(value: str, max_len: int) -> str:
    """截断文本，超长时追加 `...` 标记。"""
    if len(value) <= max_len:
        return value
    return value[:max_len] + "..."
