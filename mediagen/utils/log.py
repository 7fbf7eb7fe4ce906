from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

LOGGER_NAMESPACE = "mediagen"
_MAX_LOG_LIST_ITEMS = 5
_MAX_LOG_TEXT_LEN = 400


def summarize_log_value(value: Any) -> Any:
    """将复杂对象压缩为更适合日志输出的结构。"""
    if isinstance(value, dict):
        return {key: summarize_log_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        items = [summarize_log_value(item) for item in value[:_MAX_LOG_LIST_ITEMS]]
        if len(value) > _MAX_LOG_LIST_ITEMS:
            items.append(f"<+{len(value) - _MAX_LOG_LIST_ITEMS} items>")
        return items
    if isinstance(value, str):
        # 参考图、b64 产物可能是很长的 data URL，只记录长度。
        if value.startswith("data:"):
            return f"<data-url len={len(value)}>"
        if len(value) > _MAX_LOG_TEXT_LEN:
            return f"{value[:_MAX_LOG_TEXT_LEN]}...(truncated)"
    return value


def get_structured_logger(
    name: str | None = None,
    *,
    compress: bool = True,
) -> StructuredLogEmitter:
    """创建结构化日志输出器，logger 统一挂在 `mediagen` 命名空间下。"""
    logger_name = LOGGER_NAMESPACE
    if name and name != LOGGER_NAMESPACE:
        logger_name = (
            name if name.startswith(f"{LOGGER_NAMESPACE}.") else f"{LOGGER_NAMESPACE}.{name}"
        )
    return StructuredLogEmitter(
        logger=logging.getLogger(logger_name),
        compress=compress,
    )


@dataclass(slots=True)
class StructuredLogEmitter:
    """结构化日志输出器，默认会压缩复杂字段。"""

    logger: logging.Logger
    compress: bool = True

    def _emit(self, level: int, event: str, detail: dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return
        payload: Any = summarize_log_value(detail) if self.compress else detail
        message = {
            "event": event,
            "detail": payload,
        }

        self.logger.log(
            level,
            "%s",
            json.dumps(message, ensure_ascii=False, default=str),
            stacklevel=3,
        )

    def debug(self, event: str, detail: dict[str, Any]) -> None:
        self._emit(logging.DEBUG, event, detail)

    def info(self, event: str, detail: dict[str, Any]) -> None:
        self._emit(logging.INFO, event, detail)

    def warning(self, event: str, detail: dict[str, Any]) -> None:
        self._emit(logging.WARNING, event, detail)

    def error(self, event: str, detail: dict[str, Any]) -> None:
        self._emit(logging.ERROR, event, detail)

    def exception(self, message: str, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("stacklevel", 3)
        self.logger.exception(message, *args, **kwargs)


logger = get_structured_logger()
