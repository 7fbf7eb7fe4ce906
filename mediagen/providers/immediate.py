"""同步完成型供应商：一次请求的响应里直接带回成品。"""

from __future__ import annotations

import json
import re
from abc import abstractmethod
from typing import Any, ClassVar

from ..utils.errors import MediaGenErrorCode, MediaGenException, truncate_text
from ..utils.http import MAX_ERROR_BODY_LEN
from ..utils.log import get_structured_logger
from ..utils.randomness import new_request_id
from .base import ProviderAdapter
from .envelope import read_envelope_error
from .options import GenerationConfiguration, GenerationOption
from .schema import GenerationTask, TaskState

logger = get_structured_logger(__name__)

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*[xX*]\s*(\d+)\s*$")


def parse_size_tag(size: str | None) -> tuple[int, int] | None:
    """解析 `1024x1024` 形式的尺寸标签，无法解析时返回 None。"""
    if not size:
        return None
    matched = _SIZE_PATTERN.match(size)
    if matched is None:
        return None
    return int(matched.group(1)), int(matched.group(2))


def extract_artifact_urls(data: dict[str, Any]) -> list[str]:
    """提取 `data[]` 中的产物地址；`b64_json` 产物转换为 data URL。"""
    items = data.get("data")
    if not isinstance(items, list):
        return []
    urls: list[str] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        url = item.get("url")
        if isinstance(url, str) and url.strip():
            urls.append(url.strip())
            continue
        b64_payload = item.get("b64_json")
        if isinstance(b64_payload, str) and b64_payload.strip():
            urls.append(f"data:image/png;base64,{b64_payload.strip()}")
    return urls


class ImmediateCompletionAdapter(ProviderAdapter):
    supports_task_polling = False
    generation_path: ClassVar[str]

    @abstractmethod
    def build_request_payload(
        self,
        prompt: str,
        configuration: GenerationConfiguration,
        *,
        model: str,
    ) -> dict[str, Any]: ...

    def describe_artifact(
        self, configuration: GenerationConfiguration
    ) -> dict[str, int | None]:
        """返回成品的已知尺寸/时长，默认从尺寸标签推导。"""
        dimensions = parse_size_tag(configuration.size)
        if dimensions is None:
            return {"width": configuration.width, "height": configuration.height}
        width, height = dimensions
        return {"width": width, "height": height}

    async def generate(
        self, prompt: str, *options: GenerationOption
    ) -> GenerationTask:
        """执行一次生成请求。

        响应带 error 字段时按供应商错误抛出；既无错误也无成品时视为协议错误。
        """
        request_id = new_request_id()
        configuration = self.compose(options)
        model = self.resolve_model(configuration)
        payload = self.build_request_payload(prompt, configuration, model=model)

        response = await self._post(self.generation_path, payload)
        data = response["data"]
        elapsed_ms = response["elapsed_ms"]

        error, error_code = read_envelope_error(data.get("error"))
        if error is not None:
            raise MediaGenException(
                code=MediaGenErrorCode.PROVIDER_ERROR,
                message=f"{self.source_name} error: {error}",
                retryable=False,
                detail={
                    "provider": self.provider,
                    "request_id": request_id,
                    "elapsed_ms": elapsed_ms,
                    "provider_message": error,
                    "provider_code": error_code,
                },
            )

        urls = extract_artifact_urls(data)
        if not urls:
            raise MediaGenException(
                code=MediaGenErrorCode.PROTOCOL_ERROR,
                message=f"{self.source_name} returned no artifact.",
                retryable=True,
                detail={
                    "provider": self.provider,
                    "request_id": request_id,
                    "elapsed_ms": elapsed_ms,
                    "body": truncate_text(
                        json.dumps(data, ensure_ascii=False, default=str),
                        MAX_ERROR_BODY_LEN,
                    ),
                },
            )

        task = GenerationTask(
            media_kind=self.media_kind,
            state=TaskState.COMPLETED,
            url=urls[0],
            metadata=self.build_metadata(model, elapsed_ms),
            **self.describe_artifact(configuration),
        )
        logger.info(
            "generation.completed",
            {
                "request_id": request_id,
                "provider": self.provider,
                "media_kind": self.media_kind.value,
                "model": model,
                "artifact_count": len(urls),
                "elapsed_ms": elapsed_ms,
            },
        )
        return task

    async def get_task_status(self, task_id: str) -> GenerationTask:
        raise MediaGenException(
            code=MediaGenErrorCode.UNSUPPORTED_OPERATION,
            message=(
                f"{self.source_name} completes synchronously and has no task status."
            ),
            retryable=False,
            detail={
                "provider": self.provider,
                "media_kind": self.media_kind.value,
                "task_id": task_id,
            },
        )
