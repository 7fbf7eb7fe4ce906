from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, ClassVar

from ..images.reference import normalize_reference_image
from ..utils.errors import MediaGenErrorCode, MediaGenException
from ..utils.http import JsonSuccessResponse, get_json, post_json
from .options import GenerationConfiguration, GenerationOption, compose_options
from .schema import GenerationTask, InferenceMetadata, MediaKind


class ProviderAdapter(ABC):
    """生成供应商的统一契约：提交生成与查询任务状态。

    实例上的连接配置在构造后只读，可被多个调用方并发使用；
    适配器不保存任何任务状态，轮询时由调用方传入任务 ID。
    """

    provider: str
    base_url: str
    api_key: str
    model: str
    timeout_sec: int
    poll_timeout_sec: int

    media_kind: ClassVar[MediaKind]
    supports_task_polling: ClassVar[bool]
    default_base_url: ClassVar[str]
    source_name: ClassVar[str]
    default_options: ClassVar[GenerationConfiguration]

    def __post_init__(self) -> None:
        normalized = (self.base_url.strip() or self.default_base_url).rstrip("/")
        if not normalized:
            raise ValueError(f"{self.source_name} base_url must be configured.")
        self.base_url = normalized

    @abstractmethod
    async def generate(
        self, prompt: str, *options: GenerationOption
    ) -> GenerationTask: ...

    @abstractmethod
    async def get_task_status(self, task_id: str) -> GenerationTask: ...

    def compose(self, options: Iterable[GenerationOption]) -> GenerationConfiguration:
        """以本供应商的默认配置为基础组合调用方参数。"""
        return compose_options(self.default_options, options)

    def resolve_model(self, configuration: GenerationConfiguration) -> str:
        return configuration.model or self.model

    def build_metadata(
        self, model: str, elapsed_ms: int | None = None
    ) -> InferenceMetadata:
        return InferenceMetadata(
            provider=self.provider,
            model=model,
            elapsed_ms=elapsed_ms,
        )

    def normalize_reference_images(self, images: list[str]) -> list[str]:
        """参考图统一转换为 http(s) URL 或 data URL，非法输入在请求构造阶段报错。"""
        return [
            self.normalize_reference_image(image, f"reference_images[{index}]")
            for index, image in enumerate(images)
        ]

    def normalize_reference_image(self, image: str, field_name: str) -> str:
        try:
            return normalize_reference_image(image)
        except ValueError as exc:
            raise MediaGenException(
                code=MediaGenErrorCode.INVALID_REQUEST,
                message=f"{field_name} is not a valid image reference: {exc}",
                retryable=False,
                detail={"provider": self.provider, "field": field_name},
            ) from exc

    def _auth_headers(self) -> dict[str, str]:
        if not self.api_key.strip():
            raise MediaGenException(
                code=MediaGenErrorCode.PERMISSION_DENIED,
                message=f"{self.source_name} API key is not configured.",
                retryable=False,
                detail={
                    "provider": self.provider,
                    "base_url": self.base_url,
                },
            )
        return {"Authorization": f"Bearer {self.api_key}"}

    async def _post(self, path: str, payload: dict[str, Any]) -> JsonSuccessResponse:
        headers = self._auth_headers()
        return await post_json(
            url=f"{self.base_url}{path}",
            payload=payload,
            headers={**headers, "Content-Type": "application/json"},
            timeout_sec=self.timeout_sec,
            source=self.source_name,
        )

    async def _get(self, path: str) -> JsonSuccessResponse:
        headers = self._auth_headers()
        return await get_json(
            url=f"{self.base_url}{path}",
            headers=headers,
            timeout_sec=self.poll_timeout_sec,
            source=self.source_name,
        )


class ImageProvider(ProviderAdapter):
    media_kind = MediaKind.IMAGE


class VideoProvider(ProviderAdapter):
    media_kind = MediaKind.VIDEO
