from __future__ import annotations

from dataclasses import dataclass

from .providers.base import ImageProvider, ProviderAdapter, VideoProvider
from .providers.options import GenerationOption
from .providers.schema import GenerationTask, MediaKind
from .utils.errors import MediaGenErrorCode, MediaGenException


@dataclass(slots=True)
class GenerationGateway:
    """按媒体类型把生成与轮询请求分派给对应的供应商适配器。

    调用方在构造时选定具体供应商；轮询间隔与次数由调用方自行决定。
    """

    image_provider: ImageProvider | None = None
    video_provider: VideoProvider | None = None

    def provider_for(self, media_kind: MediaKind | str) -> ProviderAdapter:
        kind = MediaKind(media_kind)
        provider: ProviderAdapter | None = (
            self.image_provider if kind is MediaKind.IMAGE else self.video_provider
        )
        if provider is None:
            raise MediaGenException(
                code=MediaGenErrorCode.INVALID_REQUEST,
                message=f"No {kind.value} provider is configured.",
                retryable=False,
                detail={"media_kind": kind.value},
            )
        return provider

    def supports_task_polling(self, media_kind: MediaKind | str) -> bool:
        return self.provider_for(media_kind).supports_task_polling

    async def generate(
        self,
        prompt: str,
        media_kind: MediaKind | str,
        *options: GenerationOption,
    ) -> GenerationTask:
        return await self.provider_for(media_kind).generate(prompt, *options)

    async def poll_status(
        self, task_id: str, media_kind: MediaKind | str
    ) -> GenerationTask:
        return await self.provider_for(media_kind).get_task_status(task_id)
