from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from .base import ImageProvider, VideoProvider
from .minimax import MinimaxVideoAdapter
from .openai_chat import OpenAIChatAdapter
from .openai_media import OpenAIImageAdapter, OpenAIVideoAdapter
from .schema import ProviderAdapterConfig
from .stable_diffusion import StableDiffusionAdapter

AdapterT = TypeVar("AdapterT")


def _connection_kwargs(config: ProviderAdapterConfig) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "base_url": config.base_url,
        "api_key": config.api_key,
    }
    # 模型与超时留空时沿用各适配器自己的默认值。
    if config.model.strip():
        kwargs["model"] = config.model.strip()
    if config.timeout_sec is not None:
        kwargs["timeout_sec"] = config.timeout_sec
    return kwargs


def _media_builder(
    adapter_cls: Callable[..., AdapterT],
) -> Callable[[ProviderAdapterConfig], AdapterT]:
    def build(config: ProviderAdapterConfig) -> AdapterT:
        return adapter_cls(
            **_connection_kwargs(config),
            poll_timeout_sec=config.poll_timeout_sec,
        )

    return build


def _build_openai_chat(config: ProviderAdapterConfig) -> OpenAIChatAdapter:
    # 文本补全没有通用的默认模型，必须显式配置。
    if not config.model.strip():
        raise ValueError(
            f"Chat provider {config.provider} requires a non-empty model."
        )
    return OpenAIChatAdapter(**_connection_kwargs(config))


_IMAGE_BUILDERS: dict[str, Callable[[ProviderAdapterConfig], ImageProvider]] = {
    "openai": _media_builder(OpenAIImageAdapter),
    "dalle": _media_builder(OpenAIImageAdapter),
    "stable_diffusion": _media_builder(StableDiffusionAdapter),
    "sd": _media_builder(StableDiffusionAdapter),
}

_VIDEO_BUILDERS: dict[str, Callable[[ProviderAdapterConfig], VideoProvider]] = {
    "openai": _media_builder(OpenAIVideoAdapter),
    "minimax": _media_builder(MinimaxVideoAdapter),
}

_CHAT_BUILDERS: dict[str, Callable[[ProviderAdapterConfig], OpenAIChatAdapter]] = {
    "openai": _build_openai_chat,
}


def _build(
    builders: dict[str, Callable[[ProviderAdapterConfig], AdapterT]],
    config: ProviderAdapterConfig,
    kind: str,
) -> AdapterT:
    provider = config.provider.strip().lower()
    builder = builders.get(provider)
    if builder is not None:
        return builder(config)
    available = ", ".join(sorted(builders))
    raise ValueError(
        f"Unsupported {kind} provider: {config.provider}. Available: {available}"
    )


def build_image_provider(config: ProviderAdapterConfig) -> ImageProvider:
    return _build(_IMAGE_BUILDERS, config, "image")


def build_video_provider(config: ProviderAdapterConfig) -> VideoProvider:
    return _build(_VIDEO_BUILDERS, config, "video")


def build_chat_provider(config: ProviderAdapterConfig) -> OpenAIChatAdapter:
    return _build(_CHAT_BUILDERS, config, "chat")
