"""OpenAI 兼容的同步生成接口（图片 / 视频）"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..utils.dicts import drop_none_values
from .base import ImageProvider, VideoProvider
from .immediate import ImmediateCompletionAdapter
from .options import GenerationConfiguration

OPENAI_DEFAULT_BASE_URL = "https://api.openai.com"
OPENAI_DEFAULT_IMAGE_MODEL = "dall-e-3"
OPENAI_DEFAULT_VIDEO_MODEL = "sora-2"


@dataclass(slots=True)
class OpenAIImageAdapter(ImmediateCompletionAdapter, ImageProvider):
    """`POST /v1/images/generations`，响应 `data[].url` 即成品。

    默认参数：size=1920x1920，quality=standard。
    """

    base_url: str
    api_key: str
    model: str = OPENAI_DEFAULT_IMAGE_MODEL
    timeout_sec: int = 600
    poll_timeout_sec: int = 60
    provider: str = "openai"

    default_base_url = OPENAI_DEFAULT_BASE_URL
    source_name = "OpenAI Images"
    generation_path = "/v1/images/generations"
    default_options = GenerationConfiguration(size="1920x1920", quality="standard")

    def build_request_payload(
        self,
        prompt: str,
        configuration: GenerationConfiguration,
        *,
        model: str,
    ) -> dict[str, Any]:
        reference_images = self.normalize_reference_images(
            configuration.reference_images
        )
        return drop_none_values(
            {
                "model": model,
                "prompt": prompt,
                "size": configuration.size,
                "quality": configuration.quality,
                "style": configuration.style,
                "n": 1,
                "image": reference_images or None,
            }
        )


@dataclass(slots=True)
class OpenAIVideoAdapter(ImmediateCompletionAdapter, VideoProvider):
    """`POST /v1/videos/generations` 的同步网关形态，响应 `data[].url` 即成品。

    默认参数：duration=5，resolution=720P。
    """

    base_url: str
    api_key: str
    model: str = OPENAI_DEFAULT_VIDEO_MODEL
    timeout_sec: int = 1800
    poll_timeout_sec: int = 60
    provider: str = "openai"

    default_base_url = OPENAI_DEFAULT_BASE_URL
    source_name = "OpenAI Videos"
    generation_path = "/v1/videos/generations"
    default_options = GenerationConfiguration(duration=5, resolution="720P")

    def build_request_payload(
        self,
        prompt: str,
        configuration: GenerationConfiguration,
        *,
        model: str,
    ) -> dict[str, Any]:
        first_frame = None
        if configuration.first_frame_image:
            first_frame = self.normalize_reference_image(
                configuration.first_frame_image, "first_frame_image"
            )
        return drop_none_values(
            {
                "model": model,
                "prompt": prompt,
                "duration": configuration.duration,
                "resolution": configuration.resolution,
                "size": configuration.size,
                "seed": configuration.seed,
                "image": first_frame,
            }
        )

    def describe_artifact(
        self, configuration: GenerationConfiguration
    ) -> dict[str, int | None]:
        attributes = ImmediateCompletionAdapter.describe_artifact(self, configuration)
        attributes["duration"] = configuration.duration
        return attributes
