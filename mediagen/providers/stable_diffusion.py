"""Stable Diffusion 任务型生图接口"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..utils.dicts import drop_none_values
from .base import ImageProvider
from .envelope import (
    TaskEnvelope,
    apply_failure_status,
    read_envelope_error,
    read_output_urls,
)
from .options import GenerationConfiguration
from .polling import TaskPollingAdapter

# 自建/代理部署没有公共默认地址，base_url 必须显式配置。
STABLE_DIFFUSION_DEFAULT_BASE_URL = ""
STABLE_DIFFUSION_DEFAULT_MODEL = "stable-diffusion-xl"


@dataclass(slots=True)
class StableDiffusionAdapter(TaskPollingAdapter, ImageProvider):
    """提交 `POST /v1/images/generations`，轮询 `GET /v1/images/status/{id}`。

    响应信封：`{status, task_id, output: [{url}], error}`。
    默认参数：1024x1024，steps=30，cfg_scale=7.5；seed 未设置时不下发。
    """

    base_url: str
    api_key: str
    model: str = STABLE_DIFFUSION_DEFAULT_MODEL
    timeout_sec: int = 600
    poll_timeout_sec: int = 60
    provider: str = "stable_diffusion"

    default_base_url = STABLE_DIFFUSION_DEFAULT_BASE_URL
    source_name = "Stable Diffusion"
    submit_path = "/v1/images/generations"
    default_options = GenerationConfiguration(
        width=1024,
        height=1024,
        steps=30,
        cfg_scale=7.5,
    )

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
                "prompt": prompt,
                "negative_prompt": configuration.negative_prompt or None,
                "model": model,
                "width": configuration.width,
                "height": configuration.height,
                "steps": configuration.steps,
                "cfg_scale": configuration.cfg_scale,
                "seed": configuration.seed,
                "samples": 1,
                "image": reference_images or None,
            }
        )

    def status_path(self, task_id: str) -> str:
        return f"/v1/images/status/{task_id}"

    def decode_envelope(self, data: dict[str, Any]) -> TaskEnvelope:
        error, error_code = read_envelope_error(data.get("error"))
        status = data.get("status")
        task_id = data.get("task_id")
        return apply_failure_status(
            TaskEnvelope(
                status=status if isinstance(status, str) else "",
                task_id=str(task_id) if task_id not in (None, "") else None,
                urls=read_output_urls(data.get("output")),
                error=error,
                error_code=error_code,
            )
        )
