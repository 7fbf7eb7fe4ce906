"""Minimax 视频生成（支持首尾帧与主体参考）"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..utils.dicts import drop_none_values, get_dict_value
from .base import VideoProvider
from .envelope import TaskEnvelope, apply_failure_status, read_envelope_error
from .options import GenerationConfiguration
from .polling import TaskPollingAdapter

MINIMAX_DEFAULT_BASE_URL = "https://api.minimaxi.com"
MINIMAX_DEFAULT_MODEL = "MiniMax-Hailuo-02"
MINIMAX_SUBJECT_REFERENCE_TYPE = "character"


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


@dataclass(slots=True)
class MinimaxVideoAdapter(TaskPollingAdapter, VideoProvider):
    """提交 `POST /v1/video_generation`，轮询 `GET /v1/video_generation/{id}`。

    默认参数：duration=6，resolution=1080P。
    参考图以 `subject_reference` 下发，首尾帧分别对应 `first_frame_image` / `last_frame_image`。
    """

    base_url: str
    api_key: str
    model: str = MINIMAX_DEFAULT_MODEL
    timeout_sec: int = 300
    poll_timeout_sec: int = 60
    provider: str = "minimax"

    default_base_url = MINIMAX_DEFAULT_BASE_URL
    source_name = "Minimax"
    submit_path = "/v1/video_generation"
    default_options = GenerationConfiguration(duration=6, resolution="1080P")

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
        last_frame = None
        if configuration.last_frame_image:
            last_frame = self.normalize_reference_image(
                configuration.last_frame_image, "last_frame_image"
            )
        reference_images = self.normalize_reference_images(
            configuration.reference_images
        )
        subject_reference = None
        if reference_images:
            subject_reference = [
                {"type": MINIMAX_SUBJECT_REFERENCE_TYPE, "image": reference_images}
            ]
        return drop_none_values(
            {
                "prompt": prompt,
                "model": model,
                "duration": configuration.duration,
                "resolution": configuration.resolution or None,
                "first_frame_image": first_frame,
                "last_frame_image": last_frame,
                "subject_reference": subject_reference,
            }
        )

    def status_path(self, task_id: str) -> str:
        return f"/v1/video_generation/{task_id}"

    def decode_envelope(self, data: dict[str, Any]) -> TaskEnvelope:
        error, error_code = read_envelope_error(data.get("error"))
        # base_resp.status_code 非 0 同样表示供应商拒绝了请求。
        if error is None:
            status_code = get_dict_value(data, "base_resp", "status_code")
            if status_code not in (None, 0):
                status_msg = get_dict_value(data, "base_resp", "status_msg")
                error = (
                    status_msg.strip()
                    if isinstance(status_msg, str) and status_msg.strip()
                    else f"provider error code {status_code}"
                )
                error_code = str(status_code)

        video_url = get_dict_value(data, "video", "url")
        status = data.get("status")
        task_id = data.get("task_id")
        return apply_failure_status(
            TaskEnvelope(
                status=status if isinstance(status, str) else "",
                task_id=str(task_id) if task_id not in (None, "") else None,
                urls=[video_url.strip()]
                if isinstance(video_url, str) and video_url.strip()
                else [],
                error=error,
                error_code=error_code,
                duration=_as_int(get_dict_value(data, "video", "duration")) or None,
            )
        )
