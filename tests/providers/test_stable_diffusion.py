from __future__ import annotations

import json

import pytest

from mediagen.providers.options import (
    with_dimensions,
    with_negative_prompt,
    with_reference_images,
    with_seed,
)
from mediagen.providers.schema import MediaKind, TaskState
from mediagen.providers.stable_diffusion import StableDiffusionAdapter
from mediagen.utils.errors import MediaGenErrorCode, MediaGenException


def _make_adapter() -> StableDiffusionAdapter:
    return StableDiffusionAdapter(
        base_url="https://sd.example.com",
        api_key="test-key",
        model="sdxl",
        timeout_sec=600,
        poll_timeout_sec=15,
    )


def test_stable_diffusion_requires_base_url() -> None:
    """验证：没有公共默认地址，base_url 为空时直接报错。"""
    with pytest.raises(ValueError, match="base_url must be configured"):
        StableDiffusionAdapter(base_url=" ", api_key="test-key")


def test_stable_diffusion_payload_defaults_and_unset_seed() -> None:
    """验证：默认 1024x1024/30 步/7.5，未设置 seed 时不下发。"""
    adapter = _make_adapter()
    configuration = adapter.compose([])

    payload = adapter.build_request_payload("A cat", configuration, model="sdxl")

    assert payload == {
        "prompt": "A cat",
        "model": "sdxl",
        "width": 1024,
        "height": 1024,
        "steps": 30,
        "cfg_scale": 7.5,
        "samples": 1,
    }


def test_stable_diffusion_payload_passes_zero_seed_through() -> None:
    """验证：显式 seed=0 原样透传，不被替换成固定值。"""
    adapter = _make_adapter()

    payload = adapter.build_request_payload(
        "A cat", adapter.compose([with_seed(0)]), model="sdxl"
    )

    assert payload["seed"] == 0


def test_stable_diffusion_payload_is_byte_identical_for_same_options() -> None:
    """验证：同一组 options 两次构造的请求体序列化后完全一致。"""
    adapter = _make_adapter()
    options = [
        with_negative_prompt("lowres"),
        with_dimensions(640, 480),
        with_seed(7),
        with_reference_images(["https://example.com/ref.png"]),
    ]

    first = adapter.build_request_payload("A cat", adapter.compose(options), model="m")
    second = adapter.build_request_payload("A cat", adapter.compose(options), model="m")

    assert json.dumps(first).encode() == json.dumps(second).encode()


@pytest.mark.asyncio
async def test_stable_diffusion_submit_processing_then_poll_completed(
    fake_http,
) -> None:
    """验证：提交返回 processing 任务，轮询到 output 后变为 completed。"""
    adapter = _make_adapter()
    fake_http.queue({"status": "processing", "task_id": "sd-123"})
    fake_http.queue(
        {
            "status": "completed",
            "task_id": "sd-123",
            "output": [{"url": "https://cdn.example.com/sd.png"}],
        }
    )

    submitted = await adapter.generate("A cat", with_dimensions(512, 768))

    assert submitted.state is TaskState.PROCESSING
    assert submitted.task_id == "sd-123"
    assert submitted.url is None
    assert (submitted.width, submitted.height) == (512, 768)

    polled = await adapter.get_task_status(submitted.task_id)

    assert polled.state is TaskState.COMPLETED
    assert polled.url == "https://cdn.example.com/sd.png"
    assert polled.media_kind is MediaKind.IMAGE

    poll_call = fake_http.calls[1]
    assert poll_call["method"] == "GET"
    assert poll_call["url"] == "https://sd.example.com/v1/images/status/sd-123"
    assert poll_call["timeout_sec"] == 15
    assert "payload" not in poll_call
    assert poll_call["headers"] == {"Authorization": "Bearer test-key"}


@pytest.mark.asyncio
async def test_stable_diffusion_poll_still_processing(fake_http) -> None:
    adapter = _make_adapter()
    fake_http.queue({"status": "processing"})

    task = await adapter.get_task_status("sd-123")

    assert task.state is TaskState.PROCESSING
    assert task.task_id == "sd-123"


@pytest.mark.asyncio
async def test_stable_diffusion_poll_error_wins_over_output(fake_http) -> None:
    """验证：轮询结果同时含 error 与 output 时判定为 failed。"""
    adapter = _make_adapter()
    fake_http.queue(
        {
            "status": "completed",
            "output": [{"url": "https://cdn.example.com/sd.png"}],
            "error": "safety checker triggered",
        }
    )

    task = await adapter.get_task_status("sd-123")

    assert task.state is TaskState.FAILED
    assert task.error == "safety checker triggered"
    assert task.url is None


@pytest.mark.asyncio
async def test_stable_diffusion_poll_structured_error(fake_http) -> None:
    adapter = _make_adapter()
    fake_http.queue({"status": "failed", "error": {"code": "E1", "message": "oom"}})

    task = await adapter.get_task_status("sd-123")

    assert task.state is TaskState.FAILED
    assert task.error == "oom"
    assert task.error_code == "E1"


@pytest.mark.asyncio
async def test_stable_diffusion_submit_error_raises_provider_error(fake_http) -> None:
    """验证：提交响应带 error 时立即失败，不产生任务。"""
    adapter = _make_adapter()
    fake_http.queue({"status": "error", "error": "invalid model"})

    with pytest.raises(MediaGenException) as exc_info:
        await adapter.generate("A cat")

    assert exc_info.value.code is MediaGenErrorCode.PROVIDER_ERROR
    assert exc_info.value.detail["provider_message"] == "invalid model"
    assert "invalid model" in exc_info.value.message


@pytest.mark.asyncio
async def test_stable_diffusion_submit_already_completed(fake_http) -> None:
    """验证：提交响应已带成品时直接返回 completed。"""
    adapter = _make_adapter()
    fake_http.queue(
        {"status": "success", "output": [{"url": "https://cdn.example.com/now.png"}]}
    )

    task = await adapter.generate("A cat")

    assert task.state is TaskState.COMPLETED
    assert task.url == "https://cdn.example.com/now.png"
    assert (task.width, task.height) == (1024, 1024)


@pytest.mark.asyncio
async def test_stable_diffusion_submit_processing_without_task_id(fake_http) -> None:
    adapter = _make_adapter()
    fake_http.queue({"status": "processing"})

    with pytest.raises(MediaGenException) as exc_info:
        await adapter.generate("A cat")

    assert exc_info.value.code is MediaGenErrorCode.PROTOCOL_ERROR


@pytest.mark.asyncio
async def test_stable_diffusion_poll_rejects_empty_task_id(fake_http) -> None:
    adapter = _make_adapter()

    with pytest.raises(MediaGenException) as exc_info:
        await adapter.get_task_status("  ")

    assert exc_info.value.code is MediaGenErrorCode.INVALID_REQUEST
    assert fake_http.calls == []
    assert adapter.supports_task_polling is True


@pytest.mark.asyncio
async def test_stable_diffusion_poll_escapes_task_id(fake_http) -> None:
    adapter = _make_adapter()
    fake_http.queue({"status": "processing"})

    await adapter.get_task_status("a/b c")

    assert fake_http.calls[0]["url"].endswith("/v1/images/status/a%2Fb%20c")
