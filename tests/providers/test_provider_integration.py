from __future__ import annotations

import asyncio

import pytest

from mediagen import GenerationGateway, MediaKind, TaskState
from mediagen.providers.factory import (
    build_chat_provider,
    build_image_provider,
    build_video_provider,
)
from mediagen.providers.options import with_duration

LIVE_POLL_INTERVAL_SEC = 10
LIVE_POLL_MAX_ATTEMPTS = 60


@pytest.mark.integration
@pytest.mark.asyncio
async def test_image_generate_live_smoke(live_env, live_provider_config) -> None:
    """验证：可选的真实生图冒烟测试，异步供应商会轮询到终态。"""
    gateway = GenerationGateway(
        image_provider=build_image_provider(live_provider_config("MEDIAGEN_IMAGE"))
    )
    task = await gateway.generate(live_env("MEDIAGEN_TEST_PROMPT"), MediaKind.IMAGE)

    for _ in range(LIVE_POLL_MAX_ATTEMPTS):
        if task.is_terminal:
            break
        await asyncio.sleep(LIVE_POLL_INTERVAL_SEC)
        task = await gateway.poll_status(task.task_id or "", MediaKind.IMAGE)

    print(f"[live] image task: state={task.state.value} url={task.url}")
    assert task.state is TaskState.COMPLETED
    assert task.url


@pytest.mark.integration
@pytest.mark.asyncio
async def test_video_generate_live_submit(live_env, live_provider_config) -> None:
    """验证：真实视频提交能返回任务 ID 或直接完成。"""
    gateway = GenerationGateway(
        video_provider=build_video_provider(live_provider_config("MEDIAGEN_VIDEO"))
    )
    task = await gateway.generate(
        live_env("MEDIAGEN_TEST_PROMPT"), MediaKind.VIDEO, with_duration(6)
    )

    print(f"[live] video task: state={task.state.value} task_id={task.task_id}")
    assert task.state in {TaskState.PROCESSING, TaskState.COMPLETED}
    if task.state is TaskState.PROCESSING:
        assert task.task_id


@pytest.mark.integration
@pytest.mark.asyncio
async def test_chat_connection_live(live_provider_config) -> None:
    adapter = build_chat_provider(live_provider_config("MEDIAGEN_CHAT"))

    await adapter.test_connection()
