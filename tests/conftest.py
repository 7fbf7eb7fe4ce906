from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

import pytest
from dotenv import load_dotenv

from mediagen.providers.config import read_provider_adapter_config
from mediagen.providers.schema import ProviderAdapterConfig

LIVE_TEST_SWITCH = "MEDIAGEN_RUN_LIVE_TEST"

# 真实供应商凭据从仓库根目录的 .env 读取，已存在的环境变量优先。
load_dotenv(Path(__file__).resolve().parents[1] / ".env", override=False)


def _live_tests_enabled() -> bool:
    return os.getenv(LIVE_TEST_SWITCH, "").strip().lower() in {"1", "true", "yes", "on"}


def pytest_configure(config: pytest.Config) -> None:
    """输出 mediagen 的 DEBUG 结构化日志，便于排查请求与响应。"""
    config.option.log_cli = True
    config.option.log_cli_level = "DEBUG"
    logging.getLogger("mediagen").setLevel(logging.DEBUG)


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """未打开开关时跳过所有 integration 用例，不发出任何真实请求。"""
    if _live_tests_enabled():
        return
    skip_live = pytest.mark.skip(
        reason=f"Live provider test is disabled. Set {LIVE_TEST_SWITCH}=1 to enable."
    )
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip_live)


@pytest.fixture
def live_env() -> Callable[[str], str]:
    """读取必需的环境变量，缺失时跳过当前用例。"""

    def read(name: str) -> str:
        value = os.getenv(name, "").strip()
        if not value:
            pytest.skip(f"{name} is required for live integration test.")
        return value

    return read


@pytest.fixture
def live_provider_config(
    live_env: Callable[[str], str],
) -> Callable[[str], ProviderAdapterConfig]:
    """按前缀（例如 `MEDIAGEN_IMAGE`）组装真实供应商配置。"""

    def build(prefix: str) -> ProviderAdapterConfig:
        return read_provider_adapter_config(
            {
                "provider": live_env(f"{prefix}_PROVIDER"),
                "base_url": live_env(f"{prefix}_BASE_URL"),
                "api_key": live_env(f"{prefix}_API_KEY"),
                "model": live_env(f"{prefix}_MODEL"),
            }
        )

    return build
