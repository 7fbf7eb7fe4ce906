from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .schema import ProviderAdapterConfig

REQUIRED_CONFIG_KEYS = ("provider", "base_url", "api_key", "model")
OPTIONAL_CONFIG_KEYS = ("timeout_sec", "poll_timeout_sec")


def _require_mapping(raw_config: Any) -> Mapping[str, Any]:
    """确保原始配置是键值映射。"""
    if not isinstance(raw_config, Mapping):
        raise TypeError("Provider adapter config must be a mapping object.")
    return raw_config


def _require_keys(cfg: Mapping[str, Any], required: tuple[str, ...]) -> None:
    """仅校验必填字段是否存在。"""
    missing = [key for key in required if key not in cfg]
    if missing:
        raise KeyError(f"Missing required provider config keys: {', '.join(missing)}")


def read_provider_adapter_config(raw_config: Any) -> ProviderAdapterConfig:
    """读取并返回适配器配置；超时字段可选，值为 None 时使用默认值，多余字段忽略。"""
    cfg = _require_mapping(raw_config)
    _require_keys(cfg, REQUIRED_CONFIG_KEYS)
    payload: dict[str, Any] = {key: cfg[key] for key in REQUIRED_CONFIG_KEYS}
    for key in OPTIONAL_CONFIG_KEYS:
        value = cfg.get(key)
        if value is not None:
            payload[key] = int(value)
    return ProviderAdapterConfig(**payload)
