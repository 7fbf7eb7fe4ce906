from __future__ import annotations

from typing import Any


def get_dict_value(data: Any, *keys: str | int) -> Any:
    """安全读取嵌套字段，str 键读字典、int 键读列表，路径不存在时返回 None。"""
    current = data
    for key in keys:
        if isinstance(key, int):
            if not isinstance(current, list) or not -len(current) <= key < len(current):
                return None
            current = current[key]
        else:
            if not isinstance(current, dict):
                return None
            current = current.get(key)
        if current is None:
            return None
    return current


def drop_none_values(data: dict[str, Any]) -> dict[str, Any]:
    """移除值为 None 的键，用于只序列化已设置的请求字段。"""
    return {key: value for key, value in data.items() if value is not None}
