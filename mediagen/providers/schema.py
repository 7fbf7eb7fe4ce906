from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

DEFAULT_POLL_TIMEOUT_SEC = 60


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class TaskState(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.FAILED)


@dataclass(slots=True)
class ProviderAdapterConfig:
    provider: str
    """供应商标识"""
    base_url: str
    """供应商 API 基础地址，留空时使用供应商默认地址"""
    api_key: str
    """供应商 API 密钥"""
    model: str
    """默认模型名称，可被 with_model 覆盖"""
    timeout_sec: int | None = None
    """提交请求超时时间（秒），None 表示使用供应商默认值"""
    poll_timeout_sec: int = DEFAULT_POLL_TIMEOUT_SEC
    """状态查询超时时间（秒）"""


@dataclass(slots=True)
class InferenceMetadata:
    provider: str
    """供应商标识。"""
    model: str
    """实际请求使用的模型名。"""
    elapsed_ms: int | None = None
    """从发起请求到收到响应的耗时（毫秒）。"""


@dataclass(slots=True)
class GenerationTask:
    media_kind: MediaKind
    state: TaskState
    task_id: str | None = None
    """供应商任务 ID；同步完成的供应商没有任务 ID。"""
    url: str | None = None
    """产物地址，仅在 completed 时有值。"""
    error: str | None = None
    """失败详情，仅在 failed 时有值。"""
    error_code: str | None = None
    width: int | None = None
    height: int | None = None
    duration: int | None = None
    """视频时长（秒）。"""
    provider_status: str | None = None
    """供应商返回的原始状态字符串。"""
    metadata: InferenceMetadata | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal
