from .gateway import GenerationGateway
from .providers import (
    GenerationConfiguration,
    GenerationTask,
    MediaKind,
    TaskState,
    build_chat_provider,
    build_image_provider,
    build_video_provider,
    read_provider_adapter_config,
)
from .structured import StructuredOutputError, extract_structured
from .utils.errors import MediaGenErrorCode, MediaGenException

__all__ = [
    "GenerationConfiguration",
    "GenerationGateway",
    "GenerationTask",
    "MediaGenErrorCode",
    "MediaGenException",
    "MediaKind",
    "StructuredOutputError",
    "TaskState",
    "build_chat_provider",
    "build_image_provider",
    "build_video_provider",
    "extract_structured",
    "read_provider_adapter_config",
]
