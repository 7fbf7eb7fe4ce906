from .base import ImageProvider, ProviderAdapter, VideoProvider
from .config import read_provider_adapter_config
from .factory import build_chat_provider, build_image_provider, build_video_provider
from .immediate import ImmediateCompletionAdapter
from .minimax import MinimaxVideoAdapter
from .openai_chat import ChatMessage, OpenAIChatAdapter
from .openai_media import OpenAIImageAdapter, OpenAIVideoAdapter
from .options import GenerationConfiguration, GenerationOption, compose_options
from .polling import TaskPollingAdapter
from .schema import (
    GenerationTask,
    InferenceMetadata,
    MediaKind,
    ProviderAdapterConfig,
    TaskState,
)
from .stable_diffusion import StableDiffusionAdapter

__all__ = [
    "ChatMessage",
    "GenerationConfiguration",
    "GenerationOption",
    "GenerationTask",
    "ImageProvider",
    "ImmediateCompletionAdapter",
    "InferenceMetadata",
    "MediaKind",
    "MinimaxVideoAdapter",
    "OpenAIChatAdapter",
    "OpenAIImageAdapter",
    "OpenAIVideoAdapter",
    "ProviderAdapter",
    "ProviderAdapterConfig",
    "StableDiffusionAdapter",
    "TaskPollingAdapter",
    "TaskState",
    "VideoProvider",
    "build_chat_provider",
    "build_image_provider",
    "build_video_provider",
    "compose_options",
    "read_provider_adapter_config",
]
