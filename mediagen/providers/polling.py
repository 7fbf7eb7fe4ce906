"""异步任务型供应商：提交后返回任务 ID，由调用方轮询直到终态。"""

from __future__ import annotations

import json
from abc import abstractmethod
from typing import Any, ClassVar
from urllib.parse import quote

from ..utils.errors import MediaGenErrorCode, MediaGenException, truncate_text
from ..utils.http import MAX_ERROR_BODY_LEN
from ..utils.log import get_structured_logger
from ..utils.randomness import new_request_id
from .base import ProviderAdapter
from .envelope import TaskEnvelope, normalize_envelope
from .options import GenerationConfiguration, GenerationOption
from .schema import GenerationTask, TaskState

logger = get_structured_logger(__name__)


class TaskPollingAdapter(ProviderAdapter):
    supports_task_polling = True
    submit_path: ClassVar[str]

    @abstractmethod
    def build_request_payload(
        self,
        prompt: str,
        configuration: GenerationConfiguration,
        *,
        model: str,
    ) -> dict[str, Any]: ...

    @abstractmethod
    def status_path(self, task_id: str) -> str:
        """返回查询任务状态的路径，task_id 已做 URL 转义。"""

    @abstractmethod
    def decode_envelope(self, data: dict[str, Any]) -> TaskEnvelope:
        """把供应商响应解码为统一信封，提交与轮询共用。"""

    def fill_requested_attributes(
        self, task: GenerationTask, configuration: GenerationConfiguration
    ) -> None:
        """供应商未回传尺寸/时长时，用本次请求的参数补齐。"""
        if task.width is None:
            task.width = configuration.width
        if task.height is None:
            task.height = configuration.height
        if task.duration is None:
            task.duration = configuration.duration

    async def generate(
        self, prompt: str, *options: GenerationOption
    ) -> GenerationTask:
        """提交生成任务。

        信封带错误时直接抛出，不会产生任务；若提交响应已带成品则直接返回 completed。
        """
        request_id = new_request_id()
        configuration = self.compose(options)
        model = self.resolve_model(configuration)
        payload = self.build_request_payload(prompt, configuration, model=model)

        response = await self._post(self.submit_path, payload)
        data = response["data"]
        elapsed_ms = response["elapsed_ms"]

        envelope = self.decode_envelope(data)
        task = normalize_envelope(
            envelope,
            media_kind=self.media_kind,
            metadata=self.build_metadata(model, elapsed_ms),
        )
        if task.state is TaskState.FAILED:
            raise MediaGenException(
                code=MediaGenErrorCode.PROVIDER_ERROR,
                message=f"{self.source_name} error: {task.error}",
                retryable=False,
                detail={
                    "provider": self.provider,
                    "request_id": request_id,
                    "provider_message": task.error,
                    "provider_code": task.error_code,
                    "provider_status": task.provider_status,
                    "task_id": task.task_id,
                },
            )
        if task.state is TaskState.PROCESSING and not task.task_id:
            raise MediaGenException(
                code=MediaGenErrorCode.PROTOCOL_ERROR,
                message=f"{self.source_name} accepted the request without a task id.",
                retryable=True,
                detail={
                    "provider": self.provider,
                    "request_id": request_id,
                    "provider_status": task.provider_status,
                    "body": truncate_text(
                        json.dumps(data, ensure_ascii=False, default=str),
                        MAX_ERROR_BODY_LEN,
                    ),
                },
            )

        self.fill_requested_attributes(task, configuration)
        logger.info(
            "generation.submitted",
            {
                "request_id": request_id,
                "provider": self.provider,
                "media_kind": self.media_kind.value,
                "model": model,
                "task_id": task.task_id,
                "state": task.state.value,
                "elapsed_ms": elapsed_ms,
            },
        )
        return task

    async def get_task_status(self, task_id: str) -> GenerationTask:
        """查询一次任务状态；错误优先于产物，仍在处理中时原样返回 processing。"""
        normalized_task_id = task_id.strip()
        if not normalized_task_id:
            raise MediaGenException(
                code=MediaGenErrorCode.INVALID_REQUEST,
                message="task_id must not be empty.",
                retryable=False,
                detail={"provider": self.provider},
            )

        response = await self._get(self.status_path(quote(normalized_task_id, safe="")))
        data = response["data"]
        elapsed_ms = response["elapsed_ms"]

        task = normalize_envelope(
            self.decode_envelope(data),
            media_kind=self.media_kind,
            metadata=self.build_metadata(self.model, elapsed_ms),
            task_id=normalized_task_id,
        )
        logger.info(
            "generation.polled",
            {
                "provider": self.provider,
                "media_kind": self.media_kind.value,
                "task_id": task.task_id,
                "state": task.state.value,
                "provider_status": task.provider_status,
                "elapsed_ms": elapsed_ms,
            },
        )
        return task
