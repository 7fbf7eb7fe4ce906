"""OpenAI 兼容的文本补全客户端"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import asdict, dataclass
from typing import Any, TypeVar

from ..structured import extract_structured
from ..utils.dicts import get_dict_value
from ..utils.errors import MediaGenErrorCode, MediaGenException, truncate_text
from ..utils.http import MAX_ERROR_BODY_LEN, JsonSuccessResponse, post_json

OPENAI_CHAT_DEFAULT_BASE_URL = "https://api.openai.com"
OPENAI_CHAT_DEFAULT_ENDPOINT = "/v1/chat/completions"

T = TypeVar("T")


@dataclass(slots=True)
class ChatMessage:
    role: str
    content: str


ChatOption = Callable[[dict[str, Any]], None]


def with_temperature(temperature: float) -> ChatOption:
    def apply(request: dict[str, Any]) -> None:
        request["temperature"] = temperature

    return apply


def with_max_tokens(tokens: int) -> ChatOption:
    def apply(request: dict[str, Any]) -> None:
        request["max_tokens"] = tokens

    return apply


def with_top_p(top_p: float) -> ChatOption:
    def apply(request: dict[str, Any]) -> None:
        request["top_p"] = top_p

    return apply


@dataclass(slots=True)
class OpenAIChatAdapter:
    base_url: str
    api_key: str
    model: str
    endpoint: str = OPENAI_CHAT_DEFAULT_ENDPOINT
    timeout_sec: int = 600
    provider: str = "openai"

    def __post_init__(self) -> None:
        self.base_url = (self.base_url.strip() or OPENAI_CHAT_DEFAULT_BASE_URL).rstrip(
            "/"
        )
        self.endpoint = self.endpoint.strip() or OPENAI_CHAT_DEFAULT_ENDPOINT

    def build_request(
        self, messages: list[ChatMessage], options: tuple[ChatOption, ...]
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": [asdict(message) for message in messages],
        }
        for option in options:
            option(request)
        return request

    async def chat_completion(
        self, messages: list[ChatMessage], *options: ChatOption
    ) -> dict[str, Any]:
        """发送 chat/completions 请求并返回原始响应对象。"""
        if not self.api_key.strip():
            raise MediaGenException(
                code=MediaGenErrorCode.PERMISSION_DENIED,
                message="Chat completion API key is not configured.",
                retryable=False,
                detail={
                    "provider": self.provider,
                    "base_url": self.base_url,
                },
            )
        response: JsonSuccessResponse = await post_json(
            url=f"{self.base_url}{self.endpoint}",
            payload=self.build_request(messages, options),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout_sec=self.timeout_sec,
            source="Chat completion",
        )
        return response["data"]

    async def generate_text(
        self, prompt: str, system_prompt: str = "", *options: ChatOption
    ) -> str:
        """返回第一条补全的文本内容，没有任何 choice 时视为协议错误。"""
        messages: list[ChatMessage] = []
        if system_prompt:
            messages.append(ChatMessage(role="system", content=system_prompt))
        messages.append(ChatMessage(role="user", content=prompt))

        data = await self.chat_completion(messages, *options)
        content = get_dict_value(data, "choices", 0, "message", "content")
        if not isinstance(content, str):
            raise MediaGenException(
                code=MediaGenErrorCode.PROTOCOL_ERROR,
                message="Chat completion returned no response.",
                retryable=True,
                detail={
                    "provider": self.provider,
                    "model": self.model,
                    "body": truncate_text(
                        json.dumps(data, ensure_ascii=False, default=str),
                        MAX_ERROR_BODY_LEN,
                    ),
                },
            )
        return content

    async def generate_structured(
        self,
        prompt: str,
        target: type[T],
        system_prompt: str = "",
        *options: ChatOption,
    ) -> T:
        """生成文本后提取其中的 JSON 对象并按 target 解码。"""
        text = await self.generate_text(prompt, system_prompt, *options)
        return extract_structured(text, target)

    async def test_connection(self) -> None:
        await self.chat_completion(
            [ChatMessage(role="user", content="Hello")],
            with_max_tokens(10),
        )
