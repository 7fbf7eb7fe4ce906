from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest


@dataclass
class FakeHttp:
    """按顺序返回预置响应，并记录每次请求的参数。"""

    responses: list[Any] = field(default_factory=list)
    calls: list[dict[str, Any]] = field(default_factory=list)

    def queue(self, data: dict[str, Any], elapsed_ms: int = 5) -> None:
        self.responses.append({"data": data, "elapsed_ms": elapsed_ms})

    def queue_error(self, exc: Exception) -> None:
        self.responses.append(exc)

    def _next(self) -> dict[str, Any]:
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def post_json(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append({"method": "POST", **kwargs})
        return self._next()

    async def get_json(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append({"method": "GET", **kwargs})
        return self._next()


@pytest.fixture
def fake_http(monkeypatch: pytest.MonkeyPatch) -> FakeHttp:
    fake = FakeHttp()
    monkeypatch.setattr("mediagen.providers.base.post_json", fake.post_json)
    monkeypatch.setattr("mediagen.providers.base.get_json", fake.get_json)
    monkeypatch.setattr("mediagen.providers.openai_chat.post_json", fake.post_json)
    return fake
