from __future__ import annotations

import asyncio
import json
import time
from typing import Any, TypedDict

import aiohttp

from .dicts import get_dict_value
from .errors import MediaGenErrorCode, MediaGenException, truncate_text
from .log import get_structured_logger

structured_log = get_structured_logger(__name__)

MAX_ERROR_BODY_LEN = 2000


class JsonSuccessResponse(TypedDict):
    data: dict[str, Any]
    elapsed_ms: int


def _mask_headers(headers: dict[str, str]) -> dict[str, str]:
    secret_keys = {"authorization", "cookie", "set-cookie", "x-api-key"}
    masked: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in secret_keys:
            masked[key] = "<redacted>"
            continue
        masked[key] = value
    return masked


def _elapsed_ms(started_at: float) -> int:
    return int((time.perf_counter() - started_at) * 1000)


def _extract_provider_message(raw_text: str) -> str | None:
    """尝试从错误响应体中读取 `error.message`，读取失败返回 None。"""
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        return None
    message = get_dict_value(data, "error", "message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    error = get_dict_value(data, "error")
    if isinstance(error, str) and error.strip():
        return error.strip()
    return None


async def _request_json(
    method: str,
    *,
    url: str,
    headers: dict[str, str],
    payload: dict[str, Any] | None,
    timeout_sec: float,
    source: str,
) -> JsonSuccessResponse:
    if timeout_sec <= 0:
        raise MediaGenException(
            code=MediaGenErrorCode.INVALID_REQUEST,
            message="timeout_sec must be > 0.",
            retryable=False,
            detail={
                "source": source,
                "url": url,
                "timeout_sec": timeout_sec,
            },
        )

    masked_headers = _mask_headers(headers)
    started_at = time.perf_counter()
    request_error_detail: dict[str, Any] = {
        "source": source,
        "method": method,
        "url": url,
        "timeout_sec": timeout_sec,
        "headers": masked_headers,
    }
    if payload is not None:
        request_error_detail["payload"] = payload
    structured_log.debug("http.request", request_error_detail)

    # total timeout 覆盖连接、读写和响应等待的总耗时。
    timeout = aiohttp.ClientTimeout(total=timeout_sec)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(
                method, url, json=payload, headers=headers
            ) as response:
                raw_text = await response.text()
                masked_response_headers = _mask_headers(dict(response.headers))
                elapsed_ms = _elapsed_ms(started_at)
                structured_log.debug(
                    "http.response",
                    {
                        "elapsed_ms": elapsed_ms,
                        "status_code": response.status,
                        "headers": masked_response_headers,
                        "body": raw_text,
                    },
                )
                # 非 2xx 保留原始响应体，供应商的诊断文本不能丢。
                if response.status >= 400:
                    detail: dict[str, Any] = {
                        **request_error_detail,
                        "elapsed_ms": elapsed_ms,
                        "status_code": response.status,
                        "response_headers": masked_response_headers,
                        "body": raw_text,
                    }
                    provider_message = _extract_provider_message(raw_text)
                    if provider_message is not None:
                        detail["provider_message"] = provider_message
                    raise MediaGenException(
                        code=MediaGenErrorCode.UPSTREAM_ERROR,
                        message=f"{source} HTTP {response.status}: "
                        f"{provider_message or truncate_text(raw_text, 300)}",
                        retryable=(response.status >= 500 or response.status == 429),
                        detail=detail,
                    )

    except asyncio.TimeoutError as exc:
        raise MediaGenException(
            code=MediaGenErrorCode.TIMEOUT,
            message=f"{source} request timed out.",
            retryable=True,
            detail={**request_error_detail, "elapsed_ms": _elapsed_ms(started_at)},
        ) from exc
    except aiohttp.ClientError as exc:
        raise MediaGenException(
            code=MediaGenErrorCode.NETWORK_ERROR,
            message=f"{source} request failed.",
            retryable=True,
            detail={
                **request_error_detail,
                "elapsed_ms": _elapsed_ms(started_at),
                "client_error": str(exc),
                "client_error_type": type(exc).__name__,
            },
        ) from exc

    # 传输成功后再解析 JSON，区分“传输错误”与“响应格式错误”。
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise MediaGenException(
            code=MediaGenErrorCode.PROTOCOL_ERROR,
            message=f"{source} returned invalid JSON.",
            retryable=True,
            detail={
                **request_error_detail,
                "elapsed_ms": _elapsed_ms(started_at),
                "body": truncate_text(raw_text, MAX_ERROR_BODY_LEN),
            },
        ) from exc

    if not isinstance(data, dict):
        raise MediaGenException(
            code=MediaGenErrorCode.PROTOCOL_ERROR,
            message=f"{source} response must be a JSON object.",
            retryable=True,
            detail={
                **request_error_detail,
                "elapsed_ms": _elapsed_ms(started_at),
                "response_type": type(data).__name__,
                "body": truncate_text(raw_text, MAX_ERROR_BODY_LEN),
            },
        )

    return {
        "data": data,
        "elapsed_ms": _elapsed_ms(started_at),
    }


async def post_json(
    *,
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str],
    timeout_sec: float = 30,
    source: str = "Upstream",
) -> JsonSuccessResponse:
    """发送 JSON POST 请求并返回结果对象。

    约定：
    - 传输层错误映射为 `NETWORK_ERROR/TIMEOUT`
    - 非 2xx HTTP 响应映射为 `UPSTREAM_ERROR`，保留原始响应体
    - 成功响应必须是 JSON object（dict），否则为 `PROTOCOL_ERROR`
    - 成功返回结构：`{"data": <json_object>, "elapsed_ms": <int>}`
    """
    return await _request_json(
        "POST",
        url=url,
        headers=headers,
        payload=payload,
        timeout_sec=timeout_sec,
        source=source,
    )


async def get_json(
    *,
    url: str,
    headers: dict[str, str],
    timeout_sec: float = 30,
    source: str = "Upstream",
) -> JsonSuccessResponse:
    """发送无请求体的 GET 请求，错误映射规则与 `post_json` 一致。"""
    return await _request_json(
        "GET",
        url=url,
        headers=headers,
        payload=None,
        timeout_sec=timeout_sec,
        source=source,
    )
