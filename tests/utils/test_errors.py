from __future__ import annotations

from mediagen.utils.dicts import drop_none_values, get_dict_value
from mediagen.utils.errors import MediaGenErrorCode, MediaGenException, truncate_text
from mediagen.utils.log import summarize_log_value


def test_mediagen_exception_to_dict_and_str() -> None:
    """验证：异常可序列化，字符串形式带错误码与压缩后的 detail。"""
    exc = MediaGenException(
        code=MediaGenErrorCode.PROVIDER_ERROR,
        message="Minimax error: quota",
        retryable=False,
        detail={"image": "data:image/png;base64,AAAA"},
    )

    assert exc.to_dict() == {
        "code": "PROVIDER_ERROR",
        "message": "Minimax error: quota",
        "retryable": False,
        "detail": {"image": "data:image/png;base64,AAAA"},
    }
    assert str(exc).startswith("[PROVIDER_ERROR] Minimax error: quota (retryable=False)")
    assert "<data-url len=26>" in str(exc)


def test_mediagen_exception_without_detail() -> None:
    exc = MediaGenException(
        code=MediaGenErrorCode.TIMEOUT, message="timed out", retryable=True
    )

    assert exc.detail == {}
    assert str(exc) == "[TIMEOUT] timed out (retryable=True)"


def test_truncate_text() -> None:
    assert truncate_text("abc", 3) == "abc"
    assert truncate_text("abcd", 3) == "abc..."


def test_summarize_log_value_limits_lists_and_text() -> None:
    summary = summarize_log_value({"items": list(range(8)), "text": "y" * 500})

    assert summary["items"] == [0, 1, 2, 3, 4, "<+3 items>"]
    assert summary["text"] == "y" * 400 + "...(truncated)"


def test_get_dict_value_reads_nested_lists() -> None:
    data = {"choices": [{"message": {"content": "hi"}}]}

    assert get_dict_value(data, "choices", 0, "message", "content") == "hi"
    assert get_dict_value(data, "choices", 1, "message") is None
    assert get_dict_value(data, "choices", "0") is None
    assert get_dict_value(None, "a") is None


def test_drop_none_values() -> None:
    assert drop_none_values({"a": 1, "b": None, "c": 0}) == {"a": 1, "c": 0}
