from __future__ import annotations

import random
import string

from uuid6 import uuid7

DIGITS = string.digits
ALPHANUMERIC = string.ascii_letters + string.digits


def new_request_id() -> str:
    """生成按时间有序的请求 ID，用于串联同一次生成调用的日志。"""
    return str(uuid7())


class RandomSource:
    """显式持有的随机数生成器。

    不做任何模块级播种；需要可复现结果时传入 seed，
    需要独立序列时各自创建实例。
    """

    __slots__ = ("_rng",)

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def choice_string(self, alphabet: str, length: int) -> str:
        if length < 0:
            raise ValueError("length must be >= 0.")
        if not alphabet:
            raise ValueError("alphabet must not be empty.")
        return "".join(self._rng.choice(alphabet) for _ in range(length))

    def verification_code(self, length: int = 6) -> str:
        """生成纯数字验证码。"""
        return self.choice_string(DIGITS, length)

    def random_string(self, length: int) -> str:
        """生成大小写字母与数字组成的随机串。"""
        return self.choice_string(ALPHANUMERIC, length)
