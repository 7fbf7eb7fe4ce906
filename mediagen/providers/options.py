"""生成参数组合。

每个 option 是一个只修改单个字段的可调用对象，按顺序作用在供应商默认配置的副本上，
同一字段以后出现的为准。这里不做任何校验，校验由各供应商在构造请求时负责。
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Sequence
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(slots=True)
class GenerationConfiguration:
    negative_prompt: str | None = None
    size: str | None = None
    """尺寸标签，例如 `1920x1920`。"""
    width: int | None = None
    height: int | None = None
    quality: str | None = None
    style: str | None = None
    steps: int | None = None
    cfg_scale: float | None = None
    seed: int | None = None
    """None 表示由供应商决定；显式设置的值（包括 0）原样透传。"""
    model: str | None = None
    reference_images: list[str] = field(default_factory=list)
    duration: int | None = None
    resolution: str | None = None
    first_frame_image: str | None = None
    last_frame_image: str | None = None

    def populated(self) -> dict[str, Any]:
        """返回已设置的字段，空的参考图列表也视为未设置。"""
        return {
            key: value
            for key, value in asdict(self).items()
            if value is not None and value != []
        }


GenerationOption = Callable[[GenerationConfiguration], None]


def compose_options(
    defaults: GenerationConfiguration,
    options: Iterable[GenerationOption] = (),
) -> GenerationConfiguration:
    """在默认配置的副本上依次应用 options，不会修改 defaults 本身。"""
    configuration = copy.deepcopy(defaults)
    for option in options:
        option(configuration)
    return configuration


def with_negative_prompt(prompt: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.negative_prompt = prompt

    return apply


def with_size(size: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.size = size

    return apply


def with_dimensions(width: int, height: int) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.width = width
        configuration.height = height

    return apply


def with_quality(quality: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.quality = quality

    return apply


def with_style(style: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.style = style

    return apply


def with_steps(steps: int) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.steps = steps

    return apply


def with_cfg_scale(scale: float) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.cfg_scale = scale

    return apply


def with_seed(seed: int) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.seed = seed

    return apply


def with_model(model: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.model = model

    return apply


def with_reference_images(images: Sequence[str]) -> GenerationOption:
    # 拷贝一份，调用方之后修改原列表不影响已组合的配置。
    snapshot = list(images)

    def apply(configuration: GenerationConfiguration) -> None:
        configuration.reference_images = list(snapshot)

    return apply


def with_duration(seconds: int) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.duration = seconds

    return apply


def with_resolution(resolution: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.resolution = resolution

    return apply


def with_first_frame(image: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.first_frame_image = image

    return apply


def with_last_frame(image: str) -> GenerationOption:
    def apply(configuration: GenerationConfiguration) -> None:
        configuration.last_frame_image = image

    return apply
