from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Tuple

from pydantic import BaseModel, ConfigDict, model_validator
from typing_extensions import Self

from imageproxy.types import PositiveInt


def clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def snap_to_nearest(value: int, choices: Tuple[int, ...]) -> int:
    """
    Return the choice closest to ``value``.

    Ties go to the first candidate reached while scanning ``choices`` left to right,
    so ``snap_to_nearest(384, (256, 512, 1024))`` is 256.
    """
    if not choices:
        raise ValueError('choices must not be empty')
    nearest = choices[0]
    for choice in choices[1:]:
        if abs(choice - value) < abs(nearest - value):
            nearest = choice
    return nearest


def format_size(width: int, height: int) -> str:
    return f'{width}x{height}'


class SizePolicy(BaseModel, ABC):
    model_config = ConfigDict(frozen=True)

    @abstractmethod
    def resolve_dimension(self, value: int) -> int:
        ...

    def resolve(self, width: int, height: int) -> Tuple[int, int]:
        return self.resolve_dimension(width), self.resolve_dimension(height)


class RangeSizePolicy(SizePolicy):
    minimum: PositiveInt
    maximum: PositiveInt

    @model_validator(mode='after')
    def _check_bounds(self) -> Self:
        if self.minimum > self.maximum:
            raise ValueError(f'minimum {self.minimum} is greater than maximum {self.maximum}')
        return self

    def resolve_dimension(self, value: int) -> int:
        return clamp(value, self.minimum, self.maximum)


class DiscreteSizePolicy(SizePolicy):
    choices: Tuple[PositiveInt, ...]

    @model_validator(mode='after')
    def _check_choices(self) -> Self:
        if not self.choices:
            raise ValueError('choices must not be empty')
        return self

    def resolve_dimension(self, value: int) -> int:
        return snap_to_nearest(value, self.choices)
