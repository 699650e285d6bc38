"""Result envelope returned by every catalog service operation.

A result is either a ``Success`` or a ``Failure``. Both carry a human-readable
``message`` and a ``data`` payload; ``data`` only means something when
``success`` is True, so check the flag (or the result's truthiness) first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    message: str
    data: Optional[T] = None

    @property
    def success(self) -> bool:
        return True

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    message: str
    data: Any = None

    @property
    def success(self) -> bool:
        return False

    def __bool__(self) -> bool:
        return False


ServiceResult = Union[Success[T], Failure]
