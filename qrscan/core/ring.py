"""
Fixed-capacity circular buffer, used as reusable scratch space while walking
lines of pixels. Write with `push`, read oldest-first with iteration or
`peek_oldest`, and `clear` to reuse it for the next line without reallocating.
"""

from __future__ import annotations
from typing import Generic, Iterator, List, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    def __init__(self, capacity: int, fill: T = 0):  # type: ignore[assignment]
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._data: List[T] = [fill] * capacity
        self._cap = capacity
        self._head = 0
        self._full = False

    @property
    def capacity(self) -> int:
        return self._cap

    def is_full(self) -> bool:
        return self._full

    def __len__(self) -> int:
        return self._cap if self._full else self._head

    def clear(self) -> None:
        self._head = 0
        self._full = False

    def push(self, value: T) -> None:
        self._data[self._head] = value
        self._head = (self._head + 1) % self._cap
        if self._head == 0:
            self._full = True

    def peek_oldest(self) -> T:
        if not self._full and self._head == 0:
            raise IndexError("peek on empty ring buffer")
        return self._data[self._head if self._full else 0]

    def __iter__(self) -> Iterator[T]:
        if self._full:
            yield from self._data[self._head:]
        yield from self._data[:self._head]
