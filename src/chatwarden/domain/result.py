"""Success/failure values returned by every chatwarden operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, NoReturn


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    @property
    def is_ok(self) -> Literal[True]:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err[E: Exception]:
    error: E

    @property
    def is_ok(self) -> Literal[False]:
        return False

    def unwrap(self) -> NoReturn:
        raise self.error


type Result[T, E: Exception] = Ok[T] | Err[E]
