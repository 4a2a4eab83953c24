from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class EngineError(Exception):
    """Base for every expected failure. Returned inside a Result, never raised by the engine."""

    @property
    def message(self) -> str:
        return str(self)


class FormatError(EngineError):
    def __init__(self, text: str, reason: str = "not a valid American price"):
        super().__init__(f"{text!r}: {reason}")
        self.text = text
        self.reason = reason


class ExtractionError(EngineError):
    pass


class NoPriceFound(ExtractionError):
    def __init__(self, reason: str = "no odds found near the selected point"):
        super().__init__(reason)


class TeamNotResolved(ExtractionError):
    def __init__(self, candidate: Optional[str], reason: str = "could not match a team"):
        label = candidate if candidate else "<none>"
        super().__init__(f"{reason} ({label})")
        self.candidate = candidate


class SideNotResolved(ExtractionError):
    def __init__(self, reason: str = "could not tell over from under"):
        super().__init__(reason)


class DuplicateError(EngineError):
    def __init__(self, key: Tuple[str, str, str]):
        super().__init__(f"leg already on slip: {' / '.join(key)}")
        self.key = key


class AggregationKind(str, Enum):
    EMPTY = "empty"
    INVALID_LEG = "invalid_leg"


class AggregationError(EngineError):
    def __init__(self, kind: AggregationKind, pick_id: Optional[str] = None, cause: Optional[EngineError] = None):
        if kind == AggregationKind.EMPTY:
            msg = "slip has no legs"
        else:
            msg = f"leg {pick_id} has an invalid price"
            if cause is not None:
                msg += f": {cause}"
        super().__init__(msg)
        self.kind = kind
        self.pick_id = pick_id
        self.cause = cause


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[EngineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: EngineError) -> "Result[T]":
        return cls(error=error)
