from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Sequence, Tuple


class Status(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Outcome:
    field: str
    test_name: str
    status: Status
    detail: str | None = None
    rows: Tuple[Any, ...] = field(default_factory=tuple)
    duration_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status is Status.PASS

    def as_row(self) -> tuple[str, str, str, str | None]:
        return self.field, self.test_name, self.status.value, self.detail


_SORT_KEYS = {
    "status": lambda outcome: list(Status).index(outcome.status),
    "field": lambda outcome: outcome.field,
    "test_name": lambda outcome: outcome.test_name,
}


@dataclass(frozen=True, slots=True)
class ResultTable:
    generated_at: datetime
    outcomes: Tuple[Outcome, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.outcomes)

    def __iter__(self):
        return iter(self.outcomes)

    def rows(self) -> list[tuple[str, str, str, str | None]]:
        return [outcome.as_row() for outcome in self.outcomes]

    def sorted_by(self, keys: Sequence[str]) -> "ResultTable":
        """
        Returns a copy ordered by the given keys ("status", "field", "test_name").
        Ties keep registration order.
        """
        unknown = [key for key in keys if key not in _SORT_KEYS]
        if unknown:
            raise ValueError(f"unknown sort keys {unknown}")
        ordered = sorted(
            self.outcomes,
            key=lambda outcome: tuple(_SORT_KEYS[key](outcome) for key in keys),
        )
        return ResultTable(generated_at=self.generated_at, outcomes=tuple(ordered))
