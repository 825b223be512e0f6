from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Iterable, Sequence

import pandas as pd

from field_quality_monitor.domain.models.result import Outcome, ResultTable, Status

COLUMNS = ["field", "test_name", "status", "detail"]


class ResultAggregator:
    """
    Collects outcomes as they complete and exposes them in registration order.
    """

    def __init__(self) -> None:
        self._slots: dict[int, Outcome] = {}
        self._lock = threading.Lock()

    def add(self, position: int, outcome: Outcome) -> None:
        with self._lock:
            if position in self._slots:
                raise ValueError(f"outcome already recorded at position {position}")
            self._slots[position] = outcome

    def extend(self, outcomes: Iterable[Outcome]) -> None:
        with self._lock:
            start = max(self._slots, default=-1) + 1
            for offset, outcome in enumerate(outcomes):
                self._slots[start + offset] = outcome

    @property
    def outcomes(self) -> tuple[Outcome, ...]:
        with self._lock:
            return tuple(self._slots[position] for position in sorted(self._slots))

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def by_status(self, status: Status | str) -> list[Outcome]:
        status = Status(status)
        return [outcome for outcome in self.outcomes if outcome.status is status]

    def summary(self) -> dict[str, int]:
        counts = {status.value: 0 for status in Status}
        for outcome in self.outcomes:
            counts[outcome.status.value] += 1
        return counts

    def to_table(self) -> list[tuple[str, str, str, str | None]]:
        return [outcome.as_row() for outcome in self.outcomes]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.to_table(), columns=COLUMNS)

    def build(self, sort_by: Sequence[str] | None = None) -> ResultTable:
        table = ResultTable(
            generated_at=datetime.now(timezone.utc),
            outcomes=self.outcomes,
        )
        return table.sorted_by(sort_by) if sort_by else table
