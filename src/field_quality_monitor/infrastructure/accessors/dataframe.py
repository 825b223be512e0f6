from __future__ import annotations

import threading
from typing import Any, Iterable, Mapping

import pandas as pd
from loguru import logger

from field_quality_monitor.domain.errors import DatasetBindingError, FieldNotFound


class DataFrameAccessor:
    """
    Read-only, name-indexed view over a single shared DataFrame.
    Columns are looked up on request; the frame itself is never copied.
    """

    def __init__(self, frame: pd.DataFrame) -> None:
        if not isinstance(frame, pd.DataFrame):
            raise DatasetBindingError(
                f"expected a pandas DataFrame, got {type(frame).__name__}"
            )
        if frame.columns.has_duplicates:
            duplicated = sorted(set(frame.columns[frame.columns.duplicated()]))
            raise DatasetBindingError(f"duplicated columns {duplicated}")
        self._frame = frame
        self._requested: set[str] = set()
        self._lock = threading.Lock()

    @classmethod
    def from_mapping(cls, columns: Mapping[str, Any]) -> "DataFrameAccessor":
        try:
            frame = pd.DataFrame(dict(columns))
        except ValueError as exc:
            raise DatasetBindingError(str(exc)) from exc
        return cls(frame)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(str(column) for column in self._frame.columns)

    @property
    def requested(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._requested)

    @property
    def row_count(self) -> int:
        return len(self._frame)

    def has(self, field_name: str) -> bool:
        return field_name in self._frame.columns

    def missing(self, names: Iterable[str]) -> tuple[str, ...]:
        return tuple(name for name in names if not self.has(name))

    def get(self, field_name: str) -> pd.Series:
        if not self.has(field_name):
            raise FieldNotFound(field_name)
        with self._lock:
            if field_name not in self._requested:
                logger.debug("resolving field {}", field_name)
                self._requested.add(field_name)
        return self._frame[field_name]

    def __getitem__(self, field_name: str) -> pd.Series:
        return self.get(field_name)
