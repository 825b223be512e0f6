from __future__ import annotations

from pathlib import Path
from typing import Iterable, Protocol, runtime_checkable

import pandas as pd

from field_quality_monitor.domain.models.result import ResultTable


@runtime_checkable
class FieldAccessor(Protocol):
    @property
    def fields(self) -> tuple[str, ...]: ...

    def get(self, field_name: str) -> pd.Series: ...

    def has(self, field_name: str) -> bool: ...

    def missing(self, names: Iterable[str]) -> tuple[str, ...]: ...


class DatasetLoader(Protocol):
    def load(self, path: Path) -> pd.DataFrame: ...


class ResultSink(Protocol):
    def write(self, table: ResultTable) -> None: ...
