from __future__ import annotations

from pathlib import Path

import pandas as pd
from loguru import logger

from field_quality_monitor.domain.errors import DatasetBindingError


class PandasDatasetLoader:
    """Reads a dataset file into the single DataFrame shared by every rule."""

    READERS = {
        ".csv": pd.read_csv,
        ".json": pd.read_json,
        ".jsonl": lambda path: pd.read_json(path, lines=True),
    }

    def load(self, path: Path) -> pd.DataFrame:
        reader = self.READERS.get(path.suffix.lower())
        if reader is None:
            raise DatasetBindingError(
                f"unsupported dataset format '{path.suffix}', expected one of {sorted(self.READERS)}"
            )
        if not path.exists():
            raise DatasetBindingError(f"dataset {path} not found")
        try:
            frame = reader(path)
        except ValueError as exc:
            raise DatasetBindingError(f"could not read {path}: {exc}") from exc
        logger.info("loaded {} rows x {} fields from {}", len(frame), len(frame.columns), path)
        return frame
