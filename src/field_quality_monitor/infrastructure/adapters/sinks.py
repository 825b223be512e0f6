from __future__ import annotations

from pathlib import Path

import pandas as pd
from loguru import logger

from field_quality_monitor.domain.errors import ConfigurationError
from field_quality_monitor.domain.models.result import ResultTable, Status
from field_quality_monitor.domain.services.interfaces import ResultSink
from field_quality_monitor.infrastructure.serializers.payload_serializer import (
    PayloadOutputSerializer,
)


class LoggingSink:
    def write(self, table: ResultTable) -> None:
        for outcome in table:
            mark = {Status.PASS: "✓", Status.FAIL: "✗", Status.ERROR: "!"}[outcome.status]
            log = logger.warning if outcome.status is Status.ERROR else logger.info
            log(
                "{} {}:{} {}{}",
                mark,
                outcome.field,
                outcome.test_name,
                outcome.status.value,
                f" - {outcome.detail}" if outcome.detail else "",
            )


class JsonLinesSink:
    def __init__(self, path: Path) -> None:
        self._path = path

    def write(self, table: ResultTable) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8") as f:
            for outcome in table:
                payload = PayloadOutputSerializer.build(table, outcome)
                f.write(PayloadOutputSerializer.to_json(payload) + "\n")
        logger.info("wrote {} outcomes to {}", len(table), self._path)


class CsvSink:
    def __init__(self, path: Path) -> None:
        self._path = path

    def write(self, table: ResultTable) -> None:
        frame = pd.DataFrame(
            table.rows(), columns=["field", "test_name", "status", "detail"]
        )
        frame["generated_at"] = table.generated_at.isoformat()
        self._path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(self._path, index=False)
        logger.info("wrote {} outcomes to {}", len(table), self._path)


def create_sink(output_format: str, path: Path | None) -> ResultSink:
    if output_format == "log":
        return LoggingSink()
    if path is None:
        raise ConfigurationError(f"output format '{output_format}' needs a path")
    if output_format == "jsonl":
        return JsonLinesSink(path)
    if output_format == "csv":
        return CsvSink(path)
    raise ConfigurationError(f"unknown output format '{output_format}'")
