from __future__ import annotations

import threading
from pathlib import Path
from typing import Sequence

from loguru import logger

from field_quality_monitor.application.services.aggregator import ResultAggregator
from field_quality_monitor.application.services.catalog import RuleCatalog
from field_quality_monitor.application.services.executor import TestExecutor
from field_quality_monitor.domain.models.result import ResultTable
from field_quality_monitor.domain.services.interfaces import (
    DatasetLoader,
    FieldAccessor,
    ResultSink,
)
from field_quality_monitor.infrastructure.accessors.dataframe import DataFrameAccessor
from field_quality_monitor.infrastructure.adapters.sinks import create_sink
from field_quality_monitor.infrastructure.config import EngineConfig, build_catalog
from field_quality_monitor.infrastructure.loaders.pandas_loader import PandasDatasetLoader


class RunFieldTests:
    """
    One run: bind the dataset, execute the catalog, hand the table to the sink.
    """

    def __init__(
        self,
        catalog: RuleCatalog,
        executor: TestExecutor,
        sink: ResultSink | None = None,
    ) -> None:
        self.catalog = catalog
        self.executor = executor
        self.sink = sink

    def execute(
        self,
        accessor: FieldAccessor,
        sort_by: Sequence[str] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ResultTable:
        aggregator = ResultAggregator()
        self.executor.run(
            self.catalog, accessor, cancel_event=cancel_event, aggregator=aggregator
        )
        table = aggregator.build(sort_by=sort_by)
        if self.sink is not None:
            self.sink.write(table)
        return table


class RunProcess:
    def __init__(
        self,
        config_path: Path,
        data_path: Path,
        loader: DatasetLoader | None = None,
        max_workers: int | None = None,
        output_format: str | None = None,
        output_path: Path | None = None,
    ) -> None:
        self.config = EngineConfig.load(config_path)
        self.data_path = data_path
        self.loader = loader if loader is not None else PandasDatasetLoader()
        self.catalog = build_catalog(self.config)
        self.executor = TestExecutor(max_workers=max_workers or self.config.engine.max_workers)
        self.sink = create_sink(
            output_format or self.config.output.format,
            output_path or self.config.output.path,
        )

    def execute(self, sort_by: Sequence[str] | None = None) -> ResultTable:
        accessor = DataFrameAccessor(self.loader.load(self.data_path))
        logger.info(
            "checking {} rules over fields {}", len(self.catalog), list(accessor.fields)
        )
        return RunFieldTests(self.catalog, self.executor, self.sink).execute(
            accessor, sort_by=sort_by
        )
