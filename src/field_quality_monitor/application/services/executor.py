from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import numpy as np
from loguru import logger

from field_quality_monitor.application.services.aggregator import ResultAggregator
from field_quality_monitor.application.services.catalog import RuleCatalog
from field_quality_monitor.domain.errors import (
    CancelledRule,
    FieldNotFound,
    RuleExecutionError,
)
from field_quality_monitor.domain.models.result import Outcome, Status
from field_quality_monitor.domain.models.rule import Rule, Verdict
from field_quality_monitor.domain.services.interfaces import FieldAccessor
from field_quality_monitor.infrastructure.adapters.metrics import (
    outcome_counter,
    rule_duration,
    run_counter,
)


class TestExecutor:
    """
    Applies every rule of a catalog to one shared dataset.

    Each rule runs inside its own failure boundary: a missing field, an
    exception in the logic or an unusable return value becomes an ``error``
    outcome for that rule only. Outcomes always come back in registration
    order, whatever the number of workers.
    """

    __test__ = False

    def __init__(self, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._max_workers = max_workers

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def run(
        self,
        catalog: RuleCatalog,
        accessor: FieldAccessor,
        cancel_event: threading.Event | None = None,
        aggregator: ResultAggregator | None = None,
    ) -> list[Outcome]:
        aggregator = aggregator if aggregator is not None else ResultAggregator()
        if len(aggregator):
            raise ValueError("aggregator already holds outcomes, pass a fresh one per run")
        cancel_event = cancel_event if cancel_event is not None else threading.Event()
        run_counter.inc()

        with catalog.locked() as rules:
            logger.info(
                "running {} rules with {} worker(s)", len(rules), self._max_workers
            )
            if self._max_workers == 1 or len(rules) < 2:
                for position, rule in enumerate(rules):
                    aggregator.add(position, self._guarded(rule, accessor, cancel_event))
            else:
                with ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="field-tests"
                ) as pool:
                    futures = [
                        pool.submit(self._guarded, rule, accessor, cancel_event)
                        for rule in rules
                    ]
                    for position, future in enumerate(futures):
                        aggregator.add(position, future.result())

        if cancel_event.is_set():
            logger.warning("run cancelled: {}", aggregator.summary())
        else:
            logger.info("run finished: {}", aggregator.summary())
        return list(aggregator.outcomes)

    def _guarded(
        self, rule: Rule, accessor: FieldAccessor, cancel_event: threading.Event
    ) -> Outcome:
        if cancel_event.is_set():
            skipped = CancelledRule(rule.field, rule.test_name)
            outcome = Outcome(rule.field, rule.test_name, Status.ERROR, str(skipped))
        else:
            outcome = self._execute(rule, accessor)
        outcome_counter.labels(status=outcome.status.value).inc()
        return outcome

    def _execute(self, rule: Rule, accessor: FieldAccessor) -> Outcome:
        missing = accessor.missing(rule.required_fields)
        if missing:
            detail = "; ".join(str(FieldNotFound(name)) for name in missing)
            logger.warning("rule {}:{} skipped, {}", rule.field, rule.test_name, detail)
            return Outcome(rule.field, rule.test_name, Status.ERROR, detail)

        started = time.perf_counter()
        try:
            primary = accessor.get(rule.field)
            verdict = rule.logic(primary, accessor)
            outcome = _to_outcome(rule, verdict, (time.perf_counter() - started) * 1000)
        except Exception as exc:
            failure = RuleExecutionError(rule.field, rule.test_name, exc)
            elapsed = time.perf_counter() - started
            rule_duration.observe(elapsed)
            logger.warning("rule {}:{} raised {}", rule.field, rule.test_name, failure)
            return Outcome(
                rule.field,
                rule.test_name,
                Status.ERROR,
                str(failure),
                duration_ms=elapsed * 1000,
            )

        rule_duration.observe(outcome.duration_ms / 1000)
        logger.debug(
            "rule {}:{} -> {} {}",
            rule.field,
            rule.test_name,
            outcome.status.value,
            outcome.detail or "",
        )
        return outcome


def _to_outcome(rule: Rule, verdict: Any, duration_ms: float) -> Outcome:
    if isinstance(verdict, Verdict):
        if not isinstance(verdict.passed, (bool, np.bool_)):
            return Outcome(
                rule.field,
                rule.test_name,
                Status.ERROR,
                f"unsupported verdict, passed is of type {type(verdict.passed).__name__}",
                duration_ms=duration_ms,
            )
        return Outcome(
            rule.field,
            rule.test_name,
            Status.PASS if verdict.passed else Status.FAIL,
            verdict.detail,
            rows=tuple(verdict.rows),
            duration_ms=duration_ms,
        )
    if isinstance(verdict, (bool, np.bool_)):
        return Outcome(
            rule.field,
            rule.test_name,
            Status.PASS if verdict else Status.FAIL,
            duration_ms=duration_ms,
        )
    return Outcome(
        rule.field,
        rule.test_name,
        Status.ERROR,
        f"unsupported verdict of type {type(verdict).__name__}",
        duration_ms=duration_ms,
    )
