from __future__ import annotations

import inspect
import threading
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator

from loguru import logger

from field_quality_monitor.domain.errors import (
    CatalogLocked,
    DuplicateRule,
    InvalidDependency,
    InvalidRule,
    InvalidRuleLogic,
)
from field_quality_monitor.domain.models.rule import Rule, RuleLogic


def _accepts_two_arguments(logic: Callable) -> bool:
    try:
        signature = inspect.signature(logic)
    except (TypeError, ValueError):
        # builtins without introspectable signatures are taken as-is
        return True
    try:
        signature.bind(None, None)
    except TypeError:
        return False
    return True


class RuleCatalog:
    """
    Ordered registry of rules. Filled during setup, read-only while a run
    iterates it.
    """

    def __init__(self) -> None:
        self._rules: dict[tuple[str, str], Rule] = {}
        self._lock = threading.Lock()
        self._runs = 0

    def register(
        self,
        field: str,
        test_name: str,
        logic: RuleLogic,
        depends_on: Iterable[str] = (),
    ) -> Rule:
        if not isinstance(field, str) or not field:
            raise InvalidRule(f"rule {test_name!r} needs a field name")
        if not isinstance(test_name, str) or not test_name:
            raise InvalidRule(f"rule for field '{field}' needs a test name")
        if not callable(logic):
            raise InvalidRuleLogic(f"logic of {field}:{test_name} is not callable")
        if not _accepts_two_arguments(logic):
            raise InvalidRuleLogic(
                f"logic of {field}:{test_name} must accept (primary, accessor)"
            )

        if isinstance(depends_on, str):
            depends_on = (depends_on,)
        dependencies = tuple(depends_on)
        for dependency in dependencies:
            if not isinstance(dependency, str) or not dependency.strip():
                raise InvalidDependency(field, test_name, dependency)

        rule = Rule(
            field=field,
            test_name=test_name,
            logic=logic,
            depends_on=frozenset(dependencies),
        )
        with self._lock:
            if self._runs:
                raise CatalogLocked(
                    f"cannot register {field}:{test_name} while the catalog is running"
                )
            if rule.key in self._rules:
                raise DuplicateRule(field, test_name)
            self._rules[rule.key] = rule

        logger.debug("registered rule {}:{}", field, test_name)
        return rule

    def rule(
        self, field: str, test_name: str, depends_on: Iterable[str] = ()
    ) -> Callable[[RuleLogic], RuleLogic]:
        def decorator(logic: RuleLogic) -> RuleLogic:
            self.register(field, test_name, logic, depends_on=depends_on)
            return logic

        return decorator

    def all_rules(self) -> tuple[Rule, ...]:
        with self._lock:
            return tuple(self._rules.values())

    def for_field(self, field: str) -> tuple[Rule, ...]:
        return tuple(rule for rule in self.all_rules() if rule.field == field)

    def get(self, field: str, test_name: str) -> Rule | None:
        with self._lock:
            return self._rules.get((field, test_name))

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(rule.field for rule in self.all_rules()))

    @property
    def is_locked(self) -> bool:
        return self._runs > 0

    @contextmanager
    def locked(self) -> Iterator[tuple[Rule, ...]]:
        with self._lock:
            self._runs += 1
            rules = tuple(self._rules.values())
        try:
            yield rules
        finally:
            with self._lock:
                self._runs -= 1

    def __len__(self) -> int:
        with self._lock:
            return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.all_rules())

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._rules
