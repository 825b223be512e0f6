"""Exception hierarchy for the field quality monitor.

    FieldTestError (base)
    ├── SetupError               surfaced to the caller, aborts setup
    │   ├── DuplicateRule
    │   ├── InvalidDependency
    │   ├── InvalidRule
    │   │   └── InvalidRuleLogic
    │   ├── CatalogLocked
    │   ├── ConfigurationError
    │   └── DatasetBindingError
    ├── FieldNotFound            converted into an error outcome
    ├── RuleExecutionError       converted into an error outcome
    └── CancelledRule            describes a rule skipped after cancellation
"""

from __future__ import annotations

from typing import Any


class FieldTestError(Exception):
    pass


class SetupError(FieldTestError):
    pass


class DuplicateRule(SetupError):
    def __init__(self, field: str, test_name: str) -> None:
        super().__init__(f"rule already registered for field '{field}': {test_name}")
        self.field = field
        self.test_name = test_name


class InvalidDependency(SetupError):
    def __init__(self, field: str, test_name: str, dependency: Any) -> None:
        super().__init__(
            f"invalid dependency {dependency!r} for rule {field}:{test_name}"
        )
        self.dependency = dependency


class InvalidRule(SetupError):
    pass


class InvalidRuleLogic(InvalidRule):
    pass


class CatalogLocked(SetupError):
    pass


class ConfigurationError(SetupError):
    pass


class DatasetBindingError(SetupError):
    pass


class FieldNotFound(FieldTestError, KeyError):
    def __init__(self, field: str) -> None:
        super().__init__(field)
        self.field = field

    def __str__(self) -> str:
        return f"field '{self.field}' not found"


class RuleExecutionError(FieldTestError):
    """Failure raised by a rule's logic, kept together with its origin."""

    def __init__(self, field: str, test_name: str, cause: BaseException) -> None:
        super().__init__(f"{type(cause).__name__}: {cause}")
        self.field = field
        self.test_name = test_name
        self.cause = cause


class CancelledRule(FieldTestError):
    def __init__(self, field: str, test_name: str) -> None:
        super().__init__("cancelled")
        self.field = field
        self.test_name = test_name
