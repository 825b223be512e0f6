from __future__ import annotations

import inspect
from typing import Any, Callable, Iterable, Mapping

import numpy as np
import pandas as pd

from field_quality_monitor.domain.errors import ConfigurationError
from field_quality_monitor.domain.models.rule import RuleLogic, Verdict
from field_quality_monitor.infrastructure.constants import MAX_LISTED_VIOLATIONS

CheckFactory = Callable[..., RuleLogic]

# parameters naming another field; their values become the rule's depends_on
DEPENDENCY_PARAMS = ("other",)


def format_value(value: Any) -> str:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _verdict(messages: list[str], rows: list[Any]) -> Verdict:
    if not messages:
        return Verdict(passed=True)
    listed = messages[:MAX_LISTED_VIOLATIONS]
    hidden = len(messages) - len(listed)
    if hidden:
        listed.append(f"... and {hidden} more")
    return Verdict(passed=False, detail="; ".join(listed), rows=tuple(rows))


def _violations(values: pd.Series, mask: pd.Series, template: str) -> Verdict:
    offending = values[mask]
    rows = list(offending.index)
    messages = [
        template.format(row=row, value=format_value(value))
        for row, value in offending.items()
    ]
    return _verdict(messages, rows)


def not_missing() -> RuleLogic:
    def check(primary: pd.Series, accessor) -> Verdict:
        missing = primary[primary.isna()]
        return _verdict([f"row {row} missing" for row in missing.index], list(missing.index))

    return check


def completeness(threshold: float = 1.0) -> RuleLogic:
    threshold = float(threshold)

    def check(primary: pd.Series, accessor) -> Verdict:
        ratio = float(primary.notna().mean()) if len(primary) else 0.0
        if ratio >= threshold:
            return Verdict(passed=True, detail=f"completeness {ratio:.3f}")
        return Verdict(
            passed=False,
            detail=f"completeness {ratio:.3f} below {threshold:g}",
            rows=tuple(primary.index[primary.isna()]),
        )

    return check


def between(min: float, max: float) -> RuleLogic:
    bounds = f"[{format_value(min)},{format_value(max)}]"

    def check(primary: pd.Series, accessor) -> Verdict:
        values = primary.dropna()
        return _violations(
            values,
            ~values.between(min, max),
            "row {row} value {value} not in " + bounds,
        )

    return check


def not_between(min: float, max: float) -> RuleLogic:
    bounds = f"[{format_value(min)},{format_value(max)}]"

    def check(primary: pd.Series, accessor) -> Verdict:
        values = primary.dropna()
        return _violations(
            values,
            values.between(min, max),
            "row {row} value {value} in " + bounds,
        )

    return check


def negative() -> RuleLogic:
    def check(primary: pd.Series, accessor) -> Verdict:
        values = primary.dropna()
        return _violations(values, values >= 0, "row {row} value {value} not negative")

    return check


def unique() -> RuleLogic:
    def check(primary: pd.Series, accessor) -> Verdict:
        values = primary.dropna()
        return _violations(values, values.duplicated(), "row {row} value {value} duplicated")

    return check


def allowed_values(values: Iterable[Any]) -> RuleLogic:
    allowed = list(values)

    def check(primary: pd.Series, accessor) -> Verdict:
        present = primary.dropna()
        return _violations(
            present, ~present.isin(allowed), "row {row} value {value} not allowed"
        )

    return check


def present_when(other: str) -> RuleLogic:
    def check(primary: pd.Series, accessor) -> Verdict:
        reference = accessor.get(other)
        mask = reference.notna() & primary.isna()
        rows = list(primary.index[mask])
        return _verdict([f"row {row} missing while {other} present" for row in rows], rows)

    return check


CHECKS: Mapping[str, CheckFactory] = {
    "not_missing": not_missing,
    "completeness": completeness,
    "between": between,
    "not_between": not_between,
    "negative": negative,
    "unique": unique,
    "allowed_values": allowed_values,
    "present_when": present_when,
}


def describe_checks() -> dict[str, str]:
    signatures = {}
    for name, factory in CHECKS.items():
        signature = inspect.signature(factory)
        signatures[name] = str(signature.replace(return_annotation=inspect.Signature.empty))
    return signatures


def build_check(name: str, params: Mapping[str, Any]) -> tuple[RuleLogic, tuple[str, ...]]:
    """
    Instantiates a named check and returns it with the fields it reads
    besides its primary one.
    """
    factory = CHECKS.get(name)
    if factory is None:
        raise ConfigurationError(f"unknown check {name}")
    try:
        inspect.signature(factory).bind(**params)
    except TypeError as exc:
        raise ConfigurationError(f"bad parameters for check {name}: {exc}") from exc
    dependencies = tuple(str(params[key]) for key in DEPENDENCY_PARAMS if key in params)
    return factory(**params), dependencies
