from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, FrozenSet, Tuple, Union

import pandas as pd

# logic(primary column, accessor) -> bool | Verdict
RuleLogic = Callable[[pd.Series, Any], Union[bool, "Verdict"]]


@dataclass(frozen=True, slots=True)
class Verdict:
    """
    Structured answer of a rule's logic.
    Example: Verdict(False, "row 2 missing", rows=(2,))
    """
    passed: bool
    detail: str | None = None
    rows: Tuple[Any, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Rule:
    """
    One validation check bound to a field of the dataset.
    """
    field: str
    test_name: str
    logic: RuleLogic = field(compare=False)
    depends_on: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def key(self) -> tuple[str, str]:
        return self.field, self.test_name

    @property
    def required_fields(self) -> tuple[str, ...]:
        return (self.field, *sorted(self.depends_on - {self.field}))
