import pandas as pd
import pytest

from field_quality_monitor.domain.errors import ConfigurationError
from field_quality_monitor.infrastructure.accessors.dataframe import DataFrameAccessor
from field_quality_monitor.infrastructure.rules import checks


@pytest.fixture
def accessor():
    return DataFrameAccessor(
        pd.DataFrame(
            {
                "id": [1, 2, 2, 3],
                "value": [0.5, None, 7.25, -3.0],
                "kind": ["x", "y", None, "q"],
            }
        )
    )


def run(logic, accessor, field):
    return logic(accessor.get(field), accessor)


def test_not_missing(accessor):
    verdict = run(checks.not_missing(), accessor, "value")
    assert not verdict.passed
    assert verdict.detail == "row 1 missing"
    assert verdict.rows == (1,)

    assert run(checks.not_missing(), accessor, "id").passed


def test_completeness_threshold(accessor):
    assert run(checks.completeness(threshold=0.75), accessor, "value").passed

    verdict = run(checks.completeness(), accessor, "value")
    assert not verdict.passed
    assert verdict.detail == "completeness 0.750 below 1"


def test_between_and_not_between(accessor):
    verdict = run(checks.between(min=0, max=5), accessor, "value")
    assert verdict.detail == "row 2 value 7.25 not in [0,5]; row 3 value -3 not in [0,5]"
    assert verdict.rows == (2, 3)

    verdict = run(checks.not_between(min=0, max=1), accessor, "value")
    assert verdict.detail == "row 0 value 0.5 in [0,1]"


def test_negative_skips_missing_values(accessor):
    verdict = run(checks.negative(), accessor, "value")
    assert verdict.rows == (0, 2)


def test_unique(accessor):
    verdict = run(checks.unique(), accessor, "id")
    assert verdict.detail == "row 2 value 2 duplicated"


def test_allowed_values(accessor):
    verdict = run(checks.allowed_values(["x", "y"]), accessor, "kind")
    assert verdict.detail == "row 3 value q not allowed"


def test_present_when_reads_other_field(accessor):
    verdict = run(checks.present_when("kind"), accessor, "value")
    assert verdict.detail == "row 1 missing while kind present"

    assert run(checks.present_when("value"), accessor, "id").passed


def test_long_violation_lists_are_truncated():
    frame = pd.DataFrame({"a": [None] * 25})
    verdict = run(checks.not_missing(), DataFrameAccessor(frame), "a")
    assert len(verdict.rows) == 25
    assert verdict.detail.endswith("; ... and 5 more")


def test_build_check_infers_dependencies():
    logic, dependencies = checks.build_check("present_when", {"other": "a"})
    assert callable(logic)
    assert dependencies == ("a",)

    _, dependencies = checks.build_check("between", {"min": 1, "max": 2})
    assert dependencies == ()


def test_build_check_rejects_bad_input():
    with pytest.raises(ConfigurationError):
        checks.build_check("no_such_check", {})
    with pytest.raises(ConfigurationError):
        checks.build_check("between", {"min": 1})
    with pytest.raises(ConfigurationError):
        checks.build_check("negative", {"threshold": 1})


def test_describe_checks_lists_every_check():
    described = checks.describe_checks()
    assert set(described) == set(checks.CHECKS)
    assert described["between"] == "(min: 'float', max: 'float')"
