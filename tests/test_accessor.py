import numpy as np
import pandas as pd
import pytest

from field_quality_monitor.domain.errors import DatasetBindingError, FieldNotFound
from field_quality_monitor.domain.services.interfaces import FieldAccessor
from field_quality_monitor.infrastructure.accessors.dataframe import DataFrameAccessor


def test_get_resolves_column_lazily():
    frame = pd.DataFrame({"a": [1, 2], "b": [3, 4], "c": [5, 6]})
    accessor = DataFrameAccessor(frame)

    assert accessor.requested == frozenset()
    assert accessor.get("b").tolist() == [3, 4]
    assert accessor["a"].tolist() == [1, 2]
    assert accessor.requested == frozenset({"a", "b"})
    assert accessor.fields == ("a", "b", "c")
    assert accessor.row_count == 2
    assert isinstance(accessor, FieldAccessor)


def test_missing_field_raises_field_not_found():
    accessor = DataFrameAccessor(pd.DataFrame({"a": [1]}))

    with pytest.raises(FieldNotFound) as excinfo:
        accessor.get("z")
    assert excinfo.value.field == "z"
    assert str(excinfo.value) == "field 'z' not found"
    assert accessor.missing(["a", "z", "y"]) == ("z", "y")


def test_accessor_shares_the_frame():
    frame = pd.DataFrame({"a": [1, 2, 3]})
    accessor = DataFrameAccessor(frame)

    assert np.shares_memory(accessor.get("a").to_numpy(), frame["a"].to_numpy())


def test_from_mapping_and_binding_errors():
    accessor = DataFrameAccessor.from_mapping({"a": [1, 4, None], "b": [-1, 0, None]})
    assert accessor.fields == ("a", "b")

    with pytest.raises(DatasetBindingError):
        DataFrameAccessor.from_mapping({"a": [1, 2], "b": [1]})
    with pytest.raises(DatasetBindingError):
        DataFrameAccessor({"a": [1]})
    with pytest.raises(DatasetBindingError):
        DataFrameAccessor(pd.DataFrame([[1, 2]], columns=["a", "a"]))
