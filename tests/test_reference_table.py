from __future__ import annotations

import pytest

from momentmorph_core.errors import ConfigurationError
from momentmorph_core.morphing import ConstantValue, ReferencePoint, ReferenceTable
from momentmorph_core.morphing.reference import as_value_source


class Box:
    def __init__(self, value: float) -> None:
        self.value = value


def test_table_keeps_source_handles_without_copying_values() -> None:
    box = Box(2.0)
    table = ReferenceTable([0, 1.5], [1, box], tolerance=1e-9)

    assert table.positions.tolist() == [0.0, 1.5]
    assert table.points == (ReferencePoint(0.0, 0), ReferencePoint(1.5, 1))
    assert table.source(1) is box
    assert table.values() == [1.0, 2.0]

    box.value = 7.0

    assert table.read(1) == 7.0
    assert [point.index for point, _ in table] == [0, 1]
    assert len(table) == table.size == 2


def test_positions_are_read_only() -> None:
    table = ReferenceTable([0.0, 1.0], [0.0, 1.0], tolerance=1e-9)

    with pytest.raises(ValueError):
        table.positions[0] = 5.0


def test_mismatched_sizes_report_both_lengths() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ReferenceTable([0.0, 1.0, 2.0], [1.0, 2.0], tolerance=1e-9)

    assert excinfo.value.context == {"positions": 3, "sources": 2}


def test_non_increasing_positions_report_offending_index() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        ReferenceTable([0.0, 2.0, 1.0], [1.0, 2.0, 3.0], tolerance=1e-9)

    assert excinfo.value.context == {"index": 2, "previous": 2.0, "position": 1.0}


@pytest.mark.parametrize("candidate", [True, None, "3", object()])
def test_unsupported_sources_are_rejected(candidate) -> None:
    with pytest.raises(ConfigurationError):
        as_value_source(candidate, role="query")


def test_numbers_become_constant_sources() -> None:
    source = as_value_source(4)

    assert isinstance(source, ConstantValue)
    assert source.value == 4.0
    assert repr(source) == "ConstantValue(4.0)"
