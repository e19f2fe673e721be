from __future__ import annotations

from pathlib import Path

import pytest

from momentmorph_core.config import (
    MorphDefinition,
    build_graph,
    load_morph_definitions,
    parse_morph_definitions,
)
from momentmorph_core.errors import ConfigurationError
from momentmorph_core.morphing import MorphMode

from tests.conftest import write_definitions


def test_packaged_sample_definitions_load() -> None:
    definitions = load_morph_definitions()

    assert set(definitions) == {"efficiency", "yield_curve", "bounded_response"}
    efficiency = definitions["efficiency"]
    assert efficiency.positions == (0.0, 1.0, 2.0)
    assert efficiency.values == (10.0, 20.0, 30.0)
    assert efficiency.mode is MorphMode.LINEAR
    assert definitions["yield_curve"].mode is MorphMode.NON_LINEAR
    assert definitions["bounded_response"].mode is MorphMode.NON_LINEAR_POS_FRACTIONS


def test_packaged_sample_definitions_build_and_evaluate() -> None:
    graph = build_graph(load_morph_definitions().values())

    assert graph.morph("efficiency").evaluate() == pytest.approx(15.0)
    assert set(graph.morphs) == {"efficiency", "yield_curve", "bounded_response"}
    bounded = graph.morph("bounded_response").fractions()
    assert min(bounded) >= 0.0
    assert sum(bounded) == pytest.approx(1.0)


def test_definitions_accept_both_reference_forms() -> None:
    definitions = parse_morph_definitions(
        {
            "morphs": {
                "paired": {
                    "references": [
                        {"position": 0, "value": 1},
                        {"position": 2, "value": 5},
                    ],
                    "query": 1,
                },
                "parallel": {"positions": [0, 1], "values": [3, 4], "mode": "NonLinear"},
            }
        }
    )

    assert definitions["paired"] == MorphDefinition(
        name="paired", positions=(0.0, 2.0), values=(1.0, 5.0), query=1.0
    )
    assert definitions["parallel"].mode is MorphMode.NON_LINEAR
    assert definitions["parallel"].query == 0.0


def test_defaults_are_merged_under_each_entry() -> None:
    definitions = parse_morph_definitions(
        {
            "defaults": {"mode": "nonlinear_lin_fractions", "query": 0.5},
            "morphs": {
                "a": {"positions": [0, 1], "values": [0, 1]},
                "b": {"positions": [0, 1], "values": [0, 1], "mode": "linear"},
            },
        }
    )

    assert definitions["a"].mode is MorphMode.NON_LINEAR_LIN_FRACTIONS
    assert definitions["a"].query == 0.5
    assert definitions["b"].mode is MorphMode.LINEAR


def test_document_without_morphs_is_empty() -> None:
    assert parse_morph_definitions({}) == {}


@pytest.mark.parametrize(
    "config",
    [
        pytest.param({"morphs": ["a"]}, id="morphs-not-mapping"),
        pytest.param({"morphs": {"a": 3}}, id="entry-not-mapping"),
        pytest.param({"morphs": {"a": {"positions": [0, 1]}}}, id="missing-values"),
        pytest.param({"morphs": {"a": {"positions": [0, 1], "values": [1]}}}, id="length-mismatch"),
        pytest.param({"morphs": {"a": {"positions": "01", "values": [1, 2]}}}, id="positions-string"),
        pytest.param({"morphs": {"a": {"references": {"position": 0}}}}, id="references-mapping"),
        pytest.param({"morphs": {"a": {"references": [3, 4]}}}, id="reference-not-mapping"),
        pytest.param({"morphs": {"a": {"positions": [0, True], "values": [1, 2]}}}, id="bool-position"),
        pytest.param({"morphs": {"a": {"positions": [0, 1], "values": [1, ".nan"]}}}, id="nan-value"),
        pytest.param({"morphs": {"a": {"positions": [0, 1], "values": [1, 2], "mode": "spline"}}}, id="bad-mode"),
    ],
)
def test_invalid_definitions_raise_configuration_error(config) -> None:
    with pytest.raises(ConfigurationError):
        parse_morph_definitions(config)


def test_definition_errors_name_the_morph() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        parse_morph_definitions({"morphs": {"broken": {"positions": [0, "x"], "values": [1, 2]}}})

    assert excinfo.value.context["morph"] == "broken"
    assert excinfo.value.context["field"] == "positions[1]"


def test_invalid_reference_layout_fails_when_built() -> None:
    definitions = parse_morph_definitions(
        {"morphs": {"flat": {"positions": [0, 0], "values": [1, 2]}}}
    )

    with pytest.raises(ConfigurationError):
        definitions["flat"].build()


def test_load_definitions_from_file(tmp_path: Path) -> None:
    path = write_definitions(
        tmp_path,
        """
        morphs:
          ramp:
            mode: NonLinear
            query: 1.5
            references:
              - {position: 0.0, value: 0.0}
              - {position: 1.0, value: 1.0}
              - {position: 2.0, value: 4.0}
        """,
    )

    definitions = load_morph_definitions(path)
    morph = definitions["ramp"].build()

    assert morph.evaluate() == pytest.approx(2.25)


def test_missing_definitions_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_morph_definitions(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "contents",
    [
        pytest.param("morphs: [unclosed\n", id="invalid-yaml"),
        pytest.param("- just\n- a list\n", id="not-a-mapping"),
    ],
)
def test_malformed_definitions_file_is_a_configuration_error(tmp_path: Path, contents: str) -> None:
    path = write_definitions(tmp_path, contents)

    with pytest.raises(ConfigurationError) as excinfo:
        load_morph_definitions(path)

    assert excinfo.value.context["source"] == str(path)


def test_empty_definitions_file_yields_no_morphs(tmp_path: Path) -> None:
    path = write_definitions(tmp_path, "")

    assert load_morph_definitions(path) == {}


def test_failed_build_leaves_shared_graph_untouched() -> None:
    graph = build_graph(load_morph_definitions().values())
    size = len(graph)
    broken = parse_morph_definitions(
        {"morphs": {"retry": {"positions": [0, 0], "values": [1, 2]}}}
    )["retry"]

    with pytest.raises(ConfigurationError):
        broken.build(graph)

    assert len(graph) == size
    assert "retry.query" not in graph

    fixed = parse_morph_definitions(
        {"morphs": {"retry": {"positions": [0, 1], "values": [1, 2], "query": 0.5}}}
    )["retry"]
    assert fixed.build(graph).evaluate() == pytest.approx(1.5)
    assert len(graph) == size + 3
