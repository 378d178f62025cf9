import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

import pytest

from csvexport.config.dialect import CsvDialect
from csvexport.domain.rules import DerivedValue, Rules
from csvexport.errors import CsvSerializationError, DuplicateLabelError
from csvexport.io.materialize import (
    build_label_index,
    generate,
    printable,
    resolve_cell,
    resolve_value,
)


def test_generate_scenario_with_static_and_formatter(people_rules) -> None:
    rows = [{"first_name": "Ada", "active": True}]
    field_map = {"first_name": "First Name", "active": "Status"}
    headers = ["First Name", "Country", "Status"]

    out = generate(rows, field_map, headers, people_rules)

    assert out == '"First Name","Country","Status"\n"Ada","USA","Active"'


def test_generate_without_rows_emits_header_and_separator() -> None:
    out = generate([], {"a": "A"}, ["A", "B"])
    assert out == '"A","B"\n'


def test_generate_keeps_header_order_and_row_order() -> None:
    rows = [{"a": 1, "b": 2}, {"a": 3, "b": 4}]
    out = generate(rows, {"a": "A", "b": "B"}, ["B", "A"])
    assert out.split("\n") == ['"B","A"', '"2","1"', '"4","3"']


def test_generate_has_no_trailing_separator() -> None:
    out = generate([{"a": "x"}, {"a": "y"}], {"a": "A"}, ["A"])
    assert not out.endswith("\n")


def test_header_cells_are_escaped() -> None:
    out = generate([], {}, ['Say "hi"'])
    assert out == '"Say ""hi"""\n'


def test_unmapped_header_without_rule_is_empty() -> None:
    out = generate([{"a": 1}], {"a": "A"}, ["A", "Unknown"])
    assert out.split("\n")[1] == '"1",""'


@pytest.mark.parametrize("value, expected", [(None, '""'), (0, '"0"'), (False, '"false"'), ("", '""')])
def test_field_value_present_skips_static_fallback(value, expected) -> None:
    calls = []

    def compute(row):
        calls.append(row)
        return "fallback"

    rules = Rules.build(static_by_header={"A": compute})
    cell = resolve_cell({"a": value}, "A", {"A": "a"}, rules)

    assert cell == expected
    assert calls == []


def test_missing_field_key_uses_static_fallback() -> None:
    rules = Rules.build(static_by_header={"A": "fallback"})
    assert resolve_value({}, "A", {"A": "a"}, rules) == "fallback"


def test_derived_static_receives_row() -> None:
    rules = Rules(static_by_header={"Full": DerivedValue(lambda r: f"{r['f']} {r['l']}")})
    rows = [{"f": "Ada", "l": "Lovelace"}]
    out = generate(rows, {}, ["Full"], rules)
    assert out.split("\n")[1] == '"Ada Lovelace"'


def test_static_fallback_returning_none_defaults_to_empty() -> None:
    rules = Rules.build(static_by_header={"A": None})
    assert resolve_value({}, "A", {}, rules) == ""


def test_formatter_receives_resolved_value_and_row() -> None:
    seen = []

    def fmt(value, row):
        seen.append((value, row))
        return {"wrapped": value}

    row = {"a": None}
    rules = Rules.build(format_by_header={"A": fmt})
    cell = resolve_cell(row, "A", {"A": "a"}, rules)

    assert seen == [("", row)]
    assert cell == '"{""wrapped"":""""}"'


def test_formatter_output_supersedes_static_value() -> None:
    rules = Rules.build(
        static_by_header={"C": "USA"},
        format_by_header={"C": lambda v, _r: v.lower()},
    )
    assert resolve_cell({}, "C", {}, rules) == '"usa"'


def test_objects_and_arrays_are_json_serialized() -> None:
    rows = [{"tags": ["a", "b"], "meta": {"k": 1, "name": "Zoë"}}]
    out = generate(rows, {"tags": "Tags", "meta": "Meta"}, ["Tags", "Meta"])
    assert out.split("\n")[1] == '"[""a"",""b""]","{""k"":1,""name"":""Zoë""}"'


def test_dataclass_values_are_json_serialized() -> None:
    @dataclass
    class Point:
        x: int
        y: int

    assert printable(Point(1, 2)) == '{"x":1,"y":2}'


def test_primitives_pass_through_printable() -> None:
    assert printable(3) == 3
    assert printable(1.25) == 1.25
    assert printable(True) is True
    assert printable("s") == "s"
    assert printable(date(2024, 1, 2)) == date(2024, 1, 2)


def test_nested_dates_are_json_encoded_as_iso_strings() -> None:
    rows = [{"meta": {"created": date(2024, 1, 2), "seen": [datetime(2024, 1, 2, 9, 30)]}}]
    out = generate(rows, {"meta": "Meta"}, ["Meta"])
    assert out.split("\n")[1] == '"{""created"":""2024-01-02"",""seen"":[""2024-01-02T09:30:00""]}"'


def test_nested_decimals_are_json_encoded_as_strings() -> None:
    assert printable([Decimal("1.5"), 2]) == '["1.5",2]'


def test_unserializable_value_fails_fast() -> None:
    rows = [{"a": "ok"}, {"a": {"bad": object()}}]
    with pytest.raises(CsvSerializationError) as excinfo:
        generate(rows, {"a": "A"}, ["A"])
    assert excinfo.value.label == "A"
    assert excinfo.value.row_index == 1


def test_nan_inside_container_fails_fast() -> None:
    with pytest.raises(CsvSerializationError):
        generate([{"a": [float("nan")]}], {"a": "A"}, ["A"])


def test_derived_static_errors_propagate_unchanged() -> None:
    def boom(_row):
        raise KeyError("missing")

    rules = Rules.build(static_by_header={"A": boom})
    with pytest.raises(KeyError):
        generate([{}], {}, ["A"], rules)


def test_label_index_last_mapping_wins(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="csvexport.io.materialize"):
        index = build_label_index({"first": "Name", "second": "Name"})
    assert index == {"Name": "second"}
    assert any("keeping 'second'" in record.getMessage() for record in caplog.records)


def test_label_index_rejects_duplicates_when_configured() -> None:
    with pytest.raises(DuplicateLabelError, match="'Name'"):
        build_label_index({"first": "Name", "second": "Name"}, on_duplicate_label="error")


def test_label_index_rejects_unknown_policy() -> None:
    with pytest.raises(ValueError):
        build_label_index({}, on_duplicate_label="first")


def test_generate_uses_dialect() -> None:
    dialect = CsvDialect(delimiter=";", line_separator="\r\n")
    out = generate([{"a": 1, "b": 2}], {"a": "A", "b": "B"}, ["A", "B"], dialect=dialect)
    assert out == '"A";"B"\r\n"1";"2"'


def test_generate_does_not_mutate_rows() -> None:
    row = {"a": None}
    rules = Rules.build(static_by_header={"B": "x"}, format_by_header={"A": lambda v, r: "y"})
    generate([row], {"a": "A"}, ["A", "B"], rules)
    assert row == {"a": None}


def test_generate_accepts_rules_built_from_plain_values() -> None:
    rules = Rules(
        static_by_header={"Country": "USA"},
        format_by_header={"Status": lambda v, _r: "Active" if v else "Inactive"},
    )
    out = generate([{"active": False}], {"active": "Status"}, ["Country", "Status"], rules)
    assert out.split("\n")[1] == '"USA","Inactive"'
