# tests/core/derive/test_nest_deriver.py
"""
Testes do deriver canônico `nest`.

Os testes asseguram que:
- cada linha `into` gera exatamente uma linha de saída
- linhas `from` da mesma chave são aninhadas na ordem original
- `into` sem correspondência gera lista vazia (nunca ausente ou nula)
- `from` sem correspondência é descartado sem erro
- propriedades obrigatórias e dependências ausentes são fatais
"""

import pytest

from atlas_stepflow.core.dataset import ArrayType, DataType, Dataset, Schema
from atlas_stepflow.core.exceptions import (
    DependencyNotFoundError,
    InvalidDatasetShapeError,
    InvalidPropertyError,
    MissingPropertyError,
)
from atlas_stepflow.derive import Deriver, NestDeriver


def _configured(**overrides):
    config = {
        "type": "nest",
        "nest.into": "people",
        "nest.from": "values",
        "key.field.names": ["id"],
        "nested.field.name": "nested",
    }
    config.update(overrides)
    deriver = NestDeriver()
    deriver.configure(config)
    return deriver


@pytest.fixture
def people():
    schema = Schema.of(("id", DataType.LONG), ("name", DataType.STRING))
    return Dataset.from_rows(schema, [(1, "x")])


@pytest.fixture
def values():
    schema = Schema.of(("id", DataType.LONG), ("v", DataType.LONG))
    return Dataset.from_rows(schema, [(1, 10), (1, 20), (2, 99)])


def test_nest_deriver_satisfies_protocol():
    assert isinstance(NestDeriver(), Deriver)


def test_nest_groups_from_rows_under_into_row(people, values):
    out = _configured().derive({"people": people, "values": values})

    assert out.to_records() == [
        {"id": 1, "name": "x", "nested": [{"id": 1, "v": 10}, {"id": 1, "v": 20}]},
    ]


def test_output_schema_appends_array_of_from_schema(people, values):
    out = _configured().derive({"people": people, "values": values})

    assert out.schema.names == ["id", "name", "nested"]
    assert out.schema.dtypes[2] == ArrayType(values.schema)


def test_into_without_matches_gets_empty_list(values):
    schema = Schema.of(("id", DataType.LONG), ("name", DataType.STRING))
    people = Dataset.from_rows(schema, [(1, "x"), (5, "lonely")])

    out = _configured().derive({"people": people, "values": values})
    rows = {r.get("id"): r for r in out.collect()}

    assert out.count() == 2
    assert rows[5].get("nested") == []


def test_duplicate_into_keys_use_first_row(values):
    schema = Schema.of(("id", DataType.LONG), ("name", DataType.STRING))
    people = Dataset.from_rows(schema, [(1, "first"), (1, "second")])

    out = _configured().derive({"people": people, "values": values})

    assert out.count() == 1
    assert out.collect()[0].get("name") == "first"


def test_null_keys_group_together():
    people = Dataset.from_rows(
        Schema.of(("id", DataType.LONG), ("name", DataType.STRING)),
        [(None, "a"), (None, "b"), (1, "c")],
    )
    values = Dataset.from_rows(
        Schema.of(("id", DataType.LONG), ("v", DataType.LONG)),
        [(None, 1), (None, 2)],
    )

    out = _configured().derive({"people": people, "values": values})
    rows = {r.get("id"): r for r in out.collect()}

    assert out.count() == 2
    assert rows[None].get("name") == "a"
    assert [r.get("v") for r in rows[None].get("nested")] == [1, 2]
    assert rows[1].get("nested") == []


def test_composite_key():
    left = Dataset.from_rows(
        Schema.of(("a", DataType.STRING), ("b", DataType.LONG)),
        [("k", 1), ("k", 2)],
    )
    right = Dataset.from_rows(
        Schema.of(("a", DataType.STRING), ("b", DataType.LONG), ("n", DataType.LONG)),
        [("k", 2, 7), ("k", 1, 8), ("k", 2, 9)],
    )

    out = _configured(**{"key.field.names": ["a", "b"]}).derive({"people": left, "values": right})

    assert [[r.get("n") for r in row.get("nested")] for row in out.collect()] == [[8], [7, 9]]


def test_dependencies_are_not_mutated(people, values):
    _configured().derive({"people": people, "values": values})

    assert people.schema.names == ["id", "name"]
    assert values.count() == 3


@pytest.mark.parametrize("missing", ["nest.into", "nest.from", "key.field.names", "nested.field.name"])
def test_missing_property_is_fatal(missing):
    config = {
        "nest.into": "people",
        "nest.from": "values",
        "key.field.names": ["id"],
        "nested.field.name": "nested",
    }
    del config[missing]

    with pytest.raises(MissingPropertyError) as exc_info:
        NestDeriver().configure(config)

    assert exc_info.value.details["property"] == missing


def test_empty_key_list_is_fatal():
    with pytest.raises(InvalidPropertyError):
        _configured(**{"key.field.names": []})


def test_nested_config_form_is_accepted(people, values):
    deriver = NestDeriver()
    deriver.configure(
        {
            "nest": {"into": "people", "from": "values"},
            "key": {"field": {"names": ["id"]}},
            "nested": {"field": {"name": "nested"}},
        }
    )

    assert deriver.derive({"people": people, "values": values}).count() == 1


def test_missing_into_dependency_is_fatal(values):
    with pytest.raises(DependencyNotFoundError) as exc_info:
        _configured().derive({"values": values})

    assert str(exc_info.value) == "Nest deriver points to non-existent nest-into dependency: people"


def test_missing_from_dependency_is_fatal(people):
    with pytest.raises(DependencyNotFoundError):
        _configured().derive({"people": people})


def test_missing_key_field_is_fatal(people):
    other = Dataset.from_rows(Schema.of(("other", DataType.LONG)), [(1,)])

    with pytest.raises(InvalidDatasetShapeError):
        _configured().derive({"people": people, "values": other})
