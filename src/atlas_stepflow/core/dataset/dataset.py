"""
Handle tabular do Atlas StepFlow.

Este módulo define o `Dataset`, o handle opaco que Steps produzem e
consomem, e a `Row`, uma linha materializada alinhada ao schema.

O Engine e os Steps dependem apenas do contrato mínimo do handle:
    - introspecção de schema (`schema`)
    - filtro por igualdade (`where`)
    - contagem e materialização integral (`count`, `collect`)
    - agrupamento conjunto por chave (`cogroup`)

A implementação de referência usa um `pandas.DataFrame` como
armazenamento. Colunas do tipo `ArrayType` guardam listas de `Row`.

Decisões arquiteturais:
    - O schema é declarado e carregado junto com os dados
    - Nenhuma operação muta o DataFrame interno; filtros devolvem novos Datasets
    - `from_rows` usa dtypes pandas anuláveis derivados do schema
      (LONG/INTEGER → Int64, DOUBLE → Float64, BOOLEAN → boolean)
    - `collect` converte escalares em tipos Python nativos e nulos em `None`

Limites explícitos:
    - Não define armazenamento físico nem particionamento
    - Não implementa leitura de fontes externas
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .schema import DataType, FieldType, Schema, infer_schema


class Row(tuple):
    """Tupla de valores alinhada a um Schema."""

    schema: Schema

    def __new__(cls, values: Iterable[Any], schema: Schema) -> "Row":
        row = super().__new__(cls, tuple(values))
        row.schema = schema
        return row

    def get(self, name: str) -> Any:
        return self[self.schema.field_index(name)]

    def as_dict(self) -> Dict[str, Any]:
        return {name: _plain(value) for name, value in zip(self.schema.names, self)}

    def __repr__(self) -> str:
        return f"Row({', '.join(f'{k}={v!r}' for k, v in zip(self.schema.names, self))})"


def _plain(value: Any) -> Any:
    if isinstance(value, Row):
        return value.as_dict()
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


# STRING e ArrayType permanecem object
_PANDAS_DTYPES: Dict[FieldType, str] = {
    DataType.INTEGER: "Int64",
    DataType.LONG: "Int64",
    DataType.DOUBLE: "Float64",
    DataType.BOOLEAN: "boolean",
}


def _column_dtype(dtype: FieldType) -> Any:
    return _PANDAS_DTYPES.get(dtype, object)


def _none_if_missing(value: Any) -> Any:
    if value is None or value is pd.NA:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


class Dataset:
    """Dataset tabular imutável com schema explícito."""

    def __init__(self, frame: pd.DataFrame, schema: Schema):
        if list(frame.columns) != schema.names:
            raise ValueError(
                f"DataFrame columns {list(frame.columns)} do not match schema {schema.names}"
            )
        self._frame = frame.reset_index(drop=True)
        self._schema = schema

    # -----------------------------
    # Construção
    # -----------------------------
    @classmethod
    def from_rows(cls, schema: Schema, rows: Iterable[Sequence[Any]]) -> "Dataset":
        data = [tuple(r) for r in rows]
        for r in data:
            if len(r) != len(schema):
                raise ValueError(f"Row {r!r} does not have {len(schema)} values")
        columns = {
            field.name: pd.Series([r[i] for r in data], dtype=_column_dtype(field.dtype))
            for i, field in enumerate(schema)
        }
        frame = pd.DataFrame(columns, index=pd.RangeIndex(len(data)))
        return cls(frame, schema)

    @classmethod
    def from_records(cls, schema: Schema, records: Iterable[Mapping[str, Any]]) -> "Dataset":
        return cls.from_rows(schema, ([rec.get(name) for name in schema.names] for rec in records))

    @classmethod
    def from_frame(cls, frame: pd.DataFrame, schema: Optional[Schema] = None) -> "Dataset":
        return cls(frame.copy(), schema if schema is not None else infer_schema(frame))

    # -----------------------------
    # Introspecção
    # -----------------------------
    @property
    def schema(self) -> Schema:
        return self._schema

    def count(self) -> int:
        return int(self._frame.shape[0])

    def __len__(self) -> int:
        return self.count()

    def __repr__(self) -> str:
        return f"Dataset(schema={self._schema}, rows={self.count()})"

    # -----------------------------
    # Operações
    # -----------------------------
    def where(self, column: str, value: Any) -> "Dataset":
        """Filtra linhas cuja coluna `column` é igual a `value`."""
        if not self._schema.has_field(column):
            raise KeyError(column)
        # comparações com nulos produzem NA; linhas nulas nunca casam
        mask = (self._frame[column] == value).fillna(False).astype(bool)
        return Dataset(self._frame.loc[mask], self._schema)

    def collect(self) -> List[Row]:
        """Materializa todas as linhas, na ordem do dataset."""
        plain = self._frame.astype(object)
        return [
            Row((_none_if_missing(v) for v in values), self._schema)
            for values in plain.itertuples(index=False, name=None)
        ]

    def key_tuples(self, field_names: Sequence[str]) -> List[Tuple[Any, ...]]:
        """
        Tupla ordenada dos valores de `field_names` para cada linha.

        Valores ausentes (None, NaN, pd.NA) são normalizados para `None`,
        de modo que chaves nulas são iguais entre si.
        """
        missing = [f for f in field_names if not self._schema.has_field(f)]
        if missing:
            raise KeyError(missing[0])
        keys = self._frame[list(field_names)].astype(object)
        return [
            tuple(_none_if_missing(v) for v in values)
            for values in keys.itertuples(index=False, name=None)
        ]

    def to_frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def to_records(self) -> List[Dict[str, Any]]:
        return [row.as_dict() for row in self.collect()]


def cogroup(
    left: Dataset,
    right: Dataset,
    key_fields: Sequence[str],
) -> List[Tuple[Tuple[Any, ...], List[Row], List[Row]]]:
    """
    Agrupa as linhas de dois datasets pela mesma chave (equi-join por cogroup).

    Retorna uma entrada por chave distinta presente em qualquer um dos lados,
    na ordem da primeira aparição (primeiro `left`, depois `right`). Cada
    entrada contém as linhas de cada lado para a chave, na ordem original.
    """
    groups: Dict[Tuple[Any, ...], Tuple[List[Row], List[Row]]] = {}

    for key, row in zip(left.key_tuples(key_fields), left.collect()):
        groups.setdefault(key, ([], []))[0].append(row)

    for key, row in zip(right.key_tuples(key_fields), right.collect()):
        groups.setdefault(key, ([], []))[1].append(row)

    return [(key, lrows, rrows) for key, (lrows, rrows) in groups.items()]
