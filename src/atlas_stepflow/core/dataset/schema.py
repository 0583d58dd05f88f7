"""
Schema tabular do Atlas StepFlow.

Este módulo define a descrição explícita de colunas de um dataset:
    - DataType  → tipos escalares canônicos
    - ArrayType → coluna que guarda uma coleção de linhas de outro schema
    - Field     → coluna nomeada e tipada
    - Schema    → sequência ordenada e imutável de Fields

O schema é declarado, não inferido a cada leitura: consumidores como o
DecisionStep validam o formato de um dataset apenas olhando o schema.

Invariantes:
    - A ordem dos Fields é a ordem das colunas das linhas
    - Nomes de Fields são únicos dentro de um Schema
    - Schemas são imutáveis; `add` devolve um novo Schema
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Sequence, Tuple, Union

import pandas as pd


class DataType(str, Enum):
    """Tipos escalares canônicos de coluna."""
    STRING = "string"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    LONG = "long"
    DOUBLE = "double"


@dataclass(frozen=True)
class ArrayType:
    """Coluna que contém uma lista de linhas do schema `element`."""

    element: "Schema"

    def __str__(self) -> str:
        return f"array<{self.element}>"


FieldType = Union[DataType, ArrayType]


@dataclass(frozen=True)
class Field:
    name: str
    dtype: FieldType
    nullable: bool = True


@dataclass(frozen=True)
class Schema:
    """Sequência ordenada de colunas nomeadas e tipadas."""

    fields: Tuple[Field, ...] = ()

    def __post_init__(self) -> None:
        names = [f.name for f in self.fields]
        if len(set(names)) != len(names):
            dupes = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"Duplicate field names in schema: {dupes}")

    @classmethod
    def of(cls, *columns: Tuple[str, FieldType]) -> "Schema":
        """Atalho: `Schema.of(("id", DataType.LONG), ("name", DataType.STRING))`."""
        return cls(tuple(Field(name, dtype) for name, dtype in columns))

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __getitem__(self, index: int) -> Field:
        return self.fields[index]

    def __str__(self) -> str:
        inner = ",".join(f"{f.name}:{f.dtype if isinstance(f.dtype, ArrayType) else f.dtype.value}" for f in self.fields)
        return f"struct<{inner}>"

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def dtypes(self) -> List[FieldType]:
        return [f.dtype for f in self.fields]

    def has_field(self, name: str) -> bool:
        return name in self.names

    def field_index(self, name: str) -> int:
        try:
            return self.names.index(name)
        except ValueError:
            raise KeyError(name) from None

    def add(self, name: str, dtype: FieldType, nullable: bool = True) -> "Schema":
        return Schema(self.fields + (Field(name, dtype, nullable),))


def infer_schema(frame: pd.DataFrame) -> Schema:
    """
    Infere um Schema a partir dos dtypes de um DataFrame.

    Regras (v1):
        - bool            → BOOLEAN
        - inteiro         → LONG
        - ponto flutuante → DOUBLE
        - string / vazio  → STRING

    Colunas com valores mistos ou aninhados não são inferidas: nesses
    casos o schema deve ser declarado explicitamente.
    """
    fields: List[Field] = []
    for column in frame.columns:
        series = frame[column]
        if pd.api.types.is_bool_dtype(series):
            dtype: FieldType = DataType.BOOLEAN
        elif pd.api.types.is_integer_dtype(series):
            dtype = DataType.LONG
        elif pd.api.types.is_float_dtype(series):
            dtype = DataType.DOUBLE
        else:
            inferred = pd.api.types.infer_dtype(series, skipna=True)
            if inferred in ("string", "empty"):
                dtype = DataType.STRING
            elif inferred == "boolean":
                dtype = DataType.BOOLEAN
            elif inferred == "integer":
                dtype = DataType.LONG
            elif inferred in ("floating", "mixed-integer-float"):
                dtype = DataType.DOUBLE
            else:
                raise ValueError(
                    f"Cannot infer type of column '{column}' ({inferred}); declare the schema explicitly"
                )
        fields.append(Field(str(column), dtype))
    return Schema(tuple(fields))


def schema_from_pairs(columns: Sequence[Sequence[str]]) -> Schema:
    """Constrói um Schema a partir de pares `[nome, tipo]` vindos de configuração."""
    fields: List[Field] = []
    for pair in columns:
        if len(pair) != 2:
            raise ValueError(f"Schema column must be [name, type], got: {list(pair)}")
        name, type_name = pair
        fields.append(Field(str(name), DataType(str(type_name).lower())))
    return Schema(tuple(fields))
