"""Deriver canônico: nest (v1).

Aninha as linhas de um dataset (`nest.from`) dentro das linhas de outro
(`nest.into`) que compartilham a mesma chave.

Config esperada (exemplo):
deriver:
  type: nest
  nest.into: accounts
  nest.from: orders
  key.field.names: [account_id]
  nested.field.name: orders

Comportamento:
- A chave de cada linha é a tupla ordenada dos valores de `key.field.names`.
- As linhas dos dois datasets são agrupadas por chave (cogroup).
- Cada chave presente em `into` gera exatamente uma linha de saída: todas as
  colunas da linha `into` seguidas de uma coluna com a lista das linhas
  `from` da mesma chave (lista vazia quando não há correspondência).
- Espera-se no máximo uma linha `into` por chave; havendo mais de uma,
  a primeira encontrada é usada e as demais são ignoradas.
- Chaves presentes apenas em `from` não geram linha de saída.

Schema de saída = schema de `into` + `array<schema de from>` com o nome
configurado em `nested.field.name`.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

from atlas_stepflow.core.config.properties import (
    assert_properties,
    get_string,
    get_string_list,
)
from atlas_stepflow.core.dataset import ArrayType, Dataset, cogroup
from atlas_stepflow.core.exceptions import (
    DependencyNotFoundError,
    InvalidDatasetShapeError,
    InvalidPropertyError,
)


NEST_INTO_CONFIG_NAME = "nest.into"
NEST_FROM_CONFIG_NAME = "nest.from"
KEY_FIELD_NAMES_CONFIG_NAME = "key.field.names"
NESTED_FIELD_NAME_CONFIG_NAME = "nested.field.name"

_OWNER = "Nest deriver"


class NestDeriver:
    """Agrupa linhas relacionadas por chave em uma coluna aninhada."""

    def __init__(self) -> None:
        self.into_name: Optional[str] = None
        self.from_name: Optional[str] = None
        self.key_field_names: List[str] = []
        self.nested_field_name: Optional[str] = None

    def configure(self, config: Mapping[str, Any]) -> None:
        assert_properties(
            config,
            [
                NEST_INTO_CONFIG_NAME,
                NEST_FROM_CONFIG_NAME,
                KEY_FIELD_NAMES_CONFIG_NAME,
                NESTED_FIELD_NAME_CONFIG_NAME,
            ],
            owner=_OWNER,
        )

        self.into_name = get_string(config, NEST_INTO_CONFIG_NAME, owner=_OWNER)
        self.from_name = get_string(config, NEST_FROM_CONFIG_NAME, owner=_OWNER)
        self.key_field_names = get_string_list(config, KEY_FIELD_NAMES_CONFIG_NAME, owner=_OWNER)
        self.nested_field_name = get_string(config, NESTED_FIELD_NAME_CONFIG_NAME, owner=_OWNER)

        if not self.key_field_names:
            raise InvalidPropertyError(
                f"{_OWNER} property '{KEY_FIELD_NAMES_CONFIG_NAME}' must not be empty",
                details={"owner": _OWNER, "property": KEY_FIELD_NAMES_CONFIG_NAME},
            )

    def derive(self, dependencies: Mapping[str, Dataset]) -> Dataset:
        into, from_ = self._resolve(dependencies)

        for side, dataset in (("nest-into", into), ("nest-from", from_)):
            missing = [f for f in self.key_field_names if not dataset.schema.has_field(f)]
            if missing:
                raise InvalidDatasetShapeError(
                    f"Nest deriver {side} dependency is missing key field '{missing[0]}'",
                    details={"dependency": side, "missing": missing},
                )

        nested_schema = into.schema.add(self.nested_field_name, ArrayType(from_.schema))

        rows: List[Tuple[Any, ...]] = []
        for _key, into_rows, from_rows in cogroup(into, from_, self.key_field_names):
            if not into_rows:
                continue
            # só deve existir uma linha 'into' por chave
            into_row = into_rows[0]
            rows.append(tuple(into_row) + (list(from_rows),))

        return Dataset.from_rows(nested_schema, rows)

    def _resolve(self, dependencies: Mapping[str, Dataset]) -> Tuple[Dataset, Dataset]:
        if self.into_name not in dependencies:
            raise DependencyNotFoundError(
                f"Nest deriver points to non-existent nest-into dependency: {self.into_name}",
                details={"property": NEST_INTO_CONFIG_NAME, "dependency": self.into_name},
            )
        if self.from_name not in dependencies:
            raise DependencyNotFoundError(
                f"Nest deriver points to non-existent nest-from dependency: {self.from_name}",
                details={"property": NEST_FROM_CONFIG_NAME, "dependency": self.from_name},
            )
        return dependencies[self.into_name], dependencies[self.from_name]
