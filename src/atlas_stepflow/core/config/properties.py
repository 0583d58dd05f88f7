"""
Leitura tipada de propriedades de Steps (property bag).

Cada Step recebe sua própria seção da configuração como um dicionário de
propriedades. Este módulo oferece acessores que:
    - aceitam chaves pontuadas tanto na forma plana (`"nest.into": a`)
      quanto na forma aninhada (`nest: {into: a}`)
    - validam o tipo do valor lido
    - sinalizam ausência ou tipo inválido com exceções tipadas
      (`MissingPropertyError`, `InvalidPropertyError`) que nomeiam a
      propriedade e o Step dono

A checagem de presença é exposta também como valor (`missing_properties`),
para que construtores validem todas as chaves antes de ler qualquer uma.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Sequence

from atlas_stepflow.core.exceptions import InvalidPropertyError, MissingPropertyError


_MISSING = object()

_TRUE_STRINGS = {"true", "yes", "on"}
_FALSE_STRINGS = {"false", "no", "off"}


def _lookup(config: Mapping[str, Any], key: str) -> Any:
    if key in config:
        return config[key]

    node: Any = config
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return _MISSING
        node = node[part]
    return node


def has_property(config: Mapping[str, Any], key: str) -> bool:
    value = _lookup(config, key)
    return value is not _MISSING and value is not None


def missing_properties(config: Mapping[str, Any], keys: Sequence[str]) -> List[str]:
    """Retorna as chaves ausentes, na ordem em que foram pedidas."""
    return [k for k in keys if not has_property(config, k)]


def assert_properties(config: Mapping[str, Any], keys: Sequence[str], *, owner: str) -> None:
    missing = missing_properties(config, keys)
    if missing:
        raise MissingPropertyError(
            f"{owner} requires '{missing[0]}' property",
            details={"owner": owner, "property": missing[0], "missing": missing},
        )


def _require(config: Mapping[str, Any], key: str, owner: str) -> Any:
    assert_properties(config, [key], owner=owner)
    return _lookup(config, key)


def _invalid(owner: str, key: str, expected: str, value: Any) -> InvalidPropertyError:
    return InvalidPropertyError(
        f"{owner} property '{key}' must be {expected}, got {type(value).__name__}",
        details={"owner": owner, "property": key, "expected": expected},
    )


def get_string(config: Mapping[str, Any], key: str, *, owner: str) -> str:
    value = _require(config, key, owner)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise _invalid(owner, key, "a string", value)
    return str(value)


def get_string_list(
    config: Mapping[str, Any],
    key: str,
    *,
    owner: str,
    default: Any = _MISSING,
) -> List[str]:
    if default is not _MISSING and not has_property(config, key):
        return list(default)

    value = _require(config, key, owner)
    if not isinstance(value, (list, tuple)):
        raise _invalid(owner, key, "a list of strings", value)

    out: List[str] = []
    for item in value:
        if not isinstance(item, str):
            raise _invalid(owner, key, "a list of strings", item)
        out.append(item)
    return out


def get_bool(config: Mapping[str, Any], key: str, *, owner: str) -> bool:
    value = _require(config, key, owner)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise _invalid(owner, key, "a boolean", value)


def get_int(config: Mapping[str, Any], key: str, *, owner: str, default: Any = _MISSING) -> int:
    if default is not _MISSING and not has_property(config, key):
        return int(default)

    value = _require(config, key, owner)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _invalid(owner, key, "an integer", value)
    return value


def get_mapping(config: Mapping[str, Any], key: str, *, owner: str) -> Mapping[str, Any]:
    value = _require(config, key, owner)
    if not isinstance(value, Mapping):
        raise _invalid(owner, key, "a mapping", value)
    return value
