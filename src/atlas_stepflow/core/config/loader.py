"""
Loader canônico de configuração de pipelines do Atlas StepFlow.

Este módulo é responsável por carregar, validar estruturalmente e resolver
a configuração efetiva de um pipeline. Uma configuração típica declara o
grafo de Steps e as políticas do Engine:

    engine:
      max_workers: 2
    steps:
      accounts:
        input:
          type: static
      orders:
        input:
          type: static
      flags:
        input:
          type: static
      route:
        type: decision
        dependencies: [flags]
        method: step_by_key
        step: flags
        key: nest_accounts
        if-true-steps: [nested]
      nested:
        dependencies: [route, accounts, orders]
        deriver:
          type: nest
          nest.into: accounts
          nest.from: orders
          key.field.names: [account_id]
          nested.field.name: orders

A configuração é resolvida a partir de:
    - um arquivo de defaults (obrigatório)
    - um arquivo local de overrides (opcional)

Invariantes:
    - O arquivo de defaults é obrigatório
    - O resultado é sempre um dicionário puro (`dict`)
    - Overrides nunca mutam os defaults
    - As seções `steps` e `engine`, quando presentes, são dicionários

Limites explícitos:
    - Não valida propriedades de Steps (responsabilidade dos próprios Steps)
    - Não constrói Steps nem executa pipeline
"""

from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSectionTypeError,
    UnsupportedConfigFormatError,
)


# seções reservadas; quando presentes, precisam ser dicionários
PIPELINE_SECTIONS = ("engine", "steps")


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)

    Arquivos vazios são interpretados como dicionários vazios.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def _check_sections(config: Dict[str, Any]) -> None:
    for section in PIPELINE_SECTIONS:
        value = config.get(section)
        if value is not None and not isinstance(value, dict):
            raise InvalidSectionTypeError(
                f"Seção '{section}' deve ser dict, recebido: {type(value).__name__}"
            )


def load_config(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva do pipeline.

    Política de resolução:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional (ignorado quando não existe)
        - Quando presente, o local sempre tem prioridade sobre defaults
        - A resolução utiliza `deep_merge` com política determinística

    Args:
        defaults_path (str): Caminho para o arquivo de configuração base.
        local_path (Optional[str]): Caminho opcional para overrides locais.

    Returns:
        Dict[str, Any]: Configuração final resolvida do pipeline.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        InvalidSectionTypeError: Se `steps` ou `engine` não forem dicionários.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """

    defaults = _load_file(Path(defaults_path))

    effective = defaults

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            local = _load_file(local_file)
            effective = deep_merge(defaults, local)

    _check_sections(effective)

    return effective
