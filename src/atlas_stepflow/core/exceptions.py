"""
Atlas StepFlow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do Atlas StepFlow.

Taxonomia:
- StepConfigError   → propriedade ausente ou inválida (fatal na construção)
- StepReferenceError → Step ou dependência nomeada inexistente (fatal na avaliação)
- ContractViolation → dataset com formato, tipo ou cardinalidade inválidos,
                      ou Step resolvido que não produz dados (fatal na avaliação)

Regras:
- Cada classe carrega um `code` estável do catálogo em `core.errors`.
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Nenhuma exceção é recuperada internamente: todas abortam o run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from atlas_stepflow.core import errors


class ErrorKind(str, Enum):
    """Família de erro, usada para relatórios e para o mapeamento no Engine."""
    CONFIG = "config"
    REFERENCE = "reference"
    CONTRACT = "contract"


@dataclass(frozen=True)
class AtlasException(Exception):
    """Base class para exceções internas do Atlas.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e nomear a propriedade ou o Step ofensor
    """

    kind: ClassVar[ErrorKind]
    code: ClassVar[str]

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> errors.AtlasErrorPayload:
        return errors.AtlasErrorPayload(
            type=self.code,
            message=self.message,
            details={"kind": self.kind.value, **self.details},
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StepConfigError(AtlasException):
    """Configuração de Step inválida."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFIG
    code: ClassVar[str] = errors.CONFIG_INVALID_PROPERTY


@dataclass(frozen=True)
class MissingPropertyError(StepConfigError):
    """Propriedade obrigatória ausente."""

    code: ClassVar[str] = errors.CONFIG_MISSING_PROPERTY


@dataclass(frozen=True)
class InvalidPropertyError(StepConfigError):
    """Propriedade presente, mas com tipo ou valor não suportado."""


# ---------------------------------------------------------------------------
# Referências
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StepReferenceError(AtlasException):
    """Referência nomeada que não pode ser resolvida."""

    kind: ClassVar[ErrorKind] = ErrorKind.REFERENCE
    code: ClassVar[str] = errors.STEP_NOT_FOUND


@dataclass(frozen=True)
class StepNotFoundError(StepReferenceError):
    """Nenhum Step com o nome informado existe no conjunto atual."""


@dataclass(frozen=True)
class DependencyNotFoundError(StepReferenceError):
    """Dependência nomeada ausente no mapa de datasets recebido."""

    code: ClassVar[str] = errors.DEPENDENCY_NOT_FOUND


# ---------------------------------------------------------------------------
# Contrato de dados
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContractViolation(AtlasException):
    """Dataset ou Step viola o contrato exigido pelo consumidor."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONTRACT
    code: ClassVar[str] = errors.DATASET_INVALID_SHAPE


@dataclass(frozen=True)
class NotADataStepError(ContractViolation):
    """Step resolvido não produz dataset."""

    code: ClassVar[str] = errors.STEP_NOT_DATA_PRODUCING


@dataclass(frozen=True)
class InvalidDatasetShapeError(ContractViolation):
    """Quantidade ou tipo de colunas incompatível."""


@dataclass(frozen=True)
class InvalidRowCountError(ContractViolation):
    """Quantidade de linhas incompatível."""

    code: ClassVar[str] = errors.DATASET_INVALID_ROW_COUNT


@dataclass(frozen=True)
class DataNotAvailableError(ContractViolation):
    """DataStep consultado antes de computar seu dataset."""

    code: ClassVar[str] = errors.DATASET_NOT_AVAILABLE
