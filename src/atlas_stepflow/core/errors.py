"""
Atlas StepFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas StepFlow.
Erros são artefatos do contrato operacional do runner, devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhuma recuperação implícita é permitida: toda falha aqui catalogada
aborta o ciclo de execução afetado.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AtlasErrorPayload:
    """
    Payload canônico de erro do Atlas StepFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, contendo a propriedade ou o Step ofensor
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Configuração (construção)
CONFIG_MISSING_PROPERTY = "CONFIG_MISSING_PROPERTY"
CONFIG_INVALID_PROPERTY = "CONFIG_INVALID_PROPERTY"

# Referências (avaliação)
STEP_NOT_FOUND = "STEP_NOT_FOUND"
DEPENDENCY_NOT_FOUND = "DEPENDENCY_NOT_FOUND"

# Contrato de dados (avaliação)
STEP_NOT_DATA_PRODUCING = "STEP_NOT_DATA_PRODUCING"
DATASET_INVALID_SHAPE = "DATASET_INVALID_SHAPE"
DATASET_INVALID_ROW_COUNT = "DATASET_INVALID_ROW_COUNT"
DATASET_NOT_AVAILABLE = "DATASET_NOT_AVAILABLE"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o event log do run para diagnosticar a falha. Nenhum retry é aplicado automaticamente.",
) -> AtlasErrorPayload:
    return AtlasErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=exc_message or "Falha inesperada durante a execução do pipeline",
        details={
            "step": step,
            "exc_type": exc_type,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a declaração dos steps antes de reexecutar.",
) -> AtlasErrorPayload:
    return AtlasErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )
