"""
Tipos canônicos do pipeline do Atlas StepFlow.

Este módulo define as estruturas e enums que padronizam a comunicação
entre Steps, Engine e o resultado de uma run.

Componentes principais:
    - StepKind   → classificação semântica de Steps (input, derive, decision)
    - StepStatus → estados finais reportados por Step (SUCCESS, SKIPPED, FAILED)
    - StepResult → estrutura imutável de resultado por Step

Observação: `StepStatus` é o status *reportado* no resultado da run. O
estado de submissão de um Step (NotSubmitted → Submitted) vive no próprio
Step e não é representado aqui.

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepResult é imutável
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps no pipeline.

    Tipos definidos:
        - INPUT: DataStep que lê uma fonte externa (BatchInput)
        - DERIVE: DataStep que deriva um dataset de dependências (Deriver)
        - DECISION: Step que avalia um booleano e poda o grafo

    O tipo é informativo: o Engine despacha pela variante do Step,
    não pelo `kind`.
    """
    INPUT = "input"
    DERIVE = "derive"
    DECISION = "decision"


class StepStatus(str, Enum):
    """
    Estados finais possíveis de um Step em uma run.

    Estados definidos:
        - SUCCESS: dataset computado ou decisão aplicada
        - SKIPPED: Step podado por uma decisão
        - FAILED: execução interrompida por erro fatal
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável de um Step em uma run.

    Campos:
        - step_name: nome único do Step
        - kind: tipo semântico do Step
        - status: estado final
        - summary: resumo textual
        - metrics: métricas numéricas (ex.: `rows`)
        - warnings: avisos não fatais
        - payload: dados adicionais (ex.: `decision`, `pruned`, `error`)
    """
    step_name: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)
