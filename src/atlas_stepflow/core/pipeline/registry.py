"""
Registro estrutural de Steps do pipeline.

Este módulo define o `StepRegistry`, responsável por registrar Steps
construídos a partir da configuração e validar a integridade estrutural
do conjunto antes de qualquer planejamento ou execução.

Responsabilidades do módulo:
    - Validar unicidade de `step.name`
    - Preservar ordem de registro dos Steps
    - Expor acesso controlado aos Steps registrados

Invariantes:
    - Cada Step registrado possui um nome único
    - A lista de Steps reflete exatamente a ordem de registro

Limites explícitos:
    - Não planeja execução (não é DAG planner)
    - Não resolve dependências
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .step import Step


class DuplicateStepNameError(ValueError):
    """
    Exceção levantada quando dois Steps possuem o mesmo nome.

    Decisões arquiteturais:
        - Nomes de Step são a identidade do nó no grafo
        - A duplicidade é tratada como erro fatal de configuração
    """


@dataclass
class StepRegistry:
    """Registro canônico de Steps para validação estrutural pré-execução."""

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, step: Step) -> None:
        name = getattr(step, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("step.name must be a non-empty string")

        if name in self._steps:
            raise DuplicateStepNameError(f"Duplicate step name: {name}")

        self._steps[name] = step
        self._order.append(name)

    def get(self, name: str) -> Step:
        return self._steps[name]

    def list(self) -> List[Step]:
        return [self._steps[name] for name in self._order]
