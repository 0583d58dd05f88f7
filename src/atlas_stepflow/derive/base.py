"""
Contrato de Deriver do Atlas StepFlow.

Um Deriver é a transformação plugável de um DataStep: uma função pura que
mapeia datasets nomeados (as dependências do Step, já materializadas) em
um único dataset de saída.

Contrato:
    - `configure(config)` recebe a seção `deriver` do Step e valida
      imediatamente as propriedades obrigatórias (StepConfigError)
    - `derive(dependencies)` recebe `{nome da dependência: Dataset}` e
      devolve um novo Dataset, sem mutar as entradas

Dependências que não produzem dados (ex.: DecisionSteps) não aparecem no
mapa recebido.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from atlas_stepflow.core.dataset import Dataset


@runtime_checkable
class Deriver(Protocol):
    def configure(self, config: Mapping[str, Any]) -> None:
        ...

    def derive(self, dependencies: Mapping[str, Dataset]) -> Dataset:
        ...
