"""
Contrato de BatchInput do Atlas StepFlow.

Inputs batch leem um dataset de uma fonte estática externa. Conectores
concretos ficam fora do framework: o chamador os registra na factory de
Steps (`build_steps(..., inputs={...})`) sob um nome de tipo.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from atlas_stepflow.core.dataset import Dataset


@runtime_checkable
class BatchInput(Protocol):
    def configure(self, config: Mapping[str, Any]) -> None:
        ...

    def read(self) -> Dataset:
        """Lê os dados da fonte externa."""
        ...
