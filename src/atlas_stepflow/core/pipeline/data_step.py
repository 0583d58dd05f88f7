"""
DataStep: variante de Step que produz um dataset.

O dataset é produzido por uma transformação plugável:
    - BatchInput → `read()` (Step de origem, StepKind.INPUT)
    - Deriver    → `derive(dependencies)` (StepKind.DERIVE)

O resultado é computado no máximo uma vez e mantido em cache até o fim da
run (`release`). Enquanto não computado, `get_data` falha com
`DataNotAvailableError`.
"""

from __future__ import annotations

from threading import Lock
from typing import Any, Mapping, Optional, Union

from atlas_stepflow.core.dataset import Dataset
from atlas_stepflow.core.exceptions import ContractViolation, DataNotAvailableError, InvalidPropertyError
from atlas_stepflow.derive.base import Deriver
from atlas_stepflow.input.base import BatchInput

from .step import Step
from .types import StepKind


Transform = Union[BatchInput, Deriver]


class DataStep(Step):
    """Step que materializa um dataset via BatchInput ou Deriver."""

    def __init__(
        self,
        name: str,
        config: Optional[Mapping[str, Any]] = None,
        *,
        transform: Transform,
    ):
        super().__init__(name, config)

        if isinstance(transform, Deriver):
            self.kind = StepKind.DERIVE
        elif isinstance(transform, BatchInput):
            self.kind = StepKind.INPUT
        else:
            raise InvalidPropertyError(
                f"Data step '{name}' transform must be a BatchInput or a Deriver, "
                f"got {type(transform).__name__}",
                details={"step": name},
            )

        self._transform = transform
        self._data: Optional[Dataset] = None
        self._lock = Lock()

    @property
    def transform(self) -> Transform:
        return self._transform

    @property
    def has_data(self) -> bool:
        return self._data is not None

    def compute(self, dependencies: Mapping[str, Dataset]) -> Dataset:
        """Computa (uma única vez) e devolve o dataset do Step."""
        with self._lock:
            if self._data is None:
                if self.kind is StepKind.INPUT:
                    data = self._transform.read()  # type: ignore[union-attr]
                else:
                    data = self._transform.derive(dict(dependencies))  # type: ignore[union-attr]

                if not isinstance(data, Dataset):
                    raise ContractViolation(
                        f"Data step '{self.name}' transform returned {type(data).__name__}, expected Dataset",
                        details={"step": self.name},
                    )
                self._data = data
            return self._data

    def get_data(self) -> Dataset:
        if self._data is None:
            raise DataNotAvailableError(
                f"Data step '{self.name}' has not computed its dataset",
                details={"step": self.name},
            )
        return self._data

    def release(self) -> None:
        with self._lock:
            self._data = None

    def copy(self) -> "DataStep":
        # a transformação é configurada uma vez e compartilhada entre cópias
        return DataStep(self.name, self._config, transform=self._transform)
