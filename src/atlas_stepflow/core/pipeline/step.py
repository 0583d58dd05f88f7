"""
Contrato canônico de Step do Atlas StepFlow.

Um Step é um nó nomeado do grafo de dependências do pipeline. Todo Step
possui:
    - identidade (`name`), imutável após a construção
    - dependências declaradas por nome (`depends_on`, propriedade `dependencies`)
    - um estado de submissão de mão única: NotSubmitted → Submitted

O conjunto de variantes é fechado:
    - DataStep     → produz um dataset por meio de uma transformação plugável
    - DecisionStep → avalia um booleano e poda o grafo (capacidade de refactor)

A capacidade de refactor não é um nível da hierarquia: ela é exposta pelo
protocolo `RefactorStep` (@runtime_checkable) e verificada pelo Engine
no momento de submeter o Step.

Invariantes:
    - `name` é único no contexto de um grafo
    - `submitted` nunca volta a False
    - `copy()` produz um Step novo, com a mesma configuração e não submetido

Limites explícitos:
    - Não decide ordem de execução (responsabilidade do Engine)
    - Não resolve dependências (ver `core.graph.utils`)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

from atlas_stepflow.core.config.properties import get_string_list
from atlas_stepflow.core.exceptions import InvalidPropertyError

from .types import StepKind


DEPENDENCIES_PROPERTY = "dependencies"


class Step(ABC):
    """
    Base comum das variantes de Step.

    A configuração recebida é a seção do Step na configuração do pipeline
    (property bag). Apenas `dependencies` é lido aqui; cada variante valida
    as próprias propriedades no construtor e falha imediatamente quando
    alguma obrigatória está ausente.
    """

    kind: StepKind

    def __init__(self, name: str, config: Optional[Mapping[str, Any]] = None):
        if not isinstance(name, str) or not name.strip():
            raise InvalidPropertyError(
                "step name must be a non-empty string",
                details={"property": "name"},
            )

        self._name = name
        self._config: Dict[str, Any] = dict(config or {})
        self._depends_on: List[str] = get_string_list(
            self._config, DEPENDENCIES_PROPERTY, owner=f"Step '{name}'", default=[]
        )
        self._submitted = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> Dict[str, Any]:
        return dict(self._config)

    @property
    def depends_on(self) -> List[str]:
        return list(self._depends_on)

    @property
    def submitted(self) -> bool:
        return self._submitted

    def set_submitted(self) -> None:
        self._submitted = True

    @abstractmethod
    def copy(self) -> "Step":
        """Novo Step com configuração idêntica e `submitted = False`."""

    def __repr__(self) -> str:
        state = "submitted" if self._submitted else "not submitted"
        return f"{type(self).__name__}({self._name!r}, {state})"


@runtime_checkable
class RefactorStep(Protocol):
    """
    Capacidade opcional de reestruturar o conjunto de Steps.

    `refactor` recebe o conjunto atual e devolve um novo conjunto
    (atualização funcional). O Engine invoca `refactor` exatamente uma vez
    por run, imediatamente antes de considerar o Step submetido e antes que
    qualquer dependente se torne elegível.
    """

    def refactor(self, steps: Sequence[Step]) -> List[Step]:
        ...
