"""
DecisionStep: poda condicional do grafo de Steps.

O Atlas StepFlow executa decisões podando os Steps do pipeline que não
podem ser submetidos como consequência da decisão. Vários sub-grafos podem
depender de um DecisionStep, mas apenas parte deles segue adiante.

A configuração de um DecisionStep define:
    - como obter um booleano (`method`):
        - literal       → valor fixo em `result`
        - step_by_key   → linha de um DataStep (string, boolean) com a chave `key`
        - step_by_value → único valor de um DataStep (boolean) com uma linha
    - quais dependentes imediatos seguem quando a decisão é verdadeira
      (`if-true-steps`); quando falsa, seguem apenas os demais dependentes
      imediatos

Algoritmo de poda (`refactor`):
    1. D = dependentes imediatos deste Step no conjunto atual
    2. decision = avaliação do método configurado
    3. para cada s em D, s é mantido sse decision == (s.name ∈ if-true-steps);
       caso contrário s e todos os seus descendentes entram no conjunto de poda
    4. o conjunto devolvido é o atual menos o conjunto de poda, na mesma ordem
    5. o Step é marcado como submetido

Um descendente alcançável a partir de qualquer dependente podado é removido
mesmo quando um dependente mantido também o alcança.

Invariantes:
    - Propriedades obrigatórias são validadas no construtor
    - `refactor` em um Step já submetido não altera o conjunto
    - Nomes em `if-true-steps` que não são dependentes imediatos são inertes

Limites explícitos:
    - Não executa DataSteps: o Step referenciado já deve ter computado seus dados
    - Não faz retry de falhas de contrato
"""

from __future__ import annotations

from enum import Enum
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence

from atlas_stepflow.core.config.properties import (
    assert_properties,
    get_bool,
    get_string,
    get_string_list,
)
from atlas_stepflow.core.dataset import DataType, Dataset
from atlas_stepflow.core.exceptions import (
    AtlasException,
    InvalidDatasetShapeError,
    InvalidPropertyError,
    InvalidRowCountError,
)
from atlas_stepflow.core.graph.utils import all_dependents, immediate_dependents, resolve_data_step

from .step import Step
from .types import StepKind


IF_TRUE_STEP_NAMES_PROPERTY = "if-true-steps"
DECISION_METHOD_PROPERTY = "method"
LITERAL_RESULT_PROPERTY = "result"
STEP_BY_KEY_STEP_PROPERTY = "step"
STEP_BY_KEY_KEY_PROPERTY = "key"
STEP_BY_VALUE_STEP_PROPERTY = "step"


class DecisionMethod(str, Enum):
    LITERAL = "literal"
    STEP_BY_KEY = "step_by_key"
    STEP_BY_VALUE = "step_by_value"


def check_key_dataset(dataset: Dataset) -> Optional[AtlasException]:
    """Dataset de decisão por chave: exatamente (string, boolean), nessa ordem."""
    if dataset.schema.dtypes != [DataType.STRING, DataType.BOOLEAN]:
        return InvalidDatasetShapeError(
            "Decision step's key step must contain a string column and then a boolean column",
            details={"schema": str(dataset.schema)},
        )
    return None


def check_value_dataset(dataset: Dataset) -> Optional[AtlasException]:
    """Dataset de decisão por valor: uma coluna boolean e uma linha."""
    if dataset.schema.dtypes != [DataType.BOOLEAN]:
        return InvalidDatasetShapeError(
            "Decision step's value step must contain a single boolean column with a single row",
            details={"schema": str(dataset.schema)},
        )
    rows = dataset.count()
    if rows != 1:
        return InvalidRowCountError(
            "Decision step's value step must contain a single boolean column with a single row",
            details={"rows": rows},
        )
    return None


class DecisionStep(Step):
    """Step com capacidade de refactor que poda dependentes conforme um booleano."""

    kind = StepKind.DECISION

    def __init__(self, name: str, config: Optional[Mapping[str, Any]] = None):
        super().__init__(name, config)
        owner = f"Decision step '{name}'"
        cfg = self._config

        assert_properties(cfg, [IF_TRUE_STEP_NAMES_PROPERTY], owner=owner)
        self.if_true_step_names: FrozenSet[str] = frozenset(
            get_string_list(cfg, IF_TRUE_STEP_NAMES_PROPERTY, owner=owner)
        )

        assert_properties(cfg, [DECISION_METHOD_PROPERTY], owner=owner)
        raw_method = get_string(cfg, DECISION_METHOD_PROPERTY, owner=owner)
        try:
            self.method = DecisionMethod(raw_method.strip().lower())
        except ValueError:
            raise InvalidPropertyError(
                f"Unsupported decision method: {raw_method}",
                details={"owner": owner, "property": DECISION_METHOD_PROPERTY, "value": raw_method},
            ) from None

        self.literal_result: Optional[bool] = None
        self.decision_step_name: Optional[str] = None
        self.decision_key: Optional[str] = None

        if self.method is DecisionMethod.LITERAL:
            assert_properties(cfg, [LITERAL_RESULT_PROPERTY], owner=owner)
            self.literal_result = get_bool(cfg, LITERAL_RESULT_PROPERTY, owner=owner)
        elif self.method is DecisionMethod.STEP_BY_KEY:
            assert_properties(cfg, [STEP_BY_KEY_STEP_PROPERTY, STEP_BY_KEY_KEY_PROPERTY], owner=owner)
            self.decision_step_name = get_string(cfg, STEP_BY_KEY_STEP_PROPERTY, owner=owner)
            self.decision_key = get_string(cfg, STEP_BY_KEY_KEY_PROPERTY, owner=owner)
        else:
            assert_properties(cfg, [STEP_BY_VALUE_STEP_PROPERTY], owner=owner)
            self.decision_step_name = get_string(cfg, STEP_BY_VALUE_STEP_PROPERTY, owner=owner)

        # preenchidos por refactor
        self.decision: Optional[bool] = None
        self.pruned: List[str] = []

    # ------------------------------------------------------------------
    # Poda
    # ------------------------------------------------------------------
    def refactor(self, steps: Sequence[Step]) -> List[Step]:
        if self.submitted:
            return list(steps)

        decide_steps = immediate_dependents(self, steps)
        prune_names = self._prune_names(decide_steps, steps)

        remaining = [s for s in steps if s.name not in prune_names]
        self.pruned = [s.name for s in steps if s.name in prune_names]

        self.set_submitted()

        return remaining

    def _prune_names(self, decide_steps: Sequence[Step], all_steps: Sequence[Step]) -> set:
        prune_names = set()

        decision = self.evaluate(all_steps)

        for decide_step in decide_steps:
            if decision != (decide_step.name in self.if_true_step_names):
                prune_names.add(decide_step.name)
                prune_names.update(s.name for s in all_dependents(decide_step, all_steps))

        return prune_names

    # ------------------------------------------------------------------
    # Avaliação
    # ------------------------------------------------------------------
    def evaluate(self, steps: Sequence[Step]) -> bool:
        if self.method is DecisionMethod.LITERAL:
            decision = self._evaluate_literal()
        elif self.method is DecisionMethod.STEP_BY_KEY:
            decision = self._evaluate_step_by_key(steps)
        else:
            decision = self._evaluate_step_by_value(steps)

        self.decision = decision
        return decision

    def _evaluate_literal(self) -> bool:
        return bool(self.literal_result)

    def _evaluate_step_by_key(self, steps: Sequence[Step]) -> bool:
        resolved = resolve_data_step(self.decision_step_name, steps, owner="decision step's key")
        if isinstance(resolved, AtlasException):
            raise resolved

        key_dataset = resolved.get_data()
        violation = check_key_dataset(key_dataset)
        if violation is not None:
            raise violation

        key_column = key_dataset.schema.names[0]
        decision_dataset = key_dataset.where(key_column, self.decision_key)

        matches = decision_dataset.count()
        if matches != 1:
            raise InvalidRowCountError(
                "Decision step's key step must contain a single record for the given key",
                details={"step": self.decision_step_name, "key": self.decision_key, "matches": matches},
            )

        return bool(decision_dataset.collect()[0][1])

    def _evaluate_step_by_value(self, steps: Sequence[Step]) -> bool:
        resolved = resolve_data_step(self.decision_step_name, steps, owner="decision step's value")
        if isinstance(resolved, AtlasException):
            raise resolved

        value_dataset = resolved.get_data()
        violation = check_value_dataset(value_dataset)
        if violation is not None:
            raise violation

        return bool(value_dataset.collect()[0][0])

    def copy(self) -> "DecisionStep":
        return DecisionStep(self.name, self._config)
