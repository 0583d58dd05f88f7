"""
Consultas estruturais sobre um conjunto de Steps.

Todas as funções deste módulo são puras: recebem o conjunto atual de Steps
(uma sequência ordenada) e não o modificam. Arestas do grafo são dadas por
`step.depends_on` (nomes), de modo que as consultas funcionam tanto sobre o
template do pipeline quanto sobre as cópias de um ciclo de execução.

Consultas:
    - immediate_dependents → Steps que declaram `step` como dependência
    - all_dependents       → fecho transitivo de immediate_dependents
    - find_by_name         → Step com o nome dado, ou None
    - ready_steps          → fronteira de submissão
    - resolve_data_step    → DataStep nomeado, ou o erro tipado da resolução

Invariantes:
    - O resultado preserva a ordem relativa do conjunto recebido
    - Nenhuma consulta muta Steps ou o conjunto
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union

from atlas_stepflow.core.exceptions import AtlasException, NotADataStepError, StepNotFoundError
from atlas_stepflow.core.pipeline.data_step import DataStep
from atlas_stepflow.core.pipeline.step import Step


def immediate_dependents(step: Step, steps: Sequence[Step]) -> List[Step]:
    return [s for s in steps if step.name in s.depends_on]


def all_dependents(step: Step, steps: Sequence[Step]) -> List[Step]:
    """Todos os Steps alcançáveis seguindo a aresta "depende de mim" a partir de `step`."""
    reached = set()
    frontier = [step.name]

    while frontier:
        current = frontier.pop()
        for s in steps:
            if current in s.depends_on and s.name not in reached:
                reached.add(s.name)
                frontier.append(s.name)

    return [s for s in steps if s.name in reached]


def find_by_name(name: str, steps: Sequence[Step]) -> Optional[Step]:
    for s in steps:
        if s.name == name:
            return s
    return None


def ready_steps(steps: Sequence[Step]) -> List[Step]:
    """
    Steps elegíveis para submissão: ainda não submetidos e com todas as
    dependências presentes no conjunto e submetidas.
    """
    submitted = {s.name for s in steps if s.submitted}
    return [
        s for s in steps
        if not s.submitted and all(dep in submitted for dep in s.depends_on)
    ]


def resolve_data_step(
    name: str,
    steps: Sequence[Step],
    *,
    owner: str,
) -> Union[DataStep, AtlasException]:
    """
    Resolve `name` para um DataStep.

    Retorna o DataStep ou, quando a resolução falha, o erro tipado
    correspondente (sem levantá-lo): `StepNotFoundError` para nomes
    desconhecidos e `NotADataStepError` para Steps que não produzem dados.
    """
    found = find_by_name(name, steps)

    if found is None:
        return StepNotFoundError(
            f"Unknown {owner} step: {name}",
            details={"step": name, "owner": owner},
        )

    if not isinstance(found, DataStep):
        return NotADataStepError(
            f"{owner[0].upper()}{owner[1:]} step is not a data step: {name}",
            details={"step": name, "owner": owner},
        )

    return found
