# src/atlas_stepflow/core/engine/planner.py
"""
Planejador de execução do pipeline (DAG).

Este módulo valida a estrutura do conjunto de Steps e produz uma ordem
topológica determinística, usada pelo Engine como ordem de referência
do conjunto de trabalho de cada run.

O planner opera exclusivamente em nível estrutural, analisando:
    - nomes de Steps
    - dependências declaradas
    - formação de ciclos

Decisões arquiteturais:
    - Utiliza ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos por ordem lexicográfica de `step.name`
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - Nenhum Step aparece antes de suas dependências
    - Todos os Steps aparecem exatamente uma vez
    - A mesma definição de pipeline produz sempre a mesma ordem

Limites explícitos:
    - Não executa Steps
    - Não avalia decisões (a poda acontece durante a execução)
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from atlas_stepflow.core.pipeline.registry import DuplicateStepNameError
from atlas_stepflow.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """
    Exceção levantada quando um Step referencia uma dependência inexistente.

    Invariantes:
        - Um Step não pode depender de um Step inexistente
        - O pipeline é considerado inválido nesta condição
    """


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando o grafo de dependências contém um ciclo.

    Invariantes:
        - A existência de um ciclo invalida o planejamento do pipeline
        - Nenhuma ordem topológica válida pode ser produzida
    """


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística de Steps.

    Args:
        steps (Iterable[Step]): Conjunto de Steps do pipeline.

    Returns:
        List[Step]: Steps em ordem topológica determinística.

    Raises:
        ValueError: Se algum Step possuir nome inválido.
        DuplicateStepNameError: Se dois Steps possuírem o mesmo nome.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    step_list = list(steps)
    by_name: Dict[str, Step] = {}
    for s in step_list:
        name = getattr(s, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("step.name must be a non-empty string")
        if name in by_name:
            raise DuplicateStepNameError(f"Duplicate step name: {name}")
        by_name[name] = s

    # Validate dependencies exist
    deps: Dict[str, List[str]] = {}
    for name, s in by_name.items():
        d = list(s.depends_on)
        for dep in d:
            if dep not in by_name:
                raise UnknownDependencyError(f"Step '{name}' depends on unknown step '{dep}'")
        deps[name] = d

    # Kahn's algorithm (deterministic)
    incoming_count: Dict[str, int] = {name: 0 for name in by_name}
    outgoing: Dict[str, Set[str]] = {name: set() for name in by_name}

    for name, dlist in deps.items():
        incoming_count[name] = len(set(dlist))
        for dep in set(dlist):
            outgoing[dep].add(name)

    ready: List[str] = sorted([name for name, c in incoming_count.items() if c == 0])
    order: List[str] = []

    while ready:
        name = ready.pop(0)  # smallest lexicographic
        order.append(name)
        for child in sorted(outgoing[name]):
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
                ready.sort()

    if len(order) != len(by_name):
        stuck = sorted(n for n, c in incoming_count.items() if c > 0)
        raise CycleDetectedError(f"Cycle detected in step dependency graph: {stuck}")

    return [by_name[name] for name in order]
