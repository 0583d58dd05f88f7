# src/atlas_stepflow/core/engine/engine.py
"""
Engine de execução do pipeline do Atlas StepFlow (o Runner).

O Engine recebe o conjunto de Steps *template* e, a cada `run()`, executa
um ciclo sobre cópias frescas desses Steps. O template nunca é mutado:
submissões, decisões e datasets em cache vivem apenas nas cópias.

Ciclo de execução:
    1. copiar os Steps do template e validar o grafo (planner)
    2. calcular a fronteira: Steps não submetidos cujas dependências
       estão todas presentes e submetidas
    3. se houver Steps com capacidade de refactor na fronteira, invocar
       `refactor` de cada um, um por vez, e recalcular a fronteira
    4. caso contrário, computar todos os DataSteps da fronteira (em
       paralelo, até `engine.max_workers`) e marcá-los como submetidos
       a partir da thread do Engine
    5. repetir até a fronteira ficar vazia

Decisões arquiteturais:
    - Refactors e transições de submissão acontecem apenas na thread do
      Engine; apenas a computação de datasets é concorrente
    - Um dependente nunca é submetido antes do refactor da decisão da
      qual depende
    - A primeira falha interrompe o ciclo (fail-fast, sem retry)

Invariantes:
    - Falha → StepResult FAILED com `payload["error"]` canônico e nenhum
      dataset no RunResult (sem saída parcial)
    - Steps podados → StepResult SKIPPED com `payload["pruned_by"]`
    - Sucesso → `RunResult.datasets` contém todos os DataSteps computados;
      as cópias liberam seus datasets ao final

Limites explícitos:
    - Não persiste datasets (saídas são responsabilidade do chamador)
    - Não reexecuta Steps entre runs
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from atlas_stepflow.core.config.hashing import compute_config_hash
from atlas_stepflow.core.config.properties import get_int
from atlas_stepflow.core.dataset import Dataset
from atlas_stepflow.core.errors import (
    AtlasErrorPayload,
    engine_configuration_error,
    engine_execution_error,
)
from atlas_stepflow.core.exceptions import AtlasException, InvalidPropertyError
from atlas_stepflow.core.graph.utils import find_by_name, immediate_dependents, ready_steps
from atlas_stepflow.core.pipeline.context import RunContext
from atlas_stepflow.core.pipeline.data_step import DataStep
from atlas_stepflow.core.pipeline.decision_step import DecisionStep
from atlas_stepflow.core.pipeline.step import RefactorStep, Step
from atlas_stepflow.core.pipeline.types import StepResult, StepStatus

from .planner import plan_execution


ENGINE_SECTION = "engine"
MAX_WORKERS_PROPERTY = "max_workers"
DEFAULT_MAX_WORKERS = 1

_ENGINE_STEP_ID = "engine"


@dataclass(frozen=True)
class RunResult:
    """
    Resultado agregado de uma run do pipeline.

    Campos:
        - steps: StepResult por nome de Step (template completo)
        - datasets: datasets computados, por nome de DataStep (vazio em falha)
        - error: payload canônico da falha que interrompeu o ciclo, se houver
    """

    steps: Dict[str, StepResult] = field(default_factory=dict)
    datasets: Dict[str, Dataset] = field(default_factory=dict)
    error: Optional[AtlasErrorPayload] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class _CycleFailure(Exception):
    """Falha interna do ciclo, já convertida em payload canônico."""

    def __init__(self, step: Step, error: AtlasErrorPayload):
        super().__init__(error.message)
        self.step = step
        self.error = error


class Engine:
    """Engine canônico do Atlas StepFlow (planner + executor)."""

    def __init__(self, *, steps: Sequence[Step], ctx: RunContext):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx

    def _max_workers(self) -> int:
        engine_cfg = (self.ctx.config or {}).get(ENGINE_SECTION, {}) or {}
        workers = get_int(engine_cfg, MAX_WORKERS_PROPERTY, owner="Engine", default=DEFAULT_MAX_WORKERS)
        if workers < 1:
            raise InvalidPropertyError(
                f"Engine property '{MAX_WORKERS_PROPERTY}' must be at least 1, got {workers}",
                details={"owner": "Engine", "property": MAX_WORKERS_PROPERTY, "value": workers},
            )
        return workers

    # ------------------------------------------------------------------
    # Guardrails: exceção -> AtlasErrorPayload
    # ------------------------------------------------------------------
    def _exception_to_error(self, step: Step, exc: Exception) -> AtlasErrorPayload:
        """Converte exceções em AtlasErrorPayload (serializável, acionável).

        Regras:
        - AtlasException: já carrega código estável, details e hint.
        - Outras exceções: ENGINE_EXECUTION_ERROR sem expor stack trace.
        """
        if isinstance(exc, AtlasException):
            payload = exc.to_payload()
            if "step" in payload.details:
                return payload
            return AtlasErrorPayload(
                type=payload.type,
                message=payload.message,
                details={**payload.details, "step": step.name},
                hint=payload.hint,
            )

        return engine_execution_error(
            step=step.name,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    def _warnings_for(self, step_name: str) -> List[str]:
        return list(self.ctx.warnings.get(step_name, []) or [])

    # ------------------------------------------------------------------
    # Ciclo
    # ------------------------------------------------------------------
    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)
        max_workers = self._max_workers()

        working: List[Step] = [s.copy() for s in ordered]
        results: Dict[str, StepResult] = {}
        pruned_by: Dict[str, str] = {}

        self.ctx.log(
            step_id=_ENGINE_STEP_ID,
            level="info",
            message="run started",
            config_hash=compute_config_hash(self.ctx.config or {}),
            steps=[s.name for s in working],
            max_workers=max_workers,
        )

        try:
            while True:
                frontier = ready_steps(working)
                if not frontier:
                    break

                refactorable = [s for s in frontier if isinstance(s, RefactorStep)]
                if refactorable:
                    working = self._refactor(refactorable, working, results, pruned_by)
                    continue

                self._compute(frontier, working, results, max_workers)

        except _CycleFailure as failure:
            return self._fail(failure, ordered, working, results, pruned_by)

        datasets: Dict[str, Dataset] = {}
        for s in working:
            if isinstance(s, DataStep) and s.has_data:
                datasets[s.name] = s.get_data()
                s.release()

        self._skip_pruned(ordered, results, pruned_by)

        self.ctx.log(
            step_id=_ENGINE_STEP_ID,
            level="info",
            message="run finished",
            datasets=sorted(datasets),
            pruned=sorted(pruned_by),
        )

        return RunResult(
            steps={s.name: results[s.name] for s in ordered if s.name in results},
            datasets=datasets,
        )

    def _refactor(
        self,
        refactorable: Sequence[Step],
        working: List[Step],
        results: Dict[str, StepResult],
        pruned_by: Dict[str, str],
    ) -> List[Step]:
        for step in refactorable:
            # uma decisão anterior do mesmo lote pode ter podado este Step
            if find_by_name(step.name, working) is not step:
                continue

            before = [s.name for s in working]
            dependents = {s.name for s in immediate_dependents(step, working)}

            try:
                working = step.refactor(working)  # type: ignore[attr-defined]
            except Exception as exc:
                raise _CycleFailure(step, self._exception_to_error(step, exc)) from exc

            remaining = {s.name for s in working}
            removed = [name for name in before if name not in remaining]
            for name in removed:
                pruned_by[name] = step.name

            payload: Dict[str, Any] = {"pruned": removed}
            if isinstance(step, DecisionStep):
                payload["decision"] = step.decision
                for name in sorted(step.if_true_step_names - dependents):
                    self.ctx.add_warning(
                        step_id=step.name,
                        message=f"if-true step '{name}' is not an immediate dependent of '{step.name}'",
                    )

            self.ctx.log(
                step_id=step.name,
                level="info",
                message="decision applied",
                decision=payload.get("decision"),
                pruned=removed,
            )

            results[step.name] = StepResult(
                step_name=step.name,
                kind=step.kind,
                status=StepStatus.SUCCESS,
                summary=f"decision={payload.get('decision')}; pruned {len(removed)} step(s)",
                warnings=self._warnings_for(step.name),
                payload=payload,
            )

        return working

    def _compute(
        self,
        frontier: Sequence[Step],
        working: Sequence[Step],
        results: Dict[str, StepResult],
        max_workers: int,
    ) -> None:
        for step in frontier:
            if not isinstance(step, DataStep):
                raise _CycleFailure(
                    step,
                    engine_configuration_error(
                        message=f"Step '{step.name}' is neither a data step nor refactor-capable",
                        details={"step": step.name, "type": type(step).__name__},
                    ),
                )

        jobs: List[Tuple[DataStep, Mapping[str, Dataset]]] = [
            (step, self._dependency_datasets(step, working)) for step in frontier  # type: ignore[misc]
        ]

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [(step, pool.submit(step.compute, deps)) for step, deps in jobs]

            # resultados consumidos na ordem da fronteira
            for step, future in futures:
                try:
                    dataset = future.result()
                except Exception as exc:
                    for _, pending in futures:
                        pending.cancel()
                    raise _CycleFailure(step, self._exception_to_error(step, exc)) from exc

                rows = dataset.count()
                step.set_submitted()
                self.ctx.log(
                    step_id=step.name,
                    level="info",
                    message="dataset computed",
                    rows=rows,
                    columns=dataset.schema.names,
                )
                results[step.name] = StepResult(
                    step_name=step.name,
                    kind=step.kind,
                    status=StepStatus.SUCCESS,
                    summary=f"computed {rows} row(s)",
                    metrics={"rows": rows},
                    warnings=self._warnings_for(step.name),
                )

    def _dependency_datasets(self, step: DataStep, working: Sequence[Step]) -> Dict[str, Dataset]:
        deps: Dict[str, Dataset] = {}
        for name in step.depends_on:
            dep = find_by_name(name, working)
            # dependências de ordenação (ex.: decisões) não contribuem dados
            if isinstance(dep, DataStep):
                deps[name] = dep.get_data()
        return deps

    def _skip_pruned(
        self,
        ordered: Sequence[Step],
        results: Dict[str, StepResult],
        pruned_by: Mapping[str, str],
    ) -> None:
        for s in ordered:
            decision = pruned_by.get(s.name)
            if decision is None or s.name in results:
                continue
            results[s.name] = StepResult(
                step_name=s.name,
                kind=s.kind,
                status=StepStatus.SKIPPED,
                summary=f"pruned by decision '{decision}'",
                payload={"pruned_by": decision},
            )

    def _fail(
        self,
        failure: _CycleFailure,
        ordered: Sequence[Step],
        working: Sequence[Step],
        results: Dict[str, StepResult],
        pruned_by: Mapping[str, str],
    ) -> RunResult:
        step, error = failure.step, failure.error

        self.ctx.log(
            step_id=step.name,
            level="error",
            message=error.message,
            error=error.to_dict(),
        )

        results[step.name] = StepResult(
            step_name=step.name,
            kind=step.kind,
            status=StepStatus.FAILED,
            summary=error.message,
            warnings=self._warnings_for(step.name),
            payload={"error": error.to_dict()},
        )
        self._skip_pruned(ordered, results, pruned_by)

        for s in working:
            if isinstance(s, DataStep):
                s.release()

        return RunResult(
            steps={s.name: results[s.name] for s in ordered if s.name in results},
            error=error,
        )
