"""
Contexto de execução compartilhado do pipeline.

Este módulo define o `RunContext`, a estrutura canônica de observabilidade
de uma run do Atlas StepFlow. Ele é a camada de logging do framework:
Engine e Steps registram eventos estruturados e warnings aqui, em vez de
escrever em stdout.

Responsabilidades do módulo:
    - Manter identidade e metadados da execução
    - Armazenar a configuração resolvida do pipeline
    - Registrar eventos de log estruturados
    - Coletar warnings por Step

Invariantes:
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`
    - Eventos são anexados em ordem de ocorrência

Limites explícitos:
    - Não executa Steps
    - Não guarda datasets (pertencem aos DataSteps até o fim da run)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List


@dataclass
class RunContext:
    """
    Contexto de execução de uma run do pipeline.

    O RunContext consolida:
        - identidade da execução (run_id, created_at)
        - configuração resolvida
        - metadados livres (ex.: hash da configuração)
        - logs estruturados de execução
        - warnings associados a Steps específicos

    O registro de eventos é protegido por lock, já que DataSteps
    independentes podem ser computados em paralelo pelo Engine.
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    _lock: Lock = field(default_factory=Lock, init=False, repr=False, compare=False)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        with self._lock:
            if step_id not in self.warnings:
                self.warnings[step_id] = []
            self.warnings[step_id].append(message)

    def events_for(self, step_id: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["step_id"] == step_id]
