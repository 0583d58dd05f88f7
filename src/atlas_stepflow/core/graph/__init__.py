"""
Utilitários de grafo sobre conjuntos de Steps (consultas puras).
"""

from .utils import all_dependents, find_by_name, immediate_dependents, ready_steps, resolve_data_step

__all__ = [
    "all_dependents",
    "find_by_name",
    "immediate_dependents",
    "ready_steps",
    "resolve_data_step",
]
