# src/atlas_stepflow/__init__.py
"""
Atlas StepFlow — runner de pipelines orientado a configuração.

Este pacote raiz define o namespace público do Atlas StepFlow, um
framework para execução de grafos de Steps declarados em configuração,
onde cada Step produz um dataset tabular ou toma uma decisão que
reestrutura o grafo durante a execução.

Princípios centrais:
    - O pipeline é um DAG explícito de Steps nomeados
    - Decisões podam ramos do grafo antes que seus dependentes sejam submetidos
    - Transformações são plugáveis e puras (datasets nomeados → dataset)
    - Falhas de configuração ou de contrato são fatais e tipadas

Arquitetura em alto nível:
    - core.config   → carregamento, merge, hashing e leitura de propriedades
    - core.dataset  → handle tabular (schema, rows, filtro, cogroup)
    - core.graph    → consultas estruturais sobre o conjunto de Steps
    - core.pipeline → Steps (DataStep, DecisionStep), contexto e factory
    - core.engine   → planejamento (DAG) e execução do pipeline
    - derive        → contrato de Deriver e NestDeriver
    - input         → contrato de BatchInput

Limites explícitos:
    - Não implementa conectores concretos de origem ou destino
    - Não define armazenamento físico ou paralelismo de datasets
    - Não contém CLI nem submissão de jobs
"""
# src/atlas_stepflow/__init__.py
from .core.dataset import ArrayType, DataType, Dataset, Field, Row, Schema
from .core.engine.engine import Engine, RunResult
from .core.pipeline.context import RunContext
from .core.pipeline.data_step import DataStep
from .core.pipeline.decision_step import DecisionStep
from .core.pipeline.factory import build_steps
from .derive.nest import NestDeriver

__all__ = [
    "ArrayType",
    "DataType",
    "Dataset",
    "Field",
    "Row",
    "Schema",
    "Engine",
    "RunResult",
    "RunContext",
    "DataStep",
    "DecisionStep",
    "build_steps",
    "NestDeriver",
]
