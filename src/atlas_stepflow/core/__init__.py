# src/atlas_stepflow/core/__init__.py
"""
Core do Atlas StepFlow.

Este pacote contém a implementação canônica do modelo de execução por
grafo de Steps, incluindo a poda condicional baseada em decisões.

O core é projetado para ser:
    - determinístico
    - testável de forma isolada
    - livre de conectores concretos e de CLI
    - orientado a contratos explícitos

Componentes principais:
    - config   → resolução de configuração (merge, hashing, propriedades)
    - dataset  → handle tabular com schema explícito (pandas)
    - graph    → consultas de dependentes, ancestrais e nomes
    - pipeline → Steps, RunContext, registry e factory
    - engine   → planner (DAG) e Engine (runner)

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - O conjunto de Steps é um valor: refactor devolve um novo conjunto
    - Estado de submissão só avança (NotSubmitted → Submitted)

Este pacote existe como a fonte de verdade operacional do Atlas StepFlow.
"""
