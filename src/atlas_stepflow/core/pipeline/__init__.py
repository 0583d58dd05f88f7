# src/atlas_stepflow/core/pipeline/__init__.py
"""
# Pipeline Core — Atlas StepFlow

Este pacote define os **contratos canônicos** e as **variantes de Step**
que compõem um pipeline no Atlas StepFlow.

Um pipeline é modelado como um **DAG explícito de Steps nomeados**, onde:
- cada Step declara identidade e dependências (por nome)
- a submissão é coordenada exclusivamente pelo Engine
- decisões reestruturam o conjunto de Steps antes que seus dependentes
  sejam submetidos

## Componentes

- **types**
  - `StepKind`, `StepStatus`, `StepResult`

- **step**
  - `Step`: base comum (nome, dependências, estado de submissão)
  - `RefactorStep` (Protocol): capacidade opcional de refactor

- **data_step**
  - `DataStep`: produz e mantém em cache um dataset

- **decision_step**
  - `DecisionStep`: avalia um booleano e poda o grafo

- **context**
  - `RunContext`: event log e warnings da run

- **registry / factory**
  - `StepRegistry`: unicidade de nomes
  - `build_steps`: configuração → conjunto de Steps

## Invariantes

- Cada Step possui um nome único
- `submitted` só transita de False para True
- Nenhuma validação de configuração é adiada para a execução
"""
