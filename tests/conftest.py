# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas StepFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações de pipeline mínimas e determinísticas (YAML e dict)
- contexto de execução controlado (RunContext)
- datasets pequenos para Steps de decisão e para o nest
- fábricas de Steps de dados sem I/O

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - Datasets são declarados com schema explícito

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture realiza I/O
    - Todas as fixtures devolvem objetos novos a cada teste

Limites explícitos:
    - Não substituir testes de integração (ver tests/e2e)
"""

import pytest
from datetime import datetime, timezone


# =====================================================
# Config Loader fixtures
# =====================================================

@pytest.fixture
def pipeline_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) de um pipeline com decisão.

    Declara dois inputs estáticos, um input de flags (string, boolean),
    uma decisão por chave e um nest condicionado à decisão.

    Returns:
        str: Conteúdo YAML representando a configuração defaults.
    """
    return """\
engine:
  max_workers: 1
steps:
  accounts:
    input:
      type: static
      schema: [[account_id, long], [name, string]]
      rows:
        - [1, alice]
        - [2, bob]
  orders:
    input:
      type: static
      schema: [[order_id, long], [account_id, long], [amount, double]]
      rows:
        - [10, 1, 5.0]
        - [11, 1, 7.5]
        - [12, 3, 1.0]
  flags:
    input:
      type: static
      schema: [[flag, string], [enabled, boolean]]
      rows:
        - [nest_accounts, true]
        - [export_raw, false]
  route:
    type: decision
    dependencies: [flags]
    method: step_by_key
    step: flags
    key: nest_accounts
    if-true-steps: [nested]
  nested:
    dependencies: [route, accounts, orders]
    deriver:
      type: nest
      nest.into: accounts
      nest.from: orders
      key.field.names: [account_id]
      nested.field.name: orders
  raw:
    dependencies: [route, accounts, orders]
    deriver:
      type: nest
      nest.into: orders
      nest.from: accounts
      key.field.names: [account_id]
      nested.field.name: accounts
"""


@pytest.fixture
def pipeline_local_yaml() -> str:
    """
    YAML de override local: paraleliza o Engine e troca o ramo retido.

    Returns:
        str: Conteúdo YAML representando a configuração local.
    """
    return """\
engine:
  max_workers: 4
steps:
  route:
    key: export_raw
"""


# =====================================================
# Pipeline fixtures (RunContext + datasets)
# =====================================================

@pytest.fixture
def dummy_config() -> dict:
    """
    Configuração mínima e já resolvida para testes do Engine.

    Returns:
        dict: Configuração com a seção `engine` e nenhuma seção `steps`.
    """
    return {
        "engine": {"max_workers": 1},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """
    RunContext determinístico para testes.

    Decisões arquiteturais:
        - O import de RunContext é feito de forma lazy para melhorar
          a legibilidade dos erros quando o core não está disponível
        - `run_id` e `created_at` são fixos para garantir determinismo

    Returns:
        RunContext: Contexto de execução isolado e previsível.
    """
    from atlas_stepflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def accounts_dataset():
    from atlas_stepflow.core.dataset import DataType, Dataset, Schema

    schema = Schema.of(("account_id", DataType.LONG), ("name", DataType.STRING))
    return Dataset.from_rows(schema, [(1, "alice"), (2, "bob")])


@pytest.fixture
def orders_dataset():
    from atlas_stepflow.core.dataset import DataType, Dataset, Schema

    schema = Schema.of(
        ("order_id", DataType.LONG),
        ("account_id", DataType.LONG),
        ("amount", DataType.DOUBLE),
    )
    return Dataset.from_rows(schema, [(10, 1, 5.0), (11, 1, 7.5), (12, 3, 1.0)])


@pytest.fixture
def flags_dataset():
    """Dataset de decisão por chave: (string, boolean)."""
    from atlas_stepflow.core.dataset import DataType, Dataset, Schema

    schema = Schema.of(("flag", DataType.STRING), ("enabled", DataType.BOOLEAN))
    return Dataset.from_rows(schema, [("go", True), ("stop", False)])


@pytest.fixture
def make_input_step():
    """
    Fábrica de DataSteps de origem a partir de um Dataset pronto.

    Returns:
        Callable[[str, Dataset], DataStep]
    """
    from atlas_stepflow.core.pipeline.data_step import DataStep
    from tests.fixtures.inputs import FixedInput

    def _make(name, dataset, dependencies=None):
        config = {"dependencies": list(dependencies)} if dependencies else {}
        return DataStep(name, config, transform=FixedInput(dataset))

    return _make


@pytest.fixture
def make_computed_step(make_input_step):
    """
    Fábrica de DataSteps de origem já computados (dados em cache),
    para avaliar decisões fora do Engine.
    """

    def _make(name, dataset):
        step = make_input_step(name, dataset)
        step.compute({})
        step.set_submitted()
        return step

    return _make
