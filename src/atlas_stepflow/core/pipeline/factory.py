"""
Factory de Steps a partir da configuração do pipeline.

Cada entrada da seção `steps` descreve um Step:

    steps:
      <nome>:
        type: data | decision          # default: data
        dependencies: [<nome>, ...]
        # DataStep: exatamente uma das seções abaixo
        input:   {type: <tipo registrado>, ...}
        deriver: {type: <tipo registrado>, ...}
        # DecisionStep: propriedades do método (ver DecisionStep)

Tipos de deriver embutidos: `nest`. Tipos de input são fornecidos pelo
chamador, já que conectores concretos são externos ao framework.

Toda a validação de propriedades acontece aqui, na construção: uma
propriedade obrigatória ausente ou um tipo desconhecido interrompe a
montagem do pipeline antes de qualquer execução.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional

from atlas_stepflow.core.config.properties import get_mapping, get_string, has_property
from atlas_stepflow.core.exceptions import InvalidPropertyError, MissingPropertyError
from atlas_stepflow.derive.base import Deriver
from atlas_stepflow.derive.nest import NestDeriver
from atlas_stepflow.input.base import BatchInput

from .data_step import DataStep
from .decision_step import DecisionStep
from .registry import StepRegistry
from .step import Step


STEPS_SECTION = "steps"
STEP_TYPE_PROPERTY = "type"
INPUT_PROPERTY = "input"
DERIVER_PROPERTY = "deriver"

DATA_STEP_TYPE = "data"
DECISION_STEP_TYPE = "decision"

DEFAULT_DERIVERS: Dict[str, Callable[[], Deriver]] = {
    "nest": NestDeriver,
}


def build_step(
    name: str,
    step_cfg: Mapping[str, Any],
    *,
    inputs: Mapping[str, Callable[[], BatchInput]],
    derivers: Mapping[str, Callable[[], Deriver]],
) -> Step:
    owner = f"Step '{name}'"
    if not isinstance(step_cfg, Mapping):
        raise InvalidPropertyError(
            f"{owner} configuration must be a mapping, got {type(step_cfg).__name__}",
            details={"step": name},
        )

    step_type = str(step_cfg.get(STEP_TYPE_PROPERTY, DATA_STEP_TYPE)).strip().lower()

    if step_type == DECISION_STEP_TYPE:
        return DecisionStep(name, step_cfg)

    if step_type != DATA_STEP_TYPE:
        raise InvalidPropertyError(
            f"Unsupported step type for step '{name}': {step_type}",
            details={"step": name, "property": STEP_TYPE_PROPERTY, "value": step_type},
        )

    has_input = has_property(step_cfg, INPUT_PROPERTY)
    has_deriver = has_property(step_cfg, DERIVER_PROPERTY)

    if not has_input and not has_deriver:
        raise MissingPropertyError(
            f"Data step '{name}' requires an '{INPUT_PROPERTY}' or a '{DERIVER_PROPERTY}' property",
            details={"step": name},
        )
    if has_input and has_deriver:
        raise InvalidPropertyError(
            f"Data step '{name}' must declare only one of '{INPUT_PROPERTY}' and '{DERIVER_PROPERTY}'",
            details={"step": name},
        )

    section_name = INPUT_PROPERTY if has_input else DERIVER_PROPERTY
    registered = inputs if has_input else derivers

    section = get_mapping(step_cfg, section_name, owner=owner)
    transform_type = get_string(section, STEP_TYPE_PROPERTY, owner=f"{owner} {section_name}")

    factory = registered.get(transform_type)
    if factory is None:
        raise InvalidPropertyError(
            f"Unsupported {section_name} type for step '{name}': {transform_type}",
            details={"step": name, "property": f"{section_name}.{STEP_TYPE_PROPERTY}", "value": transform_type},
        )

    transform = factory()
    transform.configure(section)

    return DataStep(name, step_cfg, transform=transform)


def build_steps(
    config: Mapping[str, Any],
    *,
    inputs: Optional[Mapping[str, Callable[[], BatchInput]]] = None,
    derivers: Optional[Mapping[str, Callable[[], Deriver]]] = None,
) -> List[Step]:
    """
    Constrói o conjunto de Steps (template) declarado na configuração.

    Args:
        config: Configuração resolvida do pipeline (com a seção `steps`).
        inputs: Tipos de BatchInput disponíveis, por nome.
        derivers: Tipos de Deriver adicionais, por nome (somados aos embutidos).

    Returns:
        List[Step]: Steps na ordem de declaração.

    Raises:
        StepConfigError: Propriedade ausente, tipo desconhecido ou inválido.
        DuplicateStepNameError: Nome de Step repetido.
    """
    steps_cfg = get_mapping(config, STEPS_SECTION, owner="Pipeline")

    input_types: Dict[str, Callable[[], BatchInput]] = dict(inputs or {})
    deriver_types: Dict[str, Callable[[], Deriver]] = {**DEFAULT_DERIVERS, **(derivers or {})}

    registry = StepRegistry()
    for name, step_cfg in steps_cfg.items():
        registry.add(
            build_step(str(name), step_cfg or {}, inputs=input_types, derivers=deriver_types)
        )

    return registry.list()
