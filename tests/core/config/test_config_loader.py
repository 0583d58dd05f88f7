# tests/core/config/test_config_loader.py
"""
Testes do carregador de configuração (load_config).

Os testes asseguram que:
- o arquivo defaults é obrigatório
- o arquivo local é opcional
- formatos não suportados e raízes não-dict são rejeitados
- a configuração final de um pipeline é corretamente resolvida

Decisões arquiteturais:
    - A configuração é declarativa e baseada em arquivos
    - Configuração local atua apenas como override explícito
    - Erros estruturais são tratados como falhas fatais

Limites explícitos:
    - Não valida propriedades de Steps (ver tests/core/pipeline)
"""

import json
from pathlib import Path

import pytest

try:
    from atlas_stepflow.core.config.loader import load_config
    from atlas_stepflow.core.config.errors import (
        ConfigError,
        DefaultsNotFoundError,
        InvalidConfigRootTypeError,
        InvalidSectionTypeError,
        UnsupportedConfigFormatError,
    )
except Exception as e:  # noqa: BLE001
    load_config = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """
    Garante que o loader de configuração e suas exceções tipadas estejam disponíveis.

    Falha imediatamente, com mensagem explícita, quando o módulo `loader`
    ou as exceções canônicas de `errors` não podem ser importados.
    """
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing loader/errors modules. Implement:\n"
            "- src/atlas_stepflow/core/config/loader.py (load_config)\n"
            "- src/atlas_stepflow/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_missing_defaults_raises(tmp_path: Path):
    _require_imports()
    with pytest.raises(DefaultsNotFoundError):
        load_config(defaults_path=str(tmp_path / "defaults.yaml"), local_path=None)


def test_missing_local_is_ignored(tmp_path: Path, pipeline_defaults_yaml):
    """
    Verifica que a ausência do arquivo local não é erro.

    Invariantes:
        - Defaults permanecem como fonte única quando o local não existe
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(pipeline_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(tmp_path / "local.yaml"))

    assert out["engine"]["max_workers"] == 1
    assert out["steps"]["route"]["key"] == "nest_accounts"


def test_defaults_yaml_is_parsed_into_step_sections(tmp_path: Path, pipeline_defaults_yaml):
    _require_imports()
    defaults = tmp_path / "defaults.yml"
    defaults.write_text(pipeline_defaults_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults))

    assert list(out["steps"]) == ["accounts", "orders", "flags", "route", "nested", "raw"]
    assert out["steps"]["route"]["if-true-steps"] == ["nested"]
    assert out["steps"]["nested"]["deriver"]["key.field.names"] == ["account_id"]
    assert out["steps"]["flags"]["input"]["rows"][0] == ["nest_accounts", True]


def test_local_overrides_defaults(tmp_path: Path, pipeline_defaults_yaml, pipeline_local_yaml):
    """
    Verifica o merge defaults + local.

    O resultado deve refletir os valores sobrescritos pelo local e
    preservar o restante da seção do Step.
    """
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text(pipeline_defaults_yaml, encoding="utf-8")
    local.write_text(pipeline_local_yaml, encoding="utf-8")

    out = load_config(defaults_path=str(defaults), local_path=str(local))

    assert out["engine"]["max_workers"] == 4
    assert out["steps"]["route"]["key"] == "export_raw"
    assert out["steps"]["route"]["method"] == "step_by_key"
    assert out["steps"]["route"]["if-true-steps"] == ["nested"]


def test_json_defaults_are_supported(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.json"
    defaults.write_text(
        json.dumps({"steps": {"gate": {"type": "decision", "method": "literal", "result": True}}}),
        encoding="utf-8",
    )

    out = load_config(defaults_path=str(defaults))

    assert out["steps"]["gate"]["result"] is True


def test_empty_file_is_empty_config(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("", encoding="utf-8")

    assert load_config(defaults_path=str(defaults)) == {}


def test_invalid_root_type_raises(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text("- accounts\n- orders\n", encoding="utf-8")

    with pytest.raises(InvalidConfigRootTypeError):
        load_config(defaults_path=str(defaults), local_path=None)


@pytest.mark.parametrize(
    "content,section",
    [
        ("steps:\n  - accounts\n  - orders\n", "steps"),
        ("engine: parallel\n", "engine"),
    ],
)
def test_pipeline_sections_must_be_mappings(tmp_path: Path, content, section):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    defaults.write_text(content, encoding="utf-8")

    with pytest.raises(InvalidSectionTypeError) as exc_info:
        load_config(defaults_path=str(defaults))

    assert f"'{section}'" in str(exc_info.value)
    assert isinstance(exc_info.value, ConfigError)


def test_local_override_cannot_replace_steps_section_shape(tmp_path: Path):
    _require_imports()
    defaults = tmp_path / "defaults.yaml"
    local = tmp_path / "local.yaml"
    defaults.write_text("engine:\n  max_workers: 2\n", encoding="utf-8")
    local.write_text("steps: accounts\n", encoding="utf-8")

    with pytest.raises(InvalidSectionTypeError):
        load_config(defaults_path=str(defaults), local_path=str(local))


def test_unsupported_extension_raises(tmp_path: Path):
    """
    Verifica que o formato é determinado pela extensão e que
    formatos não declarados não são inferidos nem convertidos.
    """
    _require_imports()
    defaults = tmp_path / "defaults.toml"
    defaults.write_text("[engine]\nmax_workers = 2\n", encoding="utf-8")

    with pytest.raises(UnsupportedConfigFormatError) as exc_info:
        load_config(defaults_path=str(defaults), local_path=None)

    assert isinstance(exc_info.value, ConfigError)
