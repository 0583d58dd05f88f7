# src/atlas_stepflow/core/config/errors.py
"""
Exceções da camada de carregamento de configuração do Atlas StepFlow.

Este módulo define a hierarquia de exceções utilizadas durante o
carregamento e a resolução de arquivos de configuração de pipeline.

Erros de propriedades de Steps (propriedade ausente, método de decisão
desconhecido) não pertencem a esta hierarquia: eles são levantados como
`StepConfigError` em `core.exceptions`, no momento da construção do Step.

Invariantes:
    - Todas as exceções de arquivo de configuração herdam de `ConfigError`
    - Nenhuma exceção representa erro de execução de Step

Limites explícitos:
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros de carregamento de configuração.

    Esta hierarquia permite:
        - captura genérica de erros de arquivo de configuração
        - distinção clara entre falhas de carregamento e falhas de execução
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - A ausência de defaults invalida a execução do pipeline
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"engine": {"max_workers": 4}}
        - override: {"engine": "parallel"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidSectionTypeError(ConfigError):
    """
    Exceção levantada quando uma seção reservada do pipeline
    (`steps`, `engine`) está presente mas não é um dicionário.

    Exemplo:
        - steps: [accounts, orders]
    """
