# src/atlas_stepflow/core/config/__init__.py

"""
Camada de configuração do Atlas StepFlow.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, identificar e ler configurações de pipelines do Atlas StepFlow.

A configuração de um pipeline é:
    - declarativa (a seção `steps` descreve o grafo inteiro)
    - determinística
    - explicitamente versionável

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Geração de hash canônico para rastreabilidade
    - Leitura tipada de propriedades de Steps (property bag)

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro
    - Propriedades obrigatórias ausentes falham na construção do Step

Limites explícitos:
    - Não constrói Steps (ver `core.pipeline.factory`)
    - Não executa pipeline
"""

from .errors import ConfigError
from .hashing import compute_config_hash
from .loader import load_config
from .merge import deep_merge

__all__ = ["ConfigError", "compute_config_hash", "load_config", "deep_merge"]
