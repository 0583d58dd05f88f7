# tests/core/config/test_config_hashing.py
"""
Testes do hashing canônico de configuração.

O hash identifica a definição do grafo de uma run e é registrado pelo
Engine no evento de início. Deve ser determinístico e insensível à ordem
de chaves.
"""

import hashlib
import json

import pytest

from atlas_stepflow.core.config.hashing import compute_config_hash


def test_hash_is_deterministic_and_key_order_insensitive():
    a = {"steps": {"route": {"method": "literal", "result": True}}, "engine": {"max_workers": 2}}
    b = {"engine": {"max_workers": 2}, "steps": {"route": {"result": True, "method": "literal"}}}

    assert compute_config_hash(a) == compute_config_hash(b)
    assert len(compute_config_hash(a)) == 64


def test_hash_matches_sha256_of_canonical_json():
    cfg = {"steps": {"nested": {"deriver": {"type": "nest", "nest.into": "accounts"}}}}
    canonical = json.dumps(cfg, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

    assert compute_config_hash(cfg) == hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def test_hash_changes_when_branch_changes():
    base = {"steps": {"route": {"if-true-steps": ["nested"]}}}
    other = {"steps": {"route": {"if-true-steps": ["raw"]}}}

    assert compute_config_hash(base) != compute_config_hash(other)


def test_hash_rejects_non_dict():
    with pytest.raises(TypeError):
        compute_config_hash(["steps"])
