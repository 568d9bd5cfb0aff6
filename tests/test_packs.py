"""
Tests for the effectiveness policy pack loader.

Validates:
- The bundled pack loads and covers every domain and verdict
- Malformed YAML / JSON fails with PolicyLoadError
- Missing domains, verdicts or blank keywords fail validation
- Incompatible schema major version fails unless strict_version is off
- Keywords are stored normalized
"""
import json

import pytest
import yaml

from pldaudit.exceptions import PolicyLoadError, PolicyValidationError, PolicyVersionMismatch
from pldaudit.models import ComplianceDomain, EffectivenessVerdict
from pldaudit.packs import (
    EffectivenessPackLoader,
    load_default_policy,
    load_effectiveness_pack,
    load_effectiveness_pack_from_string,
)


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def minimal_valid_pack():
    """Smallest pack covering every domain and verdict."""
    return {
        "schema_version": "1.0.0",
        "id": "test-pack",
        "version": "0.1",
        "domains": [
            {"id": "MSAC", "name": "Monitoramento", "keywords": ["Monitoramento"]},
            {"id": "CSNU", "name": "Sanções", "keywords": ["CSNU"]},
            {"id": "CSC", "name": "Conheça seu cliente", "keywords": ["Conheça seu Cliente"]},
        ],
        "verdicts": [
            {"verdict": "EFETIVO", "sentence": "ok", "criterion": "c1"},
            {"verdict": "PARCIALMENTE EFETIVO", "sentence": "parcial", "criterion": "c2"},
            {"verdict": "POUCO EFETIVO", "sentence": "pouco", "criterion": "c3"},
        ],
    }


@pytest.fixture
def pack_yaml_file(tmp_path, minimal_valid_pack):
    path = tmp_path / "pack.yaml"
    path.write_text(yaml.safe_dump(minimal_valid_pack, allow_unicode=True), encoding="utf-8")
    return path


# ============================================================================
# BASIC LOADING TESTS
# ============================================================================

def test_default_policy_covers_all_domains():
    policy = load_default_policy()

    assert [rule.domain for rule in policy.domains] == [
        ComplianceDomain.MSAC, ComplianceDomain.CSNU, ComplianceDomain.CSC,
    ]
    assert set(policy.verdicts) == set(EffectivenessVerdict)
    assert "operacoes atipicas" in policy.domains[0].keywords


def test_load_yaml_file(pack_yaml_file):
    policy = load_effectiveness_pack(pack_yaml_file)

    assert policy.id == "test-pack"
    assert policy.copy_for(EffectivenessVerdict.PARCIALMENTE_EFETIVO).sentence == "parcial"


def test_load_json_file(tmp_path, minimal_valid_pack):
    path = tmp_path / "pack.json"
    path.write_text(json.dumps(minimal_valid_pack), encoding="utf-8")

    assert load_effectiveness_pack(path).version == "0.1"


def test_keywords_normalized(minimal_valid_pack):
    policy = EffectivenessPackLoader().load_data(minimal_valid_pack)
    csc = next(r for r in policy.domains if r.domain is ComplianceDomain.CSC)

    assert csc.keywords == ("conheca seu cliente",)
    assert csc.matches("procedimentos conheca seu cliente")


def test_loader_caches_by_id(pack_yaml_file):
    loader = EffectivenessPackLoader()
    policy = loader.load(pack_yaml_file)

    assert loader.get_policy("test-pack") is policy
    assert loader.list_policies() == ["test-pack"]
    assert loader.get_policy("missing") is None


def test_file_not_found(tmp_path):
    with pytest.raises(PolicyLoadError) as exc_info:
        load_effectiveness_pack(tmp_path / "missing.yaml")

    assert exc_info.value.details["path"].endswith("missing.yaml")


def test_malformed_yaml():
    with pytest.raises(PolicyLoadError):
        load_effectiveness_pack_from_string("domains: [unclosed")


def test_non_mapping_pack():
    with pytest.raises(PolicyLoadError):
        load_effectiveness_pack_from_string("- just\n- a list\n")


# ============================================================================
# VALIDATION TESTS
# ============================================================================

def test_missing_domain(minimal_valid_pack):
    minimal_valid_pack["domains"].pop()

    with pytest.raises(PolicyValidationError) as exc_info:
        EffectivenessPackLoader().load_data(minimal_valid_pack)

    assert exc_info.value.code == "PA_POLICY_VALIDATION_ERROR"


def test_duplicate_verdict(minimal_valid_pack):
    minimal_valid_pack["verdicts"][2]["verdict"] = "EFETIVO"

    with pytest.raises(PolicyValidationError):
        EffectivenessPackLoader().load_data(minimal_valid_pack)


def test_blank_keyword_rejected(minimal_valid_pack):
    minimal_valid_pack["domains"][0]["keywords"].append("   ")

    with pytest.raises(PolicyValidationError):
        EffectivenessPackLoader().load_data(minimal_valid_pack)


def test_unknown_field_rejected(minimal_valid_pack):
    minimal_valid_pack["weights"] = {"MSAC": 1}

    with pytest.raises(PolicyValidationError):
        EffectivenessPackLoader().load_data(minimal_valid_pack)


def test_unknown_domain_rejected(minimal_valid_pack):
    minimal_valid_pack["domains"][0]["id"] = "FATCA"

    with pytest.raises(PolicyValidationError):
        EffectivenessPackLoader().load_data(minimal_valid_pack)


# ============================================================================
# VERSION TESTS
# ============================================================================

def test_major_version_mismatch(minimal_valid_pack):
    minimal_valid_pack["schema_version"] = "2.0.0"

    with pytest.raises(PolicyVersionMismatch) as exc_info:
        EffectivenessPackLoader().load_data(minimal_valid_pack)

    assert exc_info.value.details["pack_version"] == "2.0.0"


def test_minor_version_accepted(minimal_valid_pack):
    minimal_valid_pack["schema_version"] = "1.4.0"

    assert EffectivenessPackLoader().load_data(minimal_valid_pack).id == "test-pack"


def test_lenient_loader_skips_version_check(minimal_valid_pack):
    minimal_valid_pack["schema_version"] = "2.0.0"

    policy = EffectivenessPackLoader(strict_version=False).load_data(minimal_valid_pack)

    assert policy.id == "test-pack"
