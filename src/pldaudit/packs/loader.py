"""
Effectiveness Policy Pack Loader

Loads and validates effectiveness policy packs from YAML or JSON files and
converts the pydantic schema into pldaudit.models.EffectivenessPolicy.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from ..exceptions import PolicyLoadError, PolicyValidationError, PolicyVersionMismatch
from ..models import (
    ComplianceDomain,
    DomainRule,
    EffectivenessPolicy,
    EffectivenessVerdict,
    VerdictCopy,
)
from .schema import (
    SCHEMA_VERSION,
    DomainSchema,
    EffectivenessPackSchema,
    VerdictSchema,
    check_schema_version,
    validate_effectiveness_pack,
)

logger = logging.getLogger(__name__)

DEFAULT_PACK_PATH = Path(__file__).parent / "data" / "effectiveness_v1.yaml"


# =============================================================================
# Schema to Model Converters
# =============================================================================

def _convert_domain(schema: DomainSchema) -> DomainRule:
    return DomainRule.build(
        domain=ComplianceDomain(schema.id),
        name=schema.name,
        keywords=schema.keywords,
    )


def _convert_verdict(schema: VerdictSchema) -> VerdictCopy:
    return VerdictCopy(
        verdict=EffectivenessVerdict(schema.verdict),
        sentence=schema.sentence.strip(),
        criterion=schema.criterion.strip(),
    )


def _convert_pack(schema: EffectivenessPackSchema) -> EffectivenessPolicy:
    verdicts = [_convert_verdict(v) for v in schema.verdicts]
    return EffectivenessPolicy(
        id=schema.id,
        version=schema.version,
        domains=[_convert_domain(d) for d in schema.domains],
        verdicts={v.verdict: v for v in verdicts},
    )


# =============================================================================
# Loader
# =============================================================================

class EffectivenessPackLoader:
    """
    Loads effectiveness policy packs from YAML or JSON files.

    Usage:
        loader = EffectivenessPackLoader()
        policy = loader.load("path/to/effectiveness.yaml")
    """

    def __init__(self, strict_version: bool = True):
        """
        Initialize the loader.

        Args:
            strict_version: If True, reject packs with incompatible schema versions
        """
        self.strict_version = strict_version
        self._policies: dict[str, EffectivenessPolicy] = {}

    def load(self, path: Union[str, Path]) -> EffectivenessPolicy:
        """
        Load a pack from a file.

        Raises:
            PolicyLoadError: If file cannot be read or parsed
            PolicyValidationError: If validation fails
            PolicyVersionMismatch: If schema version incompatible
        """
        path = Path(path)
        try:
            data = self._load_file(path)
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise PolicyLoadError(
                message=f"Failed to load policy pack: {e}",
                details={"path": str(path), "error": str(e)},
            ) from e

        policy = self.load_data(data, source=str(path))
        logger.info(
            "Loaded effectiveness pack %s v%s from %s",
            policy.id, policy.version, path,
        )
        return policy

    def load_data(self, data: Any, source: str = "<memory>") -> EffectivenessPolicy:
        """Validate and convert an already-parsed pack."""
        if not isinstance(data, dict):
            raise PolicyLoadError(
                message="Policy pack must be a mapping",
                details={"path": source, "type": type(data).__name__},
            )

        if self.strict_version and not check_schema_version(data):
            pack_version = data.get("schema_version", "unknown")
            raise PolicyVersionMismatch(
                message=f"Schema version mismatch: pack has {pack_version}, expected {SCHEMA_VERSION}",
                details={"pack_version": pack_version, "expected_version": SCHEMA_VERSION},
            )

        try:
            schema = validate_effectiveness_pack(data)
        except ValidationError as e:
            raise PolicyValidationError(
                message=f"Policy pack validation failed: {e.error_count()} errors",
                details={"errors": e.errors(include_url=False, include_context=False), "path": source},
            ) from e

        policy = _convert_pack(schema)
        self._policies[policy.id] = policy
        return policy

    def _load_file(self, path: Path) -> Any:
        """Load data from YAML or JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def get_policy(self, policy_id: str) -> Optional[EffectivenessPolicy]:
        """Get a cached policy by ID."""
        return self._policies.get(policy_id)

    def list_policies(self) -> list[str]:
        """List IDs of all loaded policies."""
        return list(self._policies.keys())


# =============================================================================
# Convenience Functions
# =============================================================================

def load_effectiveness_pack(path: Union[str, Path]) -> EffectivenessPolicy:
    """Load a pack from a file with a temporary loader."""
    return EffectivenessPackLoader().load(path)


def load_effectiveness_pack_from_string(content: str, format: str = "yaml") -> EffectivenessPolicy:
    """Load a pack from a YAML or JSON string."""
    try:
        data = json.loads(content) if format.lower() == "json" else yaml.safe_load(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise PolicyLoadError(
            message=f"Failed to parse policy pack: {e}",
            details={"format": format},
        ) from e
    return EffectivenessPackLoader().load_data(data)


def load_default_policy() -> EffectivenessPolicy:
    """The bundled MSAC/CSNU/CSC pack."""
    return load_effectiveness_pack(DEFAULT_PACK_PATH)
