"""
Effectiveness Policy Pack Schemas

Pydantic models for validating effectiveness policy pack YAML/JSON files.
They map to pldaudit.models.EffectivenessPolicy.

Schema versioning:
- schema_version field tracks breaking changes
- Loaders check major-version compatibility
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Enums as Literals (for YAML validation)
# =============================================================================

DomainValue = Literal["MSAC", "CSNU", "CSC"]

VerdictValue = Literal["EFETIVO", "PARCIALMENTE EFETIVO", "POUCO EFETIVO"]


# =============================================================================
# Pack Schemas
# =============================================================================

class DomainSchema(BaseModel):
    """Keyword set for one compliance domain."""
    id: DomainValue = Field(..., description="Domain identifier")
    name: str = Field(..., description="Human-readable domain name")
    keywords: list[str] = Field(..., min_length=1, description="Substrings that identify the domain")

    @field_validator("keywords")
    @classmethod
    def validate_keywords(cls, v: list[str]) -> list[str]:
        """Reject blank keywords; a blank substring would match everything."""
        cleaned = [k.strip() for k in v]
        if any(not k for k in cleaned):
            raise ValueError("Keywords must not be blank")
        return cleaned


class VerdictSchema(BaseModel):
    """Copy attached to a verdict."""
    verdict: VerdictValue = Field(..., description="Verdict label")
    sentence: str = Field(..., min_length=1, description="Sentence shown in the verdict block")
    criterion: str = Field(..., min_length=1, description="Criterion shown in the methodology table")


class EffectivenessPackSchema(BaseModel):
    """Complete effectiveness policy pack."""
    schema_version: str = Field(SCHEMA_VERSION, description="Pack schema version")
    id: str = Field(..., description="Pack identifier")
    version: str = Field(..., description="Pack version")
    description: str = Field("", description="What this pack covers")
    domains: list[DomainSchema] = Field(..., description="Domain keyword table")
    verdicts: list[VerdictSchema] = Field(..., description="Copy per verdict")

    model_config = {
        "extra": "forbid",
    }

    @model_validator(mode="after")
    def validate_coverage(self) -> "EffectivenessPackSchema":
        """Every domain and every verdict must appear exactly once."""
        domain_ids = [d.id for d in self.domains]
        if sorted(domain_ids) != sorted({"MSAC", "CSNU", "CSC"}):
            raise ValueError(f"Pack must define MSAC, CSNU and CSC exactly once, got {domain_ids}")
        verdicts = [v.verdict for v in self.verdicts]
        expected = {"EFETIVO", "PARCIALMENTE EFETIVO", "POUCO EFETIVO"}
        if sorted(verdicts) != sorted(expected):
            raise ValueError(f"Pack must define copy for each verdict exactly once, got {verdicts}")
        return self


# =============================================================================
# Validation Helpers
# =============================================================================

def validate_effectiveness_pack(data: dict[str, Any]) -> EffectivenessPackSchema:
    """
    Validate a pack dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return EffectivenessPackSchema.model_validate(data)


def check_schema_version(data: dict[str, Any]) -> bool:
    """Major version of the pack must match SCHEMA_VERSION."""
    pack_version = str(data.get("schema_version", SCHEMA_VERSION))
    return pack_version.split(".")[0] == SCHEMA_VERSION.split(".")[0]
