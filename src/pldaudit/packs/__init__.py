"""
Effectiveness policy packs.

A pack holds the domain keyword table and the verdict copy, so both can be
tuned without touching the scoring algorithm.
"""
from .loader import (
    DEFAULT_PACK_PATH,
    EffectivenessPackLoader,
    load_default_policy,
    load_effectiveness_pack,
    load_effectiveness_pack_from_string,
)
from .schema import SCHEMA_VERSION, EffectivenessPackSchema, validate_effectiveness_pack

__all__ = [
    "DEFAULT_PACK_PATH",
    "EffectivenessPackLoader",
    "EffectivenessPackSchema",
    "SCHEMA_VERSION",
    "load_default_policy",
    "load_effectiveness_pack",
    "load_effectiveness_pack_from_string",
    "validate_effectiveness_pack",
]
