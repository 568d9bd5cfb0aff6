"""
Runtime configuration.

Settings are read from ``PLD_*`` environment variables once, at the edge
(API startup or a test fixture), and passed explicitly into the layers that
need them. Nothing below ``pldaudit.service`` reads the environment.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Optional

DEFAULT_PUBLIC_BASE_URL = "http://localhost:3001"
DEFAULT_MIN_ALLOWED_YEAR = 2000
DEFAULT_POLICY_PACK = Path(__file__).parent / "packs" / "data" / "effectiveness_v1.yaml"


def normalize_base_url(raw: str) -> str:
    """Strip trailing slashes and a trailing ``/api`` segment."""
    url = raw.strip().rstrip("/")
    if url.lower().endswith("/api"):
        url = url[:-4]
    return url.rstrip("/")


def _env_int(env: Mapping[str, str], name: str, *, default: int, minimum: int = 0) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, value)


def _env_bool(env: Mapping[str, str], name: str, *, default: bool) -> bool:
    raw = env.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    """
    Explicit configuration injected into validation, reporting and the API.

    Attributes:
        log_level: Level name for the ``pldaudit`` logger
        min_allowed_year: Earliest year accepted in date fields
        public_base_url: Base URL used to build evidence links
        policy_pack_path: YAML policy pack with domain keywords and verdict copy
        docs_enabled: Whether the API exposes /docs
        now: Clock override for deterministic validation in tests
    """
    log_level: str = "INFO"
    min_allowed_year: int = DEFAULT_MIN_ALLOWED_YEAR
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL
    policy_pack_path: Path = DEFAULT_POLICY_PACK
    docs_enabled: bool = True
    now: Optional[datetime] = field(default=None, compare=False)

    @property
    def max_allowed_year(self) -> int:
        """Latest year accepted in date fields (the current year)."""
        return (self.now or datetime.now(timezone.utc)).year

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> Settings:
        """Build settings from ``PLD_*`` variables (defaults to os.environ)."""
        env = os.environ if env is None else env
        policy_path = env.get("PLD_POLICY_PACK", "").strip()
        return cls(
            log_level=env.get("PLD_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            min_allowed_year=_env_int(
                env, "PLD_MIN_ALLOWED_YEAR", default=DEFAULT_MIN_ALLOWED_YEAR, minimum=1900
            ),
            public_base_url=normalize_base_url(
                env.get("PLD_PUBLIC_BASE_URL", "") or DEFAULT_PUBLIC_BASE_URL
            ),
            policy_pack_path=Path(policy_path) if policy_path else DEFAULT_POLICY_PACK,
            docs_enabled=_env_bool(env, "PLD_DOCS_ENABLED", default=True),
        )
