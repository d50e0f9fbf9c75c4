"""Load and validate configuration from YAML with env var substitution."""

from __future__ import annotations

import os
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from pulse.models import PulseCategory
from pulse.process.scoring import DEFAULT_WEIGHTS, ScoringTables


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")
        match = pattern.search(value)
        if match:
            if match.group(0) == value:
                return os.environ.get(match.group(1), "")
            return pattern.sub(lambda m: os.environ.get(m.group(1), ""), value)
        return value
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    return _resolve_env_vars(raw)


def get_active_sources(config: dict) -> list[str]:
    """Return list of enabled source names."""
    sources = config.get("sources") or {}
    return [name for name, cfg in sources.items() if (cfg or {}).get("enabled", False)]


def get_db_path(config: dict) -> str:
    """Get database path from config."""
    return (config.get("database") or {}).get("path", "data/pulse.db")


def get_retention_hours(config: dict) -> dict[str, int]:
    """Staging lifetime in hours for high-value and standard signals."""
    cfg = (config.get("staging") or {}).get("retention_hours") or {}
    return {
        "high_value": int(cfg.get("high_value", 168)),
        "standard": int(cfg.get("standard", 48)),
    }


def get_min_authority(config: dict) -> float:
    """Signals scoring below this floor are not staged."""
    return float((config.get("staging") or {}).get("min_authority", 3.0))


def get_scoring_tables(config: dict) -> ScoringTables:
    """Build scoring tables, applying optional weight and allowlist overrides."""
    cfg = config.get("scoring") or {}

    weights = dict(DEFAULT_WEIGHTS)
    for name, value in (cfg.get("weights") or {}).items():
        try:
            weights[PulseCategory(name)] = float(value)
        except ValueError:
            raise ValueError(f"Unknown category in scoring.weights: {name!r}") from None

    kwargs: dict[str, Any] = {"weights": MappingProxyType(weights)}
    if cfg.get("trusted_sources") is not None:
        kwargs["trusted_sources"] = frozenset(cfg["trusted_sources"])
    for key in ("citation_threshold", "citation_bonus", "trusted_bonus", "high_value_threshold"):
        if key in cfg:
            kwargs[key] = cfg[key]
    return ScoringTables(**kwargs)


def get_sufficiency_config(config: dict) -> dict:
    """Similarity threshold and match count for the sufficiency gate."""
    cfg = config.get("sufficiency") or {}
    return {
        "threshold": float(cfg.get("threshold", 0.85)),
        "min_matches": int(cfg.get("min_matches", 3)),
    }


def get_matcher_config(config: dict) -> dict:
    """Result limit, similarity floor and label cutoffs for the matcher."""
    cfg = config.get("matcher") or {}
    labels = cfg.get("labels") or {}
    return {
        "limit": int(cfg.get("limit", 20)),
        "min_similarity": float(cfg.get("min_similarity", 0.65)),
        "labels": {
            "priority": float(labels.get("priority", 0.85)),
            "relevant": float(labels.get("relevant", 0.75)),
        },
    }
