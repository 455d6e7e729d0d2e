#!/usr/bin/env python3
"""YAML run configuration for genstats."""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Optional

import yaml

from statsbench.errors import ConfigError
from statsbench.gauge import is_key_safe

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "configs" / "genstats.yaml"


@dataclass
class GenstatsConfig:
    pool_size: int = 100
    max_words: int = 5
    separator: str = "_"
    max_attempts: int = 1000
    exclude_last_word: bool = False
    seed: Optional[int] = None
    buffer_size: int = 8 * 1024
    line_capacity: int = 256
    dictionary: Optional[str] = None

    def validate(self) -> "GenstatsConfig":
        for name in ("pool_size", "max_words", "max_attempts", "buffer_size", "line_capacity"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if not isinstance(self.separator, str):
            raise ConfigError(f"separator must be a string, got {self.separator!r}")
        if not is_key_safe(self.separator):
            raise ConfigError(f"separator {self.separator!r} may not contain ':', '|' or whitespace")
        if self.seed is not None and (not isinstance(self.seed, int) or isinstance(self.seed, bool)):
            raise ConfigError(f"seed must be an integer, got {self.seed!r}")
        return self

    @classmethod
    def from_mapping(cls, raw: Dict) -> "GenstatsConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            print(
                f"[genstats] warning: unrecognized config keys {unknown}; they will be ignored",
                file=sys.stderr,
            )
        return cls(**{key: value for key, value in raw.items() if key in known}).validate()

    @classmethod
    def from_yaml(cls, path: Optional[str]) -> "GenstatsConfig":
        if not path:
            return cls()
        p = Path(path).expanduser()
        if not p.exists():
            return cls()
        try:
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {p}: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError(f"{p} must contain a mapping, got {type(raw).__name__}")
        return cls.from_mapping(raw)

    def with_overrides(self, **overrides) -> "GenstatsConfig":
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes).validate()
