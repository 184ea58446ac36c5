"""
Configuration for the transformer, printer and interactive shell.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from replout.replout_serialize import deserialize, format_for_path

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigError(ValueError):
    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key


@dataclass
class ReploutConfig:
    chunk_range: int = 100
    max_depth: int = 32
    theme: str = "monokai"
    lexer: str = "python"
    indent_width: int = 2
    expand_depth: int = 1
    log_level: str = "WARNING"

    @classmethod
    def from_mapping(cls, cfg: Optional[Mapping[str, Any]] = None) -> 'ReploutConfig':
        """Builds a config from a plain dict. Unknown keys are ignored; 'chunk-range' == 'chunk_range'."""
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for raw_key, raw in dict(cfg or {}).items():
            key = str(raw_key).replace('-', '_')
            if key not in known:
                continue
            default = known[key].default
            if isinstance(default, int):
                try:
                    value = int(raw)
                except (TypeError, ValueError):
                    raise ConfigError(key, f"expected an integer, got {raw!r}") from None
                if value < (0 if key in ('max_depth', 'expand_depth') else 1):
                    raise ConfigError(key, f"out of range: {value}")
                values[key] = value
            else:
                values[key] = str(raw)
        if 'log_level' in values:
            values['log_level'] = values['log_level'].upper()
            if values['log_level'] not in _LOG_LEVELS:
                raise ConfigError('log_level', f"unknown level {values['log_level']!r}")
        return cls(**values)

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level)


def load_config(path: str | Path) -> ReploutConfig:
    """Reads a JSON, YAML or TOML file. A top-level [replout] table is used when present."""
    p = Path(path)
    fmt = format_for_path(p.name)
    if fmt is None:
        raise ConfigError('path', f"unsupported config file type: {p.name}")
    data = deserialize(p.read_bytes(), fmt=fmt) or {}
    if not isinstance(data, Mapping):
        raise ConfigError('path', f"expected a mapping at top level of {p.name}")
    section = data.get('replout', data)
    return ReploutConfig.from_mapping(section)
