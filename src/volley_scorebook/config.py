"""Configuration helpers for the volley_scorebook toolkit."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping

import yaml

from .rules import DEFAULT_FORMAT, MatchFormat

DEFAULT_STORE_PATH = Path("data/matches.json")


@dataclass(slots=True)
class StorageConfig:
    path: Path = DEFAULT_STORE_PATH


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(slots=True)
class AppConfig:
    """Root configuration model."""

    match_format: MatchFormat = DEFAULT_FORMAT
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object]) -> "AppConfig":
        format_section = mapping.get("match_format")
        format_values = {}
        if isinstance(format_section, Mapping):
            for item in fields(MatchFormat):
                raw = format_section.get(item.name)
                if raw is None:
                    continue
                try:
                    value = int(raw)
                except (TypeError, ValueError):
                    continue
                if value > 0:
                    format_values[item.name] = value
        match_format = MatchFormat(**format_values) if format_values else DEFAULT_FORMAT

        storage = StorageConfig()
        storage_section = mapping.get("storage")
        if isinstance(storage_section, Mapping):
            path_value = str(storage_section.get("path", "") or "").strip()
            if path_value:
                storage = StorageConfig(path=Path(path_value))

        logging_config = LoggingConfig()
        logging_section = mapping.get("logging")
        if isinstance(logging_section, Mapping):
            level = str(logging_section.get("level", "") or "").strip().upper()
            if level:
                logging_config = LoggingConfig(level=level)

        return cls(match_format=match_format, storage=storage, logging=logging_config)


def load_config(path: Path) -> AppConfig:
    """Load a configuration file from YAML."""

    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Configuration file must contain a mapping at the root.")
    return AppConfig.from_mapping(data)
