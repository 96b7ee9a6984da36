"""Conversion settings."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml

DEFAULT_EXTENSIONS: Dict[str, str] = {
    "prisma": "dsl",
    "sql": "sql",
    "psql": "sql",
    "json": "json",
}
SOURCE_FORMATS = {"dsl", "sql", "json"}


@dataclass(frozen=True)
class ConversionConfig:
    """Settings for a single conversion call."""

    extensions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_EXTENSIONS))
    # Scalar fields ending in one of these suffixes are flagged as foreign keys.
    foreign_key_suffixes: Tuple[str, ...] = ("Id",)
    reject_name_collisions: bool = True
    header_comment: str = "Auto-generated schema"

    def format_for(self, extension: str) -> str:
        return self.extensions.get(extension.lower(), "")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversionConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

        values = dict(data)
        if "extensions" in values:
            extensions = {str(k).lower().lstrip("."): str(v).lower() for k, v in dict(values["extensions"]).items()}
            bad = sorted(v for v in extensions.values() if v not in SOURCE_FORMATS)
            if bad:
                raise ValueError(f"Unknown source formats in extensions: {', '.join(bad)}")
            values["extensions"] = extensions
        if "foreign_key_suffixes" in values:
            suffixes = values["foreign_key_suffixes"]
            if isinstance(suffixes, str):
                suffixes = [suffixes]
            values["foreign_key_suffixes"] = tuple(str(s) for s in suffixes)
        return cls(**values)


def load_config(path: str) -> ConversionConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with config_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)

    if data is None:
        return ConversionConfig()

    if not isinstance(data, dict):
        raise ValueError("Config YAML must parse to an object/map at root.")

    return ConversionConfig.from_dict(data)
