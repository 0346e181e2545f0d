from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from qdefmake.errors import ConfigError
from qdefmake.utils.paths import join_source, normalize_separators

DEFAULT_MANIFEST = "progs.src"
DEFAULT_OUTPUT = "output.def"
DEFAULT_START_MARKER = "/*QUAKED"
DEFAULT_END_MARKER = "*/"


def load_yaml(path: str | Path) -> Dict[str, Any]:
    """Load YAML config into a dict."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(str(path), exc.strerror or str(exc)) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(str(path), str(exc)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(str(path), "top level must be a mapping")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


@dataclass(frozen=True)
class RunConfig:
    source_dir: Optional[str] = None
    manifest_name: str = DEFAULT_MANIFEST
    output_name: str = DEFAULT_OUTPUT
    verbose: bool = False
    start_marker: str = DEFAULT_START_MARKER
    end_marker: str = DEFAULT_END_MARKER

    def __post_init__(self) -> None:
        # frozen, so normalize through object.__setattr__
        source_dir = normalize_separators(self.source_dir) if self.source_dir else None
        object.__setattr__(self, "source_dir", source_dir)
        object.__setattr__(self, "manifest_name", self.manifest_name or DEFAULT_MANIFEST)
        object.__setattr__(self, "output_name", normalize_separators(self.output_name or DEFAULT_OUTPUT))
        if not self.start_marker or not self.end_marker:
            raise ConfigError("markers", "start and end markers must be non-empty")

    @property
    def manifest_path(self) -> str:
        return join_source(self.source_dir, self.manifest_name)

    def source_path(self, entry: str) -> str:
        return join_source(self.source_dir, entry)

    @classmethod
    def from_mapping(cls, raw: Dict[str, Any]) -> "RunConfig":
        """Build a config from the YAML layout (``path``, ``progs``, ``output``,
        ``verbose`` and a ``markers`` section with ``start``/``end``)."""
        markers = raw.get("markers") or {}
        if not isinstance(markers, dict):
            raise ConfigError("markers", "expected a mapping with start/end")
        verbose = raw.get("verbose")
        if verbose is not None and not isinstance(verbose, bool):
            raise ConfigError("verbose", f"expected true or false, got {verbose!r}")
        values = {
            "source_dir": raw.get("path"),
            "manifest_name": raw.get("progs"),
            "output_name": raw.get("output"),
            "verbose": verbose,
            "start_marker": markers.get("start"),
            "end_marker": markers.get("end"),
        }
        defaults = {f.name: f.default for f in fields(cls)}
        kwargs = {k: (defaults[k] if v is None else v) for k, v in values.items()}
        for key in ("source_dir", "manifest_name", "output_name", "start_marker", "end_marker"):
            if kwargs[key] is not None:
                kwargs[key] = str(kwargs[key])
        return cls(**kwargs)

    @classmethod
    def from_files(cls, *paths: str | Path, overrides: Optional[Dict[str, Any]] = None) -> "RunConfig":
        merged: Dict[str, Any] = {}
        for path in paths:
            merged = deep_merge(merged, load_yaml(path))
        if overrides:
            merged = deep_merge(merged, overrides)
        return cls.from_mapping(merged)
