"""Export parameter files (YAML or JSON).

A parameter file is a flat mapping using the ``ExportParameters`` field
names, e.g.::

    application_name: my-pipeline
    object_name: character
    fps: 30

Values given on the command line take precedence over the file.
"""

from __future__ import annotations
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Mapping
import json

import yaml

from .errors import E_CONFIG, ConfigError
from .export import ExportParameters

__all__ = ["load_config", "load_export_parameters", "merge_parameters"]

_FIELDS = {f.name: f for f in fields(ExportParameters)}


def _fail(path: Path, message: str) -> ConfigError:
    return ConfigError(code=E_CONFIG, message=message, context={"file": str(path)})


def load_config(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise _fail(p, f"Config file not found: {p}")
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(p, f"Could not read config ({e})") from e
    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise _fail(p, f"Cannot parse config: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _fail(p, "Root of config must be a mapping")
    unknown = sorted(set(data) - set(_FIELDS))
    if unknown:
        raise _fail(p, f"Unknown config keys: {', '.join(unknown)}")
    return data


def merge_parameters(
    base: Mapping[str, Any], overrides: Mapping[str, Any]
) -> ExportParameters:
    """Build ExportParameters from file values and non-None overrides."""
    values = dict(base)
    values.update({k: v for k, v in overrides.items() if v is not None})
    if "fps" in values:
        try:
            values["fps"] = float(values["fps"])
        except (TypeError, ValueError) as e:
            raise ConfigError(
                code=E_CONFIG, message=f"Invalid fps: {values['fps']!r}"
            ) from e
    for key in ("application_name", "scene_description", "object_name"):
        if key in values and not isinstance(values[key], str):
            raise ConfigError(code=E_CONFIG, message=f"'{key}' must be a string")
    try:
        return ExportParameters(**values)
    except ValueError as e:
        raise ConfigError(code=E_CONFIG, message=str(e)) from e


def load_export_parameters(
    path: str | Path | None, **overrides: Any
) -> ExportParameters:
    base = load_config(path) if path is not None else {}
    return merge_parameters(base, overrides)
