"""Loading and validation of comparison settings files."""

from __future__ import annotations

from pathlib import Path
from typing import Union

import yaml

from .exceptions import ConfigError
from .models import CompareSettings, FormatSettings, INDENT_CHOICES


def validate_settings(settings: CompareSettings) -> CompareSettings:
    """
    Reject settings the differ would silently misapply.

    Raises:
        ConfigError: on a negative or non-numeric tolerance, a non-string key
            field, or an unsupported indent
    """
    tolerance = settings.float_tolerance
    if tolerance is not None:
        if isinstance(tolerance, bool) or not isinstance(tolerance, (int, float)):
            raise ConfigError(
                "float_tolerance must be a number",
                {"float_tolerance": tolerance}
            )
        if tolerance < 0:
            raise ConfigError(
                "float_tolerance must not be negative",
                {"float_tolerance": tolerance}
            )

    if settings.key_field is not None and not isinstance(settings.key_field, str):
        raise ConfigError("key_field must be a string", {"key_field": settings.key_field})

    if settings.format_settings.indent not in INDENT_CHOICES:
        raise ConfigError(
            "indent must be 2, 4 or tab",
            {"indent": settings.format_settings.indent}
        )

    return settings


def settings_from_mapping(data: dict) -> CompareSettings:
    """Build and validate settings from a mapping with snake_case or camelCase keys."""
    if not isinstance(data, dict):
        raise ConfigError(
            "Settings must be a mapping",
            {"type": type(data).__name__}
        )
    return validate_settings(CompareSettings.from_dict(data))


def load_settings(path: Union[str, Path]) -> CompareSettings:
    """
    Load comparison settings from a YAML or JSON file.

    Example file::

        ignore_array_order: true
        key_field: id
        float_tolerance: 0.001
        format_settings:
          indent: 4
          sort_keys: true

    Raises:
        ConfigError: if the file is missing, unreadable or invalid
    """
    settings_path = Path(path)
    if not settings_path.exists():
        raise ConfigError(f"Settings file not found: {settings_path}")

    with open(settings_path, 'r') as f:
        content = f.read()

    # YAML also covers JSON since JSON is valid YAML
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse settings file: {e}", {"path": str(settings_path)})

    if data is None:
        return CompareSettings()
    return settings_from_mapping(data)


def merge_overrides(settings: CompareSettings, **overrides) -> CompareSettings:
    """Apply non-None overrides (e.g. from command line flags) and validate."""
    data = settings.to_dict()
    format_data = dict(data["format_settings"])

    for key in ("indent", "sort_keys"):
        value = overrides.pop(key, None)
        if value is not None:
            format_data[key] = value

    data.update({k: v for k, v in overrides.items() if v is not None})
    data["format_settings"] = FormatSettings.from_dict(format_data)
    return validate_settings(CompareSettings.from_dict(data))
