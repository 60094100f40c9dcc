"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Mapping, Sequence

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import TagdirConfig

ENV_PREFIX = "TAGDIR__"


def resolve_with_precedence(
    *,
    defaults: TagdirConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TagdirConfig:
    """Merge configuration sources; later sources win.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Nested values extracted from ``TAGDIR__`` variables.
        cli_overrides: Dotted-key values supplied on the command line.

    Returns:
        TagdirConfig: Validated configuration.

    Raises:
        ConfigError: If an override is malformed or a value fails validation.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is None:
            continue
        merged = _deep_merge(merged, _normalize_mapping(source, source_name=name))

    try:
        return TagdirConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def extract_env_overrides(env: Mapping[str, str], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Collect ``PREFIX__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars so ``TAGDIR__RENAMER__MAX_RENAME_HOPS=3``
    yields an integer.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(prefix):
            continue
        path = [segment.lower() for segment in key[len(prefix) :].split("__") if segment]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_path(overrides, path, value, source_name="environment")
    return overrides


def flatten_for_env(config: TagdirConfig) -> Dict[str, str]:
    """Flatten the config into ``TAGDIR__SECTION__KEY`` environment mappings."""
    flat: Dict[str, str] = {}

    def _recurse(prefix: list[str], value: Any) -> None:
        if isinstance(value, dict):
            for key, child in value.items():
                _recurse(prefix + [str(key)], child)
            return
        env_key = ENV_PREFIX + "__".join(part.upper() for part in prefix)
        if isinstance(value, list):
            flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
        else:
            flat[env_key] = "null" if value is None else str(value)

    _recurse([], config.model_dump(mode="python"))
    return flat


def assign_path(
    target: dict[str, Any],
    path: Sequence[str],
    value: Any,
    *,
    source_name: str = "cli",
) -> None:
    """Assign ``value`` at the nested ``path`` inside ``target``.

    Raises:
        ConfigError: If an intermediate key holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        existing = node.get(segment)
        if existing is None:
            existing = {}
            node[segment] = existing
        elif not isinstance(existing, dict):
            raise ConfigError(
                f"{source_name.capitalize()} override for {'.'.join(path)} "
                f"conflicts with existing value at '{segment}'."
            )
        node = existing
    leaf = path[-1]
    if isinstance(value, MappingABC):
        nested = _normalize_mapping(value, source_name=source_name)
        existing_leaf = node.get(leaf)
        node[leaf] = _deep_merge(existing_leaf if isinstance(existing_leaf, dict) else {}, nested)
    else:
        node[leaf] = value


def _normalize_mapping(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        assign_path(result, key.split("."), value, source_name=source_name)
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        if isinstance(value, MappingABC) and isinstance(merged.get(key), MappingABC):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "assign_path",
    "extract_env_overrides",
    "flatten_for_env",
    "resolve_with_precedence",
]
