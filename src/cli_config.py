"""Configuration loading for the alignment CLI.

Precedence, lowest to highest: built-in defaults from Constants, the YAML
(or JSON) config file, ``DEPALIGN_*`` environment variables, CLI flags.
Invalid values fail the run before any module is processed.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from alignment.configuration import AlignmentConfiguration
from alignment.translator import RestProtocol
from common.errors import ConfigurationError
from constants import Constants

logger = logging.getLogger(__name__)

_ENV_PREFIX = "DEPALIGN_"

# config key -> (environment suffix, coercion)
_KEYS = {
    "da_url": ("DA_URL", str),
    "repository_group": ("REPOSITORY_GROUP", str),
    "version_suffix": ("VERSION_SUFFIX", str),
    "rest_protocol": ("REST_PROTOCOL", str),
    "request_timeout": ("REQUEST_TIMEOUT", float),
    "ignore_unresolvable_dependencies": ("IGNORE_UNRESOLVABLE_DEPENDENCIES", "bool"),
    "version_modification_enabled": ("VERSION_MODIFICATION", "bool"),
    "strict_conflict_resolution": ("STRICT_CONFLICT_RESOLUTION", str),
}

# camelCase spellings accepted in config files
_ALIASES = {
    "daUrl": "da_url",
    "repositoryGroup": "repository_group",
    "versionSuffix": "version_suffix",
    "restProtocol": "rest_protocol",
    "requestTimeout": "request_timeout",
    "ignoreUnresolvableDependencies": "ignore_unresolvable_dependencies",
    "versionModification": "version_modification_enabled",
    "strictConflictResolution": "strict_conflict_resolution",
}


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"Expected a boolean value, got {value!r}")


def _coerce(key: str, value: Any) -> Any:
    kind = _KEYS[key][1]
    try:
        if kind == "bool":
            return _coerce_bool(value)
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load the ``alignment`` section (or the whole mapping) of a config file.

    Args:
        config_path: Path to a YAML, YML or JSON file.

    Returns:
        Mapping of normalized config keys to raw values.
    """
    if not config_path:
        return {}
    if not os.path.isfile(config_path):
        raise ConfigurationError(f"Config file not found: {config_path}")
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.lower().endswith(".json"):
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    section = data.get("alignment", data)
    result: Dict[str, Any] = {}
    for raw_key, value in section.items():
        key = _ALIASES.get(raw_key, raw_key)
        if key in _KEYS:
            result[key] = value
        else:
            logger.warning("Ignoring unknown config key %s in %s", raw_key, config_path)
    return result


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect ``DEPALIGN_*`` overrides from the environment."""
    environ = os.environ if environ is None else environ
    result: Dict[str, Any] = {}
    for key, (suffix, _) in _KEYS.items():
        value = environ.get(_ENV_PREFIX + suffix)
        if value is not None and value.strip():
            result[key] = value.strip()
    return result


def cli_overrides(args) -> Dict[str, Any]:
    """Collect overrides from parsed CLI arguments."""
    result: Dict[str, Any] = {}
    if getattr(args, "DA_URL", None):
        result["da_url"] = args.DA_URL
    if getattr(args, "REPOSITORY_GROUP", None):
        result["repository_group"] = args.REPOSITORY_GROUP
    if getattr(args, "VERSION_SUFFIX", None):
        result["version_suffix"] = args.VERSION_SUFFIX
    if getattr(args, "REST_PROTOCOL", None):
        result["rest_protocol"] = args.REST_PROTOCOL
    if getattr(args, "REQUEST_TIMEOUT", None) is not None:
        result["request_timeout"] = args.REQUEST_TIMEOUT
    if getattr(args, "IGNORE_UNRESOLVABLE", False):
        result["ignore_unresolvable_dependencies"] = True
    if getattr(args, "NO_VERSION_MODIFICATION", False):
        result["version_modification_enabled"] = False
    if getattr(args, "STRICT_CONFLICT_RESOLUTION", None):
        result["strict_conflict_resolution"] = args.STRICT_CONFLICT_RESOLUTION
    return result


def build_configuration(
    args=None,
    environ: Optional[Mapping[str, str]] = None,
) -> AlignmentConfiguration:
    """Merge every configuration source into an AlignmentConfiguration.

    Raises:
        ConfigurationError: On unreadable files or invalid values.
        InvalidProtocolError: If the configured request protocol is unknown.
    """
    merged: Dict[str, Any] = {}
    merged.update(load_config_file(getattr(args, "CONFIG", None) if args is not None else None))
    merged.update(env_overrides(environ))
    if args is not None:
        merged.update(cli_overrides(args))

    config = AlignmentConfiguration(**{key: _coerce(key, value) for key, value in merged.items()})

    RestProtocol.parse(config.rest_protocol)
    if config.strict_conflict_resolution not in Constants.STRICT_CONFLICT_POLICIES:
        raise ConfigurationError(
            f"strict_conflict_resolution must be one of {Constants.STRICT_CONFLICT_POLICIES}, "
            f"got {config.strict_conflict_resolution!r}"
        )
    if config.request_timeout <= 0:
        raise ConfigurationError("request_timeout must be positive")
    if not config.da_url:
        raise ConfigurationError("No alignment service URL configured")
    return config
