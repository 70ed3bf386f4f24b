"""
Configuration file loading.

Precedence, highest first:
1. Explicit overrides (CLI flags)
2. YAML config file (--config)
3. INFINISPAN_EXPORTER_* environment variables and .env
4. Defaults
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pydantic
import structlog
import yaml

from infinispan_exporter.config.settings import Settings
from infinispan_exporter.errors import ConfigurationError

logger = structlog.get_logger()


def read_config_file(path: str | Path) -> dict[str, Any]:
    """
    Read settings from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, unparsable, not a mapping
            or contains unknown keys
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError("Config file not found", {"path": str(path)})

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", {"path": str(path)}) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping", {"path": str(path)})

    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ConfigurationError(
            f"Unknown config keys: {', '.join(map(str, unknown))}", {"path": str(path)}
        )

    logger.debug("loaded_config", path=str(path))
    return data


def load_settings(path: str | Path | None = None, **overrides: Any) -> Settings:
    """
    Build settings from the environment, an optional file and overrides.

    Overrides whose value is None are ignored so CLI flags that were not
    given do not mask other sources.
    """
    data: dict[str, Any] = read_config_file(path) if path else {}
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return Settings(**data)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
