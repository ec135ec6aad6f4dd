"""YAML configuration for popularity runs.

A config file holds ``PopularityConfig`` fields at the top level plus an
optional ``environments:`` mapping of named partial overrides. Values are
layered as: model defaults, then the file's top level, then the selected
environment block, then caller overrides (the CLI flags). Nested sections
such as ``weights`` merge key by key instead of being replaced wholesale.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

from pydantic import ValidationError

from ..models.config import PopularityConfig


logger = logging.getLogger(__name__)


ENVIRONMENT_VARIABLE = "SITEPULSE_ENV"
DEFAULT_ENVIRONMENT = "production"


class ConfigLoadError(Exception):
    """A config file is missing, unreadable, or holds invalid popularity settings."""
    pass


def default_config_path() -> Path:
    """The ``config/popularity.yaml`` shipped at the project root."""
    return Path(__file__).parents[3] / "config" / "popularity.yaml"


def load_popularity_config(
    config_path: Optional[Union[str, Path]] = None,
    environment: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> PopularityConfig:
    """Build a validated ``PopularityConfig`` from a YAML file.

    Args:
        config_path: File to read; the bundled ``config/popularity.yaml`` when None
        environment: Name of the ``environments:`` block to layer on top.
            Falls back to ``$SITEPULSE_ENV``, then ``production``. A name with
            no block in the file leaves the top-level values as they are.
        overrides: Final layer, typically CLI flags

    Raises:
        ConfigLoadError: Missing or unreadable file, non-mapping YAML, or
            values PopularityConfig rejects
    """
    path = Path(config_path) if config_path is not None else default_config_path()
    data = _read_mapping(path)

    environment = environment or os.getenv(ENVIRONMENT_VARIABLE, DEFAULT_ENVIRONMENT)
    data = _apply_environment(data, environment)

    if overrides:
        data = _deep_merge(data, overrides)
        logger.debug(f"Applied overrides: {sorted(overrides)}")

    try:
        return PopularityConfig(**data)
    except (ValidationError, TypeError) as e:
        raise ConfigLoadError(f"Invalid popularity settings in {path}: {e}")


def _read_mapping(path: Path) -> Dict[str, Any]:
    """Parse a YAML file whose top level must be a mapping (an empty file counts as ``{}``)."""
    if not path.exists():
        raise ConfigLoadError(f"Config file not found: {path}")

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse YAML config: {e}")
    except IOError as e:
        raise ConfigLoadError(f"Failed to read config file: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config file must contain a YAML mapping: {path}")
    return data


def _apply_environment(data: Dict[str, Any], environment: str) -> Dict[str, Any]:
    """Strip the ``environments:`` block and merge the named entry of it, if present."""
    data = dict(data)
    environments = data.pop("environments", None) or {}
    if not isinstance(environments, dict):
        raise ConfigLoadError("'environments' must be a mapping of environment names to settings")

    block = environments.get(environment)
    if block and not isinstance(block, dict):
        raise ConfigLoadError(f"Environment '{environment}' must be a mapping of settings")
    if block:
        logger.info(f"Using '{environment}' popularity settings")
        return _deep_merge(data, block)

    logger.debug(f"No '{environment}' block in config; using top-level settings")
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursive dict merge; ``override`` wins except where both sides hold mappings."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def create_default_popularity_config() -> Dict[str, Any]:
    """Model defaults plus sample ``development``/``staging``/``test`` blocks, ready for YAML."""
    defaults = PopularityConfig().model_dump(mode='json')
    defaults["environments"] = {
        "development": {
            "max_concurrency": 2,
            "max_analyzed_pages": 10,
        },
        "staging": {
            "page_timeout": 15.0,
        },
        "test": {
            "max_concurrency": 1,
            "page_timeout": 5.0,
            "sitemap_timeout": 5.0,
        }
    }
    return defaults


def save_default_config(output_path: Union[str, Path]) -> None:
    """Write ``create_default_popularity_config()`` to ``output_path`` (used by ``sitepulse init-config``)."""
    config_data = create_default_popularity_config()

    try:
        with open(output_path, 'w') as f:
            yaml.dump(config_data, f, default_flow_style=False, sort_keys=False)
        logger.info(f"Wrote default popularity settings to {output_path}")
    except IOError as e:
        raise ConfigLoadError(f"Failed to save config file: {e}")
