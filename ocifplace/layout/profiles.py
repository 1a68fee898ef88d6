"""
Layout Profiles

Named canvas/simulation presets plus loading of layout settings from a
YAML file. Each profile is a complete LayoutConfig; a YAML file may start
from a profile and override individual fields.

Example layout.yaml:
```yaml
layout:
  profile: wide
  iterations: 150
  gravity_strength: 0.05
  default_node_size: [120, 60]
```
"""

from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml

from .force_directed import LayoutConfig

logger = logging.getLogger(__name__)


class LayoutConfigError(ValueError):
    """Raised when a layout profile or configuration file is invalid."""


# Pre-defined profiles

DEFAULT = LayoutConfig()

COMPACT = LayoutConfig(
    canvas_width=640.0,
    canvas_height=480.0,
    padding=30.0,
    iterations=100,
    gravity_strength=0.15,
    max_step_displacement=30.0,
    default_node_size=(80.0, 40.0),
)

WIDE = LayoutConfig(
    canvas_width=1600.0,
    canvas_height=900.0,
    padding=60.0,
    iterations=120,
    gravity_strength=0.08,
    max_step_displacement=60.0,
)

LARGE = LayoutConfig(
    canvas_width=2400.0,
    canvas_height=1800.0,
    padding=80.0,
    iterations=200,
    gravity_strength=0.05,
    max_step_displacement=80.0,
)

PROFILES: Dict[str, LayoutConfig] = {
    "default": DEFAULT,
    "compact": COMPACT,
    "wide": WIDE,
    "large": LARGE,
}

_CONFIG_FIELDS = {f.name for f in fields(LayoutConfig)}
_SIZE_FIELDS = {"default_node_size", "default_arrow_size"}


def get_profile(name: str) -> LayoutConfig:
    """
    Get a layout profile by name (case-insensitive).

    Returns a copy, so callers may modify it freely.

    Raises:
        LayoutConfigError: If no profile has that name
    """
    key = name.strip().lower().replace("-", "_")
    if key not in PROFILES:
        raise LayoutConfigError(
            f"Unknown layout profile: {name!r}. "
            f"Available: {', '.join(sorted(PROFILES))}"
        )
    return replace(PROFILES[key])


def list_profiles() -> List[str]:
    """List available profile names."""
    return sorted(PROFILES)


def _coerce_value(name: str, value: Any) -> Any:
    """Convert a YAML value to the type LayoutConfig expects."""
    if name in _SIZE_FIELDS:
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise LayoutConfigError(f"{name} must be a [width, height] pair, got {value!r}")
        try:
            return (float(value[0]), float(value[1]))
        except (TypeError, ValueError) as e:
            raise LayoutConfigError(f"{name} must be numeric, got {value!r}") from e

    if isinstance(value, bool):
        raise LayoutConfigError(f"{name} must be a number, got {value!r}")

    if name == "iterations":
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if not isinstance(value, int):
            raise LayoutConfigError(f"iterations must be an integer, got {value!r}")
        return value

    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise LayoutConfigError(f"{name} must be a number, got {value!r}") from e


def config_from_mapping(data: Dict[str, Any],
                        base: Optional[LayoutConfig] = None) -> LayoutConfig:
    """
    Build a LayoutConfig from a mapping of overrides.

    A ``profile`` key selects the starting preset (otherwise ``base`` or the
    default profile). Unknown keys are ignored.

    Raises:
        LayoutConfigError: If a value is invalid
    """
    if not isinstance(data, dict):
        raise LayoutConfigError(
            f"Layout configuration must be a mapping, got {type(data).__name__}"
        )

    if "profile" in data:
        config = get_profile(str(data["profile"]))
    else:
        config = replace(base) if base is not None else get_profile("default")

    overrides = {}
    for key, value in data.items():
        if key == "profile":
            continue
        if key not in _CONFIG_FIELDS:
            logger.debug("Ignoring unknown layout setting %r", key)
            continue
        overrides[key] = _coerce_value(key, value)

    config = replace(config, **overrides)
    try:
        config.validate()
    except ValueError as e:
        raise LayoutConfigError(str(e)) from e
    return config


def load_layout_config(path: Union[str, Path],
                       base: Optional[LayoutConfig] = None) -> LayoutConfig:
    """
    Load layout settings from a YAML file.

    The file may hold the settings at the top level or under a ``layout:``
    key.

    Args:
        path: Path to the YAML file
        base: Configuration to override (default profile when omitted)

    Returns:
        The resulting LayoutConfig

    Raises:
        LayoutConfigError: If the file is missing, unreadable, unparsable or invalid
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as e:
        logger.error("Layout configuration missing at %s", path)
        raise LayoutConfigError(f"Layout configuration not found: {path}") from e
    except yaml.YAMLError as e:
        logger.error("Invalid YAML syntax in %s", path)
        raise LayoutConfigError(f"Invalid YAML syntax in {path}") from e
    except UnicodeDecodeError as e:
        logger.error("Layout configuration %s is not UTF-8 encoded", path)
        raise LayoutConfigError(f"Layout configuration is not UTF-8 encoded: {path}") from e
    except OSError as e:
        logger.error("Cannot read layout configuration %s: %s", path, e)
        raise LayoutConfigError(f"Cannot read layout configuration {path}: {e}") from e

    if data is None:
        data = {}
    if isinstance(data, dict) and isinstance(data.get("layout"), dict):
        data = data["layout"]

    config = config_from_mapping(data, base=base)
    logger.debug("Loaded layout configuration from %s: %s", path, config)
    return config
