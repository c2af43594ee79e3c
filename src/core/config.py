"""
===============================================================================
LAMBERT TARGETER - Solver Configuration
===============================================================================
Settings dataclasses for the Izzo and Gooding solvers, plus a YAML loader.

The YAML layout mirrors the dataclasses:

    izzo:
      max_iterations: 50
      tolerance: 1.0e-11
      residual_tolerance: 1.0e-9
    gooding:
      max_iterations: 100
      tolerance: 1.0e-12
    cases:
      - name: ...

Unknown keys inside a solver section are rejected so typos do not silently
fall back to defaults. Top-level keys other than the solver sections (such as
`cases`) are left for the caller.
===============================================================================
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from core.exceptions import InputError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / 'config' / 'lambert_config.yaml'


@dataclass(frozen=True)
class IzzoSettings:
    """Iteration controls for the Izzo secant solver."""
    max_iterations: int = 50
    tolerance: float = 1e-11            # on the log(1 + x) step
    residual_tolerance: float = 1e-9    # relative time-of-flight error

    def __post_init__(self):
        _check_positive(self, 'izzo')


@dataclass(frozen=True)
class GoodingSettings:
    """Iteration controls for the Gooding Newton-Raphson solver."""
    max_iterations: int = 100
    tolerance: float = 1e-12            # on |F(x)| scaled by max(1, T)

    def __post_init__(self):
        _check_positive(self, 'gooding')


@dataclass(frozen=True)
class LambertSettings:
    """Bundle of settings for both solvers."""
    izzo: IzzoSettings = field(default_factory=IzzoSettings)
    gooding: GoodingSettings = field(default_factory=GoodingSettings)


def _check_positive(settings, section: str) -> None:
    for f in fields(settings):
        value = getattr(settings, f.name)
        if f.type is int or f.type == 'int':
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InputError(
                    f"{section}.{f.name} must be a positive integer, got {value!r}"
                )
        elif not isinstance(value, (int, float)) or isinstance(value, bool) or not value > 0.0:
            raise InputError(f"{section}.{f.name} must be a positive number, got {value!r}")


def _section(cls, raw: Optional[Dict[str, Any]], section: str):
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise InputError(f"Config section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise InputError(
            f"Unknown keys in config section '{section}': {sorted(unknown)}. "
            f"Valid: {sorted(known)}"
        )
    values = dict(raw)
    field_types = {f.name: f.type for f in fields(cls)}
    # YAML reads "1e-11" (no dot) as a string
    for name, value in values.items():
        if isinstance(value, str):
            convert = int if field_types[name] in (int, 'int') else float
            try:
                values[name] = convert(value)
            except ValueError:
                raise InputError(
                    f"{section}.{name} is not a valid {convert.__name__}: {value!r}"
                ) from None
    return cls(**values)


def settings_from_dict(config: Optional[Dict[str, Any]]) -> LambertSettings:
    """
    Build LambertSettings from a parsed configuration mapping.

    Args:
        config: Mapping with optional 'izzo' and 'gooding' sections.

    Returns:
        Validated LambertSettings; missing sections use defaults.

    Raises:
        InputError: If a section has unknown keys or invalid values.
    """
    config = config or {}
    return LambertSettings(
        izzo=_section(IzzoSettings, config.get('izzo'), 'izzo'),
        gooding=_section(GoodingSettings, config.get('gooding'), 'gooding'),
    )


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the Lambert configuration file.

    Args:
        config_path: Path to YAML config. Defaults to config/lambert_config.yaml

    Returns:
        Dictionary of configuration parameters (empty if the file is empty)
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    logger.info("Loading configuration from: %s", config_path)
    with open(config_path, 'r') as f:
        config = yaml.safe_load(f)
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise InputError(f"Top level of {config_path} must be a mapping")
    return config


def load_settings(config_path: Optional[str] = None) -> LambertSettings:
    """Load and validate solver settings from a YAML file."""
    return settings_from_dict(load_config(config_path))
