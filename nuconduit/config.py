"""Process-wide configuration parameters.

Defaults live in :data:`DEFAULTS`; each one can be overridden from the
environment as ``NUCONDUIT_<NAME>`` or programmatically with :func:`set_par`.
Consumers read values once, at construction time.
"""

from __future__ import annotations

import os
from typing import Any

ENV_PREFIX = "NUCONDUIT_"

DEFAULTS: dict[str, Any] = {
    # -1 disables the cap
    "MAXEVENTS": -1,
    "MAXPARTICLES": 400,
}

_overrides: dict[str, Any] = {}


def set_par(name: str, value: Any) -> None:
    _overrides[name.upper()] = value


def reset() -> None:
    """Drop programmatic overrides (environment overrides still apply)."""
    _overrides.clear()


def get_par(name: str) -> Any:
    key = name.upper()
    if key in _overrides:
        return _overrides[key]
    env = os.environ.get(ENV_PREFIX + key)
    if env is not None:
        return env
    if key not in DEFAULTS:
        raise KeyError(f"Unknown configuration parameter: {name}")
    return DEFAULTS[key]


def get_par_i(name: str) -> int:
    value = get_par(name)
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Configuration parameter {name}={value!r} is not an integer") from e
