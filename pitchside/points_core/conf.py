"""
Settings lookups for points_core.

Values come from the ``POINTS_CORE`` dictionary in Django settings when a
settings module is available, falling back to the defaults below. The core can
therefore be used without a Django project.
"""

import os

from django.conf import ENVIRONMENT_VARIABLE, settings

DEFAULTS = {
    "WALKOVER_WIN_POINTS": 3,
    "WALKOVER_LOSS_POINTS": -3,
    "DEFAULT_POINT_SYSTEM": "standard",
}


def _settings_available() -> bool:
    # settings stay lazy until first access, so a set env var counts too
    return settings.configured or bool(os.environ.get(ENVIRONMENT_VARIABLE))


def get_setting(name: str):
    """Return a points_core setting by name."""
    if name not in DEFAULTS:
        raise KeyError(f"Unknown points_core setting: {name}")
    if _settings_available():
        overrides = getattr(settings, "POINTS_CORE", None) or {}
        if name in overrides:
            return overrides[name]
    return DEFAULTS[name]
