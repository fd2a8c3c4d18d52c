"""Configuration package exports."""

from .loader import HOME_ENV_VAR, ConfigLocator, ConfigRepository
from .models import DEFAULT_DIRECTORY_URL, HarvestConfig

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_DIRECTORY_URL",
    "HOME_ENV_VAR",
    "HarvestConfig",
]
