"""Configuration package exports."""

from .loader import build_destination, load_settings
from .models import (
    DEFAULT_API_BASE_URL,
    DEFAULT_OUTPUT_FORMAT,
    ClientSettings,
    Credential,
    OutputDestination,
)

__all__ = [
    "ClientSettings",
    "Credential",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_OUTPUT_FORMAT",
    "OutputDestination",
    "build_destination",
    "load_settings",
]
