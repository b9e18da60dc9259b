"""Configuration for streamcopy."""

from .settings import CopySettings, load_settings


__all__ = ["CopySettings", "load_settings"]
