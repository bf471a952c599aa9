"""Core configuration loading exports."""

from ticketbridge.core.config.loader import load_settings, write_settings

__all__ = ["load_settings", "write_settings"]
