"""
Configuration package for the outpass workflow.
"""

from outpass.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
