"""
Configuration Module

Pydantic-based settings for envbind itself, optionally loaded from YAML.
"""

from envbind.config.settings import Settings, load_config, get_config, reset_config, configure_logging

__all__ = ['Settings', 'load_config', 'get_config', 'reset_config', 'configure_logging']
