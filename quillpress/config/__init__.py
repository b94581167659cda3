"""
Config Module — Endpoint and limit configuration.
"""

from .loader import EditorConfig, load_config, load_env_file

__all__ = ["EditorConfig", "load_config", "load_env_file"]
