"""
Utility functions and helpers.
"""
from .resource_loader import get_app_data_dir, get_config_dir
from .settings import AppConfig, load_config, save_config

__all__ = [
    # Per-user directories
    'get_app_data_dir',
    'get_config_dir',

    # Settings
    'AppConfig',
    'load_config',
    'save_config',
]
