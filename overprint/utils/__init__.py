"""
Utility functions and helpers.
"""
from .app_dirs import get_app_data_dir, get_config_dir

__all__ = [
    'get_app_data_dir',
    'get_config_dir',
]
