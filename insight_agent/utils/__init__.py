"""Utility helpers."""

from .logger import setup_logger, init_app_logger, get_app_logger, quiet_libraries, mask_secret

__all__ = ["setup_logger", "init_app_logger", "get_app_logger", "quiet_libraries", "mask_secret"]
