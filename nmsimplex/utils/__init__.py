"""
Utility modules for the project
"""

from .logging_setup import setup_logging, timing_decorator

__all__ = ["setup_logging", "timing_decorator"]
