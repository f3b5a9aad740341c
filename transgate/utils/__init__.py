"""Utility modules for the translation gateway."""

from .text import truncate_for_log

__all__ = ["truncate_for_log"]
