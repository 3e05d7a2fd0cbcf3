"""Utility helpers shared across dynsql."""

from dynsql.utils.logging import get_logger

__all__ = ("get_logger",)
