"""Simulator settings."""
from .settings import Settings

__all__ = ["Settings"]
