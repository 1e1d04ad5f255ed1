"""Shared pydantic schema utilities."""

from .base import BaseSchema

__all__ = ["BaseSchema"]
