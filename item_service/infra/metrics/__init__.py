"""Metrics infrastructure."""

from __future__ import annotations

from . import prometheus

__all__ = ["prometheus"]
