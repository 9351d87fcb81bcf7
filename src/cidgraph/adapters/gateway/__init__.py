"""Public interface for the content gateway adapter."""

from __future__ import annotations

from .resolver import ContentAddressResolver

__all__ = ["ContentAddressResolver"]
