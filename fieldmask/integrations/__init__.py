"""Hooks that mask records on their way into logging pipelines."""

from .logging import MaskingLogFilter, MaskingProcessor

__all__ = ["MaskingLogFilter", "MaskingProcessor"]
