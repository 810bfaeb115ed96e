"""Exception hierarchy for externgen."""

from __future__ import annotations


class ExternGenError(RuntimeError):
    """Base class for errors raised by externgen."""


class SemanticModelError(ExternGenError):
    """Raised when an input file cannot be resolved into a semantic model."""


class ConfigError(ExternGenError):
    """Raised when the configuration file cannot be parsed."""


__all__ = ["ConfigError", "ExternGenError", "SemanticModelError"]
