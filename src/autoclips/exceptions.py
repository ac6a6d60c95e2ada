"""Error taxonomy for the clip planning pipeline.

Only configuration problems and judge failures surface as errors. Scoring,
planning and caption windowing are total and degrade silently on bad input.
"""
from __future__ import annotations


class AutoclipsError(Exception):
    """Base class for all package errors."""


class InputError(AutoclipsError):
    """Malformed or empty signal/cue input."""


class ExternalJudgeError(AutoclipsError):
    """A judge call failed or timed out."""

    def __init__(self, message: str, window_index: int = -1):
        super().__init__(message)
        self.window_index = window_index


class ConfigError(AutoclipsError):
    """Invalid configuration, detected before planning starts."""
