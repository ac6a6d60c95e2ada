"""Clip planning and caption generation for long transcripts."""

__version__ = "0.1.0"
