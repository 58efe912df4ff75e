"""Gemini Flash gateway — prompt and attachment validation in front of Gemini."""

__version__ = "0.1.0"
