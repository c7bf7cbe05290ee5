"""Insight Agent - streamed, tool-augmented answers about client analytics."""

__version__ = "1.0.0"
