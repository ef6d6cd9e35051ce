"""Scheduled source monitoring with pluggable summarization providers."""

__version__ = "0.1.0"
