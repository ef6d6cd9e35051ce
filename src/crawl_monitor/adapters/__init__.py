"""Adapters for providers and storage."""
