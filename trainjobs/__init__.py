"""Persistence layer for training-job submissions."""

__version__ = "0.1.0"
