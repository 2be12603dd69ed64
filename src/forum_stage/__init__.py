"""Threaded question and answer discussion engine."""

__version__ = "0.1.0"
