"""Slot scheduling and booking admission service."""

__version__ = "0.1.0"
